import random

import pytest

from sealstore.db import SnapshotDb, SnapshotDbConfig

CLUSTER_SIZE = 256
NUM_CLUSTERS = 100
NUM_SNAPSHOTS = 5
MASTER_SEED = 42


def generate_cluster_data(snapshot_id, cluster_id):
    seed = MASTER_SEED * snapshot_id + cluster_id
    return random.Random(seed).randbytes(CLUSTER_SIZE)


def small_config():
    return SnapshotDbConfig(num_clusters=NUM_CLUSTERS, cluster_size=CLUSTER_SIZE)


@pytest.mark.asyncio
async def test_complex_snapshot_scenario(tmp_path):
    async with await SnapshotDb.open(tmp_path / "db", small_config()) as db:
        rng = random.Random(MASTER_SEED)
        snapshot_data = [[bytes(CLUSTER_SIZE)] * NUM_CLUSTERS]
        snapshot_data.append(list(snapshot_data[-1]))

        for cluster_id in range(NUM_CLUSTERS):
            data = generate_cluster_data(1, cluster_id)
            await db.write(cluster_id, data)
            snapshot_data[1][cluster_id] = data

        for snapshot_id in range(2, NUM_SNAPSHOTS + 1):
            await db.add_snapshot()
            snapshot_data.append(list(snapshot_data[-1]))
            for _ in range(rng.randrange(5, 15)):
                cluster_id = rng.randrange(NUM_CLUSTERS)
                data = generate_cluster_data(snapshot_id, cluster_id)
                await db.write(cluster_id, data)
                snapshot_data[snapshot_id][cluster_id] = data

        for snapshot_id in range(1, NUM_SNAPSHOTS + 1):
            for cluster_id in range(NUM_CLUSTERS):
                actual = await db.read(snapshot_id, cluster_id)
                assert actual == snapshot_data[snapshot_id][cluster_id]

        await db.join_snapshot()

        for snapshot_id in range(2, NUM_SNAPSHOTS + 1):
            for cluster_id in range(NUM_CLUSTERS):
                actual = await db.read(snapshot_id, cluster_id)
                assert actual == snapshot_data[snapshot_id][cluster_id]


@pytest.mark.asyncio
async def test_fresh_database_reads_zeros(tmp_path):
    async with await SnapshotDb.open(tmp_path, SnapshotDbConfig(4, 16)) as db:
        assert db.snapshot_start == 0
        assert db.snapshot_pending == 1
        assert await db.read(0, 3) == bytes(16)
        assert await db.read(1, 0) == bytes(16)
    assert (tmp_path / "storage").stat().st_size == 4 * 16


@pytest.mark.asyncio
async def test_snapshots_isolate_writes(tmp_path):
    async with await SnapshotDb.open(tmp_path, SnapshotDbConfig(4, 8)) as db:
        await db.write(0, b"A" * 8)
        await db.add_snapshot()
        await db.write(0, b"B" * 8)
        assert await db.read(0, 0) == bytes(8)
        assert await db.read(1, 0) == b"A" * 8
        assert await db.read(2, 0) == b"B" * 8
        assert await db.read(2, 1) == bytes(8)


@pytest.mark.asyncio
async def test_overwrite_in_same_snapshot(tmp_path):
    async with await SnapshotDb.open(tmp_path, SnapshotDbConfig(2, 8)) as db:
        await db.write(1, b"x" * 8)
        await db.write(1, b"y" * 8)
        assert await db.read(1, 1) == b"y" * 8


@pytest.mark.asyncio
async def test_read_exact_subrange(tmp_path):
    data = bytes(range(64))
    async with await SnapshotDb.open(tmp_path, SnapshotDbConfig(4, 64)) as db:
        await db.write(3, data)
        assert await db.read_exact(1, 3, 10, 20) == data[10:30]
        with pytest.raises(ValueError):
            await db.read_exact(1, 3, 60, 10)


@pytest.mark.asyncio
async def test_write_errors(tmp_path):
    async with await SnapshotDb.open(tmp_path, SnapshotDbConfig(4, 8)) as db:
        with pytest.raises(ValueError):
            await db.write(0, b"short")
        with pytest.raises(IndexError):
            await db.write(4, b"z" * 8)
        with pytest.raises(KeyError):
            await db.read(7, 0)


@pytest.mark.asyncio
async def test_join_removes_oldest_and_refuses_last(tmp_path):
    async with await SnapshotDb.open(tmp_path, SnapshotDbConfig(2, 8)) as db:
        await db.write(0, b"q" * 8)
        await db.join_snapshot()
        assert db.snapshot_start == 1
        with pytest.raises(KeyError):
            await db.read(0, 0)
        assert await db.read(1, 0) == b"q" * 8
        with pytest.raises(RuntimeError):
            await db.join_snapshot()


@pytest.mark.asyncio
async def test_state_survives_reopen(tmp_path):
    config = SnapshotDbConfig(3, 8)
    async with await SnapshotDb.open(tmp_path, config) as db:
        await db.write(0, b"1" * 8)
        await db.add_snapshot()
        await db.write(1, b"2" * 8)
        await db.add_snapshot()
        await db.write(0, b"3" * 8)
        await db.join_snapshot()

    async with await SnapshotDb.open(tmp_path, config) as db:
        assert db.snapshot_start == 1
        assert db.snapshot_pending == 3
        assert await db.read(1, 0) == b"1" * 8
        assert await db.read(1, 1) == bytes(8)
        assert await db.read(2, 1) == b"2" * 8
        assert await db.read(3, 0) == b"3" * 8
        assert await db.read(3, 1) == b"2" * 8
        await db.write(2, b"4" * 8)
        assert await db.read(3, 2) == b"4" * 8
        assert await db.read(2, 2) == bytes(8)


@pytest.mark.asyncio
async def test_closed_database_rejects_use(tmp_path):
    db = await SnapshotDb.open(tmp_path, SnapshotDbConfig(2, 8))
    db.close()
    with pytest.raises(RuntimeError):
        await db.read(0, 0)


def test_config_validation():
    with pytest.raises(ValueError):
        SnapshotDbConfig(0, 16)
    with pytest.raises(ValueError):
        SnapshotDbConfig(4, 0)