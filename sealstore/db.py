"""Cluster storage with copy-on-write snapshots.

Every cluster of every live snapshot maps to a slot in a single storage
file. Writes always go to the pending snapshot and land in a fresh slot,
so older snapshots keep seeing their own data until they are joined away.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from sealstore.allocator import FREE_SLOTS_MIN_RESERVE, Allocator
from sealstore.fileio import read_exact_at, sync_range, write_all_at
from sealstore.keystore import MetadataStore, OffsetKey, OffsetTableEntry

_METADATA_FILE = "metadata"
_STORAGE_FILE = "storage"

OffsetTable = dict[int, list[OffsetTableEntry]]


@dataclass(frozen=True)
class SnapshotDbConfig:
    """Geometry of a database: how many clusters and how large each one is."""

    num_clusters: int
    cluster_size: int

    def __post_init__(self) -> None:
        if self.num_clusters <= 0:
            raise ValueError("num_clusters must be positive")
        if self.cluster_size <= 0:
            raise ValueError("cluster_size must be positive")


def _initialise(store: MetadataStore, fd: int, config: SnapshotDbConfig) -> None:
    store.snapshot_start = 0
    store.snapshot_pending = 1
    store.num_slots = FREE_SLOTS_MIN_RESERVE + config.num_clusters
    for cluster_id in range(config.num_clusters):
        store.set_offset(0, cluster_id, cluster_id)
    store.flush()

    os.ftruncate(fd, 0)
    os.ftruncate(fd, config.cluster_size * config.num_clusters)


def _load_offset_table(store: MetadataStore, num_clusters: int) -> tuple[OffsetTable, int, int]:
    """Rebuild the in-memory offset table from the stored records."""
    start = store.snapshot_start
    pending = store.snapshot_pending
    records = list(store.offset_entries())
    computed_pending = max([pending, *(key.snapshot for key, _ in records)])

    rows: list[list[Optional[OffsetTableEntry]]] = [
        [None] * num_clusters for _ in range(start, computed_pending + 1)
    ]
    stale: list[OffsetKey] = []

    for key, offset in records:
        cluster_id = key.cluster_id
        if cluster_id >= num_clusters:
            raise ValueError(
                f"stored cluster {cluster_id} exceeds the configured {num_clusters} clusters"
            )
        entry = OffsetTableEntry(key.snapshot, offset)
        if key.snapshot < start:
            # Records older than the first live snapshot fold into it; the newest wins.
            current = rows[0][cluster_id]
            if current is None or current.db_snapshot < key.snapshot:
                if current is not None:
                    stale.append(OffsetKey(current.db_snapshot, cluster_id))
                rows[0][cluster_id] = entry
        else:
            rows[key.snapshot - start][cluster_id] = entry

    store.remove_keys(stale)

    for previous, row in zip(rows, rows[1:]):
        row[:] = [cur if cur is not None else old for cur, old in zip(row, previous)]

    if computed_pending != pending:
        store.snapshot_pending = computed_pending

    table: OffsetTable = {}
    for snapshot, row in enumerate(rows, start):
        if any(entry is None for entry in row):
            raise ValueError(f"offset table of snapshot {snapshot} is incomplete")
        table[snapshot] = [entry for entry in row if entry is not None]
    return table, start, computed_pending


class SnapshotDb:
    """A store of fixed-size clusters with a chain of snapshots.

    Snapshot ``snapshot_start`` is the oldest one still readable and
    ``snapshot_pending`` is the one that receives writes.
    """

    def __init__(
        self,
        *,
        store: MetadataStore,
        storage_fd: int,
        config: SnapshotDbConfig,
        table: OffsetTable,
        snapshot_start: int,
        snapshot_pending: int,
        allocator: Allocator,
        num_slots: int,
    ) -> None:
        self.config = config
        self._store = store
        self._fd = storage_fd
        self._table = table
        self._start = snapshot_start
        self._pending = snapshot_pending
        self._allocator = allocator
        self._num_slots = num_slots
        self._closed = False

    @classmethod
    async def open(cls, path: str | os.PathLike[str], config: SnapshotDbConfig) -> SnapshotDb:
        """Open the database under ``path``, creating it when it does not exist."""
        root = Path(path)
        root.mkdir(parents=True, exist_ok=True)
        store = MetadataStore(root / _METADATA_FILE)
        flags = os.O_RDWR | os.O_CREAT | getattr(os, "O_BINARY", 0)
        try:
            fd = os.open(root / _STORAGE_FILE, flags, 0o644)
        except BaseException:
            store.close()
            raise

        try:
            if store.is_empty():
                _initialise(store, fd, config)

            table, start, pending = _load_offset_table(store, config.num_clusters)
            num_slots = store.num_slots
            highest = max(entry.offset for row in table.values() for entry in row)
            link_counter = [0] * max(num_slots, highest + 1)
            for row in table.values():
                for entry in row:
                    link_counter[entry.offset] += 1
            allocator = Allocator(link_counter)
        except BaseException:
            store.close()
            os.close(fd)
            raise

        return cls(
            store=store,
            storage_fd=fd,
            config=config,
            table=table,
            snapshot_start=start,
            snapshot_pending=pending,
            allocator=allocator,
            num_slots=num_slots,
        )

    @property
    def snapshot_start(self) -> int:
        """Identifier of the oldest readable snapshot."""
        return self._start

    @property
    def snapshot_pending(self) -> int:
        """Identifier of the snapshot that receives writes."""
        return self._pending

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("database is closed")

    def _check_cluster(self, cluster_id: int) -> None:
        if not 0 <= cluster_id < self.config.num_clusters:
            raise IndexError(f"cluster {cluster_id} is out of range")

    def _entry(self, snapshot: int, cluster_id: int) -> OffsetTableEntry:
        row = self._table.get(snapshot)
        if row is None:
            raise KeyError(f"snapshot {snapshot} is not available")
        self._check_cluster(cluster_id)
        return row[cluster_id]

    async def write(self, cluster_id: int, data: bytes) -> None:
        """Replace the contents of a cluster in the pending snapshot."""
        self._check_open()
        if len(data) != self.config.cluster_size:
            raise ValueError("Data size does not match cluster size")
        self._check_cluster(cluster_id)

        slot = self._allocator.pop()
        raw_offset = slot * self.config.cluster_size
        await write_all_at(self._fd, data, raw_offset)
        await sync_range(self._fd, raw_offset, len(data))

        pending = self._pending
        row = self._table[pending]
        previous = row[cluster_id]
        row[cluster_id] = OffsetTableEntry(pending, slot)

        self._store.set_offset(pending, cluster_id, slot)
        if previous.db_snapshot == pending:
            self._allocator.dec(previous.offset)

        num_slots = len(self._allocator)
        if num_slots != self._num_slots:
            self._num_slots = num_slots
            self._store.num_slots = num_slots

        self._store.flush()

    async def read(self, snapshot: int, cluster_id: int) -> bytes:
        """Return a whole cluster as seen by ``snapshot``."""
        return await self.read_exact(snapshot, cluster_id, 0, self.config.cluster_size)

    async def read_exact(self, snapshot: int, cluster_id: int, start: int, length: int) -> bytes:
        """Return ``length`` bytes of a cluster beginning at ``start``."""
        self._check_open()
        if start < 0 or length < 0 or start + length > self.config.cluster_size:
            raise ValueError("requested range lies outside the cluster")
        entry = self._entry(snapshot, cluster_id)
        raw_offset = entry.offset * self.config.cluster_size + start
        return await read_exact_at(self._fd, raw_offset, length)

    async def add_snapshot(self) -> None:
        """Freeze the pending snapshot and start a new one on top of it."""
        self._check_open()
        pending = self._pending
        row = self._table[pending]
        self._table[pending + 1] = list(row)
        self._allocator.inc_many(entry.offset for entry in row)
        self._pending = pending + 1
        self._store.snapshot_pending = self._pending

    async def join_snapshot(self) -> None:
        """Drop the oldest snapshot, releasing the slots only it referenced."""
        self._check_open()
        removed_id = self._start
        if removed_id >= self._pending:
            raise RuntimeError("no later snapshot to join the oldest one into")

        removed = self._table.pop(removed_id)
        self._start = removed_id + 1
        next_id = removed_id + 1
        next_row = self._table[next_id]

        offsets_to_dec: list[int] = []
        keys_to_remove: list[OffsetKey] = []
        for cluster_id, (old, kept) in enumerate(zip(removed, next_row)):
            if kept.db_snapshot == next_id:
                offsets_to_dec.append(old.offset)
                keys_to_remove.append(OffsetKey(old.db_snapshot, cluster_id))

        self._allocator.dec_many(offsets_to_dec)
        self._store.remove_keys(keys_to_remove)
        self._store.snapshot_start = self._start
        self._store.flush()

    def close(self) -> None:
        """Persist metadata and release the files; further calls do nothing."""
        if self._closed:
            return
        self._closed = True
        try:
            self._store.close()
        finally:
            os.close(self._fd)

    async def __aenter__(self) -> SnapshotDb:
        return self

    async def __aexit__(self, *args: object) -> None:
        self.close()