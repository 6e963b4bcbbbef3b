"""Command-line tools: create a database and measure its throughput."""

from __future__ import annotations

import argparse
import asyncio
import os
import random
import time
from pathlib import Path
from typing import Optional, Sequence

from sealstore.db import SnapshotDb, SnapshotDbConfig

_MIB = 1024 * 1024


def _throughput(volume: int, seconds: float) -> float:
    return volume / max(seconds, 1e-9) / _MIB


def _check_concurrency(name: str, value: int) -> None:
    if value < 1:
        raise ValueError(f"{name} must be at least 1")


async def create_database(path: str | os.PathLike[str], num_clusters: int, cluster_size: int) -> Path:
    """Create (or open) a database under ``path`` and close it again."""
    root = Path(path)
    root.mkdir(parents=True, exist_ok=True)
    config = SnapshotDbConfig(num_clusters=num_clusters, cluster_size=cluster_size)
    db = await SnapshotDb.open(root, config)
    db.close()
    return root


async def benchmark_write(db: SnapshotDb, data: bytes, num_clusters: int, concurrency: int) -> dict[str, float]:
    """Write every cluster once in sequence, then again concurrently.

    Returns throughput in MB/s under the keys ``single`` and ``concurrent``.
    """
    _check_concurrency("concurrency", concurrency)
    volume = num_clusters * len(data)

    started = time.perf_counter()
    for cluster_id in range(num_clusters):
        await db.write(cluster_id, data)
    single = _throughput(volume, time.perf_counter() - started)

    limit = asyncio.Semaphore(concurrency)

    async def write_one(cluster_id: int) -> None:
        async with limit:
            await db.write(cluster_id, data)

    started = time.perf_counter()
    await asyncio.gather(*(write_one(cluster_id) for cluster_id in range(num_clusters)))
    concurrent = _throughput(volume, time.perf_counter() - started)

    return {"single": single, "concurrent": concurrent}


async def benchmark_read_write(
    db: SnapshotDb,
    data: bytes,
    num_clusters: int,
    write_concurrency: int,
    read_concurrency: int,
) -> dict[str, float]:
    """Write every cluster while reading two random clusters per write.

    Returns the elapsed ``seconds`` and MB/s for ``write``, ``read`` and ``combined``.
    """
    _check_concurrency("write_concurrency", write_concurrency)
    _check_concurrency("read_concurrency", read_concurrency)
    write_limit = asyncio.Semaphore(write_concurrency)
    read_limit = asyncio.Semaphore(read_concurrency)

    async def write_one(cluster_id: int) -> None:
        async with write_limit:
            await db.write(cluster_id, data)

    async def read_one(cluster_id: int) -> None:
        async with read_limit:
            await db.read(0, cluster_id)

    tasks = []
    for cluster_id in range(num_clusters):
        tasks.append(write_one(cluster_id))
        tasks.extend(read_one(random.randrange(num_clusters)) for _ in range(2))

    started = time.perf_counter()
    await asyncio.gather(*tasks)
    seconds = time.perf_counter() - started

    write_volume = num_clusters * len(data)
    write = _throughput(write_volume, seconds)
    read = _throughput(write_volume * 2, seconds)
    return {"seconds": seconds, "write": write, "read": read, "combined": write + read}


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return value


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sealstore", description="Snapshot database tools.")
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="create a database")
    create.add_argument("path", nargs="?", default="./test_db")
    create.add_argument("--num-clusters", type=_positive_int, default=1000)
    create.add_argument("--cluster-size", type=_positive_int, default=4096)

    bench = commands.add_parser("bench-write", help="measure write throughput")
    bench.add_argument("path", nargs="?", default="benchmark")
    bench.add_argument("--num-clusters", type=_positive_int, default=1024)
    bench.add_argument("--cluster-size", type=_positive_int, default=_MIB)
    bench.add_argument("--concurrency", type=_positive_int, default=12)

    mixed = commands.add_parser("bench-rw", help="measure concurrent read/write throughput")
    mixed.add_argument("path", nargs="?", default="benchmark_rw")
    mixed.add_argument("--num-clusters", type=_positive_int, default=1024)
    mixed.add_argument("--cluster-size", type=_positive_int, default=_MIB)
    mixed.add_argument("--write-concurrency", type=_positive_int, default=12)
    mixed.add_argument("--read-concurrency", type=_positive_int, default=24)
    return parser


async def _run(args: argparse.Namespace) -> None:
    if args.command == "create":
        await create_database(args.path, args.num_clusters, args.cluster_size)
        print("Database created successfully!")
        return

    config = SnapshotDbConfig(num_clusters=args.num_clusters, cluster_size=args.cluster_size)
    data = bytes([42]) * args.cluster_size
    async with await SnapshotDb.open(args.path, config) as db:
        if args.command == "bench-write":
            result = await benchmark_write(db, data, args.num_clusters, args.concurrency)
            print(f"Single-threaded write: {result['single']:.2f} MB/s")
            print(f"{args.concurrency}-task write: {result['concurrent']:.2f} MB/s")
        else:
            print(f"Write tasks: {args.write_concurrency}")
            print(f"Read tasks: {args.read_concurrency}")
            result = await benchmark_read_write(
                db, data, args.num_clusters, args.write_concurrency, args.read_concurrency
            )
            print(f"Results after {result['seconds']:.2f} seconds:")
            print(f"Write throughput: {result['write']:.2f} MB/s")
            print(f"Read throughput: {result['read']:.2f} MB/s")
            print(f"Combined throughput: {result['combined']:.2f} MB/s")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point of the ``sealstore`` command."""
    args = _parser().parse_args(argv)
    asyncio.run(_run(args))
    return 0