# sealstore

`sealstore` is a small storage engine that keeps fixed-size *clusters* of
bytes in a single data file and lets you take cheap, copy-on-write
*snapshots* of them. It also ships a few arithmetic helpers over the
Mersenne-31 prime field (2³¹ − 1).

The package has no runtime dependencies beyond the standard library.

## Installing

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## The snapshot database

`sealstore.db.SnapshotDb` keeps a database in a directory. Inside it are a
`metadata` file (an SQLite database managed by
`sealstore.keystore.MetadataStore`, holding the snapshot counters, the slot
count and the offset table) and a `storage` file holding the cluster data.
Every cluster has the same size, fixed by `SnapshotDbConfig(num_clusters,
cluster_size)`; both values must be positive.

A fresh database starts with snapshot `0` (the initial, zero-filled state)
and snapshot `1`, the *pending* snapshot that receives writes. The
properties `snapshot_start` and `snapshot_pending` report the current range.

- `await write(cluster_id, data)` stores a full cluster into the pending
  snapshot. `data` must be exactly `cluster_size` bytes long, otherwise
  `ValueError` is raised; an unknown `cluster_id` raises `IndexError`. The new
  contents go to a freshly allocated slot, so older snapshots keep their own
  copy.
- `await read(snapshot, cluster_id)` returns a whole cluster as seen by a
  snapshot; `await read_exact(snapshot, cluster_id, start, length)` returns a
  byte range of it. A snapshot that is not live raises `KeyError`; a range
  outside the cluster raises `ValueError`.
- `await add_snapshot()` freezes the pending snapshot and opens a new
  pending one on top of it.
- `await join_snapshot()` drops the oldest snapshot, releasing slots that no
  other snapshot refers to. It raises `RuntimeError` when there is no later
  snapshot to join into.
- `close()` persists the metadata and releases the files; the database is
  also an async context manager.

```python
import asyncio

from sealstore.db import SnapshotDb, SnapshotDbConfig


async def demo() -> None:
    config = SnapshotDbConfig(num_clusters=100, cluster_size=4096)
    async with await SnapshotDb.open("./my_db", config) as db:
        await db.write(7, b"\x01" * 4096)
        await db.add_snapshot()                  # snapshot 1 frozen, 2 pending
        await db.write(7, b"\x02" * 4096)

        assert await db.read(1, 7) == b"\x01" * 4096
        assert await db.read(2, 7) == b"\x02" * 4096
        assert await db.read_exact(2, 7, 0, 4) == b"\x02" * 4

        await db.join_snapshot()                 # forget snapshot 0


asyncio.run(demo())
```

Reopening the same directory with `SnapshotDb.open` restores the snapshot
range, the offset table and the slot reference counts.

### Building blocks

- `sealstore.allocator.Allocator` hands out slot indices with `pop()` and
  tracks references with `inc`, `inc_many`, `dec` and `dec_many`. A slot
  returns to the free pool (first in, first out) when its count drops to
  zero, and the pool grows by `FREE_SLOTS_MIN_RESERVE` (1024) slots whenever
  fewer than that remain free. `allocator[slot]` gives a slot's count and
  `len(allocator)` the number of slots.
- `sealstore.keystore` defines the key layout (`MetaKey`, `OffsetKey`,
  `encode_key`, `decode_key`), `OffsetTableEntry` and `MetadataStore`.
- `sealstore.fileio` offers `read_exact_at`, `write_all_at` and
  `sync_range`, positioned file I/O run off the event loop. `sync_range`
  flushes the whole file to disk.

## Command line

Installing the package provides the `sealstore` command:

```
sealstore --help
```

It has three sub-commands:

- `sealstore create [PATH] [--num-clusters N] [--cluster-size BYTES]`
  creates a database (defaults: `./test_db`, 1000 clusters of 4096 bytes).
- `sealstore bench-write [PATH] [--num-clusters N] [--cluster-size BYTES]
  [--concurrency N]` writes every cluster once in sequence and once with up
  to `N` concurrent tasks, and prints MB/s for each (defaults: `benchmark`,
  1024 clusters of 1 MiB, concurrency 12).
- `sealstore bench-rw [PATH] [--num-clusters N] [--cluster-size BYTES]
  [--write-concurrency N] [--read-concurrency N]` writes every cluster while
  reading two random clusters of snapshot 0 per write, and prints write,
  read and combined MB/s (defaults: `benchmark_rw`, 1024 clusters of 1 MiB,
  12 writers, 24 readers).

The same work is available from Python through `sealstore.cli`:
`create_database`, `benchmark_write` and `benchmark_read_write`. The
benchmark functions return their measurements as dictionaries.

## Field helpers

- `sealstore.field`: the modulus `P`, `inverse`, `batch_inverse` and
  `collect_rational` (divide numerator/denominator pairs using one batched
  inversion). Inverting zero raises `ZeroDivisionError`.
- `sealstore.matrix`: `RowMajorMatrix` (with `height`, `get`, `row` and
  `transpose`), `identity_matrix`, `invert_matrix` (Gauss–Jordan
  elimination; raises `ValueError` on a singular or non-square matrix) and
  `multiply_matrices`.
- `sealstore.streamcipher`: `StreamCipher(permutation, width, rate)`, which
  turns any permutation callable and a seed (zero-padded to `width`) into an
  endless stream of field elements, `rate` values per permutation call.
- `sealstore.nonce`: `Nonce`, a value below (2³¹ − 1)², split into
  `(low, high)` field elements by `as_mersenne31_word`; and
  `div_mod_mersenne31`.
- `sealstore.consts`: round constants for a width-16, degree-5 Poseidon2
  permutation and the cluster, fragment, segment and volume sizes.

## What it does not do

The package does not implement the Poseidon2 permutation, hashing, Merkle
trees, polynomial commitments or any sealing or proof-of-storage scheme.
`sealstore.consts` only carries the round constants, and `StreamCipher`
needs a permutation supplied by the caller. The database is a local,
single-process library: there is no server or network interface.