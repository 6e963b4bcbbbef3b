"""Persistent key-value metadata for the snapshot database.

Keys carry a four-byte little-endian variant tag, followed by two
little-endian ``u64`` fields for offset-table keys. Values are
little-endian ``u64`` integers.
"""

from __future__ import annotations

import enum
import os
import sqlite3
import struct
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Union

_U64_LIMIT = 1 << 64

_TAG = struct.Struct("<I")
_OFFSET_KEY = struct.Struct("<IQQ")
_U64 = struct.Struct("<Q")

_OFFSET_TAG = 3
_OFFSET_PREFIX = bytes([_OFFSET_TAG])
_OFFSET_PREFIX_END = bytes([_OFFSET_TAG + 1])


def _check_u64(name: str, value: int) -> None:
    if not 0 <= value < _U64_LIMIT:
        raise ValueError(f"{name} must fit in an unsigned 64-bit integer")


@dataclass(frozen=True)
class OffsetTableEntry:
    """Where a cluster's data lives: the snapshot that wrote it and its slot."""

    db_snapshot: int
    offset: int


class MetaKey(enum.IntEnum):
    """Keys holding a single database-wide counter."""

    SNAPSHOT_START = 0
    SNAPSHOT_PENDING = 1
    NUM_SLOTS = 2


@dataclass(frozen=True)
class OffsetKey:
    """Key of the offset-table record for one cluster in one snapshot."""

    snapshot: int
    cluster_id: int

    def __post_init__(self) -> None:
        _check_u64("snapshot", self.snapshot)
        _check_u64("cluster_id", self.cluster_id)


Key = Union[MetaKey, OffsetKey]


def encode_key(key: Key) -> bytes:
    """Return the stored byte form of ``key``."""
    if isinstance(key, OffsetKey):
        return _OFFSET_KEY.pack(_OFFSET_TAG, key.snapshot, key.cluster_id)
    if isinstance(key, MetaKey):
        return _TAG.pack(key.value)
    raise TypeError(f"unsupported key type: {type(key).__name__}")


def decode_key(data: bytes) -> Key:
    """Parse a key previously produced by :func:`encode_key`."""
    data = bytes(data)
    if len(data) < _TAG.size:
        raise ValueError("key is too short")
    (tag,) = _TAG.unpack_from(data)
    if tag == _OFFSET_TAG:
        if len(data) != _OFFSET_KEY.size:
            raise ValueError("offset key has the wrong length")
        _, snapshot, cluster_id = _OFFSET_KEY.unpack(data)
        return OffsetKey(snapshot, cluster_id)
    try:
        key = MetaKey(tag)
    except ValueError:
        raise ValueError(f"unknown key tag {tag}") from None
    if len(data) != _TAG.size:
        raise ValueError("metadata key has the wrong length")
    return key


def _encode_u64(value: int) -> bytes:
    _check_u64("value", value)
    return _U64.pack(value)


def _decode_u64(data: bytes) -> int:
    if len(data) != _U64.size:
        raise ValueError("stored value is not an 8-byte integer")
    return _U64.unpack(data)[0]


class MetadataStore:
    """Durable store of snapshot counters and the offset table.

    Writes are visible immediately; :meth:`flush` makes them durable.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(os.fspath(path), check_same_thread=False)
        with self._lock:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS kv (key BLOB PRIMARY KEY, value BLOB NOT NULL)"
            )
            self._conn.commit()

    def __enter__(self) -> MetadataStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Flush pending writes and release the underlying store."""
        with self._lock:
            self._conn.commit()
            self._conn.close()

    def _get(self, key: Key) -> bytes | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM kv WHERE key = ?", (encode_key(key),)
            ).fetchone()
        return None if row is None else bytes(row[0])

    def _put(self, key: Key, value: int) -> None:
        encoded = _encode_u64(value)
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                (encode_key(key), encoded),
            )

    def _required(self, key: MetaKey) -> int:
        data = self._get(key)
        if data is None:
            raise KeyError(f"{key.name} is not set")
        return _decode_u64(data)

    def is_empty(self) -> bool:
        """True when the store has never been initialised."""
        return self._get(MetaKey.SNAPSHOT_START) is None

    @property
    def snapshot_start(self) -> int:
        """Identifier of the earliest live snapshot."""
        return self._required(MetaKey.SNAPSHOT_START)

    @snapshot_start.setter
    def snapshot_start(self, value: int) -> None:
        self._put(MetaKey.SNAPSHOT_START, value)

    @property
    def snapshot_pending(self) -> int:
        """Identifier of the snapshot currently receiving writes."""
        return self._required(MetaKey.SNAPSHOT_PENDING)

    @snapshot_pending.setter
    def snapshot_pending(self, value: int) -> None:
        self._put(MetaKey.SNAPSHOT_PENDING, value)

    @property
    def num_slots(self) -> int:
        """Number of storage slots known to the allocator."""
        return self._required(MetaKey.NUM_SLOTS)

    @num_slots.setter
    def num_slots(self, value: int) -> None:
        self._put(MetaKey.NUM_SLOTS, value)

    def get_offset(self, snapshot: int, cluster_id: int) -> int | None:
        """Return the slot recorded for a cluster in a snapshot, if any."""
        data = self._get(OffsetKey(snapshot, cluster_id))
        return None if data is None else _decode_u64(data)

    def set_offset(self, snapshot: int, cluster_id: int, offset: int) -> None:
        """Record the slot holding a cluster written in a snapshot."""
        self._put(OffsetKey(snapshot, cluster_id), offset)

    def offset_entries(self) -> Iterator[tuple[OffsetKey, int]]:
        """Yield every offset-table record in stored key order."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT key, value FROM kv WHERE key >= ? AND key < ? ORDER BY key",
                (_OFFSET_PREFIX, _OFFSET_PREFIX_END),
            ).fetchall()
        for raw_key, raw_value in rows:
            key = decode_key(bytes(raw_key))
            if isinstance(key, OffsetKey):
                yield key, _decode_u64(bytes(raw_value))

    def remove_keys(self, keys: Iterable[Key]) -> None:
        """Delete the given keys; missing keys are ignored."""
        encoded = [(encode_key(key),) for key in keys]
        with self._lock:
            self._conn.executemany("DELETE FROM kv WHERE key = ?", encoded)

    def flush(self) -> None:
        """Make all writes so far durable."""
        with self._lock:
            self._conn.commit()