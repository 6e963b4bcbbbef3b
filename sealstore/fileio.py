"""Positioned, non-blocking file reads and writes for asyncio code."""

from __future__ import annotations

import asyncio
import os
import threading
from typing import IO, Union

FileLike = Union[int, IO[bytes]]

_seek_lock = threading.Lock()


def _fileno(file: FileLike) -> int:
    return file if isinstance(file, int) else file.fileno()


def _check_range(offset: int, length: int) -> None:
    if offset < 0:
        raise ValueError("offset cannot be negative")
    if length < 0:
        raise ValueError("length cannot be negative")


if hasattr(os, "pread") and hasattr(os, "pwrite"):

    def _pread(fd: int, size: int, offset: int) -> bytes:
        return os.pread(fd, size, offset)

    def _pwrite(fd: int, data: memoryview, offset: int) -> int:
        return os.pwrite(fd, data, offset)

else:

    def _pread(fd: int, size: int, offset: int) -> bytes:
        with _seek_lock:
            os.lseek(fd, offset, os.SEEK_SET)
            return os.read(fd, size)

    def _pwrite(fd: int, data: memoryview, offset: int) -> int:
        with _seek_lock:
            os.lseek(fd, offset, os.SEEK_SET)
            return os.write(fd, data)


def _read_exact(fd: int, offset: int, length: int) -> bytes:
    buffer = bytearray()
    while len(buffer) < length:
        chunk = _pread(fd, length - len(buffer), offset + len(buffer))
        if not chunk:
            raise EOFError(f"file ended before {length} bytes at offset {offset}")
        buffer += chunk
    return bytes(buffer)


def _write_all(fd: int, data: bytes, offset: int) -> None:
    view = memoryview(data)
    while view:
        written = _pwrite(fd, view, offset)
        if written <= 0:
            raise OSError("failed to write to file")
        view = view[written:]
        offset += written


async def read_exact_at(file: FileLike, offset: int, length: int) -> bytes:
    """Read exactly ``length`` bytes starting at ``offset``; EOFError if short."""
    _check_range(offset, length)
    return await asyncio.to_thread(_read_exact, _fileno(file), offset, length)


async def write_all_at(file: FileLike, data: bytes, offset: int) -> None:
    """Write all of ``data`` starting at ``offset``."""
    _check_range(offset, 0)
    payload = bytes(data)
    await asyncio.to_thread(_write_all, _fileno(file), payload, offset)


async def sync_range(file: FileLike, offset: int, length: int) -> None:
    """Make the written range durable; the whole file is flushed to disk."""
    _check_range(offset, length)
    await asyncio.to_thread(os.fsync, _fileno(file))