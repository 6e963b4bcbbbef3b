import os

import pytest

from sealstore.fileio import read_exact_at, sync_range, write_all_at


@pytest.fixture
def data_file(tmp_path):
    with open(tmp_path / "storage", "w+b") as handle:
        yield handle


@pytest.mark.asyncio
async def test_write_then_read_round_trip(data_file):
    payload = bytes(range(256)) * 4
    await write_all_at(data_file, payload, 100)
    assert await read_exact_at(data_file, 100, len(payload)) == payload


@pytest.mark.asyncio
async def test_write_leaves_gap_zero_filled(data_file):
    await write_all_at(data_file, b"abc", 10)
    assert await read_exact_at(data_file, 0, 13) == b"\x00" * 10 + b"abc"


@pytest.mark.asyncio
async def test_partial_read_within_written_region(data_file):
    await write_all_at(data_file, b"hello world", 0)
    assert await read_exact_at(data_file, 6, 5) == b"world"


@pytest.mark.asyncio
async def test_overwrite_in_place(data_file):
    await write_all_at(data_file, b"aaaaaa", 0)
    await write_all_at(data_file, b"bb", 2)
    assert await read_exact_at(data_file, 0, 6) == b"aabbaa"


@pytest.mark.asyncio
async def test_read_past_end_raises_eof(data_file):
    await write_all_at(data_file, b"short", 0)
    with pytest.raises(EOFError):
        await read_exact_at(data_file, 2, 10)


@pytest.mark.asyncio
async def test_zero_length_read_is_empty(data_file):
    assert await read_exact_at(data_file, 50, 0) == b""


@pytest.mark.asyncio
async def test_accepts_raw_descriptor(tmp_path):
    fd = os.open(tmp_path / "raw", os.O_RDWR | os.O_CREAT)
    try:
        await write_all_at(fd, b"xyz", 4)
        assert await read_exact_at(fd, 4, 3) == b"xyz"
    finally:
        os.close(fd)


@pytest.mark.asyncio
async def test_sync_range_keeps_data_readable(data_file, tmp_path):
    await write_all_at(data_file, b"durable", 0)
    await sync_range(data_file, 0, 7)
    assert await read_exact_at(data_file, 0, 7) == b"durable"
    assert (tmp_path / "storage").read_bytes() == b"durable"


@pytest.mark.asyncio
@pytest.mark.parametrize("offset,length", [(-1, 4), (0, -4)])
async def test_negative_range_rejected(data_file, offset, length):
    with pytest.raises(ValueError):
        await read_exact_at(data_file, offset, length)


@pytest.mark.asyncio
async def test_negative_write_offset_rejected(data_file):
    with pytest.raises(ValueError):
        await write_all_at(data_file, b"x", -5)