"""BitReader tests: widths, byte order, strict reads."""

import io

import pytest

from flacmeta.format import SEEKPOINT_DTYPE, ByteOrder
from flacmeta.stream import BitReader, TruncatedStreamError


def _reader(data: bytes) -> BitReader:
    return BitReader(io.BytesIO(data))


class _Trickle(io.RawIOBase):
    """Unbuffered source that hands out at most *step* bytes per read."""

    def __init__(self, data: bytes, step: int = 3) -> None:
        self._data = data
        self._pos = 0
        self._step = step

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        n = min(len(b), self._step, len(self._data) - self._pos)
        b[:n] = self._data[self._pos:self._pos + n]
        self._pos += n
        return n


@pytest.mark.parametrize(
    "bits, data, big, little",
    [
        (8, b"\xab", 0xAB, 0xAB),
        (16, b"\x01\x02", 0x0102, 0x0201),
        (24, b"\x01\x02\x03", 0x010203, 0x030201),
        (32, b"\x00\x00\x00\x22", 0x22, 0x22000000),
        (64, b"\x00" * 7 + b"\x01", 1, 1 << 56),
    ],
)
def test_read_byte_order(bits, data, big, little):
    assert _reader(data).read(bits, ByteOrder.BIG) == big
    assert _reader(data).read(bits, ByteOrder.LITTLE) == little


def test_default_order_is_big_endian():
    assert _reader(b"\x12\x34").read(16) == 0x1234


def test_read_is_unsigned():
    """High bit set never yields a negative value."""
    assert _reader(b"\xff" * 8).read(64) == (1 << 64) - 1
    assert _reader(b"\x80\x00\x00").read(24) == 0x800000
    assert _reader(b"\xff\xff\xff\xff").read(32, ByteOrder.LITTLE) == 0xFFFFFFFF


@pytest.mark.parametrize("bits", [0, 4, 12, 72, -8])
def test_invalid_width(bits):
    with pytest.raises(ValueError, match="bit width"):
        _reader(b"\x00" * 16).read(bits)


def test_short_read_raises():
    r = _reader(b"\x01\x02")
    with pytest.raises(TruncatedStreamError) as info:
        r.read(32)
    assert info.value.expected == 4
    assert info.value.actual == 2


def test_read_bytes_and_position():
    r = _reader(b"abcdefgh")
    assert r.position == 0
    assert r.read_bytes(3) == b"abc"
    r.skip(2)
    assert r.position == 5
    assert r.read(24) == int.from_bytes(b"fgh", "big")
    assert r.position == 8
    with pytest.raises(TruncatedStreamError):
        r.read_bytes(1)
    assert r.position == 8


def test_read_records():
    raw = (
        (1).to_bytes(8, "big") + (100).to_bytes(8, "big") + (4096).to_bytes(2, "big")
        + (2).to_bytes(8, "big") + (200).to_bytes(8, "big") + (1024).to_bytes(2, "big")
    )
    r = _reader(raw)
    recs = r.read_records(SEEKPOINT_DTYPE, 2)
    assert r.position == 36
    assert [int(x) for x in recs["sample_number"]] == [1, 2]
    assert [int(x) for x in recs["stream_offset"]] == [100, 200]
    assert [int(x) for x in recs["frame_samples"]] == [4096, 1024]


def test_read_records_empty():
    r = _reader(b"")
    assert len(r.read_records(SEEKPOINT_DTYPE, 0)) == 0
    assert r.position == 0


def test_read_records_short():
    with pytest.raises(TruncatedStreamError):
        _reader(b"\x00" * 20).read_records(SEEKPOINT_DTYPE, 2)


def test_short_reads_before_eof_are_retried():
    r = BitReader(_Trickle(b"abcdefghij", step=3))
    assert r.read_bytes(8) == b"abcdefgh"
    assert r.read(16) == int.from_bytes(b"ij", "big")
    assert r.position == 10


def test_trickling_source_still_truncates_at_eof():
    r = BitReader(_Trickle(b"abcde", step=2))
    with pytest.raises(TruncatedStreamError) as info:
        r.read_bytes(8)
    assert (info.value.expected, info.value.actual) == (8, 5)
