"""Strict fixed-width reads from a binary stream, and the decode exceptions."""

from __future__ import annotations

from typing import BinaryIO

import numpy as np

from .format import ByteOrder


# ── Exceptions ──────────────────────────────────────────────────────────────


class FlacError(Exception):
    """Base exception for FLAC metadata decode errors."""


class FormatError(FlacError):
    """Bad signature, unmapped enum code, or malformed block framing."""


class UnsupportedBlockError(FlacError):
    """Block type that is recognized but not decoded."""

    def __init__(self, type_code: int, message: str) -> None:
        super().__init__(message)
        self.type_code = type_code


class TruncatedStreamError(FlacError):
    """Fewer bytes available than a field or declared length requires."""

    def __init__(self, expected: int, actual: int, what: str = "field") -> None:
        super().__init__(
            f"truncated stream: {what} needs {expected} bytes, got {actual}"
        )
        self.expected = expected
        self.actual = actual


# ── BitReader ───────────────────────────────────────────────────────────────


class BitReader:
    """Read unsigned fixed-width integers and byte runs from *stream*.

    Every read is strict: reads are repeated until the requested bytes
    arrive, and hitting end of stream first raises
    :class:`TruncatedStreamError` instead of returning partial data. ``position`` counts the bytes
    consumed through this reader.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    def read(self, bits: int, order: ByteOrder = ByteOrder.BIG) -> int:
        """Read *bits* (8..64, multiple of 8) as an unsigned integer."""
        if bits % 8 != 0 or not 8 <= bits <= 64:
            raise ValueError(f"bit width must be a multiple of 8 in 8..64, got {bits}")
        data = self.read_bytes(bits // 8)
        return int.from_bytes(data, order.value, signed=False)

    def read_bytes(self, n: int, what: str = "field") -> bytes:
        if n < 0:
            raise ValueError(f"negative read length: {n}")
        # Raw pipes and sockets may return fewer bytes than asked before EOF.
        buf = bytearray()
        while len(buf) < n:
            chunk = self._stream.read(n - len(buf))
            if not chunk:
                break
            buf += chunk
        if len(buf) != n:
            raise TruncatedStreamError(n, len(buf), what)
        self._position += n
        return bytes(buf)

    def skip(self, n: int) -> None:
        self.read_bytes(n, what="skipped region")

    def read_records(self, dtype: list, count: int) -> np.ndarray:
        """Read *count* fixed-size records laid out as numpy *dtype*."""
        dt = np.dtype(dtype)
        if count == 0:
            return np.zeros(0, dtype=dt)
        data = self.read_bytes(dt.itemsize * count, what="record array")
        return np.frombuffer(data, dtype=dt, count=count)
