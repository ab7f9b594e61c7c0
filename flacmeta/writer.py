"""FLAC metadata writer – produces deterministic metadata headers.

Used to build test vectors and to round-trip decoded blocks. Only the
metadata region is produced; *audio* bytes passed to
:meth:`FlacMetadataWriter.write` are appended verbatim.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import BinaryIO

import numpy as np

from .format import (
    LAST_BLOCK_MASK,
    MAGIC,
    MAX_BLOCK_LENGTH,
    MD5_SIZE,
    SEEKPOINT_DTYPE,
    TYPE_CODE_MASK,
    TYPE_CODE_SHIFT,
    BlockType,
    PictureType,
    pack_streaminfo_bits,
)


def _uint(value: int, nbytes: int, order: str = "big") -> bytes:
    if not 0 <= value < (1 << (8 * nbytes)):
        raise ValueError(f"value {value} does not fit in {nbytes * 8} bits")
    return value.to_bytes(nbytes, order)


def _lp_string(text: str, order: str) -> bytes:
    raw = text.encode("utf-8")
    return _uint(len(raw), 4, order) + raw


# ── Block dataclass ─────────────────────────────────────────────────────────


@dataclass
class Block:
    """A single metadata block body to be written, tagged with its type."""

    type_code: int
    data: bytes

    def __post_init__(self) -> None:
        if not 0 <= self.type_code <= TYPE_CODE_MASK:
            raise ValueError(f"type_code must be 0..127, got {self.type_code}")
        if len(self.data) > MAX_BLOCK_LENGTH:
            raise ValueError(
                f"block body of {len(self.data)} bytes exceeds "
                f"{MAX_BLOCK_LENGTH}-byte limit"
            )


def encode_block_header(type_code: int, length: int, is_last: bool = False) -> bytes:
    if not 0 <= length <= MAX_BLOCK_LENGTH:
        raise ValueError(f"block length {length} does not fit in 24 bits")
    word = ((type_code & TYPE_CODE_MASK) << TYPE_CODE_SHIFT) | length
    if is_last:
        word |= LAST_BLOCK_MASK
    return word.to_bytes(4, "big")


# ── FlacMetadataWriter ──────────────────────────────────────────────────────


class FlacMetadataWriter:
    """Assemble blocks into a signature-prefixed metadata header.

    The last-block flag is set on the final block and cleared on every
    other one.
    """

    def __init__(self, signature: bytes = MAGIC) -> None:
        if len(signature) != 4:
            raise ValueError("signature must be exactly 4 bytes")
        self._signature = signature

    def to_bytes(self, blocks: list[Block], audio: bytes = b"") -> bytes:
        if not blocks:
            raise ValueError("at least one metadata block is required")
        out = bytearray(self._signature)
        for i, block in enumerate(blocks):
            out += encode_block_header(
                block.type_code, len(block.data), is_last=i == len(blocks) - 1
            )
            out += block.data
        out += audio
        return bytes(out)

    def write_to(self, f: BinaryIO, blocks: list[Block], audio: bytes = b"") -> None:
        f.write(self.to_bytes(blocks, audio))

    def write(
        self,
        out_path: str,
        blocks: list[Block],
        audio: bytes = b"",
        *,
        atomic: bool = True,
    ) -> None:
        data = self.to_bytes(blocks, audio)
        tmp_path = out_path + ".tmp" if atomic else out_path
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
                if atomic:
                    f.flush()
                    os.fsync(f.fileno())
            if atomic:
                os.replace(tmp_path, out_path)
        except BaseException:
            if atomic and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


# ── Block builders ──────────────────────────────────────────────────────────


def make_streaminfo(
    min_block_size: int = 4096,
    max_block_size: int = 4096,
    min_frame_size: int = 0,
    max_frame_size: int = 0,
    sample_rate: int = 44100,
    channels: int = 2,
    bits_per_sample: int = 16,
    total_samples: int = 0,
    md5: bytes = b"\x00" * MD5_SIZE,
    packed: int | None = None,
) -> Block:
    """Create a STREAMINFO block.

    *packed* overrides the four audio properties with a raw 64-bit value.
    """
    if len(md5) != MD5_SIZE:
        raise ValueError(f"md5 must be exactly {MD5_SIZE} bytes")
    if packed is None:
        packed = pack_streaminfo_bits(sample_rate, channels, bits_per_sample, total_samples)
    data = (
        _uint(min_block_size, 2)
        + _uint(max_block_size, 2)
        + _uint(min_frame_size, 3)
        + _uint(max_frame_size, 3)
        + _uint(packed, 8)
        + md5
    )
    return Block(int(BlockType.STREAMINFO), data)


def make_padding(length: int) -> Block:
    return Block(int(BlockType.PADDING), b"\x00" * length)


def make_seektable(points: list[tuple[int, int, int]]) -> Block:
    """Create a SEEKTABLE from ``(sample_number, stream_offset, frame_samples)``."""
    arr = np.array([tuple(p) for p in points], dtype=SEEKPOINT_DTYPE)
    return Block(int(BlockType.SEEKTABLE), arr.tobytes())


def make_vorbis_comment(vendor: str, comments: list[str]) -> Block:
    data = _lp_string(vendor, "little") + _uint(len(comments), 4, "little")
    for comment in comments:
        data += _lp_string(comment, "little")
    return Block(int(BlockType.VORBIS_COMMENT), data)


def make_picture(
    data: bytes,
    picture_type: int = PictureType.COVER_FRONT,
    mime: str = "image/jpeg",
    description: str = "",
    width: int = 0,
    height: int = 0,
    depth: int = 0,
    colors: int = 0,
) -> Block:
    body = (
        _uint(int(picture_type), 4)
        + _lp_string(mime, "big")
        + _lp_string(description, "big")
        + _uint(width, 4)
        + _uint(height, 4)
        + _uint(depth, 4)
        + _uint(colors, 4)
        + _uint(len(data), 4)
        + data
    )
    return Block(int(BlockType.PICTURE), body)


def make_raw_block(type_code: int, data: bytes = b"") -> Block:
    """Create a block with an arbitrary type code and uninterpreted body."""
    return Block(type_code, data)
