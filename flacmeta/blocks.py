"""Metadata block header, per-type bodies, and the body dispatcher.

Each parser receives a :class:`BitReader` positioned at the start of a block
body and the body's declared length. :func:`parse_block_body` reads the body
as one strict run of ``length`` bytes and then checks that the parser used
every byte of it, so a mis-sized field surfaces as a :class:`FormatError`
instead of shifting every later block.
"""

from __future__ import annotations

import io
import logging
import struct
from dataclasses import dataclass, field
from typing import Callable, Union

from .format import (
    LAST_BLOCK_MASK,
    LENGTH_MASK,
    MD5_SIZE,
    PICTURE_GEOMETRY_SIZE,
    PICTURE_TYPE_LABELS,
    PLACEHOLDER_SAMPLE_NUMBER,
    SEEKPOINT_DTYPE,
    SEEKPOINT_SIZE,
    TYPE_CODE_MASK,
    TYPE_CODE_SHIFT,
    BPS_MASK,
    BPS_SHIFT,
    CHANNELS_MASK,
    CHANNELS_SHIFT,
    SAMPLE_RATE_MASK,
    SAMPLE_RATE_SHIFT,
    TOTAL_SAMPLES_MASK,
    BlockType,
    ByteOrder,
    PictureType,
    block_type_for,
)
from .stream import (
    BitReader,
    FormatError,
    TruncatedStreamError,
    UnsupportedBlockError,
)

logger = logging.getLogger("flacmeta")


# ── Header ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class BlockHeader:
    is_last: bool
    type_code: int
    length: int

    @property
    def block_type(self) -> BlockType | None:
        """The block type, or ``None`` for a reserved code."""
        return block_type_for(self.type_code)

    @property
    def type_name(self) -> str:
        bt = self.block_type
        return bt.name if bt is not None else f"RESERVED({self.type_code})"


def decode_block_header(reader: BitReader) -> BlockHeader:
    word = reader.read(32, ByteOrder.BIG)
    return BlockHeader(
        is_last=bool(word & LAST_BLOCK_MASK),
        type_code=(word >> TYPE_CODE_SHIFT) & TYPE_CODE_MASK,
        length=word & LENGTH_MASK,
    )


# ── Bodies ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class StreamInfo:
    """STREAMINFO body.

    ``packed`` holds the 64 raw bits carrying sample rate, channel count,
    bits per sample and total samples; the properties below unpack them.
    """

    min_block_size: int
    max_block_size: int
    min_frame_size: int
    max_frame_size: int
    packed: int
    md5: bytes

    @property
    def sample_rate(self) -> int:
        return (self.packed >> SAMPLE_RATE_SHIFT) & SAMPLE_RATE_MASK

    @property
    def channels(self) -> int:
        return ((self.packed >> CHANNELS_SHIFT) & CHANNELS_MASK) + 1

    @property
    def bits_per_sample(self) -> int:
        return ((self.packed >> BPS_SHIFT) & BPS_MASK) + 1

    @property
    def total_samples(self) -> int:
        return self.packed & TOTAL_SAMPLES_MASK

    @property
    def duration(self) -> float | None:
        """Length of the audio in seconds, if known."""
        if not self.sample_rate or not self.total_samples:
            return None
        return self.total_samples / self.sample_rate

    @property
    def md5_hex(self) -> str:
        return self.md5.hex()


@dataclass(frozen=True)
class Padding:
    length: int


@dataclass(frozen=True)
class SeekPoint:
    sample_number: int
    stream_offset: int
    frame_samples: int

    @property
    def is_placeholder(self) -> bool:
        return self.sample_number == PLACEHOLDER_SAMPLE_NUMBER


@dataclass(frozen=True)
class SeekTable:
    """SEEKTABLE body.

    ``remainder`` is the number of trailing bytes left over when the block
    length is not a multiple of the seek point size. Those bytes are
    consumed but not interpreted.
    """

    points: tuple[SeekPoint, ...]
    remainder: int = 0


@dataclass(frozen=True)
class VorbisComment:
    vendor: str
    comments: tuple[str, ...]

    @property
    def tags(self) -> list[tuple[str, str]]:
        """``(NAME, value)`` pairs; comments without ``=`` are skipped."""
        pairs = []
        for comment in self.comments:
            name, sep, value = comment.partition("=")
            if sep:
                pairs.append((name.upper(), value))
        return pairs


@dataclass(frozen=True)
class Picture:
    """PICTURE body.

    ``geometry`` is the raw 16-byte width/height/depth/colors run.
    ``reference`` is set by the reader once a payload sink has stored
    ``data``.
    """

    picture_type: PictureType
    mime: str
    description: str
    geometry: bytes
    data: bytes = field(repr=False)
    reference: str | None = None

    @property
    def label(self) -> str:
        return PICTURE_TYPE_LABELS[self.picture_type]

    @property
    def width(self) -> int:
        return struct.unpack(">4I", self.geometry)[0]

    @property
    def height(self) -> int:
        return struct.unpack(">4I", self.geometry)[1]

    @property
    def depth(self) -> int:
        return struct.unpack(">4I", self.geometry)[2]

    @property
    def colors(self) -> int:
        return struct.unpack(">4I", self.geometry)[3]


BlockBody = Union[StreamInfo, Padding, SeekTable, VorbisComment, Picture]


@dataclass(frozen=True)
class MetadataBlock:
    header: BlockHeader
    body: BlockBody

    @property
    def block_type(self) -> BlockType | None:
        return self.header.block_type


# ── Parsers ─────────────────────────────────────────────────────────────────


def _read_string(reader: BitReader, order: ByteOrder, what: str) -> str:
    n = reader.read(32, order)
    raw = reader.read_bytes(n, what=what)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError(f"{what} is not valid UTF-8") from exc


def parse_streaminfo(reader: BitReader, length: int) -> StreamInfo:
    return StreamInfo(
        min_block_size=reader.read(16),
        max_block_size=reader.read(16),
        min_frame_size=reader.read(24),
        max_frame_size=reader.read(24),
        packed=reader.read(64),
        md5=reader.read_bytes(MD5_SIZE, what="MD5 signature"),
    )


def parse_padding(reader: BitReader, length: int) -> Padding:
    reader.skip(length)
    return Padding(length=length)


def parse_seektable(reader: BitReader, length: int) -> SeekTable:
    count, remainder = divmod(length, SEEKPOINT_SIZE)
    records = reader.read_records(SEEKPOINT_DTYPE, count)
    points = tuple(
        SeekPoint(
            sample_number=int(r["sample_number"]),
            stream_offset=int(r["stream_offset"]),
            frame_samples=int(r["frame_samples"]),
        )
        for r in records
    )
    if remainder:
        logger.warning(
            "SEEKTABLE length %d is not a multiple of %d; "
            "ignoring %d trailing bytes",
            length, SEEKPOINT_SIZE, remainder,
        )
        reader.skip(remainder)
    return SeekTable(points=points, remainder=remainder)


def parse_vorbis_comment(reader: BitReader, length: int) -> VorbisComment:
    vendor = _read_string(reader, ByteOrder.LITTLE, "vendor string")
    count = reader.read(32, ByteOrder.LITTLE)
    comments = []
    for i in range(count):
        comments.append(_read_string(reader, ByteOrder.LITTLE, f"comment[{i}]"))
    return VorbisComment(vendor=vendor, comments=tuple(comments))


def parse_picture(reader: BitReader, length: int) -> Picture:
    code = reader.read(32)
    try:
        picture_type = PictureType(code)
    except ValueError:
        raise FormatError(f"picture type code not supported: {code}") from None
    mime = _read_string(reader, ByteOrder.BIG, "MIME type")
    description = _read_string(reader, ByteOrder.BIG, "description")
    geometry = reader.read_bytes(PICTURE_GEOMETRY_SIZE, what="picture geometry")
    data_len = reader.read(32)
    data = reader.read_bytes(data_len, what="picture data")
    return Picture(
        picture_type=picture_type,
        mime=mime,
        description=description,
        geometry=geometry,
        data=data,
    )


# ── Dispatcher ──────────────────────────────────────────────────────────────

BodyParser = Callable[[BitReader, int], BlockBody]

_PARSERS: dict[BlockType, BodyParser] = {
    BlockType.STREAMINFO: parse_streaminfo,
    BlockType.PADDING: parse_padding,
    BlockType.SEEKTABLE: parse_seektable,
    BlockType.VORBIS_COMMENT: parse_vorbis_comment,
    BlockType.PICTURE: parse_picture,
}

_UNSUPPORTED: dict[BlockType, str] = {
    BlockType.APPLICATION: "APPLICATION metadata block is not supported",
    BlockType.CUESHEET: "CUESHEET metadata block is not supported",
    BlockType.INVALID: "invalid metadata block type 127",
}


def parse_block_body(reader: BitReader, header: BlockHeader) -> BlockBody:
    """Decode the body following *header*, consuming exactly its length."""
    block_type = header.block_type
    if block_type is None:
        raise UnsupportedBlockError(
            header.type_code,
            f"reserved metadata block type {header.type_code}",
        )
    if block_type in _UNSUPPORTED:
        raise UnsupportedBlockError(header.type_code, _UNSUPPORTED[block_type])
    parser = _PARSERS[block_type]

    name = block_type.name
    raw = reader.read_bytes(header.length, what=f"{name} block body")
    body_reader = BitReader(io.BytesIO(raw))
    try:
        body = parser(body_reader, header.length)
    except TruncatedStreamError as exc:
        raise FormatError(
            f"{name} block: {exc.args[0]} within declared length "
            f"{header.length}"
        ) from exc
    if body_reader.position != header.length:
        raise FormatError(
            f"{name} block consumed {body_reader.position} of "
            f"{header.length} declared bytes"
        )
    return body
