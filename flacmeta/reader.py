"""FLAC metadata reader – validate the signature and decode metadata blocks."""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import BinaryIO, Iterator, Union

from .blocks import (
    MetadataBlock,
    Picture,
    StreamInfo,
    decode_block_header,
    parse_block_body,
)
from .format import BLOCK_HEADER_SIZE, MAGIC, SIGNATURE_SIZE, BlockType
from .sink import PayloadSink
from .stream import (
    BitReader,
    FlacError,
    FormatError,
    TruncatedStreamError,
    UnsupportedBlockError,
)

__all__ = [
    "FlacError",
    "FormatError",
    "TruncatedStreamError",
    "UnsupportedBlockError",
    "FlacReader",
    "iter_blocks",
    "read_metadata",
]

logger = logging.getLogger("flacmeta")

Source = Union[str, os.PathLike, BinaryIO]


def check_signature(reader: BitReader) -> None:
    try:
        signature = reader.read_bytes(SIGNATURE_SIZE, what="signature")
    except TruncatedStreamError as exc:
        raise FormatError("not a FLAC stream: too short for signature") from exc
    if signature != MAGIC:
        raise FormatError(f"not a FLAC stream: bad signature {signature!r}")


def iter_blocks(
    stream: BinaryIO,
    sink: PayloadSink | None = None,
) -> Iterator[MetadataBlock]:
    """Yield each metadata block of *stream* up to and including the last.

    The signature is checked before anything is yielded. Nothing is read
    past the body of the block whose last-block flag is set. PICTURE
    payloads are handed to *sink* (if given) and the returned reference is
    attached to the yielded block. Storing happens as each block is
    yielded, so a later decode error leaves earlier payloads in the sink;
    :class:`FlacReader` stores nothing until the whole header has decoded.
    """
    reader = BitReader(stream)
    check_signature(reader)
    while True:
        header = decode_block_header(reader)
        logger.debug(
            "block at %d: type=%s length=%d last=%s",
            reader.position - BLOCK_HEADER_SIZE,
            header.type_name, header.length, header.is_last,
        )
        body = parse_block_body(reader, header)
        if sink is not None and isinstance(body, Picture):
            body = dataclasses.replace(body, reference=sink.store(body))
        yield MetadataBlock(header=header, body=body)
        if header.is_last:
            return


def read_metadata(
    source: Source,
    sink: PayloadSink | None = None,
) -> list[MetadataBlock]:
    """Decode every metadata block of *source* (a path or binary file)."""
    with FlacReader(source, sink=sink) as r:
        return r.list_blocks()


# ── FlacReader ──────────────────────────────────────────────────────────────


class FlacReader:
    """Read and validate the metadata header of a FLAC file.

    Usage::

        with FlacReader("song.flac") as r:
            for b in r.list_blocks():
                print(b.header.type_name, b.header.length)
            info = r.streaminfo

    Decoding happens in the constructor; any :class:`FlacError` aborts it
    and no partial result is kept, in memory or in *sink*. A stream opened from a path is closed on
    every exit path. A caller-supplied file object is left open.
    """

    def __init__(self, source: Source, sink: PayloadSink | None = None) -> None:
        if isinstance(source, (str, os.PathLike)):
            self._path = os.fspath(source)
            self._fd = open(self._path, "rb")  # noqa: SIM115
            self._owns_fd = True
        else:
            self._path = getattr(source, "name", None)
            self._fd = source
            self._owns_fd = False
        self._sink = sink
        self._blocks: list[MetadataBlock] = []
        self._audio_offset = 0
        try:
            self._parse()
        except BaseException:
            self.close()
            raise

    # ── Public properties ────────────────────────────────────────────────

    @property
    def path(self) -> str | None:
        return self._path

    @property
    def audio_offset(self) -> int:
        """Byte offset of the first audio frame, counted from the signature."""
        return self._audio_offset

    @property
    def streaminfo(self) -> StreamInfo | None:
        block = self.get_block(BlockType.STREAMINFO)
        return block.body if block is not None else None

    @property
    def pictures(self) -> list[Picture]:
        return [b.body for b in self.get_blocks(BlockType.PICTURE)]

    # ── Block discovery ──────────────────────────────────────────────────

    def list_blocks(self) -> list[MetadataBlock]:
        return list(self._blocks)

    def get_block(self, block_type: BlockType) -> MetadataBlock | None:
        """Return the first block of *block_type*, or ``None``."""
        for b in self._blocks:
            if b.block_type == block_type:
                return b
        return None

    def get_blocks(self, block_type: BlockType) -> list[MetadataBlock]:
        return [b for b in self._blocks if b.block_type == block_type]

    # ── Lifecycle ────────────────────────────────────────────────────────

    def close(self) -> None:
        if self._owns_fd:
            self._fd.close()

    def __enter__(self) -> FlacReader:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    # ── Internal ─────────────────────────────────────────────────────────

    def _parse(self) -> None:
        offset = SIGNATURE_SIZE
        blocks = []
        for block in iter_blocks(self._fd):
            blocks.append(block)
            offset += BLOCK_HEADER_SIZE + block.header.length
        # Payloads are stored only once the whole header has decoded.
        if self._sink is not None:
            blocks = [self._store(b) for b in blocks]
        self._blocks = blocks
        self._audio_offset = offset

    def _store(self, block: MetadataBlock) -> MetadataBlock:
        if not isinstance(block.body, Picture):
            return block
        body = dataclasses.replace(block.body, reference=self._sink.store(block.body))
        return MetadataBlock(header=block.header, body=body)
