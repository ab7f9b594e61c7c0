"""flacmeta – decode the metadata blocks of a FLAC stream."""

__version__ = "0.1.0"

from .format import (
    MAGIC,
    BlockType, ByteOrder, PictureType, PICTURE_TYPE_LABELS,
)
from .stream import (
    BitReader, FlacError, FormatError, TruncatedStreamError, UnsupportedBlockError,
)
from .blocks import (
    BlockHeader, MetadataBlock,
    Padding, Picture, SeekPoint, SeekTable, StreamInfo, VorbisComment,
)
from .sink import FilePayloadSink, MemoryPayloadSink, PayloadSink
from .reader import FlacReader, iter_blocks, read_metadata
from .writer import Block, FlacMetadataWriter

__all__ = [
    "__version__",
    "MAGIC",
    "BlockType", "ByteOrder", "PictureType", "PICTURE_TYPE_LABELS",
    "BitReader", "FlacError", "FormatError", "TruncatedStreamError",
    "UnsupportedBlockError",
    "BlockHeader", "MetadataBlock",
    "Padding", "Picture", "SeekPoint", "SeekTable", "StreamInfo", "VorbisComment",
    "PayloadSink", "FilePayloadSink", "MemoryPayloadSink",
    "FlacReader", "iter_blocks", "read_metadata",
    "Block", "FlacMetadataWriter",
]
