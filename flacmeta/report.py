"""Human-readable description lines for decoded metadata blocks."""

from __future__ import annotations

from typing import Callable, Iterable

from .blocks import (
    MetadataBlock,
    Padding,
    Picture,
    SeekTable,
    StreamInfo,
    VorbisComment,
)

LineSink = Callable[[str], None]


def _streaminfo_lines(info: StreamInfo) -> list[str]:
    lines = [
        f"Minimum block size (in samples): {info.min_block_size}",
        f"Maximum block size (in samples): {info.max_block_size}",
        f"Minimum frame size (in bytes): {info.min_frame_size}",
        f"Maximum frame size (in bytes): {info.max_frame_size}",
        f"Sample rate: {info.sample_rate} Hz",
        f"Channels: {info.channels}",
        f"Bits per sample: {info.bits_per_sample}",
        f"Total samples: {info.total_samples}",
    ]
    if info.duration is not None:
        lines.append(f"Duration: {info.duration:.3f} s")
    lines.append(f"MD5 signature of the unencoded audio data: {info.md5_hex}")
    return lines


def _padding_lines(padding: Padding) -> list[str]:
    return [f"Padding: {padding.length} bytes"]


def _seektable_lines(table: SeekTable) -> list[str]:
    lines = []
    for i, p in enumerate(table.points):
        if p.is_placeholder:
            lines.append(f"{i}) Placeholder")
            continue
        lines.append(
            f"{i}) Sample number: {p.sample_number}, "
            f"Stream offset: {p.stream_offset}, "
            f"Frame samples: {p.frame_samples}"
        )
    if table.remainder:
        lines.append(f"Warning: {table.remainder} trailing bytes ignored")
    return lines


def _vorbis_comment_lines(vc: VorbisComment) -> list[str]:
    lines = [f"Vendor: {vc.vendor}"]
    lines.extend(f'comment[{i}]="{c}"' for i, c in enumerate(vc.comments))
    return lines


def _picture_lines(pic: Picture) -> list[str]:
    lines = [
        f'Picture type: {int(pic.picture_type)} ("{pic.label}")',
        f"MIME type: {pic.mime}",
        f'Description: "{pic.description}"',
        f"Dimensions: {pic.width}x{pic.height}, {pic.depth} bpp, {pic.colors} colors",
        f"Picture data: {len(pic.data)} bytes",
    ]
    if pic.reference is not None:
        lines.append(f'Picture extracted in: "{pic.reference}"')
    return lines


_DESCRIBERS: dict[type, Callable] = {
    StreamInfo: _streaminfo_lines,
    Padding: _padding_lines,
    SeekTable: _seektable_lines,
    VorbisComment: _vorbis_comment_lines,
    Picture: _picture_lines,
}


def describe_block(block: MetadataBlock) -> list[str]:
    header = block.header
    lines = [
        f"Block type: {header.type_code} ({header.type_name})",
        f"Is last metadata block? {'Yes' if header.is_last else 'No'}",
        f"Length (in bytes): {header.length}",
    ]
    lines.extend(_DESCRIBERS[type(block.body)](block.body))
    return lines


def report(blocks: Iterable[MetadataBlock], emit: LineSink = print) -> None:
    """Write every block's lines to *emit*, separated by rule lines."""
    emit("--------")
    for block in blocks:
        for line in describe_block(block):
            emit(line)
        emit("--------")
