"""flacmeta CLI – inspect, validate, extract pictures, and generate test vectors."""

from __future__ import annotations

import argparse
import hashlib
import logging
import os
import sys

from . import __version__
from .format import MAGIC, PictureType
from .reader import FlacError, FlacReader
from .report import report
from .sink import FilePayloadSink
from .writer import (
    FlacMetadataWriter,
    make_padding,
    make_picture,
    make_seektable,
    make_streaminfo,
    make_vorbis_comment,
)


# ── Terminal UI (stdlib only: colors when TTY, Unicode tables) ───────────────

def _color_enabled() -> bool:
    if not hasattr(sys.stdout, "isatty") or not sys.stdout.isatty():
        return False
    return os.environ.get("NO_COLOR", "").strip() == ""

_COLORS = {
    "reset": "\033[0m",
    "dim": "\033[2m",
    "green": "\033[32m",
    "red": "\033[31m",
    "cyan": "\033[36m",
    "bold": "\033[1m",
}

def _c(name: str, text: str) -> str:
    if not _color_enabled() or name not in _COLORS:
        return text
    return f"{_COLORS[name]}{text}{_COLORS['reset']}"

def _section(title: str) -> str:
    return _c("cyan", f"\n  ◆ {title}")

def _ok(msg: str) -> str:
    return _c("green", "✓ ") + msg

def _fail(msg: str) -> str:
    return _c("red", "✗ ") + msg

def _table(headers: list[str], rows: list[list[str]], padding: int = 1) -> list[str]:
    """Return lines for a UTF-8 box table. Column widths from content."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    pad = " " * padding
    lines = ["╭" + "┬".join("─" * (w + 2 * padding) for w in widths) + "╮"]
    lines.append("│" + "│".join(pad + h.ljust(w) + pad for h, w in zip(headers, widths)) + "│")
    lines.append("├" + "┼".join("─" * (w + 2 * padding) for w in widths) + "┤")
    for row in rows:
        lines.append("│" + "│".join(pad + c.ljust(w) + pad for c, w in zip(row, widths)) + "│")
    lines.append("╰" + "┴".join("─" * (w + 2 * padding) for w in widths) + "╯")
    return lines


# ── inspect ─────────────────────────────────────────────────────────────────


def cmd_inspect(args: argparse.Namespace) -> None:
    sink = FilePayloadSink(args.extract_dir) if args.extract_dir else None
    with FlacReader(args.file, sink=sink) as reader:
        blocks = reader.list_blocks()
        print(_c("bold", "\n  FLAC  ") + _c("dim", args.file))
        print(f"    Signature  {MAGIC.decode('ascii')}")

        print(_section(f"Blocks ({len(blocks)})"))
        rows = [
            [str(i), b.header.type_name, str(b.header.length), "yes" if b.header.is_last else ""]
            for i, b in enumerate(blocks)
        ]
        for line in _table(["#", "Type", "Length", "Last"], rows):
            print("  " + line)

        print(_section("Details"))
        report(blocks, emit=lambda line: print("    " + line))

        print(_section("Audio"))
        print(f"    Frames start at byte {reader.audio_offset}")
        print()


# ── validate ────────────────────────────────────────────────────────────────


def cmd_validate(args: argparse.Namespace) -> None:
    with FlacReader(args.file) as reader:
        n = len(reader.list_blocks())
    print(_ok(f"{n} metadata blocks, framing OK."))


# ── extract ─────────────────────────────────────────────────────────────────


def cmd_extract(args: argparse.Namespace) -> None:
    sink = FilePayloadSink(args.output_dir)
    with FlacReader(args.file, sink=sink) as reader:
        pictures = reader.pictures
    if not pictures:
        print(_c("dim", "No PICTURE blocks found."))
        return
    for pic in pictures:
        print(_ok(f"{pic.label}  {pic.mime}  {len(pic.data)} bytes  →  {pic.reference}"))


# ── make-test-vector ────────────────────────────────────────────────────────


# Smallest JPEG marker run: SOI + EOI. Enough for MIME-based extraction.
_PLACEHOLDER_JPEG = b"\xff\xd8\xff\xd9"


def cmd_make_test_vector(args: argparse.Namespace) -> None:
    if args.picture:
        with open(args.picture, "rb") as f:
            image = f.read()
    else:
        image = _PLACEHOLDER_JPEG

    blocks = [
        make_streaminfo(
            min_block_size=4096, max_block_size=4096,
            min_frame_size=14, max_frame_size=9216,
            sample_rate=44100, channels=2, bits_per_sample=16,
            total_samples=441000,
        ),
        make_seektable([(0, 0, 4096), (4096, 8192, 4096)]),
        make_vorbis_comment(
            "flacmeta test vector",
            ["TITLE=Test Vector", "ARTIST=flacmeta"],
        ),
        make_picture(
            image, picture_type=PictureType.COVER_FRONT,
            mime=args.mime, description="front cover",
        ),
        make_padding(64),
    ]
    FlacMetadataWriter().write(args.output, blocks)

    sha = hashlib.sha256()
    with open(args.output, "rb") as f:
        while True:
            block = f.read(1 << 20)
            if not block:
                break
            sha.update(block)
    print(_ok(f"Wrote {args.output}"))
    print(_c("dim", f"  SHA-256  {sha.hexdigest()}"))


# ── main ────────────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flacmeta",
        description="Decode the metadata blocks of a FLAC stream.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"flacmeta {__version__}",
    )
    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("inspect", help="print every metadata block")
    p.add_argument("file")
    p.add_argument("--extract-dir", help="write PICTURE payloads to this directory")

    p = sub.add_parser("validate", help="decode fully and check block framing")
    p.add_argument("file")

    p = sub.add_parser("extract", help="write every PICTURE payload to disk")
    p.add_argument("file")
    p.add_argument("--output-dir", help="destination directory (default: temp dir)")

    p = sub.add_parser("make-test-vector", help="write a small FLAC metadata header")
    p.add_argument("output")
    p.add_argument("--picture", help="image file to embed (default: placeholder JPEG)")
    p.add_argument("--mime", default="image/jpeg", help="MIME type of the embedded image")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    cmds = {
        "inspect": cmd_inspect,
        "validate": cmd_validate,
        "extract": cmd_extract,
        "make-test-vector": cmd_make_test_vector,
    }
    fn = cmds.get(args.command)
    if fn is None:
        parser.print_help()
        sys.exit(1)
    try:
        fn(args)
    except FlacError as exc:
        print(_fail(str(exc)), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
