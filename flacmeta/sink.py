"""Payload sinks – persist extracted PICTURE payloads.

The decoder never writes anything itself; it hands each decoded
:class:`~flacmeta.blocks.Picture` to a sink and records the reference the
sink returns.
"""

from __future__ import annotations

import logging
import mimetypes
import os
import tempfile
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import blake3

if TYPE_CHECKING:
    from .blocks import Picture

logger = logging.getLogger("flacmeta")

DEFAULT_EXTENSION = ".jpg"
DIGEST_PREFIX_LEN = 16  # hex digits of the BLAKE3 digest used in file names


# ── PayloadSink ABC ─────────────────────────────────────────────────────────


class PayloadSink(ABC):
    """Abstract interface for storing picture payloads."""

    @abstractmethod
    def store(self, picture: Picture) -> str:
        """Persist ``picture.data`` and return a reference to it."""

    def close(self) -> None:
        """Release resources."""

    def __enter__(self) -> PayloadSink:
        return self

    def __exit__(self, *_) -> None:
        self.close()


# ── FilePayloadSink ─────────────────────────────────────────────────────────


def extension_for(mime: str) -> str:
    """Guess a file extension for *mime*, falling back to ``.jpg``."""
    ext = mimetypes.guess_extension(mime.split(";")[0].strip().lower())
    if ext in (None, ".jpe", ".jpeg"):
        return DEFAULT_EXTENSION
    return ext


class FilePayloadSink(PayloadSink):
    """Write each payload to its own file under *directory*.

    Files are named ``<prefix><blake3 digest prefix><ext>``, so the same
    image stored twice lands in the same file.
    """

    def __init__(self, directory: str | None = None, prefix: str = "picture-") -> None:
        self.directory = directory or tempfile.gettempdir()
        self.prefix = prefix
        os.makedirs(self.directory, exist_ok=True)

    def store(self, picture: Picture) -> str:
        digest = blake3.blake3(picture.data).hexdigest()[:DIGEST_PREFIX_LEN]
        name = f"{self.prefix}{digest}{extension_for(picture.mime)}"
        path = os.path.join(self.directory, name)
        with open(path, "wb") as f:
            f.write(picture.data)
        logger.debug("stored %d-byte %s payload at %s", len(picture.data), picture.mime, path)
        return path


# ── MemoryPayloadSink ───────────────────────────────────────────────────────


class MemoryPayloadSink(PayloadSink):
    """Keep payloads in memory; references are ``memory:<index>``."""

    def __init__(self) -> None:
        self.payloads: list[bytes] = []

    def store(self, picture: Picture) -> str:
        self.payloads.append(picture.data)
        return f"memory:{len(self.payloads) - 1}"

    def get(self, reference: str) -> bytes:
        scheme, _, index = reference.partition(":")
        if scheme != "memory" or not index.isdigit():
            raise KeyError(reference)
        return self.payloads[int(index)]

    def close(self) -> None:
        self.payloads.clear()
