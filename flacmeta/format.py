"""FLAC metadata format constants, enums, and field sizes."""

from __future__ import annotations

from enum import Enum, IntEnum

# ── Magic ───────────────────────────────────────────────────────────────────

MAGIC = b"fLaC"

# ── Fixed sizes (bytes) ────────────────────────────────────────────────────

SIGNATURE_SIZE = 4
BLOCK_HEADER_SIZE = 4
STREAMINFO_SIZE = 34
SEEKPOINT_SIZE = 18
PICTURE_GEOMETRY_SIZE = 16
MD5_SIZE = 16

# ── Block header layout (one big-endian u32) ────────────────────────────────
#
#   bit 31        last-metadata-block flag
#   bits 30..24   block type code
#   bits 23..0    body length in bytes

LAST_BLOCK_MASK = 0x80000000
TYPE_CODE_SHIFT = 24
TYPE_CODE_MASK = 0x7F
LENGTH_MASK = 0xFFFFFF

MAX_BLOCK_LENGTH = LENGTH_MASK

# ── Seek points ────────────────────────────────────────────────────────────
#
# sample_number(u64) stream_offset(u64) frame_samples(u16), all big-endian

SEEKPOINT_DTYPE = [
    ("sample_number", ">u8"),
    ("stream_offset", ">u8"),
    ("frame_samples", ">u2"),
]

PLACEHOLDER_SAMPLE_NUMBER = 0xFFFFFFFFFFFFFFFF


class ByteOrder(Enum):
    BIG = "big"
    LITTLE = "little"


# ── Block types (7-bit code) ────────────────────────────────────────────────


class BlockType(IntEnum):
    STREAMINFO = 0
    PADDING = 1
    APPLICATION = 2
    SEEKTABLE = 3
    VORBIS_COMMENT = 4
    CUESHEET = 5
    PICTURE = 6
    INVALID = 127


def block_type_for(code: int) -> BlockType | None:
    """Return the :class:`BlockType` for *code*, or ``None`` if reserved."""
    try:
        return BlockType(code)
    except ValueError:
        return None


# ── Picture types (ID3v2 APIC) ──────────────────────────────────────────────


class PictureType(IntEnum):
    OTHER = 0
    FILE_ICON = 1
    OTHER_FILE_ICON = 2
    COVER_FRONT = 3
    COVER_BACK = 4
    LEAFLET_PAGE = 5
    MEDIA = 6
    LEAD_ARTIST = 7
    ARTIST = 8
    CONDUCTOR = 9
    BAND = 10
    COMPOSER = 11
    LYRICIST = 12
    RECORDING_LOCATION = 13
    DURING_RECORDING = 14
    DURING_PERFORMANCE = 15
    SCREEN_CAPTURE = 16
    BRIGHT_COLOURED_FISH = 17
    ILLUSTRATION = 18
    BAND_LOGOTYPE = 19
    PUBLISHER_LOGOTYPE = 20


PICTURE_TYPE_LABELS: dict[PictureType, str] = {
    PictureType.OTHER: "Other",
    PictureType.FILE_ICON: "32x32 pixels 'file icon' (PNG only)",
    PictureType.OTHER_FILE_ICON: "Other file icon",
    PictureType.COVER_FRONT: "Cover (front)",
    PictureType.COVER_BACK: "Cover (back)",
    PictureType.LEAFLET_PAGE: "Leaflet page",
    PictureType.MEDIA: "Media (e.g. label side of CD)",
    PictureType.LEAD_ARTIST: "Lead artist/lead performer/soloist",
    PictureType.ARTIST: "Artist/performer",
    PictureType.CONDUCTOR: "Conductor",
    PictureType.BAND: "Band/Orchestra",
    PictureType.COMPOSER: "Composer",
    PictureType.LYRICIST: "Lyricist/text writer",
    PictureType.RECORDING_LOCATION: "Recording Location",
    PictureType.DURING_RECORDING: "During recording",
    PictureType.DURING_PERFORMANCE: "During performance",
    PictureType.SCREEN_CAPTURE: "Movie/video screen capture",
    PictureType.BRIGHT_COLOURED_FISH: "A bright coloured fish",
    PictureType.ILLUSTRATION: "Illustration",
    PictureType.BAND_LOGOTYPE: "Band/artist logotype",
    PictureType.PUBLISHER_LOGOTYPE: "Publisher/Studio logotype",
}

assert len(PICTURE_TYPE_LABELS) == len(PictureType) == 21

# ── StreamInfo packed field (u64) ───────────────────────────────────────────
#
#   sample_rate(20) channels-1(3) bits_per_sample-1(5) total_samples(36)

SAMPLE_RATE_SHIFT = 44
SAMPLE_RATE_MASK = 0xFFFFF
CHANNELS_SHIFT = 41
CHANNELS_MASK = 0x7
BPS_SHIFT = 36
BPS_MASK = 0x1F
TOTAL_SAMPLES_MASK = 0xFFFFFFFFF


def pack_streaminfo_bits(
    sample_rate: int,
    channels: int,
    bits_per_sample: int,
    total_samples: int,
) -> int:
    """Combine the four audio properties into the 64-bit packed field."""
    if not 0 <= sample_rate <= SAMPLE_RATE_MASK:
        raise ValueError(f"sample_rate out of range: {sample_rate}")
    if not 1 <= channels <= CHANNELS_MASK + 1:
        raise ValueError(f"channels out of range: {channels}")
    if not 1 <= bits_per_sample <= BPS_MASK + 1:
        raise ValueError(f"bits_per_sample out of range: {bits_per_sample}")
    if not 0 <= total_samples <= TOTAL_SAMPLES_MASK:
        raise ValueError(f"total_samples out of range: {total_samples}")
    return (
        (sample_rate << SAMPLE_RATE_SHIFT)
        | ((channels - 1) << CHANNELS_SHIFT)
        | ((bits_per_sample - 1) << BPS_SHIFT)
        | total_samples
    )
