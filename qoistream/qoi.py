import struct
from typing import NamedTuple

from .errors import FormatError, QOIError

# QOI Constants
QOI_OP_INDEX = 0x00  # 00xxxxxx
QOI_OP_DIFF = 0x40  # 01xxxxxx
QOI_OP_LUMA = 0x80  # 10xxxxxx
QOI_OP_RUN = 0xC0  # 11xxxxxx
QOI_OP_RGB = 0xFE  # 11111110
QOI_OP_RGBA = 0xFF  # 11111111

QOI_MASK_2 = 0xC0
QOI_LOWER_SIX = 0x3F

QOI_MAGIC = b"qoif"
QOI_HEADER_SIZE = 14
QOI_END_MARKER = b"\x00\x00\x00\x00\x00\x00\x00\x01"
QOI_RUN_MAX = 62
QOI_CACHE_SIZE = 64

# > : Big Endian
# 4s: 4-byte string (magic)
# I : unsigned int (4 bytes)
# B : unsigned char (1 byte)
_HEADER = struct.Struct(">4sIIBB")


class Color(NamedTuple):
    r: int
    g: int
    b: int
    a: int


# Pixel state before the first pixel (opaque black)
SEED_COLOR = Color(0, 0, 0, 255)
_EMPTY_SLOT = Color(0, 0, 0, 0)


class PixelCache:
    """
    Direct-mapped table of the 64 most recently seen colors.

    The slot of a color is fixed by its hash and a new color simply overwrites
    whatever was there. Encoder and decoder must insert the same colors in the
    same order, otherwise OP_INDEX chunks point at the wrong pixel.
    """

    __slots__ = ("_slots",)

    def __init__(self):
        self._slots = [_EMPTY_SLOT] * QOI_CACHE_SIZE

    @staticmethod
    def slot_for(color) -> int:
        """Calculates the index position for the color array."""
        r, g, b, a = color
        return (r * 3 + g * 5 + b * 7 + a * 11) % QOI_CACHE_SIZE

    def lookup(self, color) -> bool:
        return self._slots[self.slot_for(color)] == color

    def insert(self, color) -> None:
        self._slots[self.slot_for(color)] = Color(*color)

    def __getitem__(self, slot: int) -> Color:
        return self._slots[slot]

    def __len__(self) -> int:
        return QOI_CACHE_SIZE


def write_header(width: int, height: int, channels: int, colorspace: int) -> bytes:
    """
    Serialize the 14-byte header.

    :param width: image width, 0 <= width < 2**32
    :param height: image height, 0 <= height < 2**32
    :param channels: written as-is (3 or 4 for a decodable stream)
    :param colorspace: written as-is, opaque to the codec
    :return: magic(4), width(4), height(4), channels(1), colorspace(1)
    """
    if not (0 <= width < 4294967296):
        raise QOIError("QOI.write_header: Invalid width")

    if not (0 <= height < 4294967296):
        raise QOIError("QOI.write_header: Invalid height")

    if not (0 <= channels < 256):
        raise QOIError("QOI.write_header: Invalid channels")

    if not (0 <= colorspace < 256):
        raise QOIError("QOI.write_header: Invalid colorspace")

    return _HEADER.pack(QOI_MAGIC, width, height, channels, colorspace)


def read_header(data) -> tuple:
    """Parse the first 14 bytes of data into (width, height, channels, colorspace)."""
    if len(data) < QOI_HEADER_SIZE:
        raise FormatError("QOI.read_header: File too short for header")

    magic, width, height, channels, colorspace = _HEADER.unpack(
        bytes(data[:QOI_HEADER_SIZE])
    )

    if magic != QOI_MAGIC:
        raise FormatError("QOI.read_header: The signature of the QOI file is invalid")

    return width, height, channels, colorspace
