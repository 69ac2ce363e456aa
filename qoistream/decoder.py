import logging
from typing import NamedTuple

import numpy as np

from .errors import DesyncError, FormatError
from .qoi import (
    QOI_END_MARKER,
    QOI_HEADER_SIZE,
    QOI_LOWER_SIX,
    QOI_MASK_2,
    QOI_OP_DIFF,
    QOI_OP_INDEX,
    QOI_OP_LUMA,
    QOI_OP_RGB,
    QOI_OP_RGBA,
    QOI_OP_RUN,
    SEED_COLOR,
    Color,
    PixelCache,
    read_header,
)

log = logging.getLogger(__name__)


class DecodedImage(NamedTuple):
    data: bytes
    width: int
    height: int
    channels: int
    colorspace: int

    def to_array(self) -> np.ndarray:
        """Pixel data as a (height, width, channels) uint8 array."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(
            self.height, self.width, self.channels
        )


class QOIDecoder:
    """
    A class to decode QOI (Quite OK Image) files into raw pixel data.
    """

    @staticmethod
    def decode(file_data, strict_end_marker: bool = True) -> DecodedImage:
        """
        Decode a QOI file given as a bytes/bytearray object.

        The last 8 bytes are the end marker and are never read as chunks. With
        strict_end_marker they must be exactly 00 00 00 00 00 00 00 01,
        otherwise they are dropped unchecked.

        :param file_data: Bytes containing the QOI file.
        :param strict_end_marker: Reject streams whose end marker is wrong.
        :return: DecodedImage(data, width, height, channels, colorspace)
        """
        data = bytes(file_data)
        width, height, channels, colorspace = read_header(data)

        if channels not in (3, 4):
            raise FormatError(
                "QOI.decode: The number of channels declared in the file is invalid"
            )

        chunks_end = len(data) - len(QOI_END_MARKER)
        if chunks_end < QOI_HEADER_SIZE:
            raise FormatError("QOI.decode: File too short for end marker")

        if strict_end_marker and data[chunks_end:] != QOI_END_MARKER:
            raise FormatError("QOI.decode: The end marker is invalid")

        pixel_length = width * height * channels
        result = bytearray()

        cache = PixelCache()
        px = SEED_COLOR
        p = QOI_HEADER_SIZE

        def take(n):
            nonlocal p
            if p + n > chunks_end:
                raise FormatError(f"QOI.decode: Truncated chunk at offset {p - 1}")
            chunk = data[p : p + n]
            p += n
            return chunk

        # --- Decoding Loop ---
        while p < chunks_end:
            b1 = data[p]
            p += 1

            # Exact tags first, 0xFE/0xFF also match the RUN mask
            if b1 == QOI_OP_RGB:
                r, g, b = take(3)
                px = Color(r, g, b, px.a)
                cache.insert(px)

            elif b1 == QOI_OP_RGBA:
                px = Color(*take(4))
                cache.insert(px)

            elif (b1 & QOI_MASK_2) == QOI_OP_RUN:
                run = (b1 & QOI_LOWER_SIX) + 1
                result.extend(bytes(px[:channels]) * run)
                continue

            elif (b1 & QOI_MASK_2) == QOI_OP_INDEX:
                px = cache[b1 & QOI_LOWER_SIX]

            elif (b1 & QOI_MASK_2) == QOI_OP_DIFF:
                # 2-bit differences with a bias of 2, wrapped to 8 bits
                dr = ((b1 >> 4) & 0x03) - 2
                dg = ((b1 >> 2) & 0x03) - 2
                db = (b1 & 0x03) - 2
                px = Color(
                    (px.r + dr) & 0xFF,
                    (px.g + dg) & 0xFF,
                    (px.b + db) & 0xFF,
                    px.a,
                )
                cache.insert(px)

            elif (b1 & QOI_MASK_2) == QOI_OP_LUMA:
                (b2,) = take(1)
                dg = (b1 & QOI_LOWER_SIX) - 32
                dr_dg = ((b2 >> 4) & 0x0F) - 8
                db_dg = (b2 & 0x0F) - 8
                px = Color(
                    (px.r + dr_dg + dg) & 0xFF,
                    (px.g + dg) & 0xFF,
                    (px.b + db_dg + dg) & 0xFF,
                    px.a,
                )
                cache.insert(px)

            result.extend(px[:channels])

        if len(result) != pixel_length:
            raise DesyncError(
                f"QOI.decode: Decoded {len(result) // channels} pixels, "
                f"header declares {width * height}"
            )

        log.debug(
            "decoded %d bytes into %dx%d (%d channels)",
            len(data),
            width,
            height,
            channels,
        )
        return DecodedImage(bytes(result), width, height, channels, colorspace)


def decode(file_data, strict_end_marker=True) -> DecodedImage:
    return QOIDecoder.decode(file_data, strict_end_marker)
