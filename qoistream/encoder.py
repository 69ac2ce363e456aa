import logging

import numpy as np

from .errors import InputSizeError, QOIError
from .qoi import (
    QOI_END_MARKER,
    QOI_OP_DIFF,
    QOI_OP_INDEX,
    QOI_OP_LUMA,
    QOI_OP_RGB,
    QOI_OP_RGBA,
    QOI_OP_RUN,
    QOI_RUN_MAX,
    SEED_COLOR,
    Color,
    PixelCache,
    write_header,
)

log = logging.getLogger(__name__)


def _signed_delta(value: int, prev: int) -> int:
    # (x - y + 256) % 256 gives the byte-wrapped difference (0-255),
    # then shift range to -128..127
    delta = (value - prev + 256) % 256
    if delta > 127:
        delta -= 256
    return delta


class QOIEncoder:
    @staticmethod
    def encode(
        color_data,
        width: int,
        height: int,
        channels: int,
        colorspace: int = 0,
    ) -> bytes:
        """
        Encode raw pixels into a QOI stream.

        :param color_data: Bytes-like object (bytes, bytearray, list of ints, uint8 ndarray)
                           containing width * height pixels of `channels` bytes each.
        :param width: image width
        :param height: image height
        :param channels: 3 (RGB) or 4 (RGBA)
        :param colorspace: stored in the header as-is
        :return: bytes object containing the QOI file content.
        """
        if isinstance(color_data, np.ndarray):
            color_data = color_data.tobytes()

        if channels not in (3, 4):
            raise QOIError("QOI.encode: Invalid channels, must be 3 or 4")

        pixel_length = width * height * channels
        if len(color_data) != pixel_length:
            raise InputSizeError(
                f"QOI.encode: The length of colorData is incorrect "
                f"(got {len(color_data)}, expected {pixel_length})"
            )

        # Dynamic extension, the final size is unknown up front
        result = bytearray(write_header(width, height, channels, colorspace))

        # Encoding State
        prev = SEED_COLOR
        run = 0
        cache = PixelCache()
        last_pixel = pixel_length - channels

        # --- Pixel Loop ---
        for i in range(0, pixel_length, channels):
            px = Color(
                color_data[i],
                color_data[i + 1],
                color_data[i + 2],
                color_data[i + 3] if channels == 4 else 255,
            )

            if px == prev:
                run += 1
                if run == QOI_RUN_MAX or i == last_pixel:
                    result.append(QOI_OP_RUN | (run - 1))
                    run = 0
                continue

            # If we were in a run, end it before processing the new pixel
            if run > 0:
                result.append(QOI_OP_RUN | (run - 1))
                run = 0

            if cache.lookup(px):
                result.append(QOI_OP_INDEX | cache.slot_for(px))
                prev = px
                continue

            cache.insert(px)

            if px.a != prev.a:
                result.append(QOI_OP_RGBA)
                result.extend(px)
                prev = px
                continue

            vr = _signed_delta(px.r, prev.r)
            vg = _signed_delta(px.g, prev.g)
            vb = _signed_delta(px.b, prev.b)
            vg_r = vr - vg
            vg_b = vb - vg

            if -2 <= vr <= 1 and -2 <= vg <= 1 and -2 <= vb <= 1:
                result.append(QOI_OP_DIFF | (vr + 2) << 4 | (vg + 2) << 2 | (vb + 2))
            elif -32 <= vg <= 31 and -8 <= vg_r <= 7 and -8 <= vg_b <= 7:
                result.append(QOI_OP_LUMA | (vg + 32))
                result.append((vg_r + 8) << 4 | (vg_b + 8))
            else:
                result.append(QOI_OP_RGB)
                result.extend((px.r, px.g, px.b))

            prev = px

        result.extend(QOI_END_MARKER)

        log.debug(
            "encoded %dx%d (%d channels) from %d to %d bytes",
            width,
            height,
            channels,
            pixel_length,
            len(result),
        )
        return bytes(result)


def encode(color_data, width, height, channels, colorspace=0) -> bytes:
    return QOIEncoder.encode(color_data, width, height, channels, colorspace)
