import logging
from pathlib import Path

from PIL import Image

from .decoder import QOIDecoder
from .encoder import QOIEncoder
from .utils import load_image, read_bytes, write_bytes

log = logging.getLogger(__name__)


def image_to_qoi(image_path, qoi_path, colorspace=0) -> int:
    """Convert any image Pillow (or rawpy) can read into a QOI file."""
    pixel_data, desc = load_image(image_path)
    desc["colorspace"] = colorspace

    encoded = QOIEncoder.encode(pixel_data, **desc)
    write_bytes(qoi_path, encoded)

    log.info(
        "Converted %s to %s (%dx%d, %d channels, %d -> %d bytes)",
        image_path,
        qoi_path,
        desc["width"],
        desc["height"],
        desc["channels"],
        pixel_data.nbytes,
        len(encoded),
    )
    return len(encoded)


def image_format_for(name: str) -> str:
    """Pillow format for an extension-like name (png, jpg, tif, ...)."""
    image_format = Image.registered_extensions().get("." + name.lower().lstrip("."))
    if image_format is None or image_format not in Image.SAVE:
        raise ValueError(f"Unsupported image format: {name!r}")
    return image_format


def qoi_to_image(
    qoi_path, image_path, image_format=None, strict_end_marker=True
) -> None:
    if image_format is not None:
        image_format = image_format_for(image_format)

    decoded = QOIDecoder.decode(read_bytes(qoi_path), strict_end_marker)
    mode = "RGBA" if decoded.channels == 4 else "RGB"

    img = Image.frombytes(mode, (decoded.width, decoded.height), decoded.data)
    Path(image_path).parent.mkdir(parents=True, exist_ok=True)
    img.save(image_path, format=image_format)
    log.info("Converted %s to %s", qoi_path, image_path)
