from .config import CodecConfig
from .decoder import DecodedImage, QOIDecoder, decode
from .encoder import QOIEncoder, encode
from .errors import DesyncError, FormatError, InputSizeError, QOIError
from .qoi import Color, PixelCache, read_header, write_header
from .utils import load_image, output_path

__all__ = [
    "QOIEncoder",
    "QOIDecoder",
    "DecodedImage",
    "encode",
    "decode",
    "write_header",
    "read_header",
    "Color",
    "PixelCache",
    "CodecConfig",
    "QOIError",
    "InputSizeError",
    "FormatError",
    "DesyncError",
    "load_image",
    "output_path",
]
