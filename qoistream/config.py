from dataclasses import dataclass

__all__ = ["CodecConfig"]


@dataclass(frozen=True)
class CodecConfig:
    """
    Settings shared by the command line tools.

    colorspace : int, default=0
        Byte written to the header on encode. Not interpreted by the codec.
    strict_end_marker : bool, default=True
        Reject streams whose trailing 8 bytes are not the end marker.
    qoi_extension, raw_extension : str
        Extensions of the files written next to the input stem.
    """

    colorspace: int = 0
    strict_end_marker: bool = True
    qoi_extension: str = ".qoi"
    raw_extension: str = ".raw"

    def __post_init__(self):
        if not (0 <= self.colorspace < 256):
            raise ValueError(f"colorspace must fit in a byte, got {self.colorspace}")
        for ext in (self.qoi_extension, self.raw_extension):
            if not ext.startswith("."):
                raise ValueError(f"extension must start with '.', got {ext!r}")
