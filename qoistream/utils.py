from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image

PathLike = Union[str, Path]


def load_image(filepath: PathLike) -> tuple[np.ndarray, dict]:
    """Load an image and return pixel data as numpy array + description."""

    ext = str(filepath).lower().split(".")[-1]

    if ext in ("dng", "cr2", "nef", "arw", "raw"):
        # RAW formats - requires rawpy
        import rawpy

        with rawpy.imread(str(filepath)) as raw:
            rgb = raw.postprocess()
        img = Image.fromarray(rgb)
    else:
        # Standard formats (PNG, JPEG, etc.)
        img = Image.open(filepath)

    # Convert to RGB or RGBA
    if img.mode == "RGBA":
        channels = 4
    else:
        if img.mode in ("LA", "PA") or (img.mode == "P" and "transparency" in img.info):
            img = img.convert("RGBA")
            channels = 4
        else:
            img = img.convert("RGB")
            channels = 3

    return np.array(img), {
        "width": img.size[0],
        "height": img.size[1],
        "channels": channels,
        "colorspace": 0,
    }


def output_path(
    input_path: PathLike, extension: str, out_dir: Optional[PathLike] = None
) -> Path:
    """<stem of input_path><extension>, in out_dir or the working directory."""
    directory = Path(out_dir) if out_dir is not None else Path(".")
    return directory / f"{Path(input_path).stem}{extension}"


def read_bytes(path: PathLike) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def write_bytes(path: PathLike, content: bytes) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.write(content)
