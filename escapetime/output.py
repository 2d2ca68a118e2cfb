"""Writers for rendered frames: single images, numbered sequences and GIFs."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import imageio
import numpy as np
import PIL.Image

from .renderer import to_uint8

# Formats that cannot carry an alpha channel.
_RGB_ONLY_FORMATS = {"JPEG", "PPM", "BMP"}


def pil_format_name(ext: str) -> str:
    upper = ext.upper().lstrip(".")
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    if upper in {"PNM", "PGM", "PBM"}:
        return "PPM"
    return upper


def to_image(rgba: np.ndarray) -> PIL.Image.Image:
    """Build an RGBA Pillow image from float channels or an 8-bit array."""

    if rgba.dtype != np.uint8:
        rgba = to_uint8(rgba)
    return PIL.Image.fromarray(rgba)


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format.

    Formats without alpha (PPM screenshots, JPEG) are written as RGB, which is
    lossless here since every rendered pixel is opaque.
    """

    pil_format = pil_format_name(image_format)
    if pil_format in _RGB_ONLY_FORMATS and image.mode != "RGB":
        image = image.convert("RGB")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format)


def write_frame_sequence(
    image: PIL.Image.Image,
    frame_dir: Path,
    index: int,
    digits: int,
    image_format: str,
    prefix: str = "frame",
) -> Path:
    """Persist a frame in a numbered sequence inside ``frame_dir``."""

    frame_path = frame_dir / f"{prefix}{index:0{digits}d}.{image_format}"
    write_single_image(image, frame_path, image_format)
    return frame_path


class GifWriter:
    """Append frames to an animated GIF."""

    def __init__(self, path: Path, duration: float = 0.1, loop: int = 0):
        self.path = path
        path.parent.mkdir(parents=True, exist_ok=True)
        self._writer: Optional[object] = imageio.get_writer(str(path), mode="I", duration=duration, loop=loop)

    def append(self, rgba: np.ndarray) -> None:
        if self._writer is None:
            raise RuntimeError(f"GIF writer for {self.path} is already closed")
        if rgba.dtype != np.uint8:
            rgba = to_uint8(rgba)
        self._writer.append_data(rgba)

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()
            self._writer = None

    def __enter__(self) -> "GifWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
