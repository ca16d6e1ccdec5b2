"""Sinks that encode finished frames."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import imageio
import PIL.Image

from .renderer import FrameBuffer


def pil_format_name(ext: str) -> str:
    upper = ext.upper().lstrip(".")
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def to_image(frame: FrameBuffer) -> PIL.Image.Image:
    return PIL.Image.fromarray(frame.pixels)


def write_image(frame: FrameBuffer, output_path: Path, image_format: Optional[str] = None) -> Path:
    """Encode ``frame`` to ``output_path``; the format defaults to the file suffix."""

    output_path = Path(output_path)
    image_format = image_format or output_path.suffix or "png"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    to_image(frame).save(str(output_path), format=pil_format_name(image_format))
    return output_path


class GifWriter:
    """Append frames to an animated GIF."""

    def __init__(self, output_path: Path, duration: float = 0.1):
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.frames_written = 0
        self._writer = imageio.get_writer(str(self.output_path), mode='I', duration=duration, loop=0)

    def append(self, frame: FrameBuffer) -> None:
        self._writer.append_data(frame.pixels)
        self.frames_written += 1

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()
            self._writer = None

    def __enter__(self) -> GifWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
