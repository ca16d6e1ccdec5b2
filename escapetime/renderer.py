"""Rendering of greyscale escape-time frames."""

from __future__ import annotations

import math
import numbers
import operator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .engine import DEFAULT_LANE_WIDTH, LaneBatch, iterate, iterate_batch
from .mapper import center_correction, lane_indices, map_pixel, pixel_to_complex

ENGINES = ("scalar", "vector")
RAMP_LENGTH = 255


def _positive_int(name: str, value) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        value = operator.index(value)
    except TypeError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")
    return value


def _finite_real(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValueError(f"{name} must be a real number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")
    return float(value)


@dataclass(frozen=True)
class Viewport:
    """Region of the complex plane shown by a frame."""

    x_offset: float
    y_offset: float
    zoom: float
    width: int
    height: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "width", _positive_int("width", self.width))
        object.__setattr__(self, "height", _positive_int("height", self.height))
        object.__setattr__(self, "x_offset", _finite_real("x_offset", self.x_offset))
        object.__setattr__(self, "y_offset", _finite_real("y_offset", self.y_offset))
        object.__setattr__(self, "zoom", _finite_real("zoom", self.zoom))
        if self.zoom <= 0:
            raise ValueError(f"zoom must be positive, got {self.zoom}")


@dataclass(frozen=True)
class RenderSettings:
    """How a frame is evaluated; never affects the pixels produced.

    ``lane_width`` sets the column grouping. The vector engine stacks every
    group of a row band into one lockstep loop, so the loop ends when the
    last lane of the band escapes, not per group.
    """

    engine: str = "vector"
    lane_width: int = DEFAULT_LANE_WIDTH
    rows_per_band: int = 64
    workers: int = 1
    device: Optional[str] = None

    def __post_init__(self) -> None:
        if self.engine not in ENGINES:
            raise ValueError(f"unknown engine '{self.engine}', expected one of {', '.join(ENGINES)}")
        object.__setattr__(self, "lane_width", _positive_int("lane_width", self.lane_width))
        object.__setattr__(self, "rows_per_band", _positive_int("rows_per_band", self.rows_per_band))
        object.__setattr__(self, "workers", _positive_int("workers", self.workers))


@dataclass(frozen=True, eq=False)
class FrameBuffer:
    """Row-major ``height x width x 3`` greyscale pixels."""

    pixels: np.ndarray

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def intensity(self, x: int, y: int) -> int:
        return int(self.pixels[y, x, 0])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FrameBuffer):
            return NotImplemented
        return np.array_equal(self.pixels, other.pixels)


def intensity(counts: np.ndarray) -> np.ndarray:
    """Map iteration counts onto the modulo-255 greyscale ramp."""

    return np.asarray(np.mod(counts, RAMP_LENGTH), dtype=np.uint8)


def _evaluate_band_scalar(viewport: Viewport, row_start: int, row_stop: int, settings: RenderSettings) -> np.ndarray:
    counts = np.empty((row_stop - row_start, viewport.width), dtype=np.int32)
    for y in range(row_start, row_stop):
        for x in range(viewport.width):
            counts[y - row_start, x] = iterate(map_pixel(viewport, x, y))
    return counts


def _evaluate_band_vector(viewport: Viewport, row_start: int, row_stop: int, settings: RenderSettings) -> np.ndarray:
    lanes = settings.lane_width
    groups = -(-viewport.width // lanes)
    padded_width = groups * lanes
    rows = row_stop - row_start

    # Lanes of the last group past the frame edge get the mapped coordinates
    # of their own (off-frame) columns and are dropped after evaluation.
    columns = lane_indices(0, padded_width).reshape(groups, lanes)
    re = pixel_to_complex(columns, viewport.x_offset, viewport.zoom, center_correction(viewport.width))
    im = pixel_to_complex(
        lane_indices(row_start, rows), viewport.y_offset, viewport.zoom, center_correction(viewport.height)
    )

    shape = (rows, groups, lanes)
    batch = LaneBatch(
        re=np.ascontiguousarray(np.broadcast_to(re, shape)),
        im=np.ascontiguousarray(np.broadcast_to(im[:, np.newaxis, np.newaxis], shape)),
    )
    counts = iterate_batch(batch, device=settings.device)
    return counts.reshape(rows, padded_width)[:, :viewport.width]


def render(viewport: Viewport, settings: Optional[RenderSettings] = None) -> FrameBuffer:
    """Render ``viewport`` into a freshly allocated greyscale frame."""

    settings = settings if settings is not None else RenderSettings()
    evaluate = _evaluate_band_scalar if settings.engine == "scalar" else _evaluate_band_vector
    pixels = np.zeros((viewport.height, viewport.width, 3), dtype=np.uint8)
    bands = [
        (start, min(start + settings.rows_per_band, viewport.height))
        for start in range(0, viewport.height, settings.rows_per_band)
    ]

    def fill(band: tuple[int, int]) -> None:
        start, stop = band
        pixels[start:stop] = intensity(evaluate(viewport, start, stop, settings))[..., np.newaxis]

    if settings.workers > 1 and len(bands) > 1:
        with ThreadPoolExecutor(max_workers=settings.workers) as pool:
            list(pool.map(fill, bands))
    else:
        for band in bands:
            fill(band)

    return FrameBuffer(pixels=pixels)
