"""Pixel to complex-plane coordinate mapping."""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

import numpy as np

from .engine import ComplexPoint

if TYPE_CHECKING:
    from .renderer import Viewport

ArrayOrScalar = Union[float, np.ndarray]


def center_correction(dimension: int) -> int:
    """Offset that makes zooming center on the middle of a frame dimension."""

    return int(dimension) // 2


def pixel_to_complex(pixel_index: ArrayOrScalar, offset: float, zoom: float, center_correction: int) -> ArrayOrScalar:
    """Map pixel indices (a scalar or a lane array) onto one complex axis."""

    if isinstance(pixel_index, np.ndarray):
        pixels = pixel_index.astype(np.float64, copy=False)
        return (pixels - np.float64(center_correction)) * np.float64(zoom) + np.float64(offset)
    return (float(pixel_index) - float(center_correction)) * float(zoom) + float(offset)


def lane_indices(start: int, lanes: int) -> np.ndarray:
    return np.arange(start, start + lanes, dtype=np.float64)


def map_pixel(viewport: Viewport, x: int, y: int) -> ComplexPoint:
    re = pixel_to_complex(x, viewport.x_offset, viewport.zoom, center_correction(viewport.width))
    im = pixel_to_complex(y, viewport.y_offset, viewport.zoom, center_correction(viewport.height))
    return ComplexPoint(re=re, im=im)
