"""Public API for escape-time rendering."""

from .engine import (
    DEFAULT_LANE_WIDTH,
    ESCAPE_RADIUS_SQUARED,
    MAX_ITER,
    ComplexPoint,
    IterationResult,
    LaneBatch,
    evaluate_batch,
    iterate,
    iterate_batch,
    iterate_batch_results,
    iterate_result,
)
from .mapper import center_correction, lane_indices, map_pixel, pixel_to_complex
from .renderer import FrameBuffer, RenderSettings, Viewport, intensity, render
from .controller import ACTIONS, apply_action, pan, zoom_in, zoom_out, zoom_sequence

__all__ = [
    "ACTIONS",
    "DEFAULT_LANE_WIDTH",
    "ESCAPE_RADIUS_SQUARED",
    "MAX_ITER",
    "ComplexPoint",
    "FrameBuffer",
    "IterationResult",
    "LaneBatch",
    "RenderSettings",
    "Viewport",
    "apply_action",
    "center_correction",
    "evaluate_batch",
    "intensity",
    "iterate",
    "iterate_batch",
    "iterate_batch_results",
    "iterate_result",
    "lane_indices",
    "map_pixel",
    "pan",
    "pixel_to_complex",
    "render",
    "zoom_in",
    "zoom_out",
    "zoom_sequence",
]
