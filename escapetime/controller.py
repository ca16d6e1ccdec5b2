"""Scripted pan and zoom updates between frames."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterator

from .renderer import Viewport

PAN_STEP = 20.0
ZOOM_STEP = 0.5

ACTIONS = ("up", "down", "left", "right", "in", "out")


def pan(viewport: Viewport, dx: float, dy: float) -> Viewport:
    """Move the view by ``dx``/``dy`` pan steps, each ``zoom * PAN_STEP`` wide."""

    step = viewport.zoom * PAN_STEP
    return replace(viewport, x_offset=viewport.x_offset + dx * step, y_offset=viewport.y_offset + dy * step)


def zoom_in(viewport: Viewport) -> Viewport:
    return replace(viewport, zoom=viewport.zoom * ZOOM_STEP)


def zoom_out(viewport: Viewport) -> Viewport:
    return replace(viewport, zoom=viewport.zoom / ZOOM_STEP)


def apply_action(viewport: Viewport, action: str) -> Viewport:
    action = action.lower()
    if action == "up":
        return pan(viewport, 0.0, -1.0)
    if action == "down":
        return pan(viewport, 0.0, 1.0)
    if action == "left":
        return pan(viewport, -1.0, 0.0)
    if action == "right":
        return pan(viewport, 1.0, 0.0)
    if action == "in":
        return zoom_in(viewport)
    if action == "out":
        return zoom_out(viewport)
    raise ValueError(f"Unknown action '{action}'. Valid choices: {', '.join(ACTIONS)}.")


def zoom_sequence(viewport: Viewport, frames: int, zoom_factor: float) -> Iterator[Viewport]:
    """Yield ``frames`` viewports, scaling the zoom by ``zoom_factor`` each frame."""

    if frames < 0:
        raise ValueError("frames must not be negative")
    if zoom_factor <= 0:
        raise ValueError("zoom_factor must be positive")
    for _ in range(frames):
        yield viewport
        viewport = replace(viewport, zoom=viewport.zoom * zoom_factor)
