import pytest

from escapetime import Viewport, apply_action, pan, zoom_in, zoom_out, zoom_sequence
from escapetime.controller import PAN_STEP, ZOOM_STEP


@pytest.fixture
def viewport():
    return Viewport(x_offset=0.0, y_offset=0.0, zoom=0.01, width=8, height=4)


def test_pan_scales_with_zoom(viewport):
    moved = pan(viewport, 1.0, -1.0)
    assert moved.x_offset == pytest.approx(0.01 * PAN_STEP)
    assert moved.y_offset == pytest.approx(-0.01 * PAN_STEP)
    assert viewport.x_offset == 0.0


def test_zoom_steps(viewport):
    assert zoom_in(viewport).zoom == pytest.approx(0.01 * ZOOM_STEP)
    assert zoom_out(zoom_in(viewport)).zoom == pytest.approx(0.01)


@pytest.mark.parametrize(
    "action, dx, dy",
    [("left", -1, 0), ("right", 1, 0), ("up", 0, -1), ("down", 0, 1), ("LEFT", -1, 0)],
)
def test_pan_actions(viewport, action, dx, dy):
    moved = apply_action(viewport, action)
    assert moved.x_offset == pytest.approx(dx * viewport.zoom * PAN_STEP)
    assert moved.y_offset == pytest.approx(dy * viewport.zoom * PAN_STEP)
    assert moved.zoom == viewport.zoom


def test_unknown_action(viewport):
    with pytest.raises(ValueError):
        apply_action(viewport, "spin")


def test_zoom_sequence(viewport):
    frames = list(zoom_sequence(viewport, 3, 0.5))
    assert [f.zoom for f in frames] == pytest.approx([0.01, 0.005, 0.0025])
    assert frames[0] is viewport
    assert list(zoom_sequence(viewport, 0, 0.5)) == []


@pytest.mark.parametrize("frames, factor", [(-1, 0.5), (2, 0.0)])
def test_zoom_sequence_rejects_invalid_arguments(viewport, frames, factor):
    with pytest.raises(ValueError):
        list(zoom_sequence(viewport, frames, factor))
