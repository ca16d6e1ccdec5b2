import numpy as np
import pytest

from escapetime import MAX_ITER, ComplexPoint, RenderSettings, Viewport, intensity, iterate, map_pixel, render


def small_viewport(width=9, height=5):
    return Viewport(x_offset=-0.5, y_offset=0.0, zoom=0.5, width=width, height=height)


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(x_offset=0.0, y_offset=0.0, zoom=0.0, width=4, height=1),
        dict(x_offset=0.0, y_offset=0.0, zoom=-1.0, width=4, height=1),
        dict(x_offset=0.0, y_offset=0.0, zoom=0.1, width=0, height=1),
        dict(x_offset=0.0, y_offset=0.0, zoom=0.1, width=4, height=-2),
        dict(x_offset=float("nan"), y_offset=0.0, zoom=0.1, width=4, height=1),
        dict(x_offset=0.0, y_offset=0.0, zoom=0.1, width=4.9, height=1),
        dict(x_offset=0.0, y_offset=0.0, zoom=0.1, width=4, height="2"),
        dict(x_offset=0.0, y_offset=0.0, zoom=0.1, width=True, height=1),
        dict(x_offset=0.0, y_offset=0.0, zoom="0.5", width=4, height=1),
        dict(x_offset="1", y_offset=0.0, zoom=0.1, width=4, height=1),
        dict(x_offset=0.0, y_offset=None, zoom=0.1, width=4, height=1),
    ],
)
def test_viewport_rejects_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        Viewport(**kwargs)


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(engine="gpu"),
        dict(lane_width=0),
        dict(rows_per_band=0),
        dict(workers=0),
        dict(lane_width=2.5),
        dict(lane_width="4"),
        dict(rows_per_band=1.0),
        dict(workers=None),
    ],
)
def test_settings_reject_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        RenderSettings(**kwargs)


def test_numpy_integers_are_accepted():
    viewport = Viewport(x_offset=np.float64(-0.5), y_offset=0, zoom=np.float32(0.5), width=np.int64(6), height=np.int32(2))
    assert (viewport.width, viewport.height) == (6, 2)
    assert type(viewport.width) is int
    assert type(viewport.zoom) is float
    assert RenderSettings(lane_width=np.int64(3)).lane_width == 3


def test_intensity_ramp():
    counts = np.array([1, 254, 255, 256, MAX_ITER])
    assert intensity(counts).tolist() == [1, 254, 0, 1, 0]
    assert intensity(counts).dtype == np.uint8


def test_center_of_four_by_one_frame_is_in_the_set():
    viewport = Viewport(x_offset=0.0, y_offset=0.0, zoom=0.003, width=4, height=1)
    assert map_pixel(viewport, 2, 0) == ComplexPoint(0.0, 0.0)
    assert iterate(map_pixel(viewport, 2, 0)) == MAX_ITER

    frame = render(viewport)
    assert frame.pixels.shape == (1, 4, 3)
    assert frame.intensity(2, 0) == MAX_ITER % 255


def test_greyscale_channels_match_counts():
    viewport = small_viewport()
    frame = render(viewport, RenderSettings(engine="scalar"))
    for y in range(viewport.height):
        for x in range(viewport.width):
            expected = iterate(map_pixel(viewport, x, y)) % 255
            assert frame.pixels[y, x].tolist() == [expected] * 3


def test_render_is_idempotent():
    viewport = small_viewport()
    first = render(viewport)
    second = render(viewport)
    assert first == second
    assert first.pixels is not second.pixels


@pytest.mark.parametrize("lane_width", [2, 3, 4, 5, 16])
def test_partial_groups_match_single_lane(lane_width):
    viewport = small_viewport(width=7, height=3)
    reference = render(viewport, RenderSettings(lane_width=1))
    frame = render(viewport, RenderSettings(lane_width=lane_width))
    assert frame.width == 7
    assert frame == reference


def test_vector_engine_matches_scalar_engine():
    viewport = small_viewport(width=11, height=6)
    assert render(viewport, RenderSettings(engine="scalar")) == render(viewport, RenderSettings(engine="vector"))


def test_row_bands_and_workers_do_not_change_pixels():
    viewport = small_viewport(width=10, height=7)
    reference = render(viewport)
    banded = render(viewport, RenderSettings(rows_per_band=2, workers=3))
    assert banded == reference


def test_frame_buffer_is_row_major():
    viewport = Viewport(x_offset=-0.5, y_offset=0.0, zoom=0.5, width=6, height=2)
    frame = render(viewport)
    assert (frame.height, frame.width) == (2, 6)
    assert frame.pixels.dtype == np.uint8
