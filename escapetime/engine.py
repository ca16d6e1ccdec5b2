"""Escape-time evaluation of the quadratic map ``z <- z*z + c``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np
import tensorflow as tf

# 255 * 3 so the modulo-255 ramp cycles exactly three times.
MAX_ITER = 255 * 3
ESCAPE_RADIUS_SQUARED = 4.0
DEFAULT_LANE_WIDTH = 4


@dataclass(frozen=True)
class ComplexPoint:
    """A point of an orbit, or the constant ``c`` of the map."""

    re: float
    im: float


@dataclass(frozen=True)
class IterationResult:
    """Escape iteration of a single point."""

    count: int
    escaped: bool


@dataclass(frozen=True)
class LaneBatch:
    """Parallel complex points packed as real and imaginary vectors.

    The last axis holds the lanes. Leading axes stack independent batches
    that are evaluated together; lane ``k`` always stays at index ``k``.
    """

    re: np.ndarray
    im: np.ndarray

    def __post_init__(self) -> None:
        re = np.asarray(self.re, dtype=np.float64)
        im = np.asarray(self.im, dtype=np.float64)
        if re.shape != im.shape:
            raise ValueError(f"re and im must share a shape, got {re.shape} and {im.shape}")
        if re.ndim == 0 or re.shape[-1] == 0:
            raise ValueError("a lane batch needs at least one lane")
        object.__setattr__(self, "re", re)
        object.__setattr__(self, "im", im)

    @classmethod
    def from_points(cls, points: Iterable[ComplexPoint]) -> LaneBatch:
        points = list(points)
        return cls(
            re=np.array([p.re for p in points], dtype=np.float64),
            im=np.array([p.im for p in points], dtype=np.float64),
        )

    @property
    def lanes(self) -> int:
        return int(self.re.shape[-1])

    def points(self) -> list[ComplexPoint]:
        return [ComplexPoint(float(r), float(i)) for r, i in zip(self.re.ravel(), self.im.ravel())]


def iterate(c: ComplexPoint) -> int:
    """Return the 1-based iteration at which the orbit of ``c`` escapes.

    Points that stay within the escape radius for ``MAX_ITER`` map
    applications report ``MAX_ITER``.
    """

    return iterate_result(c).count


def iterate_result(c: ComplexPoint) -> IterationResult:
    c_re = float(c.re)
    c_im = float(c.im)
    re = 0.0
    im = 0.0
    for n in range(1, MAX_ITER + 1):
        re, im = re * re - im * im + c_re, 2.0 * re * im + c_im
        if re * re + im * im > ESCAPE_RADIUS_SQUARED:
            return IterationResult(count=n, escaped=True)
    return IterationResult(count=MAX_ITER, escaped=False)


@tf.function
def _escape_step(
    z_re: tf.Tensor,
    z_im: tf.Tensor,
    c_re: tf.Tensor,
    c_im: tf.Tensor,
    counts: tf.Tensor,
    escaped: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Apply one map step to every lane and freeze the counters of escaped lanes."""

    next_re = z_re * z_re - z_im * z_im + c_re
    next_im = 2.0 * z_re * z_im + c_im
    active = tf.logical_not(escaped)
    z_re = tf.where(active, next_re, z_re)
    z_im = tf.where(active, next_im, z_im)
    counts = counts + tf.cast(active, tf.int32)
    radius = tf.constant(ESCAPE_RADIUS_SQUARED, dtype=z_re.dtype)
    outside = tf.greater(z_re * z_re + z_im * z_im, radius)
    escaped = tf.logical_or(escaped, tf.logical_and(active, outside))
    return z_re, z_im, counts, escaped


@tf.function(reduce_retracing=True)
def _escape_run(c_re: tf.Tensor, c_im: tf.Tensor, max_iterations: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor]:
    """Run lanes in lockstep until all have escaped or the bound is reached."""

    max_iterations = tf.cast(max_iterations, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    z_re = tf.zeros_like(c_re)
    z_im = tf.zeros_like(c_im)
    counts = tf.zeros(tf.shape(c_re), dtype=tf.int32)
    escaped = tf.zeros(tf.shape(c_re), dtype=tf.bool)

    def cond(i, z_re, z_im, counts, escaped):
        return tf.logical_and(tf.less(i, max_iterations), tf.logical_not(tf.reduce_all(escaped)))

    def body(i, z_re, z_im, counts, escaped):
        z_re, z_im, counts, escaped = _escape_step(z_re, z_im, c_re, c_im, counts, escaped)
        return i + 1, z_re, z_im, counts, escaped

    _, _, _, counts, escaped = tf.while_loop(cond, body, (i, z_re, z_im, counts, escaped))
    return counts, escaped


def evaluate_batch(batch: LaneBatch, *, device: Optional[str] = None) -> tuple[np.ndarray, np.ndarray]:
    """Return per-lane ``(counts, escaped)`` arrays shaped like ``batch.re``."""

    max_iterations = tf.constant(MAX_ITER, dtype=tf.int32)
    with tf.device(device if device is not None else "/CPU:0"):
        c_re = tf.convert_to_tensor(batch.re, dtype=tf.float64)
        c_im = tf.convert_to_tensor(batch.im, dtype=tf.float64)
        counts, escaped = _escape_run(c_re, c_im, max_iterations)
    return counts.numpy(), escaped.numpy()


def iterate_batch(batch: LaneBatch, *, device: Optional[str] = None) -> np.ndarray:
    """Vectorized :func:`iterate`; lane ``k`` of the result belongs to lane ``k`` of ``batch``."""

    counts, _ = evaluate_batch(batch, device=device)
    return counts


def iterate_batch_results(batch: LaneBatch, *, device: Optional[str] = None) -> list[IterationResult]:
    counts, escaped = evaluate_batch(batch, device=device)
    return [
        IterationResult(count=int(n), escaped=bool(e))
        for n, e in zip(counts.ravel(), escaped.ravel())
    ]
