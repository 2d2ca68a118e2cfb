"""Escape-time iteration of the quadratic map ``z -> z**2 + c``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
import tensorflow as tf

from .errors import InvalidConfiguration
from .view import ComplexPoint, Vec2, check_cycles

# Squared escape radius; |z| > 2 guarantees divergence of the quadratic map.
HORIZON_SQUARED = 4.0


@dataclass(frozen=True)
class Escaped:
    """The iterate left the escape radius at zero-based ``iteration``."""

    iteration: int


@dataclass(frozen=True)
class Bounded:
    """The iterate stayed bounded for the whole budget."""

    final_iterate: ComplexPoint


EscapeResult = Union[Escaped, Bounded]


@dataclass(frozen=True)
class GridResult:
    """Escape results for a whole grid of points.

    ``iterations`` holds the escape index of escaped points and the iteration
    budget for bounded ones. ``final_x``/``final_y`` hold the last iterate that
    stayed within the escape radius.
    """

    iterations: np.ndarray
    escaped: np.ndarray
    final_x: np.ndarray
    final_y: np.ndarray


def _components(point: Union[ComplexPoint, Vec2]) -> tuple[float, float]:
    if isinstance(point, ComplexPoint):
        return float(point.x), float(point.y)
    x, y = point
    return float(x), float(y)


def evaluate(
    point: Union[ComplexPoint, Vec2],
    cycles: int,
    julia_constant: Optional[Vec2] = None,
) -> EscapeResult:
    """Run at most ``cycles`` iterations starting from ``z = point``.

    Without ``julia_constant`` the parameter is the point itself (Mandelbrot
    set); with it the parameter is fixed and the point is only the seed
    (Julia set of that constant).
    """

    check_cycles(cycles)
    zx, zy = _components(point)
    if julia_constant is None:
        cx, cy = zx, zy
    else:
        cx, cy = _components(julia_constant)

    for i in range(int(cycles)):
        nx = zx * zx - zy * zy + cx
        ny = 2.0 * zx * zy + cy
        if nx * nx + ny * ny > HORIZON_SQUARED:
            return Escaped(i)
        zx, zy = nx, ny

    return Bounded(ComplexPoint(zx, zy))


@tf.function
def _escape_step(
    i: tf.Tensor,
    xs: tf.Tensor,
    ys: tf.Tensor,
    cx: tf.Tensor,
    cy: tf.Tensor,
    ns: tf.Tensor,
    active: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance every still-active point by one iteration."""

    nx = xs * xs - ys * ys + cx
    ny = 2.0 * xs * ys + cy
    horizon = tf.constant(HORIZON_SQUARED, dtype=nx.dtype)
    escaped_now = tf.logical_and(active, nx * nx + ny * ny > horizon)
    ns = tf.where(escaped_now, tf.fill(tf.shape(ns), i), ns)
    keep = tf.logical_and(active, tf.logical_not(escaped_now))
    xs = tf.where(keep, nx, xs)
    ys = tf.where(keep, ny, ys)
    return xs, ys, ns, keep


@tf.function
def _escape_run(
    xs: tf.Tensor,
    ys: tf.Tensor,
    cx: tf.Tensor,
    cy: tf.Tensor,
    cycles: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Iterate with a TensorFlow while loop until the budget is spent or all points escaped."""

    cycles = tf.cast(cycles, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    ns = tf.fill(tf.shape(xs), cycles)
    active = tf.ones_like(ns, tf.bool)

    def cond(i, xs, ys, ns, active):
        return tf.logical_and(tf.less(i, cycles), tf.reduce_any(active))

    def body(i, xs, ys, ns, active):
        xs, ys, ns, active = _escape_step(i, xs, ys, cx, cy, ns, active)
        return i + 1, xs, ys, ns, active

    return tf.while_loop(cond, body, (i, xs, ys, ns, active))


def evaluate_grid(
    xs: np.ndarray,
    ys: np.ndarray,
    cycles: int,
    julia_constant: Optional[Vec2] = None,
    *,
    device: Optional[str] = None,
) -> GridResult:
    """Vectorized :func:`evaluate` over arrays of real and imaginary parts."""

    check_cycles(cycles)
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    if xs.shape != ys.shape:
        raise InvalidConfiguration(f"coordinate grids differ in shape: {xs.shape} vs {ys.shape}.")

    if xs.size == 0:
        return GridResult(
            iterations=np.full(xs.shape, cycles, dtype=np.int32),
            escaped=np.zeros(xs.shape, dtype=bool),
            final_x=xs.copy(),
            final_y=ys.copy(),
        )

    with tf.device(device if device is not None else "/CPU:0"):
        x_tf = tf.convert_to_tensor(xs, dtype=tf.float64)
        y_tf = tf.convert_to_tensor(ys, dtype=tf.float64)
        if julia_constant is None:
            cx, cy = tf.identity(x_tf), tf.identity(y_tf)
        else:
            jx, jy = _components(julia_constant)
            cx = tf.fill(tf.shape(x_tf), tf.constant(jx, dtype=tf.float64))
            cy = tf.fill(tf.shape(y_tf), tf.constant(jy, dtype=tf.float64))

        _, zx, zy, ns, _ = _escape_run(x_tf, y_tf, cx, cy, tf.constant(int(cycles), dtype=tf.int32))
        escaped = tf.less(ns, tf.cast(int(cycles), ns.dtype))

    return GridResult(
        iterations=ns.numpy(),
        escaped=escaped.numpy(),
        final_x=zx.numpy(),
        final_y=zy.numpy(),
    )
