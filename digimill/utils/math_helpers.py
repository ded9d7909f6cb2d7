"""Utility math functions for toolpath geometry."""

from __future__ import annotations

import math

import numpy as np

TWO_PI = 2.0 * math.pi
_TINY = 1e-12


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp *value* to the interval [*min_val*, *max_val*]."""
    return float(np.clip(value, min_val, max_val))


def distance_3d(
    a: tuple[float, float, float], b: tuple[float, float, float]
) -> float:
    """Euclidean distance between two points."""
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    dz = b[2] - a[2]
    return math.sqrt(dx * dx + dy * dy + dz * dz)


def arc_sweep(
    start_angle: float, end_angle: float, clockwise: bool
) -> float:
    """Angle swept from *start_angle* to *end_angle* in the given sense.

    The result is always in (0, 2*pi]; coincident angles give a full turn.
    """
    if clockwise:
        sweep = start_angle - end_angle
    else:
        sweep = end_angle - start_angle
    if sweep <= 0.0:
        sweep += TWO_PI
    return sweep


def arc_center_from_radius(
    x1: float, y1: float, x2: float, y2: float, radius: float, clockwise: bool
) -> tuple[float, float]:
    """Centre of an R-format arc in the XY plane.

    Positive *radius* selects the arc of at most 180 degrees, negative
    the longer one. When the chord is longer than the diameter (or R is
    zero) the arc is impossible and the chord midpoint is returned, so
    the move becomes a semicircle whose radius is half the chord.
    """
    abs_radius = abs(radius)
    mid_x, mid_y = (x1 + x2) / 2.0, (y1 + y2) / 2.0
    half_chord = math.hypot(x2 - x1, y2 - y1) / 2.0

    if abs_radius < _TINY or half_chord > abs_radius * (1.0 + _TINY):
        return mid_x, mid_y
    half_chord = min(half_chord, abs_radius)

    offset = math.sqrt(abs_radius * abs_radius - half_chord * half_chord)
    chord_angle = math.atan2(y2 - y1, x2 - x1)

    # CW with R+ or CCW with R- puts the centre to the right of the chord
    if clockwise == (radius > 0):
        center_angle = chord_angle - math.pi / 2.0
    else:
        center_angle = chord_angle + math.pi / 2.0

    return (
        mid_x + offset * math.cos(center_angle),
        mid_y + offset * math.sin(center_angle),
    )


def arc_length(
    start: tuple[float, float, float],
    end: tuple[float, float, float],
    center: tuple[float, float],
    clockwise: bool,
) -> float:
    """Path length of a (possibly helical) arc around *center* in XY.

    The radius is taken from the start point; Z travel is combined with
    the in-plane length.
    """
    cx, cy = center
    radius = math.hypot(start[0] - cx, start[1] - cy)
    start_angle = math.atan2(start[1] - cy, start[0] - cx)
    end_angle = math.atan2(end[1] - cy, end[0] - cx)

    planar = radius * arc_sweep(start_angle, end_angle, clockwise)
    dz = end[2] - start[2]
    return math.sqrt(planar * planar + dz * dz)
