"""
Angle and planar vector helpers.

All public angles are in degrees unless a name says otherwise. Actuators
report radians (unbounded, as physics engines do), which
:func:`box2d_angle_to_deg` folds back into ``[0, 360)``.
"""

import math

import numpy as np

DEGENERATE_LENGTH = 1e-9


def deg_to_rad(degrees: float) -> float:
    return degrees * math.pi / 180.0


def rad_to_deg(radians: float) -> float:
    return radians * 180.0 / math.pi


def normalize_deg(degrees: float) -> float:
    """Fold an angle into ``[0, 360)``."""
    result = math.fmod(degrees, 360.0)
    if result < 0:
        result += 360.0
    # fmod of a tiny negative value can round up to exactly 360
    if result >= 360.0:
        result = 0.0
    return result


def box2d_angle_to_deg(radians: float) -> float:
    """Convert an actuator joint angle (radians) into normalized degrees."""
    return normalize_deg(rad_to_deg(radians))


def direction(degrees: float) -> np.ndarray:
    """Unit vector pointing along ``degrees`` (0 = +x, counter-clockwise)."""
    rad = deg_to_rad(degrees)
    return np.array([math.cos(rad), math.sin(rad)])


def heading(vector: np.ndarray) -> float:
    """World heading of a vector in degrees, ``[0, 360)``."""
    return normalize_deg(rad_to_deg(math.atan2(vector[1], vector[0])))


def signed_angle_between(source: np.ndarray, target: np.ndarray) -> float:
    """
    Signed rotation in degrees that turns ``source`` onto ``target``.

    The result lies in ``(-180, 180]``, so it always describes the shorter
    arc. Degenerate (zero-length) vectors yield 0.

    Args:
        source: Vector to rotate.
        target: Vector to align with.

    Returns:
        Counter-clockwise positive angle in degrees.
    """
    if np.linalg.norm(source) < DEGENERATE_LENGTH or np.linalg.norm(target) < DEGENERATE_LENGTH:
        return 0.0
    cross = source[0] * target[1] - source[1] * target[0]
    dot = source[0] * target[0] + source[1] * target[1]
    angle = rad_to_deg(math.atan2(cross, dot))
    if angle <= -180.0:
        angle += 360.0
    return angle


def shortest_rotation(current: float, desired: float) -> float:
    """
    Signed delta in degrees along the shorter arc from ``current`` to ``desired``.

    Counter-clockwise (positive) wins a tie, so 180 degree moves turn
    counter-clockwise.
    """
    ccw_delta = normalize_deg(desired - current)
    cw_delta = 360.0 - ccw_delta if ccw_delta > 0 else 0.0
    if ccw_delta > cw_delta:
        return -cw_delta
    return ccw_delta


def angular_distance(a: float, b: float) -> float:
    """Unsigned circular distance between two angles, ``[0, 180]``."""
    return abs(shortest_rotation(a, b))
