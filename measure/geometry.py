"""
Geometry primitives for 2D landmark coordinates.

All angles are in degrees. Points are anything indexable as ``[x, y]``
(tuples, lists or numpy rows). Image coordinates grow downwards, so a smaller
``y`` is higher on screen.
"""

import math
from typing import Sequence, Tuple

Point = Sequence[float]

EPSILON = 1e-9


def midpoint(point1: Point, point2: Point) -> Tuple[float, float]:
    """Midpoint of two points."""
    return ((point1[0] + point2[0]) / 2, (point1[1] + point2[1]) / 2)


def pixel_distance(point1: Point, point2: Point) -> float:
    """Euclidean distance in image-coordinate units."""
    return math.hypot(point2[0] - point1[0], point2[1] - point1[1])


def angle_between(a: Point, b: Point, c: Point) -> float:
    """Angle at vertex ``b`` formed by the rays b->a and b->c.

    Args:
        a: First end point
        b: Vertex
        c: Second end point

    Returns:
        Angle in [0, 180]. Returns 0.0 when ``a`` or ``c`` coincides with ``b``.
    """
    if pixel_distance(a, b) < EPSILON or pixel_distance(c, b) < EPSILON:
        return 0.0

    radians = math.atan2(c[1] - b[1], c[0] - b[0]) - math.atan2(a[1] - b[1], a[0] - b[0])
    angle = abs(math.degrees(radians))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def side_of_line(start: Point, end: Point, point: Point) -> float:
    """Signed area telling on which side of the line start->end ``point`` lies.

    Positive and negative values are opposite sides, 0.0 is on the line.
    """
    return (end[0] - start[0]) * (point[1] - start[1]) - (end[1] - start[1]) * (point[0] - start[0])


def oriented_joint_angle(proximal: Point, joint: Point, distal: Point, reference: Point) -> float:
    """Joint angle on a 0-360 scale where 180 is a straight limb.

    The angle is below 180 when the joint bows towards ``reference`` (e.g. the
    body midline or the direction the subject faces) and above 180 when it
    bows away from it.
    """
    angle = angle_between(proximal, joint, distal)
    joint_side = side_of_line(proximal, distal, joint)
    if abs(joint_side) < EPSILON:
        return 180.0

    reference_side = side_of_line(proximal, distal, reference)
    if joint_side * reference_side > 0:
        return angle
    return 360.0 - angle


def lateral_reference(start: Point, end: Point, direction: float) -> Tuple[float, float]:
    """Point on the ``direction`` side (+1 towards +x, -1 towards -x) of the line start-end.

    The midpoint of the segment is shifted horizontally by the segment length,
    so the side is unambiguous in normalized and in pixel coordinates alike.
    """
    mid = midpoint(start, end)
    return (mid[0] + direction * pixel_distance(start, end), mid[1])


def slope_deviation(point1: Point, point2: Point) -> float:
    """Tilt of the line point1-point2 from horizontal, in [0, 90].

    The result is symmetric under swapping the points.
    """
    raw = abs(math.degrees(math.atan2(point2[1] - point1[1], point2[0] - point1[0])))
    if raw > 90.0:
        return 180.0 - raw
    return raw


def vertical_deviation(reference: Point, target: Point) -> float:
    """Deviation of ``target`` from the vertical line through ``reference``.

    Returns:
        Angle in [0, 90]; 0.0 when the points share the same height.
    """
    delta_x = abs(target[0] - reference[0])
    delta_y = abs(target[1] - reference[1])
    if delta_y < EPSILON:
        return 0.0
    return math.degrees(math.atan2(delta_x, delta_y))
