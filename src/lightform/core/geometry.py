"""Scalar and point helpers shared by the geometry kernel.

This module provides small mathematical utilities for:
- Tolerance comparisons
- Signed area and turning angles of segment chains
- Slot width for angled cross members

All functions are pure and stateless.
"""

import math
from collections.abc import Iterable

from lightform.domain import SMALL_NUM, Path, Point, Segment
from lightform.exceptions import DegenerateGeometryError


def is_equal_within_margin(arg1: float, arg2: float, margin: float) -> bool:
    """Check that arg2 lies within +/- margin of arg1."""
    return (arg1 - margin) <= arg2 <= (arg1 + margin)


def is_equal_within_percentage(arg1: float, arg2: float, percentage: float) -> bool:
    """Check that arg2 lies within percentage% of arg1.

    Examples:
        >>> is_equal_within_percentage(100.0, 104.0, 5.0)
        True
        >>> is_equal_within_percentage(100.0, 106.0, 5.0)
        False
    """
    return is_equal_within_margin(arg1, arg2, arg1 * (percentage / 100.0))


def turning_angle(a: Segment, b: Segment) -> float:
    """Signed angle turned when travelling from segment a into segment b.

    Negative values are clockwise (right-hand) turns. Zero-length segments
    give 0.0.
    """
    return a.angle_to(b)


def signed_area(segments: Iterable[Segment]) -> float:
    """Calculate the signed area enclosed by a chain of segments.

    Uses the shoelace formula on each segment's endpoints, so the chain
    does not need to be exactly closed.

    Returns:
        Positive area for counter-clockwise chains, negative for clockwise

    Examples:
        >>> sq = Path.from_points([Point(0, 0), Point(1, 0), Point(1, 1), Point(0, 1)], close=True)
        >>> signed_area(sq)
        1.0
    """
    area = 0.0
    for seg in segments:
        p0 = seg.s0
        p1 = seg.s1
        area += p0.x * p1.y - p1.x * p0.y
    return area / 2.0


def slot_width(
    cross_line: Segment,
    slotted_line: Segment,
    cross_thickness: float,
    slotted_thickness: float,
) -> float:
    """Width of the slot needed where a member crosses another at an angle.

    Args:
        cross_line: Centre line of the crossing member
        slotted_line: Centre line of the member being slotted
        cross_thickness: Thickness of the crossing member
        slotted_thickness: Thickness of the slotted member

    Returns:
        Slot width along the slotted member

    Raises:
        DegenerateGeometryError: If the members are parallel
    """
    theta = abs(cross_line.angle() - slotted_line.angle()) % math.pi
    if theta > math.pi / 2.0:
        theta = math.pi - theta
    if theta < SMALL_NUM:
        raise DegenerateGeometryError("Parallel members cannot be slotted into each other")
    return slotted_thickness / math.tan(theta) + cross_thickness / math.sin(theta)
