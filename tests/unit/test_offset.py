"""Unit tests for offset contour tracing.

Tests cover:
- Exact inward offset of a square
- Inward then outward round trips on regular polygons
- Offsets that consume the whole shape
"""

import math

import pytest

from lightform.config import GeometryConfig
from lightform.core.geometry import signed_area
from lightform.core.offset import OffsetCandidate, trace_at_offset
from lightform.core.topology import is_clockwise
from lightform.domain import Path, Point, Segment


def cw_square(size: float) -> Path:
    """Clockwise square with its bottom-left corner at the origin."""
    return Path.from_points(
        [Point(0.0, 0.0), Point(0.0, size), Point(size, size), Point(size, 0.0)],
        close=True,
    )


def cw_polygon(sides: int, radius: float) -> Path:
    """Clockwise regular polygon centred on the origin."""
    pts = [
        Point(radius * math.cos(angle), radius * math.sin(angle))
        for angle in (math.pi / 2.0 - 2.0 * math.pi * k / sides for k in range(sides))
    ]
    return Path.from_points(pts, close=True)


def corners(path: Path) -> set[tuple[float, float]]:
    """Segment start points rounded to 1e-6."""
    return {(round(seg.s0.x, 6), round(seg.s0.y, 6)) for seg in path}


class TestTraceAtOffset:
    """Tests for trace_at_offset."""

    def test_square_inward(self) -> None:
        """Test a 20mm square traced 2mm inwards is a 16mm square."""
        result = trace_at_offset(cw_square(20.0), -2.0)

        assert len(result) == 4
        assert result.is_closed()
        assert corners(result) == {(2.0, 2.0), (2.0, 18.0), (18.0, 18.0), (18.0, 2.0)}
        assert signed_area(result) == pytest.approx(-256.0)

    def test_does_not_modify_source(self) -> None:
        """Test the source path is left alone."""
        source = cw_square(20.0)
        before = [(s.s0, s.v) for s in source]
        trace_at_offset(source, -2.0)
        assert [(s.s0, s.v) for s in source] == before

    def test_result_is_clockwise(self) -> None:
        """Test outward and inward traces are both clockwise."""
        source = cw_polygon(6, 20.0)
        assert is_clockwise(trace_at_offset(source, -3.0))
        assert is_clockwise(trace_at_offset(source, 3.0))

    def test_outward_square_has_rounded_corners(self) -> None:
        """Test an outward trace grows the bounding box and fans round corners."""
        result = trace_at_offset(cw_square(20.0), 2.0)
        min_x, min_y, max_x, max_y = result.bounding_box()
        assert min_x == pytest.approx(-2.0, abs=0.01)
        assert max_y == pytest.approx(22.0, abs=0.01)
        assert len(result) > 8
        # A rounded corner keeps the result off the sharp corner point
        assert all(seg.s0.distance_to(Point(-2.0, -2.0)) > 0.5 for seg in result)

    @pytest.mark.parametrize("sides", [3, 4, 6])
    def test_round_trip(self, sides: int) -> None:
        """Test tracing in then out recovers the polygon's silhouette."""
        source = cw_polygon(sides, 20.0)
        result = trace_at_offset(trace_at_offset(source, -1.5), 1.5)

        assert result.is_closed()
        assert abs(signed_area(result)) == pytest.approx(abs(signed_area(source)), rel=0.03)
        # Only the corners are rounded off, never by more than the offset
        for seg in result:
            nearest = min(side.distance_to_point(seg.s0) for side in source)
            assert nearest <= 1.55

    def test_consumed_shape_is_empty(self) -> None:
        """Test an offset larger than the inradius leaves nothing."""
        assert trace_at_offset(cw_square(10.0), -6.0).is_empty()

    def test_coarser_steps(self) -> None:
        """Test coarse sampling misses the exact corners and chamfers them."""
        config = GeometryConfig(trace_step=5.0, min_trace_steps=4)
        result = trace_at_offset(cw_square(20.0), -2.0, config)
        assert len(result) == 8
        for got, want in zip(result.bounding_box(), (2.0, 2.0, 18.0, 18.0)):
            assert got == pytest.approx(want)


class TestOffsetCandidate:
    """Tests for OffsetCandidate."""

    def test_bounds(self) -> None:
        """Test bounds cover the line."""
        cand = OffsetCandidate(Segment.between(Point(3.0, 1.0), Point(1.0, 4.0)), 0)
        assert cand.bounds == (1.0, 1.0, 3.0, 4.0)

    def test_may_cross(self) -> None:
        """Test the bounding-box prefilter."""
        a = OffsetCandidate(Segment.between(Point(0.0, 0.0), Point(2.0, 2.0)), 0)
        b = OffsetCandidate(Segment.between(Point(1.0, 0.0), Point(3.0, 1.0)), 1)
        c = OffsetCandidate(Segment.between(Point(5.0, 5.0), Point(6.0, 6.0)), 2)
        assert a.may_cross(b)
        assert not a.may_cross(c)
