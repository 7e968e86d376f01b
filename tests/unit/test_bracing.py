"""Unit tests for anchor placement and brace generation.

Tests cover:
- Even and notch-aligned anchor placement
- Building brace edges between two rims
- Rejecting narrow and crossing braces
- Drawing the surviving braces
- Merging overlapping gaps and cutting them out of the rims
"""

import math

import pytest

from lightform.core.bracing import (
    _anchors_evenly,
    _merge_overlapping,
    draw_valid_braces,
    generate_anchor_points,
    generate_braces,
    invalidate_crossing_braces,
    invalidate_narrow_brace_pairs,
    open_brace_gaps,
)
from lightform.core.topology import regularise
from lightform.domain import Anchor, Gap, NotchRecord, Path, Point, Segment, SegmentHandle, Vector

CENTRE = Point(0.0, 0.0)


def circle(radius: float, steps: int = 72) -> Path:
    """Clockwise polyline circle about the origin."""
    path = Path()
    path.add_ellipse(CENTRE, radius, radius, steps)
    regularise(path)
    return path


def cw_square(size: float, origin: float = 0.0) -> Path:
    """Clockwise square with its bottom-left corner at (origin, origin)."""
    lo = origin
    hi = origin + size
    return Path.from_points([Point(lo, lo), Point(lo, hi), Point(hi, hi), Point(hi, lo)], close=True)


def anchor_with(ref0: Segment, ref1: Segment) -> Anchor:
    """Anchor at ref0's start whose braces follow the given references."""
    anchor = Anchor(ref0.s0, Segment.between(ref0.s0, Point(ref0.s0.x + 1.0, ref0.s0.y)))
    anchor.braces[0].reference = ref0
    anchor.braces[1].reference = ref1
    return anchor


def gap_anchor(l0: SegmentHandle, p0: Point, l1: SegmentHandle, p1: Point) -> Anchor:
    """Anchor with one valid brace whose outer-rim gap runs from p0 on l0 to p1 on l1."""
    anchor = Anchor(p0, Segment.between(p0, p1))
    brace = anchor.braces[0]
    brace.edges[1].outer_handle = l0
    brace.edges[1].outer_point = p0
    brace.edges[0].outer_handle = l1
    brace.edges[0].outer_point = p1
    anchor.braces[1].valid = False
    return anchor


class TestGenerateAnchorPoints:
    """Tests for generate_anchor_points."""

    def test_even_count_on_circle(self) -> None:
        """Test the anchor count is the perimeter over the spacing, rounded."""
        outer = circle(50.0)
        construction = Path()

        anchors, ok = generate_anchor_points(outer, circle(47.0), circle(40.0), 7.0, 20.0, construction)

        assert ok
        assert len(anchors) == math.floor(outer.length() / 20.0 + 0.5)
        assert not any(a.failed for a in anchors)
        assert not construction.is_empty()

    def test_half_count_rounds_up(self) -> None:
        """Test a perimeter of two and a half spacings places three anchors."""
        square = cw_square(10.0)

        anchors = _anchors_evenly(square, square, 16.0)

        assert len(anchors) == 3

    def test_anchors_on_reference(self) -> None:
        """Test anchors sit on the inner reference path."""
        anchors, _ = generate_anchor_points(circle(50.0), circle(47.0), circle(40.0), 7.0, 20.0, Path())
        for anchor in anchors:
            assert anchor.rim_point.distance_to(CENTRE) == pytest.approx(47.0, abs=0.05)

    def test_braces_aim_at_inner_rim(self) -> None:
        """Test each facing pair of braces meets at a point on the inner rim."""
        anchors, _ = generate_anchor_points(circle(50.0), circle(47.0), circle(40.0), 7.0, 20.0, Path())
        count = len(anchors)
        for k, anchor in enumerate(anchors):
            following = anchors[(k + 1) % count]
            target = anchor.braces[1].reference.s1
            assert following.braces[0].reference.s1.distance_to(target) < 1e-9
            assert target.distance_to(CENTRE) == pytest.approx(40.0, abs=0.05)

    def test_anchors_between_notches(self) -> None:
        """Test notch-aligned anchors are spaced evenly between notches."""
        denotched = cw_square(40.0)
        notches = [
            NotchRecord([], Point(0.0, 0.0), Point(0.0, 0.0), distance=0.0),
            NotchRecord([], Point(0.0, 0.0), Point(0.0, 0.0), distance=80.0),
        ]

        anchors, _ = generate_anchor_points(
            denotched,
            cw_square(36.0, 2.0),
            cw_square(20.0, 10.0),
            10.0,
            20.0,
            Path(),
            denotched=denotched,
            notches=notches,
        )

        assert len(anchors) == 8
        assert anchors[0].rim_point == Point(0.0, 0.0)
        assert anchors[1].rim_point.y == pytest.approx(20.0)
        assert anchors[4].rim_point.x == pytest.approx(40.0)

    def test_spacing_too_large(self) -> None:
        """Test no anchors fit when the spacing exceeds the perimeter."""
        anchors, ok = generate_anchor_points(circle(5.0), circle(4.0), circle(2.0), 1.0, 100.0, Path())
        assert anchors == []
        assert not ok

    def test_bisector_misses(self) -> None:
        """Test anchors are marked failed when there is no inner rim to reach."""
        anchors, ok = generate_anchor_points(circle(50.0), circle(47.0), Path(), 7.0, 20.0, Path(), max_rotation=3)

        assert not ok
        assert all(a.failed for a in anchors)


class TestGenerateBraces:
    """Tests for generate_braces."""

    def test_edges_join_the_rims(self) -> None:
        """Test every valid brace edge runs from the outer rim to the inner rim."""
        outer_rim = circle(47.0)
        inner_rim = circle(40.0)
        anchors, _ = generate_anchor_points(circle(50.0), outer_rim, inner_rim, 7.0, 20.0, Path())

        valid = generate_braces(anchors, inner_rim, outer_rim, 2.0)

        assert valid > 0
        for anchor in anchors:
            for brace in anchor.braces:
                if not brace.valid:
                    continue
                for edge in brace.edges:
                    assert edge.inner_handle is not None and inner_rim.owns(edge.inner_handle)
                    assert edge.outer_handle is not None and outer_rim.owns(edge.outer_handle)
                    assert edge.line.s0.distance_to(edge.outer_point) < 1e-9
                    assert edge.line.s1.distance_to(edge.inner_point) < 1e-9
                    assert edge.inner_point.distance_to(CENTRE) == pytest.approx(40.0, abs=0.05)
                    assert edge.outer_point.distance_to(CENTRE) == pytest.approx(47.0, abs=0.05)

    def test_zero_length_reference_is_invalid(self) -> None:
        """Test a brace with no direction is rejected."""
        point = Segment(Point(47.0, 0.0), Vector(0.0, 0.0))
        anchor = anchor_with(point, point.copy())
        assert generate_braces([anchor], circle(40.0), circle(47.0), 2.0) == 0
        assert not any(b.valid for b in anchor.braces)


class TestBraceValidation:
    """Tests for narrow and crossing brace rejection."""

    def test_narrow_pair_rejects_longer(self) -> None:
        """Test the longer of two nearly parallel braces is rejected."""
        narrow = anchor_with(
            Segment.between(Point(0.0, 0.0), Point(10.0, 1.0)),
            Segment.between(Point(0.0, 0.0), Point(20.0, 3.0)),
        )
        wide = anchor_with(
            Segment.between(Point(50.0, 0.0), Point(40.0, -10.0)),
            Segment.between(Point(50.0, 0.0), Point(60.0, -10.0)),
        )

        rejected = invalidate_narrow_brace_pairs([narrow, wide], math.radians(20.0))

        assert rejected == [(0, 1)]
        assert narrow.braces[0].valid
        assert not narrow.braces[1].valid
        assert all(b.valid for b in wide.braces)

    def test_crossing_rejects_longer(self) -> None:
        """Test the longer of two crossing braces is rejected."""
        a0 = anchor_with(Segment(), Segment())
        a1 = anchor_with(Segment(), Segment())
        a0.braces[0].edges[0].line = Segment.between(Point(0.0, 0.0), Point(10.0, 10.0))
        a0.braces[0].edges[1].line = Segment.between(Point(1.0, 0.0), Point(11.0, 10.0))
        a1.braces[0].edges[0].line = Segment.between(Point(0.0, 8.0), Point(20.0, 8.0))
        a1.braces[0].edges[1].line = Segment.between(Point(0.0, 9.0), Point(20.0, 9.0))
        a0.braces[1].valid = False
        a1.braces[1].valid = False

        rejected = invalidate_crossing_braces([a0, a1])

        assert rejected == [(1, 0)]
        assert a0.braces[0].valid
        assert not a1.braces[0].valid

    def test_separate_braces_survive(self) -> None:
        """Test braces that do not cross are all kept."""
        a0 = anchor_with(Segment(), Segment())
        a0.braces[0].edges[0].line = Segment.between(Point(0.0, 0.0), Point(10.0, 10.0))
        a0.braces[0].edges[1].line = Segment.between(Point(1.0, 0.0), Point(11.0, 10.0))
        a0.braces[1].edges[0].line = Segment.between(Point(30.0, 0.0), Point(20.0, 10.0))
        a0.braces[1].edges[1].line = Segment.between(Point(31.0, 0.0), Point(21.0, 10.0))

        assert invalidate_crossing_braces([a0]) == []

    def test_draw_valid_braces(self) -> None:
        """Test two edges are drawn per valid brace."""
        a0 = anchor_with(Segment(), Segment())
        a0.braces[1].valid = False
        out = Path()

        assert draw_valid_braces([a0], out) == 1
        assert len(out) == 2


class TestOpenBraceGaps:
    """Tests for open_brace_gaps."""

    def test_gaps_cut_both_rims(self) -> None:
        """Test opening gaps shortens both rims."""
        outer_rim = circle(47.0)
        inner_rim = circle(40.0)
        anchors, _ = generate_anchor_points(circle(50.0), outer_rim, inner_rim, 7.0, 20.0, Path())
        generate_braces(anchors, inner_rim, outer_rim, 2.0)
        invalidate_narrow_brace_pairs(anchors, math.radians(20.0))
        invalidate_crossing_braces(anchors)
        outer_before = outer_rim.length()
        inner_before = inner_rim.length()

        outer_opened, outer_failed = open_brace_gaps(anchors, outer_rim, inner=False)
        inner_opened, inner_failed = open_brace_gaps(anchors, inner_rim, inner=True)

        assert outer_opened > outer_failed
        assert inner_opened > inner_failed
        assert outer_rim.length() < outer_before
        assert inner_rim.length() < inner_before

    def test_deleted_gap_end_fails_alone(self) -> None:
        """Test a gap ending on a deleted segment is counted as failed and cuts nothing."""
        rim = cw_square(10.0)
        left = rim.handle_at(0)
        right = rim.handle_at(2)
        anchor = gap_anchor(left, Point(0.0, 2.0), right, Point(10.0, 8.0))
        rim.delete(right)
        before = [(seg.s0, seg.v) for seg in rim]

        opened, failed = open_brace_gaps([anchor], rim, inner=False)

        assert (opened, failed) == (0, 1)
        assert [(seg.s0, seg.v) for seg in rim] == before


class TestMergeOverlapping:
    """Tests for coalescing brace gaps before they are cut."""

    def test_overlap_on_one_segment(self) -> None:
        """Test two overlapping gaps on the same segment become one."""
        rim = cw_square(10.0)
        left = rim.handle_at(0)
        gaps = [
            Gap(left, Point(0.0, 2.0), left, Point(0.0, 5.0)),
            Gap(left, Point(0.0, 4.0), left, Point(0.0, 7.0)),
        ]

        _merge_overlapping(gaps, rim)

        assert len(gaps) == 1
        assert gaps[0].p0 == Point(0.0, 2.0)
        assert gaps[0].p1 == Point(0.0, 7.0)

    def test_overlap_across_segments(self) -> None:
        """Test a gap starting before the previous one ends is absorbed."""
        rim = cw_square(10.0)
        left = rim.handle_at(0)
        top = rim.handle_at(1)
        right = rim.handle_at(2)
        gaps = [
            Gap(left, Point(0.0, 6.0), top, Point(4.0, 10.0)),
            Gap(left, Point(0.0, 8.0), right, Point(10.0, 7.0)),
        ]

        _merge_overlapping(gaps, rim)

        assert len(gaps) == 1
        assert gaps[0].l0 is left
        assert gaps[0].l1 is right
        assert gaps[0].p1 == Point(10.0, 7.0)

    def test_seam_gaps_kept_apart(self) -> None:
        """Test gaps either side of the rim's start are not merged."""
        rim = cw_square(10.0)
        left = rim.handle_at(0)
        bottom = rim.handle_at(3)
        gaps = [
            Gap(left, Point(0.0, 1.0), left, Point(0.0, 3.0)),
            Gap(bottom, Point(6.0, 0.0), bottom, Point(2.0, 0.0)),
        ]

        _merge_overlapping(gaps, rim)

        assert len(gaps) == 2
        assert gaps[0].p1 == Point(0.0, 3.0)
        assert gaps[1].p0 == Point(6.0, 0.0)
