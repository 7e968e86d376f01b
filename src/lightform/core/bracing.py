"""Anchor placement, brace generation and brace validation.

Braces are diagonal struts joining the outer rim to the inner rim. They are
built in stages:
- generate_anchor_points: Space anchors round the rim and aim a bisector
  from each pair of neighbours at the inner rim
- generate_braces: Turn each bisector into two physical strut edges
- invalidate_narrow_brace_pairs / invalidate_crossing_braces: Reject struts
  that are too close together or cross each other
- draw_valid_braces: Emit the surviving strut edges
- open_brace_gaps: Cut the rims where the struts join them

Anchors and braces hold handles into the rim paths. The rims must not be
mutated between generate_braces and open_brace_gaps.
"""

import math
from itertools import product

import structlog

from lightform.core.intersect import path_intersect
from lightform.core.surgery import make_gap
from lightform.domain import SNAP_LEN, Anchor, Gap, NotchRecord, Path, Segment
from lightform.exceptions import StaleHandleError

logger = structlog.get_logger(__name__)

DOTTED_MARK = 0.2
DOTTED_SPACE = 1.2
CROSSING_SHRINK = 0.001
OUTER_REACH = 1.0e4


def _round_half_up(value: float) -> int:
    """Nearest integer, with halves rounded up rather than to even."""
    return math.floor(value + 0.5)


def _anchors_at_notches(denotched: Path, notches: list[NotchRecord], spacing: float) -> list[Anchor]:
    anchors: list[Anchor] = []
    total = denotched.length()
    for index, notch in enumerate(notches):
        following = notches[(index + 1) % len(notches)]
        between = total if following is notch else following.distance - notch.distance
        if between < 0.0:
            between += total
        count = _round_half_up(between / spacing)
        for k in range(count):
            pt, handle, _ = denotched.point_at_distance(notch.distance + k * between / count)
            anchors.append(Anchor(pt, handle.segment.copy()))
    return anchors


def _anchors_evenly(reference_outer: Path, reference_inner: Path, spacing: float) -> list[Anchor]:
    count = _round_half_up(reference_outer.length() / spacing)
    if count == 0:
        return []
    step = reference_inner.length() / count
    anchors: list[Anchor] = []
    for k in range(count):
        pt, handle, _ = reference_inner.point_at_distance(k * step)
        anchors.append(Anchor(pt, handle.segment.copy()))
    return anchors


def generate_anchor_points(
    reference_outer: Path,
    reference_inner: Path,
    inner_rim: Path,
    rim_spacing: float,
    anchor_spacing: float,
    construction: Path,
    denotched: Path | None = None,
    notches: list[NotchRecord] | None = None,
    max_rotation: int = 60,
    log: structlog.stdlib.BoundLogger | None = None,
) -> tuple[list[Anchor], bool]:
    """Place anchors round the rim and aim their braces at the inner rim.

    Anchors are spaced evenly round the inner reference path, or between
    successive notches of the de-notched outline when notches are given.
    Each anchor gets two reference rays leaning back and forward by the
    initial brace angle. The facing rays of neighbouring anchors are averaged
    into one bisector, which is extended to meet the inner rim. A bisector
    that misses is rotated by +1, -2, +3, ... degrees until it hits or
    max_rotation is reached, in which case the anchor is marked failed.

    Args:
        reference_outer: Outline the anchor count is measured on
        reference_inner: Path the anchors are placed on
        inner_rim: Inner rim the bisectors must reach
        rim_spacing: Rim spacing, used for the initial brace angle
        anchor_spacing: Target distance between anchors
        construction: Path receiving the dotted construction lines
        denotched: De-notched outline for notch-aligned placement
        notches: Notch records on the de-notched outline
        max_rotation: Largest bisector rotation tried (degrees)
        log: Diagnostics logger

    Returns:
        Tuple of (anchors, ok); ok is False if any anchor failed
    """
    log = log if log is not None else logger

    anchors: list[Anchor] = []
    if notches and denotched is not None:
        anchors = _anchors_at_notches(denotched, notches, anchor_spacing)
    else:
        if notches is not None:
            log.warning("No notches to anchor at, using even spacing")
        anchors = _anchors_evenly(reference_outer, reference_inner, anchor_spacing)

    if not anchors:
        log.warning("No anchors placed", perimeter=round(reference_outer.length(), 2))
        return anchors, False

    brace_angle = math.atan2(anchor_spacing, 2.0 * rim_spacing)
    for anchor in anchors:
        inward = anchor.rim_line.angle() - math.pi / 2.0
        anchor.braces[0].angle = inward - brace_angle
        anchor.braces[1].angle = inward + brace_angle
        for brace in anchor.braces:
            brace.reference = Segment.polar(anchor.rim_point, 1.0, brace.angle)

    ok = True
    count = len(anchors)
    for k in range(count):
        a0 = anchors[k]
        a1 = anchors[(k + 1) % count]

        while True:
            fwd = a0.braces[1].reference
            back = a1.braces[0].reference
            bisector = Segment.between(fwd.s0.midpoint(back.s0), fwd.s1.midpoint(back.s1))
            if bisector.length() >= SNAP_LEN:
                break
            fwd.rotate(fwd.s0, math.radians(1.0))

        aim = bisector
        crossings = []
        offset_angle = 0
        while True:
            aim = bisector.copy()
            rotation = offset_angle if offset_angle % 2 else -offset_angle
            aim.rotate(aim.s0, math.radians(rotation))
            crossings = path_intersect(inner_rim, aim, extrapolate=True)
            if len(crossings) >= 2:
                break
            if offset_angle >= max_rotation:
                a0.failed = True
                ok = False
                aim = bisector
                log.debug("Bisector missed the inner rim", anchor=k, crossings=len(crossings))
                break
            offset_angle += 1

        shown = aim.copy()
        shown.extend_end(rim_spacing)
        construction.add_dotted(shown, DOTTED_MARK, DOTTED_SPACE)

        if len(crossings) >= 2:
            front = crossings[0].point
            back_pt = crossings[-1].point
            target = front if a0.rim_point.distance_to(front) <= a0.rim_point.distance_to(back_pt) else back_pt
            a0.braces[1].reference = Segment.between(a0.rim_point, target)
            a1.braces[0].reference = Segment.between(a1.rim_point, target)
            construction.add_dotted(a0.braces[1].reference, DOTTED_MARK, DOTTED_SPACE)
            construction.add_dotted(a1.braces[0].reference, DOTTED_MARK, DOTTED_SPACE)

    return anchors, ok


def generate_braces(anchors: list[Anchor], inner_rim: Path, outer_rim: Path, girder_width: float) -> int:
    """Build the two physical edges of every brace.

    Each edge is the brace reference rotated by atan2(girder_width, length),
    about the rim end for the first edge and the inner end for the second.
    The edge is cut where it first meets the inner rim, then traced
    backwards to where it meets the outer rim. A brace with an edge that
    misses either rim is invalid.

    Returns:
        Number of valid braces
    """
    for anchor in anchors:
        for b, brace in enumerate(anchor.braces):
            direction = 1.0 if b == 0 else -1.0
            for side, edge in enumerate(brace.edges):
                line = brace.reference.copy()
                if line.length() == 0.0:
                    brace.valid = False
                    break
                pivot = line.s0 if side == 0 else line.s1
                line.rotate(pivot, direction * math.atan2(girder_width, line.length()))

                inner = path_intersect(inner_rim, line, extrapolate=True)
                if not inner:
                    brace.valid = False
                    break
                line.set_end(inner[0].point)
                edge.inner_handle = inner[0].handle
                edge.inner_point = inner[0].point

                line.reverse()
                line.extend_end(OUTER_REACH)
                outer = path_intersect(outer_rim, line)
                if not outer:
                    brace.valid = False
                    break
                line.set_end(outer[0].point)
                edge.outer_handle = outer[0].handle
                edge.outer_point = outer[0].point
                line.reverse()

                edge.line = line

    return sum(1 for anchor in anchors for brace in anchor.braces if brace.valid)


def invalidate_narrow_brace_pairs(anchors: list[Anchor], min_angle: float) -> list[tuple[int, int]]:
    """Reject the longer brace of any anchor whose braces are too close.

    Args:
        anchors: Anchors to check
        min_angle: Smallest allowed angle between an anchor's braces (radians)

    Returns:
        (anchor index, brace index) of each brace invalidated
    """
    rejected: list[tuple[int, int]] = []
    for k, anchor in enumerate(anchors):
        b0, b1 = anchor.braces
        if not (b0.valid and b1.valid):
            continue
        ref0 = b0.reference
        ref1 = b1.reference
        if ref0.length() > 0.0 and ref1.length() > 0.0 and abs(ref0.angle_to(ref1)) < min_angle:
            longer = 0 if ref0.length() > ref1.length() else 1
            anchor.braces[longer].valid = False
            rejected.append((k, longer))
    return rejected


def invalidate_crossing_braces(anchors: list[Anchor]) -> list[tuple[int, int]]:
    """Reject the longer brace of every pair of crossing brace edges.

    Every edge is compared with every other edge, in anchor, brace, edge
    order. The first crossing found for a pair decides; the result depends
    on that order.

    Returns:
        (anchor index, brace index) of each brace invalidated
    """
    rejected: list[tuple[int, int]] = []
    keys = list(product(range(len(anchors)), range(2), range(2)))

    for (ko, bo, lo), (ki, bi, li) in product(keys, keys):
        if (ko, bo, lo) == (ki, bi, li):
            continue
        outer_brace = anchors[ko].braces[bo]
        inner_brace = anchors[ki].braces[bi]
        if not (outer_brace.valid and inner_brace.valid):
            continue

        lno = outer_brace.edges[lo].line
        lni = inner_brace.edges[li].line
        lno = Segment.between(lno.point_at(CROSSING_SHRINK), lno.point_at(1.0 - CROSSING_SHRINK))
        lni = Segment.between(lni.point_at(CROSSING_SHRINK), lni.point_at(1.0 - CROSSING_SHRINK))
        if lno.intersect(lni) is None:
            continue

        if lno.length() > lni.length():
            outer_brace.valid = False
            rejected.append((ko, bo))
        else:
            inner_brace.valid = False
            rejected.append((ki, bi))

    return rejected


def draw_valid_braces(anchors: list[Anchor], out: Path) -> int:
    """Append both edges of every valid brace to out, returning the brace count."""
    count = 0
    for anchor in anchors:
        for brace in anchor.braces:
            if brace.valid:
                out.add(brace.edges[0].line.copy())
                out.add(brace.edges[1].line.copy())
                count += 1
    return count


def _collect_gaps(anchors: list[Anchor], inner: bool) -> list[Gap]:
    gaps: list[Gap] = []
    for anchor in anchors:
        for b, brace in enumerate(anchor.braces):
            if not brace.valid:
                continue
            start = brace.edges[(b + 1) % 2]
            stop = brace.edges[b]
            if inner:
                l0, p0, l1, p1 = start.inner_handle, start.inner_point, stop.inner_handle, stop.inner_point
            else:
                l0, p0, l1, p1 = start.outer_handle, start.outer_point, stop.outer_handle, stop.outer_point
            if l0 is None or l1 is None:
                continue
            gaps.append(Gap(l0, p0, l1, p1))
    return gaps


def _merge_overlapping(gaps: list[Gap], rim: Path) -> None:
    """Coalesce neighbouring gaps that overlap, in place.

    A gap overlaps the next one when the next one starts on an earlier rim
    segment than this one ends on, or further back along the same segment.
    Gaps either side of the rim's seam are left alone.
    """
    half = len(rim) // 2
    while True:
        removed = 0
        i = 0
        while i < len(gaps) and len(gaps) > 1:
            g = gaps[i]
            j = (i + 1) % len(gaps)
            n = gaps[j]

            next_start = rim.index(n.l0)
            this_end = rim.index(g.l1)

            if this_end > half and next_start < half:
                i += 1
                continue
            if next_start > this_end:
                i += 1
                continue
            if next_start == this_end:
                seg = g.l1.segment
                if seg.t_for_point(g.p1) < seg.t_for_point(n.p0):
                    i += 1
                    continue

            g.l1 = n.l1
            g.p1 = n.p1
            del gaps[j]
            if j < i:
                i -= 1
            removed += 1

        if removed == 0:
            return


def open_brace_gaps(
    anchors: list[Anchor],
    rim: Path,
    inner: bool,
    log: structlog.stdlib.BoundLogger | None = None,
) -> tuple[int, int]:
    """Cut the rim where valid braces meet it.

    Args:
        anchors: Anchors holding the braces
        rim: The rim to cut; the inner rim if inner is set, else the outer rim
        inner: Which rim's handles to use
        log: Diagnostics logger

    Returns:
        Tuple of (gaps opened, gaps that could not be opened)
    """
    log = log if log is not None else logger
    gaps = _collect_gaps(anchors, inner)

    try:
        _merge_overlapping(gaps, rim)
    except StaleHandleError as e:
        log.warning("Brace gaps reference deleted rim segments", error=str(e), inner=inner)
        return 0, len(gaps)

    opened = 0
    failed = 0
    for gap in gaps:
        try:
            make_gap(rim, gap.l0, gap.p0, gap.l1, gap.p1, no_new_lines=True)
            opened += 1
        except StaleHandleError as e:
            log.warning("Gap end was removed by an earlier gap", error=str(e), inner=inner)
            failed += 1
    return opened, failed
