"""Path surgery: gaps, slots, splits and re-starting.

These operations cut material out of a path or divide it, then re-stitch
what is left. Gaps and slots mutate the path in place; splits leave the
source alone and build new halves.
"""

import structlog

from lightform.core.geometry import slot_width
from lightform.core.intersect import dir_intersect, path_intersect
from lightform.core.topology import make_path, regularise_no_delete
from lightform.domain import (
    Direction,
    Path,
    PathIntersect,
    Point,
    Segment,
    SegmentHandle,
    SlotStyle,
    Vector,
)
from lightform.exceptions import IntersectionNotFoundError, StaleHandleError

__all__ = [
    "cut_slot",
    "make_gap",
    "remove_extremity",
    "slot_width",
    "split_along_line",
    "split_along_line_rejoin",
    "start_at_direction",
]

logger = structlog.get_logger(__name__)


def make_gap(
    path: Path,
    l0: SegmentHandle,
    p0: Point,
    l1: SegmentHandle,
    p1: Point,
    no_new_lines: bool = False,
) -> None:
    """Remove the stretch of path running from p0 on l0 to p1 on l1.

    Whole segments strictly between l0 and l1 (walking forwards, wrapping
    round the seam) are deleted, l0 is cut back to end at p0 and l1 is cut
    to start at p1.

    When both points lie on the same segment the far part of it is either
    re-added as a new segment from p1, or with no_new_lines the following
    segment is stretched back to start at p1.

    Args:
        path: Path to cut
        l0: Segment holding the start of the gap
        p0: Point on l0 where the gap starts
        l1: Segment holding the end of the gap
        p1: Point on l1 where the gap ends
        no_new_lines: Stretch the following segment instead of adding one

    Raises:
        StaleHandleError: If either end is not a live segment of the path.
            The path is left unchanged.
    """
    for end in (l0, l1):
        if not path.owns(end):
            raise StaleHandleError("gap end is not a live segment of the path")

    if l0 is not l1:
        node = path.next_circular(l0)
        while node is not l1:
            following = path.next_circular(node)
            path.delete(node)
            node = following

    if l0 is l1:
        far_end = l0.segment.s1
        l0.segment.set_end(p0)
        if no_new_lines:
            path.next_circular(l0).segment.set_start(p1)
        else:
            path.add_points(p1, far_end)
    else:
        l0.segment.set_end(p0)
        l1.segment.set_start(p1)


def cut_slot(
    path: Path,
    direction: Direction,
    x: float,
    width: float,
    depth: float,
    style: SlotStyle = SlotStyle.VERTICAL,
) -> tuple[Point, Point] | None:
    """Cut a three-sided slot into the top or bottom edge of a closed path.

    The slot is cut into a stitched copy which then replaces the contents of
    path, so handles into path do not survive a successful cut. When None is
    returned path is untouched.

    Args:
        path: Path to cut; re-stitched, keeping any open runs
        direction: UP to cut into the top edge, DOWN for the bottom edge
        x: X position of the slot centre
        width: Slot width across its mouth
        depth: Slot depth (negative values build a tab instead)
        style: VERTICAL for a horizontal bottom, CENTRE_GRADIENT to follow
            the edge gradient at the slot centre

    Returns:
        Tuple of the slot's two corner points on the outline, or None if the
        edge could not be found at the centre or at either corner
    """
    work = path.copy()
    regularise_no_delete(work)

    centre = dir_intersect(work, direction, x)
    if centre is None:
        return None

    edge = centre.handle.segment
    slot_ref = Segment(centre.point, edge.v)
    if style == SlotStyle.VERTICAL:
        slot_ref = Segment(centre.point, Vector(edge.v.dx, 0.0))
    if slot_ref.length() == 0.0:
        logger.warning("Slot reference has no direction", x=x, direction=direction.value)
        return None

    slot_ref.set_length(width / 2.0)
    slot_ref.set_points(slot_ref.point_at(-1.0), slot_ref.point_at(1.0))

    corner0 = dir_intersect(work, direction, slot_ref.s0.x)
    corner1 = dir_intersect(work, direction, slot_ref.s1.x)
    if corner0 is None or corner1 is None:
        return None

    make_gap(work, corner0.handle, corner0.point, corner1.handle, corner1.point)

    bottom = slot_ref.copy()
    bottom.move_sideways(-depth)
    work.add_points(corner0.point, bottom.s0)
    work.add_points(bottom.s1, corner1.point)
    work.add(bottom)
    regularise_no_delete(work)

    path.clear()
    path.splice(work)

    return corner0.point, corner1.point


def split_along_line(path: Path, line: Segment) -> tuple[Path, Path, list[PathIntersect]]:
    """Divide a path into the parts either side of an unbounded line.

    Segments straddling the line are cut where they cross it. The left half
    is everything on or to the left of the line's direction of travel.

    Args:
        path: Path to divide; not modified
        line: Dividing line (only its start and direction matter)

    Returns:
        Tuple of (left half, right half, crossings). Crossings are sorted
        along the line; each one's t is its distance along the line from
        line.s0 and its handle is the crossed segment of the source path.
    """
    pivot = line.s0
    angle = line.angle()

    left = Path()
    right = Path()
    crossings: list[PathIntersect] = []

    for handle in path.handles():
        seg = handle.segment.copy()
        seg.rotate(pivot, -angle)
        seg.translate(0.0, -pivot.y)

        s0_left = seg.s0.y >= 0.0
        s1_left = seg.s1.y >= 0.0

        if s0_left and s1_left:
            left.add(seg)
            continue
        if not s0_left and not s1_left:
            right.add(seg)
            continue

        cut = seg.point_at(seg.t_for_y(0.0))
        crossings.append(PathIntersect(cut.x - pivot.x, handle, cut))
        first, second = (left, right) if s0_left else (right, left)
        first.add_points(seg.s0, cut)
        second.add_points(cut, seg.s1)

    for half in (left, right):
        half.translate(0.0, pivot.y)
        half.rotate(pivot, angle)

    crossings.sort(key=lambda c: c.t)
    for crossing in crossings:
        crossing.point = crossing.point.offset(0.0, pivot.y).rotated(pivot, angle)

    return left, right, crossings


def split_along_line_rejoin(path: Path, line: Segment) -> tuple[Path, Path, list[PathIntersect]]:
    """Split a path along a line and close each half along the cut.

    Crossings are joined in pairs along the line (first to second, third to
    fourth, and so on) in both halves, then each half is re-stitched. Open
    fragments left over are discarded.
    """
    left, right, crossings = split_along_line(path, line)

    for a, b in zip(crossings[0::2], crossings[1::2]):
        left.add_points(a.point, b.point)
        right.add_points(a.point, b.point)

    make_path(left)
    make_path(right)
    return left, right, crossings


_EXTREMITY_LINES = {
    Direction.LEFT: lambda pos: Segment(Point(pos, 0.0), Vector(0.0, -1.0)),
    Direction.RIGHT: lambda pos: Segment(Point(pos, 0.0), Vector(0.0, 1.0)),
    Direction.UP: lambda pos: Segment(Point(0.0, pos), Vector(-1.0, 0.0)),
    Direction.DOWN: lambda pos: Segment(Point(0.0, pos), Vector(1.0, 0.0)),
}


def remove_extremity(
    path: Path,
    pos: float,
    direction: Direction,
    rejoin: bool = False,
) -> tuple[Point, Point] | None:
    """Cut away everything beyond pos in a direction.

    For LEFT and RIGHT, pos is an x coordinate; for UP and DOWN a y
    coordinate. The path is replaced by the part that is kept.

    Args:
        path: Path to trim in place
        pos: Position of the cut line
        direction: Side to remove
        rejoin: Close the cut with straight segments

    Returns:
        Tuple of the last and first cut points along the cut line, or None
        if the line misses the path (the path is then left unchanged).
        Cut lines run down for LEFT, up for RIGHT, left for UP and right
        for DOWN.
    """
    line = _EXTREMITY_LINES[direction](pos)
    if rejoin:
        kept, _, crossings = split_along_line_rejoin(path, line)
    else:
        kept, _, crossings = split_along_line(path, line)

    if not crossings:
        return None

    path.clear()
    path.splice(kept)
    return crossings[-1].point, crossings[0].point


def start_at_direction(path: Path, direction: Direction) -> None:
    """Rebuild a closed path so it starts at a compass point.

    The start is where a line through the bounding-box centre meets the path:
    the horizontal centre line for LEFT/RIGHT, the vertical one for UP/DOWN.
    The segment holding that point is split there.

    Raises:
        IntersectionNotFoundError: If the centre line misses the path
    """
    make_path(path)

    min_x, min_y, max_x, max_y = path.bounding_box()
    h_line = Segment(Point(0.0, (min_y + max_y) / 2.0), Vector(1.0, 0.0))
    v_line = Segment(Point((min_x + max_x) / 2.0, 0.0), Vector(0.0, 1.0))

    if direction in (Direction.LEFT, Direction.RIGHT):
        crossings = path_intersect(path, h_line, extrapolate=True)
    else:
        crossings = path_intersect(path, v_line, extrapolate=True)
    if not crossings:
        raise IntersectionNotFoundError(f"No {direction.value} centre-line crossing to start the path at")

    chosen = crossings[0] if direction in (Direction.LEFT, Direction.DOWN) else crossings[-1]
    cut = chosen.handle

    rebuilt = Path()
    rebuilt.add_points(chosen.point, cut.segment.s1)
    node = path.next_circular(cut)
    while node is not cut:
        rebuilt.add(node.segment.copy())
        node = path.next_circular(node)
    rebuilt.add_points(cut.segment.s0, chosen.point)

    path.clear()
    path.splice(rebuilt)

