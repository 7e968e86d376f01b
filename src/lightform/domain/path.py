"""Ordered, mutable collections of segments with stable handles.

A Path owns its Segments and links them in an intrusive doubly-linked list.
Every element is addressed by a SegmentHandle:

- A handle to a live segment stays valid across unrelated inserts, deletes
  and in-path reordering.
- Deleting a segment kills its handle; dereferencing it afterwards raises
  StaleHandleError instead of silently reading freed data.
- Splicing moves handles (and their segments) into another path; they stay
  live but are then owned by the receiving path.
"""

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from lightform.domain.primitives import (
    SNAP_LEN,
    T_S1,
    Direction,
    Point,
    Segment,
    Vector,
)
from lightform.exceptions import EmptyPathError, StaleHandleError


class SegmentHandle:
    """Opaque reference to one segment inside a Path."""

    __slots__ = ("_next", "_owner", "_prev", "_segment")

    def __init__(self, segment: Segment, owner: "Path") -> None:
        self._segment = segment
        self._owner: Path | None = owner
        self._prev: SegmentHandle | None = None
        self._next: SegmentHandle | None = None

    @property
    def alive(self) -> bool:
        """True while the segment is still in a path."""
        return self._owner is not None

    @property
    def segment(self) -> Segment:
        """The referenced segment.

        Raises:
            StaleHandleError: If the segment has been deleted
        """
        if self._owner is None:
            raise StaleHandleError("segment was deleted")
        return self._segment

    def __repr__(self) -> str:
        state = "live" if self.alive else "stale"
        return f"<SegmentHandle {state} {self._segment!r}>"


@dataclass
class PathIntersect:
    """One crossing between a query segment and an element of a path.

    Attributes:
        t: Parameter along the query segment
        handle: The path element that was crossed
        point: Where the crossing happens
    """

    t: float
    handle: SegmentHandle
    point: Point


class Path:
    """An ordered collection of segments, open or closed.

    Iterating a Path yields its Segments in order; use handles() when stable
    references are needed.
    """

    def __init__(self, segments: Iterable[Segment] | None = None) -> None:
        self._head: SegmentHandle | None = None
        self._tail: SegmentHandle | None = None
        self._size = 0
        if segments is not None:
            for seg in segments:
                self.add(seg)

    @classmethod
    def from_points(cls, points: Iterable[Point], close: bool = False) -> "Path":
        """Build a path joining a sequence of points.

        Args:
            points: Vertices in drawing order
            close: Join the last point back to the first

        Returns:
            New path with one segment per consecutive pair
        """
        pts = list(points)
        path = cls()
        for a, b in zip(pts, pts[1:]):
            path.add_points(a, b)
        if close and len(pts) > 2:
            path.add_points(pts[-1], pts[0])
        return path

    # Container protocol

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Segment]:
        for handle in self.handles():
            yield handle._segment

    def __repr__(self) -> str:
        return f"Path(segments={self._size}, length={self.length():.3f})"

    def handles(self) -> Iterator[SegmentHandle]:
        """Iterate over handles in order.

        The successor is read before each yield, so the current handle may be
        deleted by the caller.
        """
        node = self._head
        while node is not None:
            nxt = node._next
            yield node
            node = nxt

    def segments(self) -> list[Segment]:
        """Snapshot list of the segments in order."""
        return list(self)

    def is_empty(self) -> bool:
        """True if the path has no segments."""
        return self._size == 0

    def owns(self, handle: SegmentHandle) -> bool:
        """True if handle refers to a live segment of this path."""
        return handle._owner is self

    def _check(self, handle: SegmentHandle) -> None:
        if handle._owner is None:
            raise StaleHandleError("segment was deleted")
        if handle._owner is not self:
            raise StaleHandleError("segment belongs to another path")

    # Linking

    def _link_after(self, node: SegmentHandle, after: SegmentHandle | None) -> None:
        """Link a detached node after `after` (or at the front when None)."""
        node._owner = self
        if after is None:
            node._prev = None
            node._next = self._head
            if self._head is not None:
                self._head._prev = node
            self._head = node
            if self._tail is None:
                self._tail = node
        else:
            node._prev = after
            node._next = after._next
            if after._next is not None:
                after._next._prev = node
            else:
                self._tail = node
            after._next = node
        self._size += 1

    def _unlink(self, node: SegmentHandle) -> None:
        """Detach a node, leaving its owner set to None."""
        if node._prev is not None:
            node._prev._next = node._next
        else:
            self._head = node._next
        if node._next is not None:
            node._next._prev = node._prev
        else:
            self._tail = node._prev
        node._prev = None
        node._next = None
        node._owner = None
        self._size -= 1

    # Adding elements

    def add(self, segment: Segment) -> SegmentHandle:
        """Append a segment (taking ownership of it) and return its handle."""
        node = SegmentHandle(segment, self)
        self._link_after(node, self._tail)
        return node

    def add_points(self, p0: Point, p1: Point) -> SegmentHandle:
        """Append a segment from p0 to p1."""
        return self.add(Segment.between(p0, p1))

    def add_point(self, pt: Point) -> SegmentHandle:
        """Extend the path from its end point to pt.

        On an empty path a zero-length "point" segment is added instead.
        """
        if self.is_empty():
            return self.add(Segment(pt, Vector(0.0, 0.0)))
        return self.add_points(self.end_point, pt)

    def insert_before(self, handle: SegmentHandle, segment: Segment) -> SegmentHandle:
        """Insert a segment in front of handle."""
        self._check(handle)
        node = SegmentHandle(segment, self)
        self._link_after(node, handle._prev)
        return node

    def insert_after(self, handle: SegmentHandle, segment: Segment) -> SegmentHandle:
        """Insert a segment after handle."""
        self._check(handle)
        node = SegmentHandle(segment, self)
        self._link_after(node, handle)
        return node

    def add_rect(self, c1: Point, c2: Point, mark_space: float = 1.0) -> SegmentHandle | None:
        """Add a rectangle from two opposite corners.

        Args:
            c1: First corner
            c2: Opposite corner
            mark_space: Fraction of each 4mm dash that is drawn; 1.0 is solid

        Returns:
            Handle of the last segment added
        """
        sides = [
            Segment.between(Point(c1.x, c1.y), Point(c1.x, c2.y)),
            Segment.between(Point(c1.x, c2.y), Point(c2.x, c2.y)),
            Segment.between(Point(c2.x, c2.y), Point(c2.x, c1.y)),
            Segment.between(Point(c2.x, c1.y), Point(c1.x, c1.y)),
        ]
        self._add_sides(sides, mark_space)
        return self.last

    def add_rect_around(self, centre_line: Segment, width: float, mark_space: float = 1.0) -> SegmentHandle | None:
        """Add a rectangle of the given width centred on a line."""
        side1 = centre_line.copy()
        side2 = centre_line.copy()
        side1.move_sideways(width / 2.0)
        side2.move_sideways(-width / 2.0)
        sides = [
            Segment.between(side1.s0, side1.s1),
            Segment.between(side2.s0, side2.s1),
            Segment.between(side1.s0, side2.s0),
            Segment.between(side1.s1, side2.s1),
        ]
        self._add_sides(sides, mark_space)
        return self.last

    def _add_sides(self, sides: list[Segment], mark_space: float) -> None:
        if mark_space != 1.0:
            mark = 4.0 * mark_space
            space = 4.0 * (1.0 - mark_space)
            for side in sides:
                self.add_dotted(side, mark, space)
        else:
            for side in sides:
                self.add(side)

    def add_dotted(self, line: Segment, mark_len: float, space_len: float) -> None:
        """Add a line as a series of dashes."""
        length = line.length()
        if length == 0.0:
            return
        mark_t = mark_len / length
        space_t = space_len / length
        t = 0.0
        while t <= 1.0 - mark_t:
            self.add_points(line.point_at(t), line.point_at(t + mark_t))
            t += mark_t + space_t

    def add_ellipse(self, centre: Point, rx: float, ry: float, steps: int = 360) -> None:
        """Add an ellipse as a counter-clockwise polyline of `steps` segments."""
        for k in range(1, steps + 1):
            phi0 = 2.0 * math.pi * (k - 1) / steps
            phi1 = 2.0 * math.pi * k / steps
            self.add_points(
                Point(centre.x + rx * math.cos(phi0), centre.y + ry * math.sin(phi0)),
                Point(centre.x + rx * math.cos(phi1), centre.y + ry * math.sin(phi1)),
            )

    def move_back_to_front(self) -> None:
        """Move the last segment to the front of the path."""
        if self._tail is not None and self._tail is not self._head:
            self.move_before(self._tail, self._head)

    # Splicing and copying

    def splice(self, other: "Path") -> None:
        """Move every segment of other onto the end of this path."""
        for handle in list(other.handles()):
            self.splice_handle(handle, other)

    def splice_handle(self, handle: SegmentHandle, other: "Path") -> None:
        """Move a single segment from other onto the end of this path.

        The handle stays live and is owned by this path afterwards.
        """
        other._check(handle)
        other._unlink(handle)
        self._link_after(handle, self._tail)

    def splice_range(self, other: "Path", start: SegmentHandle, stop: SegmentHandle | None = None) -> None:
        """Move the run start..stop (stop excluded, None = to the end) from other."""
        other._check(start)
        node: SegmentHandle | None = start
        while node is not None and node is not stop:
            nxt = node._next
            self.splice_handle(node, other)
            node = nxt

    def copy(self) -> "Path":
        """Deep copy; the copy has its own segments and handles."""
        return Path(seg.copy() for seg in self)

    def extend_copy(self, other: "Path") -> None:
        """Append copies of other's segments to this path."""
        for seg in list(other):
            self.add(seg.copy())

    # Deleting elements

    def delete(self, handle: SegmentHandle) -> None:
        """Delete one segment; its handle becomes stale."""
        self._check(handle)
        self._unlink(handle)

    def delete_range(self, start: SegmentHandle, stop: SegmentHandle | None = None) -> None:
        """Delete start up to but not including stop (None = to the end)."""
        self._check(start)
        if stop is not None:
            self._check(stop)
        node: SegmentHandle | None = start
        while node is not None and node is not stop:
            nxt = node._next
            self._unlink(node)
            node = nxt

    def clear(self) -> None:
        """Delete all segments."""
        for handle in list(self.handles()):
            self._unlink(handle)

    def delete_duplicates(self) -> int:
        """Remove exact duplicate segments, keeping the first found.

        Returns:
            Number of segments deleted
        """
        seen: set[tuple[Point, Vector]] = set()
        count = 0
        for handle in list(self.handles()):
            key = (handle._segment.s0, handle._segment.v)
            if key in seen:
                self._unlink(handle)
                count += 1
            else:
                seen.add(key)
        return count

    def delete_zero_lengths(self, threshold: float = SNAP_LEN * 1.0e-3) -> int:
        """Remove segments shorter than threshold, returning the count."""
        count = 0
        for handle in list(self.handles()):
            if handle._segment.length() < threshold:
                self._unlink(handle)
                count += 1
        return count

    def remove_verticals(self) -> int:
        """Remove vertical segments, returning the count."""
        count = 0
        for handle in list(self.handles()):
            if handle._segment.is_vertical():
                self._unlink(handle)
                count += 1
        return count

    # Navigation

    @property
    def first(self) -> SegmentHandle | None:
        """Handle of the first segment (None if empty)."""
        return self._head

    @property
    def last(self) -> SegmentHandle | None:
        """Handle of the last segment (None if empty)."""
        return self._tail

    def next(self, handle: SegmentHandle) -> SegmentHandle | None:
        """Following handle, or None at the end."""
        self._check(handle)
        return handle._next

    def prev(self, handle: SegmentHandle) -> SegmentHandle | None:
        """Preceding handle, or None at the start."""
        self._check(handle)
        return handle._prev

    def next_circular(self, handle: SegmentHandle) -> SegmentHandle:
        """Following handle, wrapping from the last back to the first."""
        self._check(handle)
        if handle._next is None:
            assert self._head is not None
            return self._head
        return handle._next

    def prev_circular(self, handle: SegmentHandle) -> SegmentHandle:
        """Preceding handle, wrapping from the first round to the last."""
        self._check(handle)
        if handle._prev is None:
            assert self._tail is not None
            return self._tail
        return handle._prev

    def move_before(self, handle: SegmentHandle, target: SegmentHandle) -> None:
        """Reposition handle directly in front of target within this path."""
        self._check(handle)
        self._check(target)
        if handle is target:
            return
        self._unlink(handle)
        self._link_after(handle, target._prev)

    def move_after(self, handle: SegmentHandle, target: SegmentHandle) -> None:
        """Reposition handle directly after target within this path."""
        self._check(handle)
        self._check(target)
        if handle is target:
            return
        self._unlink(handle)
        self._link_after(handle, target)

    def index(self, handle: SegmentHandle) -> int:
        """Zero-based position of handle in the path."""
        self._check(handle)
        for i, node in enumerate(self.handles()):
            if node is handle:
                return i
        raise StaleHandleError("handle not found in path")

    def handle_at(self, index: int) -> SegmentHandle:
        """Handle at a zero-based position (negative counts from the end)."""
        if index < 0:
            index += self._size
        if not 0 <= index < self._size:
            raise IndexError(f"Path index {index} out of range")
        for i, node in enumerate(self.handles()):
            if i == index:
                return node
        raise IndexError(f"Path index {index} out of range")

    # Interrogation

    @property
    def start_point(self) -> Point:
        """First point of the first segment."""
        if self._head is None:
            raise EmptyPathError("get the start point")
        return self._head._segment.s0

    @property
    def end_point(self) -> Point:
        """Last point of the last segment."""
        if self._tail is None:
            raise EmptyPathError("get the end point")
        return self._tail._segment.s1

    def is_closed(self, snap: float = SNAP_LEN) -> bool:
        """True if the path ends where it starts, within snap."""
        if self.is_empty():
            return False
        return self.start_point.distance_to(self.end_point) <= snap

    def length(self) -> float:
        """Total length of all segments."""
        return sum(seg.length() for seg in self)

    def point_at_distance(self, dist: float) -> tuple[Point, SegmentHandle, float]:
        """Walk along the path by arc length.

        Distances beyond the total length wrap round modulo the length.

        Args:
            dist: Arc length from the start point

        Returns:
            Tuple of (point, handle of the segment holding it, parameter on that segment)

        Raises:
            EmptyPathError: If the path has no segments
        """
        if self._head is None:
            raise EmptyPathError("find a point along the length")

        if dist <= 0.0:
            return self.start_point, self._head, 0.0

        total = self.length()
        if total > 0.0:
            dist = math.fmod(dist, total)

        so_far = 0.0
        for handle in self.handles():
            seg_len = handle._segment.length()
            if seg_len == 0.0:
                continue
            t = (dist - so_far) / seg_len
            if t <= T_S1:
                return handle._segment.point_at(t), handle, t
            so_far += seg_len

        # Rounding left dist a hair beyond the end
        assert self._tail is not None
        return self.end_point, self._tail, T_S1

    def extremity(self, direction: Direction) -> float:
        """Furthest coordinate reached in a direction (0.0 for an empty path)."""
        if self.is_empty():
            return 0.0
        min_x, min_y, max_x, max_y = self.bounding_box()
        return {
            Direction.LEFT: min_x,
            Direction.RIGHT: max_x,
            Direction.UP: max_y,
            Direction.DOWN: min_y,
        }[direction]

    def extremity_point(self, direction: Direction) -> Point:
        """Point at the extremity in a direction.

        Where several endpoints tie, the midpoint of the tied span is returned.
        """
        if self.is_empty():
            return Point(0.0, 0.0)
        value = self.extremity(direction)
        points = [p for seg in self for p in (seg.s0, seg.s1)]
        if direction in (Direction.LEFT, Direction.RIGHT):
            ties = [p.y for p in points if p.x == value]
            return Point(value, (min(ties) + max(ties)) / 2.0)
        ties = [p.x for p in points if p.y == value]
        return Point((min(ties) + max(ties)) / 2.0, value)

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Bounding box of the path.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)
        """
        if self.is_empty():
            return (0.0, 0.0, 0.0, 0.0)
        xs = [p.x for seg in self for p in (seg.s0, seg.s1)]
        ys = [p.y for seg in self for p in (seg.s0, seg.s1)]
        return (min(xs), min(ys), max(xs), max(ys))

    def origin(self) -> Point:
        """Bottom-left corner of the bounding box."""
        min_x, min_y, _, _ = self.bounding_box()
        return Point(min_x, min_y)

    def average_centre(self) -> Point:
        """Average of the segment midpoints."""
        if self.is_empty():
            return Point(0.0, 0.0)
        mids = [seg.midpoint() for seg in self]
        return Point(sum(p.x for p in mids) / len(mids), sum(p.y for p in mids) / len(mids))

    def find_start_at(self, pt: Point, snap: float = SNAP_LEN) -> SegmentHandle | None:
        """First handle whose segment starts at pt."""
        for handle in self.handles():
            if handle._segment.s0.distance_to(pt) <= snap:
                return handle
        return None

    def find_end_at(self, pt: Point, snap: float = SNAP_LEN) -> SegmentHandle | None:
        """First handle whose segment ends at pt."""
        for handle in self.handles():
            if handle._segment.s1.distance_to(pt) <= snap:
                return handle
        return None

    def find_marker_square(self, size: float, delete: bool = False) -> Point | None:
        """Find a square of side `size` made of connected axis-aligned segments.

        Args:
            size: Side length of the marker square
            delete: Remove the square's four sides when found

        Returns:
            Centre of the square, or None if none was found
        """
        tolerance = 4 * SNAP_LEN
        candidates = [
            h
            for h in self.handles()
            if (h._segment.is_vertical() or h._segment.is_horizontal())
            and abs(h._segment.length() - size) <= tolerance
        ]
        for start in candidates:
            sides = [start]
            for cand in candidates:
                if cand in sides:
                    continue
                if any(cand._segment.is_contiguous_with(s._segment) for s in sides):
                    sides.append(cand)
                if len(sides) == 4:
                    pts = [p for s in sides for p in (s._segment.s0, s._segment.s1)]
                    centre = Point(sum(p.x for p in pts) / 8.0, sum(p.y for p in pts) / 8.0)
                    if delete:
                        for s in sides:
                            self.delete(s)
                    return centre
        return None

    # Whole-path manipulation

    def translate(self, dx: float, dy: float) -> None:
        """Move every segment by (dx, dy)."""
        for seg in self:
            seg.translate(dx, dy)

    def rotate(self, pivot: Point, rads: float) -> None:
        """Rotate every segment about pivot."""
        for seg in self:
            seg.rotate(pivot, rads)

    def mirror_x(self) -> None:
        """Mirror about x = 0."""
        for seg in self:
            seg.mirror_x()

    def mirror_y(self) -> None:
        """Mirror about y = 0."""
        for seg in self:
            seg.mirror_y()

    def scale(self, factor: float) -> None:
        """Scale every point about the origin."""
        for seg in self:
            seg.set_points(
                Point(seg.s0.x * factor, seg.s0.y * factor),
                Point(seg.s1.x * factor, seg.s1.y * factor),
            )

    def scale_x_from_left(self, factor: float) -> None:
        """Scale in x keeping the left extremity where it is."""
        left = self.extremity(Direction.LEFT)
        for seg in self:
            seg.set_points(
                Point(left + (seg.s0.x - left) * factor, seg.s0.y),
                Point(left + (seg.s1.x - left) * factor, seg.s1.y),
            )

    def move_extremity_to(self, direction: Direction, pos: float) -> None:
        """Translate so that the extremity in direction lands on pos."""
        if self.is_empty():
            return
        offset = pos - self.extremity(direction)
        if direction in (Direction.UP, Direction.DOWN):
            self.translate(0.0, offset)
        else:
            self.translate(offset, 0.0)

    def move_origin_to(self, loc: Point) -> None:
        """Translate so the bottom-left of the bounding box is at loc."""
        self.move_extremity_to(Direction.LEFT, loc.x)
        self.move_extremity_to(Direction.DOWN, loc.y)

    def extend_ends(self, mm: float = 1.0) -> None:
        """Lengthen the first and last segments of an open path by mm."""
        if self.is_empty() or self.start_point == self.end_point:
            return
        assert self._head is not None and self._tail is not None
        self._head._segment.extend_start(mm)
        self._tail._segment.extend_end(mm)
