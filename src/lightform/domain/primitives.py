"""Core geometric types for planar line work.

This module defines the fundamental geometric types used throughout lightform:
- Point: A 2D coordinate
- Vector: A 2D displacement
- Segment: A mutable parametric line segment P(t) = s0 + t * v
- Direction: Compass directions used by extremity and slot queries
- SlotStyle: How the bottom of a cut slot is oriented

All lengths are in millimetres and all angles in radians unless a name says
otherwise.
"""

import math
from dataclasses import dataclass, field
from enum import Enum

from lightform.exceptions import DegenerateGeometryError

SNAP_LEN = 1e-4
SMALL_NUM = SNAP_LEN * 1.0e-3
SIMPLIFY_ERR = 0.01
LARGE = 3e3

T_S1 = 1.0
T_CENTRE = 0.5


class Direction(str, Enum):
    """Compass direction in drawing coordinates (y grows upwards)."""

    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


class SlotStyle(str, Enum):
    """Orientation of a slot bottom.

    - VERTICAL: walls are vertical and the bottom is horizontal
    - CENTRE_GRADIENT: the bottom follows the outline gradient at the slot centre
    """

    VERTICAL = "vertical"
    CENTRE_GRADIENT = "centre_gradient"


@dataclass(frozen=True, slots=True)
class Point:
    """A point in 2D space.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate
        y: Y coordinate
    """

    x: float = 0.0
    y: float = 0.0

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple.

        Returns:
            Tuple of (x, y) coordinates
        """
        return (self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def midpoint(self, other: "Point") -> "Point":
        """Point halfway between this point and another."""
        return Point((self.x + other.x) / 2.0, (self.y + other.y) / 2.0)

    def offset(self, dx: float, dy: float) -> "Point":
        """Return this point moved by (dx, dy)."""
        return Point(self.x + dx, self.y + dy)

    def rotated(self, pivot: "Point", rads: float) -> "Point":
        """Return this point rotated counter-clockwise about pivot.

        Args:
            pivot: Centre of rotation
            rads: Rotation angle in radians

        Returns:
            The rotated point
        """
        c = math.cos(rads)
        s = math.sin(rads)
        vx = self.x - pivot.x
        vy = self.y - pivot.y
        return Point(pivot.x + vx * c - vy * s, pivot.y + vx * s + vy * c)


@dataclass(frozen=True, slots=True)
class Vector:
    """A displacement in 2D space.

    Attributes:
        dx: Change in x
        dy: Change in y
    """

    dx: float = 0.0
    dy: float = 0.0

    def length(self) -> float:
        """Magnitude of the vector."""
        return math.hypot(self.dx, self.dy)

    def dot(self, other: "Vector") -> float:
        """Dot product with another vector."""
        return self.dx * other.dx + self.dy * other.dy

    def cross(self, other: "Vector") -> float:
        """Perpendicular (2D cross) product with another vector.

        Positive when other points to the left of this vector.
        """
        return self.dx * other.dy - other.dx * self.dy

    def scaled(self, factor: float) -> "Vector":
        """Return the vector multiplied by factor."""
        return Vector(self.dx * factor, self.dy * factor)


@dataclass(slots=True)
class Segment:
    """A mutable line segment in parametric form P(t) = s0 + t * v.

    Values of t in [0, 1] lie on the physical segment; values outside that
    range extrapolate along the segment's line.

    Segments are the atomic unit owned by a Path. Algorithms that keep
    long-lived references into a Path hold its SegmentHandle, not the Segment.

    Attributes:
        s0: Start point
        v: Direction vector from start to end
    """

    s0: Point = field(default_factory=Point)
    v: Vector = field(default_factory=Vector)

    @classmethod
    def between(cls, p0: Point, p1: Point) -> "Segment":
        """Create a segment running from p0 to p1."""
        return cls(p0, Vector(p1.x - p0.x, p1.y - p0.y))

    @classmethod
    def polar(cls, s0: Point, length: float, angle: float) -> "Segment":
        """Create a segment from a start point, a length and an angle."""
        return cls(s0, Vector(length * math.cos(angle), length * math.sin(angle)))

    def copy(self) -> "Segment":
        """Return an independent copy of this segment."""
        return Segment(self.s0, self.v)

    # Interrogation

    @property
    def s1(self) -> Point:
        """End point of the segment."""
        return Point(self.s0.x + self.v.dx, self.s0.y + self.v.dy)

    def length(self) -> float:
        """Length of the segment."""
        return self.v.length()

    def angle(self) -> float:
        """Direction of the segment in radians, in (-pi, pi].

        Near-vertical segments are reported as exactly +/- pi/2.
        """
        if abs(self.v.dx) < SNAP_LEN:
            return math.pi / 2.0 if self.v.dy > 0 else -math.pi / 2.0
        return math.atan2(self.v.dy, self.v.dx)

    def angle_to(self, other: "Segment") -> float:
        """Signed turning angle from this segment's direction to other's.

        Returns 0.0 if either segment has zero length.
        """
        if self.length() > 0.0 and other.length() > 0.0:
            return math.atan2(self.v.cross(other.v), self.v.dot(other.v))
        return 0.0

    def point_at(self, t: float) -> Point:
        """Point at parameter t along the segment's line."""
        return Point(self.s0.x + t * self.v.dx, self.s0.y + t * self.v.dy)

    def midpoint(self) -> Point:
        """Point halfway along the segment."""
        return self.point_at(T_CENTRE)

    def t_for_x(self, x: float) -> float:
        """Parameter at which the line reaches X = x (0.0 for vertical lines)."""
        if self.is_vertical():
            return 0.0
        return (x - self.s0.x) / self.v.dx

    def t_for_y(self, y: float) -> float:
        """Parameter at which the line reaches Y = y (0.0 for horizontal lines)."""
        if self.is_horizontal():
            return 0.0
        return (y - self.s0.y) / self.v.dy

    def t_for_point(self, pt: Point) -> float:
        """Parameter of a point assumed to lie on the line."""
        if abs(self.v.dx) > abs(self.v.dy):
            return self.t_for_x(pt.x)
        return self.t_for_y(pt.y)

    def is_vertical(self) -> bool:
        """True if the segment has (almost) no x extent."""
        return abs(self.v.dx) < SNAP_LEN

    def is_horizontal(self) -> bool:
        """True if the segment has (almost) no y extent."""
        return abs(self.v.dy) < SNAP_LEN

    def is_same_as(self, other: "Segment") -> bool:
        """True if both segments have exactly the same start and vector."""
        return self.s0 == other.s0 and self.v == other.v

    def is_contiguous_with(self, other: "Segment", snap: float = SNAP_LEN) -> bool:
        """True if any endpoint of this segment touches any endpoint of other."""
        mine = (self.s0, self.s1)
        theirs = (other.s0, other.s1)
        return any(a.distance_to(b) <= snap for a in mine for b in theirs)

    def in_collinear_range(self, pt: Point) -> bool:
        """True if a point known to be on the line lies within the segment's extent."""
        if not self.is_vertical():
            a, b, p = self.s0.x, self.s1.x, pt.x
        else:
            a, b, p = self.s0.y, self.s1.y, pt.y
        return min(a, b) <= p <= max(a, b)

    def intersect(self, other: "Segment", extrapolate: bool = False) -> Point | None:
        """Find where this segment meets another.

        Handles skew lines, parallel non-collinear lines (no result), and
        parallel collinear lines including zero-length "point" segments.

        Args:
            other: Segment to test against
            extrapolate: Treat both segments as unbounded lines

        Returns:
            The intersection point, or None if there is none
        """
        w = Vector(self.s0.x - other.s0.x, self.s0.y - other.s0.y)
        denom = self.v.cross(other.v)

        if abs(denom) < SMALL_NUM:
            # Parallel; only collinear lines can meet
            if abs(self.v.cross(w)) > SMALL_NUM or abs(other.v.cross(w)) > SMALL_NUM:
                return None

            if extrapolate:
                s1 = self.s1
                o1 = other.s1
                return Point(
                    (self.s0.x + other.s0.x + s1.x + o1.x) / 4.0,
                    (self.s0.y + other.s0.y + s1.y + o1.y) / 4.0,
                )

            mine_is_point = self.v.dot(self.v) == 0.0
            theirs_is_point = other.v.dot(other.v) == 0.0

            if mine_is_point and theirs_is_point:
                if self.is_contiguous_with(other):
                    return self.s0
                return None

            if mine_is_point:
                return self.s0 if other.in_collinear_range(self.s0) else None

            if theirs_is_point:
                return other.s0 if self.in_collinear_range(other.s0) else None

            # Collinear segments: reduce to a 1-D overlap along other
            s1 = self.s1
            w2 = Vector(s1.x - other.s0.x, s1.y - other.s0.y)
            if other.v.dx != 0.0:
                t1 = w.dx / other.v.dx
                t2 = w2.dx / other.v.dx
            else:
                t1 = w.dy / other.v.dy
                t2 = w2.dy / other.v.dy
            if t1 > t2:
                t1, t2 = t2, t1
            if t1 > 1.0 or t2 < 0.0:
                return None
            return other.point_at(max(t1, 0.0))

        t_self = other.v.cross(w) / denom
        t_other = self.v.cross(w) / denom
        if not extrapolate and (t_self < 0.0 or t_self > 1.0 or t_other < 0.0 or t_other > 1.0):
            return None
        return self.point_at(t_self)

    def distance_to_point(self, pt: Point) -> float:
        """Minimum distance from the physical segment to a point.

        Projects onto the infinite line, then clamps the parameter to [0, 1].
        """
        len_sq = self.v.dot(self.v)
        if len_sq == 0.0:
            return self.s0.distance_to(pt)
        t = ((pt.x - self.s0.x) * self.v.dx + (pt.y - self.s0.y) * self.v.dy) / len_sq
        t = max(0.0, min(1.0, t))
        return self.point_at(t).distance_to(pt)

    # Manipulation

    def set_points(self, p0: Point, p1: Point) -> None:
        """Redefine the segment to run from p0 to p1."""
        self.s0 = p0
        self.v = Vector(p1.x - p0.x, p1.y - p0.y)

    def set_start(self, p0: Point) -> None:
        """Move the start point, keeping the end point fixed."""
        self.set_points(p0, self.s1)

    def set_end(self, p1: Point) -> None:
        """Move the end point, keeping the start point fixed."""
        self.set_points(self.s0, p1)

    def translate(self, dx: float, dy: float) -> None:
        """Move the segment by (dx, dy)."""
        self.s0 = self.s0.offset(dx, dy)

    def move_sideways(self, dist: float) -> None:
        """Move the segment perpendicular to itself.

        Positive distances move it to the left of its direction of travel,
        which is outwards for a clockwise path.
        """
        length = self.length()
        if length == 0.0:
            raise DegenerateGeometryError("Cannot move a zero-length segment sideways")
        scale = dist / length
        self.translate(-self.v.dy * scale, self.v.dx * scale)

    def rotate(self, pivot: Point, rads: float) -> None:
        """Rotate the segment counter-clockwise about pivot."""
        self.set_points(self.s0.rotated(pivot, rads), self.s1.rotated(pivot, rads))

    def mirror_x(self) -> None:
        """Mirror about the vertical line x = 0."""
        self.s0 = Point(-self.s0.x, self.s0.y)
        self.v = Vector(-self.v.dx, self.v.dy)

    def mirror_y(self) -> None:
        """Mirror about the horizontal line y = 0."""
        self.s0 = Point(self.s0.x, -self.s0.y)
        self.v = Vector(self.v.dx, -self.v.dy)

    def reverse(self) -> None:
        """Swap the ends of the segment."""
        self.s0 = self.s1
        self.v = Vector(-self.v.dx, -self.v.dy)

    def set_length(self, length: float) -> None:
        """Keep s0 fixed and scale the segment to a new length."""
        current = self.length()
        if current == 0.0:
            raise DegenerateGeometryError("Cannot set the length of a zero-length segment")
        self.v = self.v.scaled(length / current)

    def extend_start(self, mm: float) -> None:
        """Extend the start of the segment backwards by mm (no-op if tiny)."""
        length = self.length()
        if length < SNAP_LEN:
            return
        self.set_points(self.point_at(-mm / length), self.s1)

    def extend_end(self, mm: float) -> None:
        """Extend the end of the segment forwards by mm (no-op if tiny)."""
        length = self.length()
        if length < SNAP_LEN:
            return
        self.set_points(self.s0, self.point_at(1.0 + mm / length))

    def extend(self, mm: float) -> None:
        """Extend both ends by mm."""
        self.extend_start(mm)
        self.extend_end(mm)
