"""Run-scoped records produced by the lightening engine.

These records hold SegmentHandles into rim paths they do not own. They are
created and discarded within one LiteEngine run, and a handle inside them is
only trusted until the referenced path is next mutated: the path raises
StaleHandleError if a deleted segment is dereferenced.
"""

from dataclasses import dataclass, field

from lightform.domain.path import SegmentHandle
from lightform.domain.primitives import Point, Segment


@dataclass
class NotchRecord:
    """A small notch found in an outline.

    Attributes:
        handles: Consecutive segments forming the notch, in path order
        begin: Point where the notch leaves the outline
        end: Point where the notch rejoins the outline
        replacement: Handle of the bridging segment once the notch is removed
        replacement_segment: Copy of the bridging segment
        distance: Arc length from the path start to the middle of the bridge
    """

    handles: list[SegmentHandle]
    begin: Point
    end: Point
    replacement: SegmentHandle | None = None
    replacement_segment: Segment | None = None
    distance: float = 0.0


@dataclass
class BraceEdge:
    """One physical edge of a brace strut.

    Attributes:
        line: The strut edge running from the outer rim to the inner rim
        outer_handle: Outer-rim segment the edge starts on
        outer_point: Where the edge meets the outer rim
        inner_handle: Inner-rim segment the edge ends on
        inner_point: Where the edge meets the inner rim
    """

    line: Segment = field(default_factory=Segment)
    outer_handle: SegmentHandle | None = None
    outer_point: Point = field(default_factory=Point)
    inner_handle: SegmentHandle | None = None
    inner_point: Point = field(default_factory=Point)


@dataclass
class Brace:
    """A strut between the outer and inner rims.

    Attributes:
        reference: Bisector line from the anchor to the inner rim
        edges: The two physical edges of the strut
        valid: False once the brace has been rejected
        angle: Initial brace angle estimate (radians)
    """

    reference: Segment = field(default_factory=Segment)
    edges: list[BraceEdge] = field(default_factory=lambda: [BraceEdge(), BraceEdge()])
    valid: bool = True
    angle: float = 0.0


@dataclass
class Anchor:
    """A point on the outer rim from which two braces radiate.

    Attributes:
        rim_point: Anchor location on the rim reference path
        rim_line: Copy of the rim segment the anchor sits on
        braces: Braces leaning backwards (0) and forwards (1) along the rim
        failed: True if no inner-rim intersection could be found for its bisector
    """

    rim_point: Point
    rim_line: Segment
    braces: list[Brace] = field(default_factory=lambda: [Brace(), Brace()])
    failed: bool = False


@dataclass
class Gap:
    """An interval to be removed from a rim path.

    Attributes:
        l0: Segment where the gap starts
        p0: Point on l0 where the gap starts
        l1: Segment where the gap ends
        p1: Point on l1 where the gap ends
    """

    l0: SegmentHandle
    p0: Point
    l1: SegmentHandle
    p1: Point
