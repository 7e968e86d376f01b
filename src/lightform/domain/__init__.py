"""Domain models for lightform.

This module contains the geometric value types, the Path container with its
stable segment handles, and the records a lightening run builds on top of
rim paths.

Key classes:
- Point, Vector: Immutable coordinates and displacements
- Segment: A mutable parametric line segment
- Path: Ordered, open or closed collection of segments
- SegmentHandle: Stable reference to one segment in a Path
- PathIntersect: A crossing between a query line and a path
- NotchRecord, Anchor, Brace, BraceEdge, Gap: Lightening-run records
"""

from lightform.domain.path import Path, PathIntersect, SegmentHandle
from lightform.domain.primitives import (
    LARGE,
    SIMPLIFY_ERR,
    SMALL_NUM,
    SNAP_LEN,
    Direction,
    Point,
    Segment,
    SlotStyle,
    Vector,
)
from lightform.domain.records import Anchor, Brace, BraceEdge, Gap, NotchRecord

__all__: list[str] = [
    # Constants
    "LARGE",
    "SIMPLIFY_ERR",
    "SMALL_NUM",
    "SNAP_LEN",
    # Enums
    "Direction",
    "SlotStyle",
    # Core types
    "Point",
    "Vector",
    "Segment",
    "Path",
    "PathIntersect",
    "SegmentHandle",
    # Run records
    "Anchor",
    "Brace",
    "BraceEdge",
    "Gap",
    "NotchRecord",
]
