"""Core geometry algorithms for lightform.

This module contains the planar-geometry kernel and the lightening engine
built on it:

- Path topology (stitching, winding, regularisation, simplification)
- Intersections between segments and paths
- Offset contour tracing
- Path surgery (gaps, slots, splits)
- Notch detection and removal
- Anchor and brace generation and validation

Kernel operations never raise for degenerate input during normal use; the
only fatal error is TopologyError, which signals a broken kernel invariant.

Key functions:
- regularise: Stitch a path and remove degeneracies
- trace_at_offset: Build a contour at a signed distance
- path_intersect: Crossings of a line with a path
- cut_slot / make_gap: Cut material out of a path
- split_along_line_rejoin: Divide a path and close both halves

Key classes:
- LiteEngine: The lightening pipeline
- LiteResult: Output of one run
"""

from lightform.core.engine import LiteEngine, LiteResult, ProgressSink
from lightform.core.intersect import (
    bot_intersect,
    dir_intersect,
    first_intersect,
    path_intersect,
    paths_intersect,
    surrounds_point,
    top_bot_intersect,
    top_intersect,
)
from lightform.core.notches import detect_notches, remove_notches
from lightform.core.offset import trace_at_offset
from lightform.core.surgery import (
    cut_slot,
    make_gap,
    remove_extremity,
    slot_width,
    split_along_line,
    split_along_line_rejoin,
    start_at_direction,
)
from lightform.core.topology import (
    is_clockwise,
    make_path,
    regularise,
    regularise_no_delete,
    simplify,
    trace_a_path,
)

__all__ = [
    "LiteEngine",
    "LiteResult",
    "ProgressSink",
    "bot_intersect",
    "cut_slot",
    "detect_notches",
    "dir_intersect",
    "first_intersect",
    "is_clockwise",
    "make_gap",
    "make_path",
    "path_intersect",
    "paths_intersect",
    "regularise",
    "regularise_no_delete",
    "remove_extremity",
    "remove_notches",
    "simplify",
    "slot_width",
    "split_along_line",
    "split_along_line_rejoin",
    "start_at_direction",
    "surrounds_point",
    "top_bot_intersect",
    "top_intersect",
    "trace_a_path",
    "trace_at_offset",
]
