"""Lightening engine.

Turns a closed outline into a lightened part: the outline itself, an inner
lightening hole, and optionally a girder of braces spanning the hole.

Pipeline (each macro step reports progress once):
1. Outer rim outer: the outline, plus a de-notched reference copy
2. Outer rim inner: the outline traced inwards by the outer rim width
3. Inner rim outer: traced inwards by the rim spacing, grown until clear
4. Inner rim inner: the lightening-hole boundary
5. Anchors: placed round the rim with bisectors aimed at the inner rim
6. Braces: built, validated, drawn and cut into both rims
7. Bracing complete
8. Assembly: rims and braces combined, then optionally split
"""

import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from lightform.config import GeometryConfig, LiteConfig
from lightform.core.bracing import (
    draw_valid_braces,
    generate_anchor_points,
    generate_braces,
    invalidate_crossing_braces,
    invalidate_narrow_brace_pairs,
    open_brace_gaps,
)
from lightform.core.intersect import paths_intersect
from lightform.core.notches import remove_notches
from lightform.core.offset import trace_at_offset
from lightform.core.surgery import split_along_line_rejoin, start_at_direction
from lightform.core.topology import regularise
from lightform.domain import Anchor, Direction, NotchRecord, Path, Point, Segment, Vector
from lightform.exceptions import IntersectionNotFoundError
from lightform.utils.logging import RunLogger, RunStats

ProgressSink = Callable[[int, int], None]

TOTAL_STEPS = 8


@dataclass
class LiteResult:
    """Outcome of one lightening run.

    Attributes:
        path: Composite output path (rims, braces and any construction lines)
        ok: False if any stage degraded or the input was unusable
        stats: Counters collected during the run
        construction: Construction geometry, whether or not it was shown
    """

    path: Path
    ok: bool
    stats: RunStats
    construction: Path = field(default_factory=Path)


@dataclass
class _RunState:
    """Working paths and records for a single run."""

    inp: Path
    oro: Path = field(default_factory=Path)
    non: Path = field(default_factory=Path)
    reforo: Path = field(default_factory=Path)
    ori: Path = field(default_factory=Path)
    refori: Path = field(default_factory=Path)
    iro: Path = field(default_factory=Path)
    iri: Path = field(default_factory=Path)
    bro: Path = field(default_factory=Path)
    construct: Path = field(default_factory=Path)
    notches: list[NotchRecord] = field(default_factory=list)
    anchors: list[Anchor] = field(default_factory=list)
    ok: bool = True


class LiteEngine:
    """Builds rims and bracing inside a closed outline.

    The engine keeps no state between runs: each call to run() works on
    its own copies, so independent runs never share mutable data.

    Attributes:
        config: Run parameters and feature toggles
        geometry: Kernel tolerances and step sizes
    """

    def __init__(
        self,
        config: LiteConfig | None = None,
        geometry: GeometryConfig | None = None,
        progress: ProgressSink | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Run parameters (defaults if None)
            geometry: Kernel settings (defaults if None)
            progress: Called as progress(step, total) after each macro step
            logger: Diagnostics sink for the run
        """
        self.config = config or LiteConfig()
        self.geometry = geometry or GeometryConfig()
        self._progress = progress
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def run(self, path: Path) -> LiteResult:
        """Lighten a closed outline.

        Args:
            path: The outline; it is not modified

        Returns:
            LiteResult with the composite path and success flag
        """
        cfg = self.config
        run_log = RunLogger(self._logger.bind(girder=cfg.girder, lighten=cfg.lighten))
        run_log.stats.start_time = time.perf_counter()

        state = _RunState(inp=path.copy())
        regularise(state.inp, self.geometry.snap_len, log=run_log.log)
        run_log.log_run_start(len(state.inp))

        if len(state.inp) <= 2:
            run_log.log_invalid_input(len(state.inp))
            return self._finish(run_log, LiteResult(state.inp.copy(), False, run_log.stats))

        self._create_outer_rim_outer(state, run_log)
        self._step(1, "outer rim outer", run_log)

        if cfg.girder:
            self._create_outer_rim_inner(state, run_log)
        self._step(2, "outer rim inner", run_log)

        if cfg.lighten:
            self._create_inner_rim_outer(state, state.ori if cfg.girder else state.oro, run_log)
        self._step(3, "inner rim outer", run_log)

        self._create_inner_rim_inner(state, cfg.inner_width if cfg.girder else 0.0, run_log)
        self._step(4, "inner rim inner", run_log)

        if cfg.girder:
            placed = self._place_anchors(state, run_log)
            self._step(5, "anchors", run_log)
            if placed:
                self._build_braces(state, run_log)
            self._step(6, "braces", run_log)
        else:
            self._step(5, "anchors", run_log)
            self._step(6, "braces", run_log)
        self._step(7, "bracing", run_log)

        outline = state.oro.copy()
        outline.extend_copy(state.iri)

        inners = state.ori.copy()
        inners.extend_copy(state.iro)
        inners.extend_copy(state.bro)
        self._step(8, "assembly", run_log)

        if cfg.girder:
            if cfg.h_split:
                outline, inners = self._girder_h_split(outline, inners, cfg.h_split_y)
            if cfg.v_split:
                outline, inners = self._girder_v_split(outline, inners)
        else:
            if cfg.h_split:
                outline = self._simple_h_split(outline)
            if cfg.v_split:
                outline = self._simple_v_split(outline)

        out = outline
        if cfg.girder:
            out.extend_copy(inners)
        if cfg.show_construction:
            out.extend_copy(state.construct)

        return self._finish(run_log, LiteResult(out, state.ok, run_log.stats, state.construct))

    def _finish(self, run_log: RunLogger, result: LiteResult) -> LiteResult:
        run_log.stats.end_time = time.perf_counter()
        run_log.log_run_complete(result.ok, run_log.stats.duration_seconds * 1000.0)
        return result

    def _step(self, step: int, stage: str, run_log: RunLogger) -> None:
        run_log.log_stage(stage, step, TOTAL_STEPS)
        if self._progress is not None:
            self._progress(step, TOTAL_STEPS)

    def _trace(self, path: Path, offset: float, run_log: RunLogger) -> Path:
        return trace_at_offset(path, offset, self.geometry, log=run_log.log)

    # Rims

    def _create_outer_rim_outer(self, state: _RunState, run_log: RunLogger) -> None:
        state.oro = state.inp.copy()
        state.non = state.inp.copy()
        state.notches = remove_notches(state.non, log=run_log.log)
        run_log.log_notches(len(state.notches))

        if self.config.notch_detect:
            state.reforo = state.non.copy()
            state.construct.extend_copy(state.reforo)
        else:
            state.reforo = state.inp.copy()

    def _create_outer_rim_inner(self, state: _RunState, run_log: RunLogger) -> None:
        width = self.config.outer_width
        state.ori = self._trace(state.inp, -width, run_log)
        state.refori = self._trace(state.reforo, -width, run_log)
        if state.refori.is_empty():
            run_log.log.warning("Outer rim width consumes the outline", outer_width=width)
            state.ok = False
            return
        try:
            start_at_direction(state.refori, self.config.start_direction)
        except IntersectionNotFoundError as e:
            run_log.log.warning("Cannot start the reference at the requested edge", error=str(e))
            state.ok = False
        regularise(state.refori, self.geometry.snap_len, log=run_log.log)

    def _create_inner_rim_outer(self, state: _RunState, clearance: Path, run_log: RunLogger) -> None:
        cfg = self.config
        extra = 0.0
        clear = True
        while True:
            state.iro = self._trace(state.reforo, -(cfg.rim_spacing + extra), run_log)
            if not paths_intersect(state.iro, clearance):
                break
            if extra >= cfg.max_clearance_growth:
                clear = False
                break
            extra += cfg.clearance_step
        run_log.log_clearance(extra, clear)

        if not clear:
            state.ok = False
        if state.iro.is_empty():
            run_log.log.warning("Rim spacing consumes the outline", rim_spacing=cfg.rim_spacing + extra)
            state.ok = False

    def _create_inner_rim_inner(self, state: _RunState, separation: float, run_log: RunLogger) -> None:
        state.iri = state.iro.copy()
        regularise(state.iri, self.geometry.snap_len, log=run_log.log)
        if separation > 0.0:
            state.iri = self._trace(state.iri, -separation, run_log)

    # Bracing

    def _place_anchors(self, state: _RunState, run_log: RunLogger) -> bool:
        cfg = self.config
        if state.refori.is_empty() or state.iro.is_empty():
            run_log.log.warning("No rim to anchor braces on")
            state.ok = False
            return False

        notches = state.notches if cfg.anchor_at_notches else None
        anchors, ok = generate_anchor_points(
            state.reforo,
            state.refori,
            state.iro,
            cfg.rim_spacing,
            cfg.anchor_spacing,
            state.construct,
            denotched=state.non,
            notches=notches,
            max_rotation=cfg.max_bisector_rotation,
            log=run_log.log,
        )
        state.anchors = anchors

        spacing = state.refori.length() / len(anchors) if anchors else 0.0
        run_log.log_anchors(len(anchors), spacing, bool(notches))
        for k, anchor in enumerate(anchors):
            if anchor.failed:
                run_log.log_anchor_failed(k)

        if not ok:
            state.ok = False
        return bool(anchors)

    def _build_braces(self, state: _RunState, run_log: RunLogger) -> None:
        generate_braces(state.anchors, state.iro, state.ori, self.config.girder_width)

        for k, b in invalidate_narrow_brace_pairs(state.anchors, math.radians(self.config.min_brace_angle)):
            run_log.log_brace_invalidated(k, b, "narrow")
        for k, b in invalidate_crossing_braces(state.anchors):
            run_log.log_brace_invalidated(k, b, "crossing")

        run_log.log_braces_drawn(draw_valid_braces(state.anchors, state.bro))

        for rim, inner, name in ((state.ori, False, "outer"), (state.iro, True, "inner")):
            opened, failed = open_brace_gaps(state.anchors, rim, inner, log=run_log.log)
            run_log.log_gaps(name, opened, failed)
            if failed:
                state.ok = False

    # Splits

    def _simple_h_split(self, outline: Path) -> Path:
        line = Segment(Point(0.0, self.config.h_split_y), Vector(1.0, 0.0))
        top, bottom, _ = split_along_line_rejoin(outline, line)
        top.translate(0.0, self.config.split_offset)
        top.splice(bottom)
        return top

    def _simple_v_split(self, outline: Path) -> Path:
        centre = (outline.extremity(Direction.LEFT) + outline.extremity(Direction.RIGHT)) / 2.0
        line = Segment(Point(centre, 0.0), Vector(0.0, 1.0))
        left, right, _ = split_along_line_rejoin(outline, line)
        right.translate(self.config.split_offset, 0.0)
        left.splice(right)
        return left

    def _girder_h_split(self, outline: Path, inners: Path, y: float) -> tuple[Path, Path]:
        width = self.config.outer_width
        offset = self.config.split_offset

        top, bottom, _ = split_along_line_rejoin(outline, Segment(Point(0.0, y), Vector(1.0, 0.0)))
        top_inner, _, _ = split_along_line_rejoin(inners, Segment(Point(0.0, y + width), Vector(1.0, 0.0)))
        _, bottom_inner, _ = split_along_line_rejoin(inners, Segment(Point(0.0, y - width), Vector(1.0, 0.0)))

        top.translate(0.0, offset)
        top_inner.translate(0.0, offset)

        top.splice(bottom)
        top_inner.splice(bottom_inner)
        return top, top_inner

    def _girder_v_split(self, outline: Path, inners: Path) -> tuple[Path, Path]:
        origin = Point(0.0, 0.0)
        outline.rotate(origin, math.pi / 2.0)
        inners.rotate(origin, math.pi / 2.0)

        y = (outline.extremity(Direction.UP) + outline.extremity(Direction.DOWN)) / 2.0
        outline, inners = self._girder_h_split(outline, inners, y)

        outline.rotate(origin, -math.pi / 2.0)
        inners.rotate(origin, -math.pi / 2.0)
        return outline, inners
