"""Offset contour tracing.

Builds a new closed path at a signed perpendicular distance from an existing
one. Positive distances grow the shape, negative distances shrink it.

The trace works by sampling short "offsetting lines" that run from the
source path out to where the offset contour should be:
1. Linear lines sampled along each segment
2. Radial fans at the corners where the offset contour must go round
3. Lines ending too close to another source segment are discarded
4. Lines crossing a later line are discarded
5. Runs of samples along one segment are reduced to their two ends
6. The surviving end points are joined in order, closed and simplified
"""

import math
from dataclasses import dataclass, field

import structlog

from lightform.config import GeometryConfig
from lightform.core.topology import regularise, simplify
from lightform.domain import Path, Segment

logger = structlog.get_logger(__name__)

T_CLAMP = 1.0e-6
RADIAL_TRIM = 0.001


@dataclass(slots=True)
class OffsetCandidate:
    """One offsetting line from the source path to a candidate contour point.

    Attributes:
        line: Runs from the source path to the candidate point (its s1)
        source_index: Position of the source segment in the regularised path
        radial: True for corner fan lines, False for lines sampled along a segment
        valid: False once the candidate has been rejected
    """

    line: Segment
    source_index: int
    radial: bool = False
    valid: bool = True
    bounds: tuple[float, float, float, float] = field(init=False)

    def __post_init__(self) -> None:
        p0 = self.line.s0
        p1 = self.line.s1
        self.bounds = (min(p0.x, p1.x), min(p0.y, p1.y), max(p0.x, p1.x), max(p0.y, p1.y))

    def may_cross(self, other: "OffsetCandidate") -> bool:
        """Cheap bounding-box overlap test."""
        a = self.bounds
        b = other.bounds
        return a[0] <= b[2] and b[0] <= a[2] and a[1] <= b[3] and b[1] <= a[3]


def _linear_candidates(seg: Segment, index: int, offset: float, config: GeometryConfig) -> list[OffsetCandidate]:
    shifted = seg.copy()
    shifted.move_sideways(offset)
    nsteps = max(math.ceil(seg.length() / config.trace_step), config.min_trace_steps)

    candidates = []
    for step in range(nsteps + 1):
        t = step / nsteps
        t = min(max(t, T_CLAMP), 1.0 - T_CLAMP)
        candidates.append(OffsetCandidate(Segment.between(seg.point_at(t), shifted.point_at(t)), index))
    return candidates


def _corner_candidates(
    seg: Segment,
    following: Segment,
    index: int,
    offset: float,
    config: GeometryConfig,
) -> list[OffsetCandidate]:
    """Fan of radial lines round the joint at the end of seg.

    Only corners that open away from the offset side get a fan; at the others
    the linear samples of the two segments already overlap.
    """
    if following.length() == 0.0:
        return []

    a_step = math.radians(config.fan_step_degrees)
    a0 = seg.angle()
    a1 = following.angle()
    turn = seg.angle_to(following)
    nsteps = math.floor(abs(turn) / a_step)

    if turn > 0.0 and offset < 0.0:
        a0 -= math.pi / 2.0
        a1 -= math.pi / 2.0
        while a0 < 0.0:
            a0 += 2.0 * math.pi
        while a1 < a0:
            a1 += 2.0 * math.pi
        signed_step = a_step
    elif turn < 0.0 and offset > 0.0:
        a0 += math.pi / 2.0
        a1 += math.pi / 2.0
        while a0 > 0.0:
            a0 -= 2.0 * math.pi
        while a1 > a0:
            a1 -= 2.0 * math.pi
        signed_step = -a_step
    else:
        return []

    corner = seg.s1
    candidates = []
    for k in range(1, nsteps):
        ray = Segment.polar(corner, abs(offset), a0 + k * signed_step)
        ray.set_start(ray.point_at(RADIAL_TRIM))
        candidates.append(OffsetCandidate(ray, index, radial=True))
    return candidates


def _invalidate_close(
    candidates: list[OffsetCandidate],
    source: list[Segment],
    offset: float,
    tolerance: float,
) -> int:
    limit = abs(offset) - tolerance
    count = 0
    for cand in candidates:
        end = cand.line.s1
        for index, seg in enumerate(source):
            if index != cand.source_index and seg.distance_to_point(end) < limit:
                cand.valid = False
                count += 1
                break
    return count


def _invalidate_crossing(candidates: list[OffsetCandidate]) -> int:
    count = 0
    for i, ref in enumerate(candidates):
        for cmp in candidates[i + 1 :]:
            if not (ref.valid and cmp.valid):
                continue
            if ref.may_cross(cmp) and ref.line.intersect(cmp.line) is not None:
                ref.valid = False
                count += 1
                break
    return count


def _invalidate_redundant(candidates: list[OffsetCandidate]) -> int:
    """Collapse runs of linear candidates from one source segment to their ends.

    Runs are taken over the candidates still valid on entry, so a run of any
    length keeps exactly its first and last members.
    """
    survivors = [cand for cand in candidates if cand.valid]
    count = 0
    for prv, ref, nxt in zip(survivors, survivors[1:], survivors[2:]):
        same_source = prv.source_index == ref.source_index == nxt.source_index
        if same_source and not (prv.radial or ref.radial or nxt.radial):
            ref.valid = False
            count += 1
    return count


def trace_at_offset(
    path: Path,
    offset: float,
    config: GeometryConfig | None = None,
    log: structlog.stdlib.BoundLogger | None = None,
) -> Path:
    """Trace a new closed contour at a signed distance from a path.

    The result is best effort: narrow inlets may pinch shut, and an extreme
    offset can leave residual self-intersection. An offset that consumes the
    whole shape gives an empty path.

    Args:
        path: Source outline; it is not modified
        offset: Distance to move outwards (positive) or inwards (negative)
        config: Kernel step sizes and tolerances
        log: Diagnostics logger

    Returns:
        New regularised, clockwise path
    """
    config = config or GeometryConfig()
    log = log if log is not None else logger

    source_path = path.copy()
    regularise(source_path, config.snap_len, log=log)
    source = source_path.segments()

    candidates: list[OffsetCandidate] = []
    for index, seg in enumerate(source):
        if seg.length() < config.snap_len:
            continue
        candidates.extend(_linear_candidates(seg, index, offset, config))
        following = source[(index + 1) % len(source)]
        candidates.extend(_corner_candidates(seg, following, index, offset, config))

    close = _invalidate_close(candidates, source, offset, config.small_num)
    crossing = _invalidate_crossing(candidates)
    redundant = _invalidate_redundant(candidates)

    log.debug(
        "Traced offset candidates",
        offset=offset,
        candidates=len(candidates),
        radial=sum(1 for c in candidates if c.radial),
        too_close=close,
        crossing=crossing,
        redundant=redundant,
    )

    traced = Path()
    for cand in candidates:
        if cand.valid:
            traced.add_point(cand.line.s1)

    if traced.is_empty():
        return traced

    traced.add_points(traced.start_point, traced.end_point)
    regularise(traced, config.snap_len, log=log)
    simplify(traced, config.simplify_error)
    return traced

