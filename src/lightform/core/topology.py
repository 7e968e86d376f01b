"""Path topology: stitching loose segments into contiguous paths.

This module turns an unordered bag of segments into contiguous paths:
- trace_a_path: Greedily grow one path from a starting segment
- make_path: Partition a path's segments into closed and open sub-paths,
  forcing closed ones clockwise
- is_clockwise: Winding test by accumulated turning angle
- regularise: Stitch and delete duplicate/zero-length segments to a fixpoint
- simplify: Merge runs of nearly-collinear segments

All operations mutate the Path they are given in place; handles to segments
that survive stay valid, handles to deleted segments become stale.
"""

import math

import structlog

from lightform.core.geometry import is_equal_within_percentage
from lightform.domain import SIMPLIFY_ERR, SMALL_NUM, SNAP_LEN, Path, Segment, SegmentHandle
from lightform.exceptions import TopologyError

logger = structlog.get_logger(__name__)


def trace_a_path(
    path: Path,
    start: SegmentHandle,
    snap: float = SNAP_LEN,
) -> tuple[bool, SegmentHandle, SegmentHandle | None]:
    """Grow a contiguous run of segments starting at `start`.

    The segments after the current run are scanned in order for one that
    joins either end of the run within snap distance. A match is flipped if
    it points the wrong way, snapped exactly onto the joint and moved next
    to the run. Growth stops when nothing more joins (open) or when an
    appended segment reaches back to the run's start point (closed). The
    closing joint is snapped exactly onto the start point.

    Args:
        path: Path holding the segments; reordered in place
        start: First segment of the run
        snap: Maximum gap treated as a joint

    Returns:
        Tuple of (is_closed, first handle of the run, handle after the run or
        None if the run reaches the end of the path)
    """
    first = start
    end = start
    candidate: SegmentHandle | None = start
    closed = False

    while True:
        assert candidate is not None
        candidate = path.next(candidate)
        if candidate is None:
            break

        seg = candidate.segment
        end_pt = end.segment.s1
        start_pt = first.segment.s0

        if end_pt.distance_to(seg.s1) <= snap:
            seg.reverse()

        if end_pt.distance_to(seg.s0) <= snap:
            seg.set_start(end_pt)
            path.move_after(candidate, end)
            end = candidate
            if start_pt.distance_to(seg.s1) <= snap:
                seg.set_end(start_pt)
                closed = True
                break
            continue

        if start_pt.distance_to(seg.s0) <= snap:
            seg.reverse()

        if start_pt.distance_to(seg.s1) <= snap:
            seg.set_end(start_pt)
            path.move_before(candidate, first)
            first = candidate
            candidate = end

    return closed, first, path.next(end)


def _run(path: Path, start: SegmentHandle, stop: SegmentHandle | None) -> list[SegmentHandle]:
    """Handles from start up to but not including stop."""
    run: list[SegmentHandle] = []
    node: SegmentHandle | None = start
    while node is not None and node is not stop:
        run.append(node)
        node = path.next(node)
    return run


def is_clockwise(
    path: Path,
    start: SegmentHandle | None = None,
    stop: SegmentHandle | None = None,
    log: structlog.stdlib.BoundLogger | None = None,
) -> bool:
    """Decide whether the closed run start..stop winds clockwise.

    Turning angles between successive non-degenerate segments are summed
    round the loop. A simple loop sums to +/- 2*pi; if the magnitude is
    within 5% of that the sign decides. Otherwise the loop probably crosses
    itself and a count of left versus right turns is used instead, with a
    warning. That fallback is an approximation, not a winding number.

    Args:
        path: Path holding the run
        start: First segment of the run (default: first of path)
        stop: Segment after the run (default: None, the end of path)
        log: Diagnostics logger

    Returns:
        True if the run is clockwise
    """
    log = log if log is not None else logger
    if start is None:
        start = path.first
    if start is None:
        return False

    run = _run(path, start, stop)
    prev_seg = run[-1].segment
    total = 0.0
    pos_neg = 0
    for handle in run:
        seg = handle.segment
        if seg.length() == 0.0:
            continue
        if prev_seg.length() > 0.0:
            ang = prev_seg.angle_to(seg)
            pos_neg += 1 if ang >= 0.0 else -1
            total += ang
        prev_seg = seg

    if is_equal_within_percentage(2.0 * math.pi, abs(total), 5.0):
        return total < 0.0

    log.warning(
        "Turning angle is not a multiple of 2pi, using turn count",
        turning=round(total, 3),
        turn_count=pos_neg,
    )
    return pos_neg < 0


def make_path(
    path: Path,
    snap: float = SNAP_LEN,
    keep_open: bool = False,
    collect: bool = False,
    log: structlog.stdlib.BoundLogger | None = None,
) -> tuple[list[Path], list[Path]]:
    """Sort a path's segments into maximal closed and open sub-paths.

    The segments are reordered in place so each sub-path is contiguous.
    Closed sub-paths are made clockwise. Open sub-paths are deleted unless
    keep_open is set.

    Args:
        path: Path to reorganise in place
        snap: Maximum gap treated as a joint
        keep_open: Keep open sub-paths instead of deleting them
        collect: Return copies of the sub-paths found
        log: Diagnostics logger

    Returns:
        Tuple of (closed sub-path copies, open sub-path copies); both empty
        unless collect is set

    Raises:
        TopologyError: If a closed sub-path cannot be re-closed after reversal
    """
    closed_paths: list[Path] = []
    open_paths: list[Path] = []

    start = path.first
    while start is not None:
        closed, start, stop = trace_a_path(path, start, snap)

        if not closed and not keep_open:
            path.delete_range(start, stop)
            start = stop
            continue

        if closed and not is_clockwise(path, start, stop, log=log):
            for handle in _run(path, start, stop):
                handle.segment.reverse()
            closed, start, stop = trace_a_path(path, start, snap)
            if not closed:
                raise TopologyError("Unable to make a closed path after reversing its segments")

        if collect:
            sub = Path(h.segment.copy() for h in _run(path, start, stop))
            (closed_paths if closed else open_paths).append(sub)

        start = stop

    return closed_paths, open_paths


def regularise(
    path: Path,
    snap: float = SNAP_LEN,
    log: structlog.stdlib.BoundLogger | None = None,
) -> None:
    """Stitch, then delete duplicates and zero-length segments until stable.

    Deleting segments can reopen tiny gaps, so the cycle repeats until a pass
    deletes nothing. Open sub-paths are discarded; closed ones end up
    clockwise.
    """
    while True:
        make_path(path, snap, log=log)
        dupes = path.delete_duplicates()
        zeros = path.delete_zero_lengths(SMALL_NUM)
        if dupes == 0 and zeros == 0:
            break


def regularise_no_delete(
    path: Path,
    snap: float = SNAP_LEN,
    log: structlog.stdlib.BoundLogger | None = None,
) -> tuple[list[Path], list[Path]]:
    """Stitch without deleting anything, keeping open sub-paths."""
    return make_path(path, snap, keep_open=True, collect=True, log=log)


def _max_distance(run: list[SegmentHandle], line: Segment) -> float:
    err = 0.0
    for handle in run:
        seg = handle.segment
        err = max(err, line.distance_to_point(seg.s0), line.distance_to_point(seg.s1))
    return err


def simplify(path: Path, error: float = SIMPLIFY_ERR) -> int:
    """Merge runs of connected segments that stay within `error` of a straight line.

    On a closed path the last run is also merged across the seam into the
    first one.

    Args:
        path: Path to simplify in place
        error: Largest allowed deviation of any merged point

    Returns:
        Number of segments deleted
    """
    start_size = len(path)
    start = path.first

    while start is not None:
        end = start
        while True:
            cand = path.next(end)
            if cand is None:
                break
            if end.segment.s1.distance_to(cand.segment.s0) > SNAP_LEN:
                break
            merged = Segment.between(start.segment.s0, cand.segment.s1)
            if _max_distance(_run(path, start, path.next(cand)), merged) >= error:
                break
            end = cand

        end.segment.set_start(start.segment.s0)
        if end is not start:
            path.delete_range(start, end)
        start = path.next(end)

    # A closed path may start part way along a straight run
    first = path.first
    last = path.last
    if first is not None and last is not None and len(path) > 3 and path.is_closed():
        merged = Segment.between(last.segment.s0, first.segment.s1)
        if _max_distance([last, first], merged) < error:
            first.segment.set_start(last.segment.s0)
            path.delete(last)

    return start_size - len(path)
