"""Notch detection and removal.

A notch is a small square or triangular indentation in an outline, such as
a slot cut for a spar. Notches are found by the signs of the turning angles
along five consecutive segments, and can be bridged with one straight
segment so that later offsetting ignores them.
"""

import math

import structlog

from lightform.core.geometry import turning_angle
from lightform.core.topology import regularise
from lightform.domain import NotchRecord, Path

logger = structlog.get_logger(__name__)

NOTCH_ANGLE = math.radians(20.0)


def detect_notches(path: Path, threshold: float = NOTCH_ANGLE) -> list[NotchRecord]:
    """Find square and triangular notches in a closed path.

    For each segment the turning angles into the following four segments
    are examined. A square notch turns right, left, left, right; a
    triangular one turns right, left, right. Each turn must exceed the
    threshold.

    Args:
        path: Clockwise closed path to search
        threshold: Smallest turn that counts as a corner (radians)

    Returns:
        Notch records in path order
    """
    notches: list[NotchRecord] = []
    if path.is_empty():
        return notches

    for handle in path.handles():
        run = [handle]
        for _ in range(4):
            run.append(path.next_circular(run[-1]))
        angles = [turning_angle(a.segment, b.segment) for a, b in zip(run, run[1:])]

        right = [a < -threshold for a in angles]
        left = [a > threshold for a in angles]

        if right[0] and left[1] and left[2] and right[3]:
            notches.append(NotchRecord(run[1:4], run[0].segment.s1, run[4].segment.s0))
        elif right[0] and left[1] and right[2]:
            notches.append(NotchRecord(run[1:3], run[0].segment.s1, run[3].segment.s0))

    return notches


def remove_notches(
    path: Path,
    threshold: float = NOTCH_ANGLE,
    log: structlog.stdlib.BoundLogger | None = None,
) -> list[NotchRecord]:
    """Bridge every notch in a path with a single straight segment.

    The first segment of each notch is re-pointed to run straight across the
    notch mouth and the rest of the notch is deleted. Once the path has been
    re-stitched, each record's distance is the arc length from the path
    start to the middle of its bridge.

    Args:
        path: Path to modify in place
        threshold: Smallest turn that counts as a corner (radians)
        log: Diagnostics logger

    Returns:
        Records of the notches that were bridged
    """
    log = log if log is not None else logger
    found = detect_notches(path, threshold)

    removed: list[NotchRecord] = []
    for notch in found:
        if not all(h.alive for h in notch.handles):
            log.debug("Skipping notch overlapping one already bridged", begin=notch.begin.to_tuple())
            continue
        bridge = notch.handles[0]
        bridge.segment.set_points(notch.begin, notch.end)
        notch.replacement = bridge
        notch.replacement_segment = bridge.segment.copy()
        for handle in notch.handles[1:]:
            path.delete(handle)
        removed.append(notch)

    regularise(path, log=log)

    for index, notch in enumerate(removed):
        bridge = notch.replacement
        if bridge is None or not bridge.alive:
            log.warning("Notch bridge lost during regularisation", notch=index)
            continue
        distance = 0.0
        for handle in path.handles():
            if handle is bridge:
                distance += handle.segment.length() / 2.0
                break
            distance += handle.segment.length()
        notch.distance = distance
        log.debug("Notch bridged", notch=index, distance=round(distance, 2))

    return removed
