"""Intersections between segments and paths.

Every query here is a pure read: no path is mutated.
"""

from lightform.domain import LARGE, Direction, Path, PathIntersect, Point, Segment, SegmentHandle, Vector
from lightform.exceptions import DegenerateGeometryError


def _extend_past_bounds(path: Path, query: Segment) -> Segment:
    """Stretch a query line until both ends lie outside the path's bounding box.

    Each pass makes the line three times longer about its middle third, which
    approximates an unbounded line without using infinities.
    """
    if query.length() == 0.0:
        raise DegenerateGeometryError("Cannot extrapolate a zero-length query line")

    min_x, min_y, max_x, max_y = path.bounding_box()
    line = query.copy()
    while True:
        p0 = line.point_at(-1.0)
        p1 = line.point_at(2.0)
        line.set_points(p0, p1)
        x_ok = (p0.x < min_x and p1.x > max_x) or (p1.x < min_x and p0.x > max_x)
        y_ok = (p0.y < min_y and p1.y > max_y) or (p1.y < min_y and p0.y > max_y)
        if x_ok or y_ok:
            return line


def path_intersect(path: Path, query: Segment, extrapolate: bool = False) -> list[PathIntersect]:
    """Find every crossing of a query line with the segments of a path.

    Args:
        path: Path to test
        query: Line to intersect with the path
        extrapolate: Treat the query as an unbounded line. The path's own
            segments are never extrapolated.

    Returns:
        Intersections sorted by parameter along the query line
    """
    if path.is_empty():
        return []

    line = _extend_past_bounds(path, query) if extrapolate else query

    found: list[PathIntersect] = []
    for handle in path.handles():
        pt = handle.segment.intersect(line)
        if pt is not None:
            found.append(PathIntersect(query.t_for_point(pt), handle, pt))

    found.sort(key=lambda isect: isect.t)
    return found


def first_intersect(
    path: Path,
    query: Segment,
    extrapolate: bool = False,
    start: SegmentHandle | None = None,
) -> tuple[SegmentHandle, Point] | None:
    """First path segment, in path order, that meets the query line.

    Args:
        path: Path to search
        query: Line to intersect with
        extrapolate: Treat both lines as unbounded
        start: Segment to start searching from (default: first)

    Returns:
        Tuple of (handle, point) or None if nothing meets the line
    """
    node = start if start is not None else path.first
    while node is not None:
        pt = node.segment.intersect(query, extrapolate)
        if pt is not None:
            return node, pt
        node = path.next(node)
    return None


def paths_intersect(a: Path, b: Path) -> bool:
    """True if any segment of b crosses any segment of a."""
    return any(first_intersect(a, seg) is not None for seg in b)


def surrounds_point(path: Path, pt: Point) -> bool:
    """True if pt lies inside the closed path.

    A long diagonal ray is cast from the point; an odd number of crossings
    means the point is inside.
    """
    ray = Segment(pt, Vector(LARGE, LARGE))
    crossings = sum(1 for seg in path if ray.intersect(seg) is not None)
    return crossings % 2 == 1


def top_bot_intersect(path: Path, x: float) -> tuple[PathIntersect, PathIntersect] | None:
    """Highest and lowest crossings of the vertical line at x.

    Args:
        path: Path to sample
        x: X coordinate of the vertical line

    Returns:
        Tuple of (upper, lower) intersections, or None if the line misses
    """
    ref = Segment.between(Point(x, 0.0), Point(x, 1.0))
    isects = path_intersect(path, ref, extrapolate=True)
    if not isects:
        return None
    return isects[-1], isects[0]


def top_intersect(path: Path, x: float) -> PathIntersect | None:
    """Highest crossing of the vertical line at x."""
    result = top_bot_intersect(path, x)
    return result[0] if result is not None else None


def bot_intersect(path: Path, x: float) -> PathIntersect | None:
    """Lowest crossing of the vertical line at x."""
    result = top_bot_intersect(path, x)
    return result[1] if result is not None else None


def dir_intersect(path: Path, direction: Direction, x: float) -> PathIntersect | None:
    """Crossing of the vertical line at x on the UP or DOWN side of the path.

    LEFT and RIGHT have no vertical-line meaning and give None.
    """
    if direction == Direction.UP:
        return top_intersect(path, x)
    if direction == Direction.DOWN:
        return bot_intersect(path, x)
    return None
