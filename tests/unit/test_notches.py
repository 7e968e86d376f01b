"""Unit tests for notch detection and removal."""

import pytest

from lightform.core.notches import detect_notches, remove_notches
from lightform.core.surgery import cut_slot
from lightform.core.topology import regularise
from lightform.domain import Direction, Path, Point


def slotted_rect() -> Path:
    """40 x 20 rectangle with a 6 x 4 slot cut into its top edge at x = 20."""
    path = Path.from_points(
        [Point(0.0, 0.0), Point(0.0, 20.0), Point(40.0, 20.0), Point(40.0, 0.0)],
        close=True,
    )
    cut_slot(path, Direction.UP, 20.0, 6.0, 4.0)
    regularise(path)
    return path


def v_notched_rect() -> Path:
    """40 x 20 rectangle with a triangular notch in its top edge."""
    return Path.from_points(
        [
            Point(0.0, 0.0),
            Point(0.0, 20.0),
            Point(17.0, 20.0),
            Point(20.0, 16.0),
            Point(23.0, 20.0),
            Point(40.0, 20.0),
            Point(40.0, 0.0),
        ],
        close=True,
    )


class TestDetectNotches:
    """Tests for detect_notches."""

    def test_square_notch(self) -> None:
        """Test a slot is found as one three-segment notch."""
        notches = detect_notches(slotted_rect())

        assert len(notches) == 1
        notch = notches[0]
        assert len(notch.handles) == 3
        assert notch.begin.x == pytest.approx(17.0)
        assert notch.end.x == pytest.approx(23.0)
        assert notch.begin.y == pytest.approx(20.0)

    def test_triangular_notch(self) -> None:
        """Test a V notch is found as one two-segment notch."""
        notches = detect_notches(v_notched_rect())

        assert len(notches) == 1
        assert len(notches[0].handles) == 2
        assert notches[0].begin == Point(17.0, 20.0)
        assert notches[0].end == Point(23.0, 20.0)

    def test_plain_rectangle(self) -> None:
        """Test convex corners are never notches."""
        path = Path.from_points(
            [Point(0.0, 0.0), Point(0.0, 20.0), Point(40.0, 20.0), Point(40.0, 0.0)],
            close=True,
        )
        assert detect_notches(path) == []

    def test_empty_path(self) -> None:
        """Test an empty path has no notches."""
        assert detect_notches(Path()) == []


class TestRemoveNotches:
    """Tests for remove_notches."""

    def test_bridges_square_notch(self) -> None:
        """Test one notch gives one record and one bridging segment."""
        path = slotted_rect()
        before = len(path)

        removed = remove_notches(path)

        assert len(removed) == 1
        record = removed[0]
        assert len(path) == before - 2
        assert record.replacement is not None
        assert record.replacement.alive
        assert all(not h.alive for h in record.handles[1:])
        assert record.replacement_segment is not None
        assert record.replacement_segment.length() == pytest.approx(6.0)
        assert path.length() == pytest.approx(120.0)
        assert path.is_closed()

    def test_distance_locates_bridge(self) -> None:
        """Test the record's distance walks to the middle of the bridge."""
        path = slotted_rect()
        record = remove_notches(path)[0]

        pt, handle, _ = path.point_at_distance(record.distance)

        assert handle is record.replacement
        assert pt.x == pytest.approx(20.0)
        assert pt.y == pytest.approx(20.0)

    def test_bridges_triangular_notch(self) -> None:
        """Test a V notch is bridged by one segment."""
        path = v_notched_rect()

        removed = remove_notches(path)

        assert len(removed) == 1
        assert len(path) == 6
        assert path.length() == pytest.approx(120.0)

    def test_no_notches(self) -> None:
        """Test a plain outline is left as it was."""
        path = Path.from_points(
            [Point(0.0, 0.0), Point(0.0, 20.0), Point(40.0, 20.0), Point(40.0, 0.0)],
            close=True,
        )
        assert remove_notches(path) == []
        assert len(path) == 4
