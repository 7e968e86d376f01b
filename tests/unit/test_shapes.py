"""Unit tests for the CLI demo outlines."""

import pytest

from lightform.cli.shapes import DemoShape, build_ellipse, build_rect, build_rib, build_shape
from lightform.core.notches import remove_notches
from lightform.core.topology import is_clockwise


class TestDemoShapes:
    """Tests for the demo outline builders."""

    def test_rect(self) -> None:
        """Test the rectangle is closed and clockwise."""
        path = build_rect(40.0, 30.0)
        assert len(path) == 4
        assert path.is_closed()
        assert is_clockwise(path)
        assert path.bounding_box() == pytest.approx((0.0, 0.0, 40.0, 30.0))

    def test_ellipse(self) -> None:
        """Test the ellipse is made clockwise and fills its box."""
        path = build_ellipse(100.0, 50.0, steps=72)
        assert path.is_closed()
        assert is_clockwise(path)
        min_x, min_y, max_x, max_y = path.bounding_box()
        assert max_x - min_x == pytest.approx(100.0, abs=0.1)
        assert max_y - min_y == pytest.approx(50.0, abs=0.2)

    def test_rib_has_spar_notch(self) -> None:
        """Test the rib is closed and carries a bridgeable spar notch."""
        rib = build_rib(200.0)
        assert rib.is_closed()
        assert is_clockwise(rib)
        min_x, _, max_x, _ = rib.bounding_box()
        assert min_x == pytest.approx(0.0)
        assert max_x == pytest.approx(140.0)
        assert len(remove_notches(rib.copy())) >= 1

    def test_rib_without_spar(self) -> None:
        """Test a rib with no spar has no notches."""
        assert remove_notches(build_rib(200.0, spar_width=0.0)) == []

    def test_rib_square_end(self) -> None:
        """Test the rib ends in a vertical edge at the trailing-edge cut."""
        rib = build_rib(200.0, spar_width=0.0)
        ends = [seg for seg in rib if seg.s0.x == pytest.approx(140.0) and seg.s1.x == pytest.approx(140.0)]
        assert len(ends) == 1
        assert ends[0].length() > 10.0

    def test_full_section(self) -> None:
        """Test a trailing edge at the full chord keeps the pointed section."""
        rib = build_rib(200.0, spar_width=0.0, trailing_edge=1.0)
        _, _, max_x, _ = rib.bounding_box()
        assert max_x == pytest.approx(200.0)

    @pytest.mark.parametrize("shape", list(DemoShape))
    def test_build_shape(self, shape: DemoShape) -> None:
        """Test every demo shape builds a closed outline."""
        path = build_shape(shape, 120.0, 20.0)
        assert not path.is_empty()
        assert path.is_closed()
