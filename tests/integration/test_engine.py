"""Integration tests for the lightening engine.

Each test runs the full pipeline on a small outline and inspects the
composite result by re-stitching it into closed and open sub-paths.
"""

import math
from unittest.mock import Mock, call

import pytest

from lightform.cli.shapes import build_ellipse, build_rib
from lightform.config import LiteConfig
from lightform.core.engine import TOTAL_STEPS, LiteEngine
from lightform.core.surgery import cut_slot
from lightform.core.topology import regularise, regularise_no_delete
from lightform.domain import Direction, Path, Point


def rect(width: float, height: float) -> Path:
    """Clockwise rectangle with its bottom-left corner at the origin."""
    return Path.from_points(
        [Point(0.0, 0.0), Point(0.0, height), Point(width, height), Point(width, 0.0)],
        close=True,
    )


def sub_paths(path: Path) -> tuple[list[Path], list[Path]]:
    """Closed and open sub-paths of a copy of path."""
    return regularise_no_delete(path.copy())


@pytest.fixture
def square() -> Path:
    """40mm square outline."""
    return rect(40.0, 40.0)


@pytest.fixture
def slotted_rect() -> Path:
    """80 x 40 outline with a 6mm deep slot in its top edge."""
    path = rect(80.0, 40.0)
    cut_slot(path, Direction.UP, 40.0, 6.0, 6.0)
    regularise(path)
    return path


class TestLightenRun:
    """Tests for plain (non-girder) runs."""

    def test_outline_and_hole(self, square: Path) -> None:
        """Test a plain run gives the outline plus one lightening hole."""
        result = LiteEngine(LiteConfig(rim_spacing=5.0)).run(square)

        assert result.ok
        closed, open_ = sub_paths(result.path)
        assert len(closed) == 2
        assert open_ == []

        boxes = sorted(p.bounding_box() for p in closed)
        assert boxes[0] == pytest.approx((0.0, 0.0, 40.0, 40.0))
        assert boxes[1] == pytest.approx((5.0, 5.0, 35.0, 35.0))

    def test_progress_reported(self, square: Path) -> None:
        """Test the progress sink is called once per macro step."""
        progress = Mock()

        result = LiteEngine(LiteConfig(rim_spacing=5.0), progress=progress).run(square)

        assert progress.call_count == TOTAL_STEPS
        assert progress.call_args_list == [call(step, TOTAL_STEPS) for step in range(1, TOTAL_STEPS + 1)]
        assert result.stats.progress_steps == TOTAL_STEPS

    def test_input_not_modified(self, square: Path) -> None:
        """Test the caller's outline is left alone."""
        before = [(s.s0, s.v) for s in square]
        LiteEngine(LiteConfig(rim_spacing=5.0)).run(square)
        assert [(s.s0, s.v) for s in square] == before

    def test_invalid_input(self) -> None:
        """Test an outline with too few segments fails fast."""
        progress = Mock()
        line = Path.from_points([Point(0.0, 0.0), Point(10.0, 0.0), Point(10.0, 10.0)])

        result = LiteEngine(progress=progress).run(line)

        assert not result.ok
        assert len(result.path) <= 2
        assert result.stats.warnings
        progress.assert_not_called()

    def test_rim_spacing_consumes_outline(self) -> None:
        """Test a rim spacing wider than the shape leaves only the outline."""
        result = LiteEngine(LiteConfig(rim_spacing=6.0)).run(rect(10.0, 10.0))

        assert not result.ok
        closed, _ = sub_paths(result.path)
        assert len(closed) == 1

    def test_lighten_disabled(self, square: Path) -> None:
        """Test the outline is returned alone when lightening is off."""
        result = LiteEngine(LiteConfig(lighten=False)).run(square)
        closed, _ = sub_paths(result.path)
        assert len(closed) == 1

    def test_stats(self, square: Path) -> None:
        """Test run statistics are collected."""
        result = LiteEngine(LiteConfig(rim_spacing=5.0)).run(square)

        assert result.stats.input_segments == 4
        assert result.stats.notches_found == 0
        assert result.stats.extra_rim_spacing == 0.0
        assert result.stats.duration_seconds >= 0.0


class TestNotchesAndClearance:
    """Tests for notch detection and inner-rim clearance."""

    def test_notch_detect_grows_spacing(self, slotted_rect: Path) -> None:
        """Test the hole follows the de-notched outline and clears the slot."""
        config = LiteConfig(rim_spacing=5.0, notch_detect=True)

        result = LiteEngine(config).run(slotted_rect)

        assert result.ok
        assert result.stats.notches_found == 1
        assert result.stats.extra_rim_spacing == pytest.approx(2.0)
        assert not result.construction.is_empty()

        closed, _ = sub_paths(result.path)
        assert len(closed) == 2
        hole = min(closed, key=lambda p: p.length())
        assert hole.bounding_box() == pytest.approx((7.0, 7.0, 73.0, 33.0))

    def test_show_construction(self, slotted_rect: Path) -> None:
        """Test construction geometry is appended on request."""
        hidden = LiteEngine(LiteConfig(rim_spacing=5.0, notch_detect=True)).run(slotted_rect)
        shown = LiteEngine(LiteConfig(rim_spacing=5.0, notch_detect=True, show_construction=True)).run(
            slotted_rect
        )

        assert len(shown.path) == len(hidden.path) + len(hidden.construction)

    def test_clearance_growth_gives_up(self, slotted_rect: Path) -> None:
        """Test the run fails when the extra spacing allowed cannot clear the slot."""
        config = LiteConfig(rim_spacing=5.0, notch_detect=True, max_clearance_growth=1.0)

        result = LiteEngine(config).run(slotted_rect)

        assert not result.ok
        assert result.stats.extra_rim_spacing == pytest.approx(1.0)
        assert "inner rim does not clear the outer rim" in result.stats.warnings


class TestSplits:
    """Tests for splitting the assembled result."""

    def test_h_split(self, square: Path) -> None:
        """Test a horizontal split gives two rings moved apart."""
        config = LiteConfig(rim_spacing=5.0, h_split=True, h_split_y=20.0)

        result = LiteEngine(config).run(square)

        closed, _ = sub_paths(result.path)
        assert len(closed) == 2
        min_x, min_y, max_x, max_y = result.path.bounding_box()
        assert max_y == pytest.approx(40.0 + config.split_offset)
        assert min_y == pytest.approx(0.0)

    def test_v_split(self, square: Path) -> None:
        """Test a vertical split at the centre moves the right half along."""
        config = LiteConfig(rim_spacing=5.0, v_split=True)

        result = LiteEngine(config).run(square)

        closed, _ = sub_paths(result.path)
        assert len(closed) == 2
        _, _, max_x, _ = result.path.bounding_box()
        assert max_x == pytest.approx(40.0 + config.split_offset)


class TestGirderRun:
    """Tests for runs with bracing."""

    @pytest.fixture
    def disc(self) -> Path:
        """100mm polyline circle."""
        return build_ellipse(100.0, 100.0, steps=72)

    @pytest.fixture
    def girder_config(self) -> LiteConfig:
        """Bracing parameters sized for the disc."""
        return LiteConfig(
            girder=True,
            rim_spacing=8.0,
            outer_width=2.0,
            inner_width=2.0,
            girder_width=2.0,
            anchor_spacing=25.0,
        )

    def test_places_anchors_and_braces(self, disc: Path, girder_config: LiteConfig) -> None:
        """Test anchors are spaced round the rim and braces drawn."""
        result = LiteEngine(girder_config).run(disc)

        assert result.stats.anchors_placed == math.floor(disc.length() / girder_config.anchor_spacing + 0.5)
        assert result.stats.braces_valid > 0
        assert result.stats.gaps_opened > 0
        assert not result.construction.is_empty()

    def test_girder_output_contains_braces(self, disc: Path, girder_config: LiteConfig) -> None:
        """Test the girder output holds more geometry than a plain run."""
        plain = LiteEngine(LiteConfig(rim_spacing=8.0)).run(disc)
        girder = LiteEngine(girder_config).run(disc)

        assert len(girder.path) > len(plain.path)

    def test_progress_reported(self, disc: Path, girder_config: LiteConfig) -> None:
        """Test girder runs report the same eight steps."""
        progress = Mock()
        LiteEngine(girder_config, progress=progress).run(disc)
        assert progress.call_count == TOTAL_STEPS

    def test_demo_rib_bisectors_reach_inner_rim(self) -> None:
        """Test every anchor on the square-ended demo rib finds the inner rim."""
        config = LiteConfig(
            girder=True,
            rim_spacing=6.0,
            outer_width=2.0,
            inner_width=1.5,
            girder_width=2.0,
            anchor_spacing=25.0,
        )

        result = LiteEngine(config).run(build_rib(200.0))

        assert result.stats.anchors_placed > 0
        assert result.stats.anchors_failed == 0
        assert result.stats.braces_valid > 0
