"""Demo outlines for the CLI.

The engine has no file formats, so the CLI builds its input from a few
parametric shapes.
"""

import math
from enum import Enum

from lightform.core.surgery import cut_slot, remove_extremity
from lightform.core.topology import regularise
from lightform.domain import Direction, Path, Point, SlotStyle


class DemoShape(str, Enum):
    """Outlines the CLI can build."""

    RECT = "rect"
    ELLIPSE = "ellipse"
    RIB = "rib"


def build_rect(width: float, height: float) -> Path:
    """Rectangle with its bottom-left corner at the origin."""
    path = Path()
    path.add_rect(Point(0.0, 0.0), Point(width, height))
    regularise(path)
    return path


def build_ellipse(width: float, height: float, steps: int = 180) -> Path:
    """Ellipse centred in a width x height box at the origin."""
    path = Path()
    path.add_ellipse(Point(width / 2.0, height / 2.0), width / 2.0, height / 2.0, steps)
    regularise(path)
    return path


def _thickness(x: float, t: float) -> float:
    """Half-thickness of a symmetric four-digit section with a closed trailing edge."""
    return 5.0 * t * (
        0.2969 * math.sqrt(x) - 0.1260 * x - 0.3516 * x**2 + 0.2843 * x**3 - 0.1036 * x**4
    )


def build_rib(
    chord: float,
    thickness: float = 0.12,
    spar_width: float = 6.0,
    spar_depth: float = 4.0,
    spar_position: float = 0.3,
    trailing_edge: float = 0.7,
    points: int = 60,
) -> Path:
    """Symmetric wing rib with a spar notch cut into its top edge.

    The rib ends square at trailing_edge, where it would butt against a
    trailing-edge strip, so the section never thins to a point.

    Args:
        chord: Rib length in mm
        thickness: Maximum thickness as a fraction of the chord
        spar_width: Width of the spar notch (0 for none)
        spar_depth: Depth of the spar notch
        spar_position: Notch centre as a fraction of the chord
        trailing_edge: Square end as a fraction of the chord (1 for a full section)
        points: Samples along each surface

    Returns:
        Closed clockwise rib outline
    """
    xs = [(1.0 - math.cos(math.pi * k / points)) / 2.0 for k in range(points + 1)]
    upper = [Point(x * chord, _thickness(x, thickness) * chord) for x in xs]
    lower = [Point(x * chord, -_thickness(x, thickness) * chord) for x in reversed(xs[1:-1])]

    path = Path.from_points(upper + lower, close=True)
    regularise(path)

    if trailing_edge < 1.0:
        remove_extremity(path, trailing_edge * chord, Direction.RIGHT, rejoin=True)
        regularise(path)

    if spar_width > 0.0:
        cut_slot(path, Direction.UP, spar_position * chord, spar_width, spar_depth, SlotStyle.VERTICAL)
        regularise(path)
    return path


def build_shape(shape: DemoShape, width: float, height: float) -> Path:
    """Build a demo outline.

    For the rib, width is the chord and height the maximum thickness.
    """
    if shape == DemoShape.RECT:
        return build_rect(width, height)
    if shape == DemoShape.ELLIPSE:
        return build_ellipse(width, height)
    return build_rib(width, thickness=height / width)
