"""Lightform - Planar geometry kernel and part lightening engine.

Lightform stitches loose line segments into closed outlines, traces offset
contours, and turns a closed outline into a lightened part: an outer rim,
an inner lightening hole and, optionally, a lattice of diagonal braces.

Example:
    $ lightform lighten --shape rib --girder

This will build a demo rib outline, lighten it with a braced girder and
print a summary of the resulting paths.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
