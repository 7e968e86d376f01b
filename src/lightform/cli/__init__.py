"""Command-line interface for lightform.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Demo outlines (rectangle, ellipse, notched rib)
- Progress bar fed by the engine's progress sink
- Verbose/quiet output modes
- Run summary with path and brace counts
"""

from lightform.cli.app import cli, main

__all__ = ["cli", "main"]
