"""CLI application entry point for lightform.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from lightform import __version__
from lightform.cli.output import (
    console,
    create_progress,
    print_error,
    print_header,
    print_outline_info,
    print_paths_table,
    print_step,
    print_success,
)
from lightform.cli.shapes import DemoShape, build_shape
from lightform.config import LightformSettings, LiteConfig, LoggingConfig
from lightform.core import LiteEngine, LiteResult, regularise_no_delete
from lightform.domain import Direction
from lightform.exceptions import LightformError
from lightform.utils.logging import configure_logging

# Create the Typer app
app = typer.Typer(
    name="lightform",
    help="Lighten closed outlines with offset rims and diagonal bracing.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Lightform[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Lighten closed outlines with offset rims and diagonal bracing."""


@app.command()
def lighten(
    shape: Annotated[
        DemoShape,
        typer.Option(
            "--shape",
            "-s",
            help="Demo outline to lighten",
        ),
    ] = DemoShape.RIB,
    width: Annotated[
        float,
        typer.Option(
            "--width",
            help="Outline width in mm (chord for the rib)",
            min=10.0,
        ),
    ] = 200.0,
    height: Annotated[
        float,
        typer.Option(
            "--height",
            help="Outline height in mm (maximum thickness for the rib)",
            min=5.0,
        ),
    ] = 24.0,
    rim_spacing: Annotated[
        float,
        typer.Option(
            "--rim-spacing",
            "-r",
            help="Distance from the outline to the lightening hole",
        ),
    ] = 6.0,
    outer_width: Annotated[
        float,
        typer.Option(
            "--outer-width",
            help="Width of the outer rim when girdering",
        ),
    ] = 2.0,
    inner_width: Annotated[
        float,
        typer.Option(
            "--inner-width",
            help="Width of the inner rim when girdering",
        ),
    ] = 1.5,
    girder_width: Annotated[
        float,
        typer.Option(
            "--girder-width",
            help="Width of each brace",
        ),
    ] = 2.0,
    anchor_spacing: Annotated[
        float,
        typer.Option(
            "--anchor-spacing",
            "-a",
            help="Target distance between brace anchors",
        ),
    ] = 25.0,
    min_brace_angle: Annotated[
        float,
        typer.Option(
            "--min-brace-angle",
            help="Smallest angle between an anchor's braces (degrees)",
        ),
    ] = 20.0,
    girder: Annotated[
        bool,
        typer.Option(
            "--girder/--no-girder",
            "-g",
            help="Add diagonal bracing inside the hole",
        ),
    ] = False,
    notch_detect: Annotated[
        bool,
        typer.Option(
            "--notch-detect",
            help="Bridge notches before offsetting",
        ),
    ] = False,
    anchor_at_notches: Annotated[
        bool,
        typer.Option(
            "--anchor-at-notches",
            help="Place anchors between notches instead of evenly",
        ),
    ] = False,
    start: Annotated[
        Direction,
        typer.Option(
            "--start",
            help="Edge at which anchor placement starts",
        ),
    ] = Direction.LEFT,
    h_split: Annotated[
        bool,
        typer.Option(
            "--h-split",
            help="Split the result horizontally",
        ),
    ] = False,
    h_split_y: Annotated[
        float,
        typer.Option(
            "--h-split-y",
            help="Y position of the horizontal split",
        ),
    ] = 0.0,
    v_split: Annotated[
        bool,
        typer.Option(
            "--v-split",
            help="Split the result vertically at its centre",
        ),
    ] = False,
    show_construction: Annotated[
        bool,
        typer.Option(
            "--show-construction",
            help="Include construction lines in the result",
        ),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
) -> None:
    """Lighten a demo outline and report the resulting paths.

    Example:
        lightform lighten --shape rib --girder --notch-detect

    This builds a notched rib, cuts a braced lightening hole into it and
    prints how many closed and open paths the result contains.
    """
    # Validate mutually exclusive options
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    try:
        settings = LightformSettings(
            lite=LiteConfig(
                rim_spacing=rim_spacing,
                outer_width=outer_width,
                inner_width=inner_width,
                girder_width=girder_width,
                anchor_spacing=anchor_spacing,
                min_brace_angle=min_brace_angle,
                h_split_y=h_split_y,
                start_direction=start,
                girder=girder,
                notch_detect=notch_detect,
                anchor_at_notches=anchor_at_notches,
                h_split=h_split,
                v_split=v_split,
                show_construction=show_construction,
            ),
            logging=LoggingConfig(
                log_file=log_file,
                log_level=log_level if not quiet else "WARNING",
            ),
        )
    except ValidationError as e:
        print_error("Invalid parameters", details=str(e))
        raise typer.Exit(code=1)

    logger = configure_logging(
        log_file=settings.logging.log_file,
        console_level=settings.logging.log_level,
        file_level=settings.logging.file_log_level,
        quiet=quiet,
    )

    if not quiet:
        print_header(__version__)

    try:
        if not quiet:
            print_step("Building outline")
        outline = build_shape(shape, width, height)
        if not quiet:
            print_outline_info(shape.value, len(outline), outline.length(), outline.bounding_box())

        if not quiet:
            print_step("Lightening")
            with create_progress() as progress:
                task_id = progress.add_task("Lightening", total=8)

                def update_progress(step: int, total: int) -> None:
                    progress.update(task_id, completed=step, total=total)

                engine = LiteEngine(settings.lite, settings.geometry, progress=update_progress, logger=logger)
                result = engine.run(outline)
        else:
            engine = LiteEngine(settings.lite, settings.geometry, logger=logger)
            result = engine.run(outline)

        _report(result, quiet, verbose)

    except LightformError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        # Re-raise typer.Exit to allow clean exits
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)

    if not result.ok:
        raise typer.Exit(code=2)


def _report(result: LiteResult, quiet: bool, verbose: bool) -> None:
    """Summarise a run's output.

    Args:
        result: Engine result
        quiet: Suppress output
        verbose: Show a per-path table
    """
    if quiet:
        return

    sorted_copy = result.path.copy()
    closed, open_ = regularise_no_delete(sorted_copy)

    print_success(
        ok=result.ok,
        stats=result.stats,
        closed=len(closed),
        open_=len(open_),
        segments=len(result.path),
    )

    if verbose:
        rows = [("closed", len(p), p.length()) for p in closed]
        rows += [("open", len(p), p.length()) for p in open_]
        print_paths_table(rows)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
