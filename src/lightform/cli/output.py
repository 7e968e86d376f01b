"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars, tables, and formatted messages.
"""


from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from lightform.utils.logging import RunStats

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def create_progress() -> Progress:
    """Create a rich progress bar for the engine's macro steps.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]Lightform[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_outline_info(shape: str, segments: int, length: float, bbox: tuple[float, float, float, float]) -> None:
    """Print information about the input outline.

    Args:
        shape: Name of the demo shape
        segments: Number of segments in the outline
        length: Perimeter in mm
        bbox: Bounding box as (min_x, min_y, max_x, max_y)
    """
    min_x, min_y, max_x, max_y = bbox
    console.print(f"  {shape} {SYM_DOT} {segments:,} segments {SYM_DOT} {length:.1f} mm perimeter")
    console.print(f"  {max_x - min_x:.1f} x {max_y - min_y:.1f} mm")


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_paths_table(rows: list[tuple[str, int, float]]) -> None:
    """Print a table of the sub-paths in the result.

    Args:
        rows: (kind, segment count, length) for each sub-path
    """
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Segments", justify="right")
    table.add_column("Length (mm)", justify="right")
    for index, (kind, segments, length) in enumerate(rows, start=1):
        table.add_row(str(index), kind, str(segments), f"{length:.1f}")
    console.print(table)


def print_success(ok: bool, stats: RunStats, closed: int, open_: int, segments: int) -> None:
    """Print the run summary.

    Args:
        ok: Whether every stage succeeded
        stats: Statistics collected during the run
        closed: Number of closed sub-paths in the output
        open_: Number of open sub-paths in the output
        segments: Total segments in the output
    """
    time_str = _format_time(stats.duration_seconds)

    if ok:
        console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")
    else:
        console.print(f"\n[bold yellow]{SYM_ERR} Completed with warnings[/bold yellow] in {time_str}")

    console.print(f"  {closed} closed paths {SYM_DOT} {open_} open paths {SYM_DOT} {segments} segments")

    if stats.anchors_placed:
        failed_style = "red" if stats.anchors_failed > 0 else "green"
        console.print(
            f"  {stats.anchors_placed} anchors {SYM_DOT} {stats.braces_valid} braces {SYM_DOT} "
            f"[{failed_style}]{stats.anchors_failed} failed anchors[/{failed_style}]"
        )
    if stats.notches_found:
        console.print(f"  {stats.notches_found} notches bridged")
    if stats.extra_rim_spacing > 0.0:
        console.print(f"  {stats.extra_rim_spacing:.1f} mm extra rim spacing")

    for warning in stats.warnings:
        console.print(f"  [yellow]{SYM_DOT} {warning}[/yellow]")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")
