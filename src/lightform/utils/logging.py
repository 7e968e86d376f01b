"""Logging utilities for lightform."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog


@dataclass
class RunStats:
    """Statistics from one lightening run."""

    input_segments: int = 0
    notches_found: int = 0
    anchors_placed: int = 0
    anchors_failed: int = 0
    braces_valid: int = 0
    braces_narrow: int = 0
    braces_crossing: int = 0
    gaps_opened: int = 0
    gaps_failed: int = 0
    extra_rim_spacing: float = 0.0
    progress_steps: int = 0
    warnings: list[str] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate run duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (console only if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        root_logger.addHandler(file_handler)

    if not quiet:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, console_level.upper()))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("lightform")
    logger.info("Logging initialized", log_file=str(log_file) if log_file else None, level=file_level)

    return logger


class RunLogger:
    """Diagnostics sink for one lightening run.

    Wraps a structlog logger and keeps the run's statistics alongside the
    log records.
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = RunStats()

    @property
    def log(self) -> structlog.stdlib.BoundLogger:
        """The wrapped logger, for passing into kernel operations."""
        return self._logger

    def log_run_start(self, segment_count: int) -> None:
        """Log start of a run."""
        self._logger.debug("Lightening run started", segments=segment_count)
        self._stats.input_segments = segment_count

    def log_invalid_input(self, segment_count: int) -> None:
        """Log an input outline too small to work with."""
        self._logger.warning("Input is not a useful shape", segments=segment_count)
        self._stats.warnings.append(f"input has only {segment_count} segments")

    def log_stage(self, stage: str, step: int, total: int) -> None:
        """Log completion of a macro stage."""
        self._logger.debug("Stage complete", stage=stage, step=step, total=total)
        self._stats.progress_steps = step

    def log_notches(self, count: int) -> None:
        """Log notch detection results."""
        self._logger.debug("Notches bridged", count=count)
        self._stats.notches_found = count

    def log_clearance(self, extra_spacing: float, clear: bool) -> None:
        """Log extra rim spacing needed to clear the clearance object."""
        self._stats.extra_rim_spacing = extra_spacing
        if not clear:
            self._logger.warning("Inner rim still touches clearance object", extra_spacing=extra_spacing)
            self._stats.warnings.append("inner rim does not clear the outer rim")
        elif extra_spacing > 0.0:
            self._logger.info("Additional rim spacing required", extra_spacing=extra_spacing)

    def log_anchors(self, count: int, spacing: float, at_notches: bool) -> None:
        """Log anchor placement."""
        self._logger.info("Anchors placed", count=count, spacing=round(spacing, 2), at_notches=at_notches)
        self._stats.anchors_placed = count

    def log_anchor_failed(self, anchor: int) -> None:
        """Log an anchor whose bisector never met the inner rim."""
        self._logger.warning("Bisector found fewer than two inner-rim crossings", anchor=anchor)
        self._stats.anchors_failed += 1
        self._stats.warnings.append(f"anchor {anchor} has no bisector intersect")

    def log_brace_invalidated(self, anchor: int, brace: int, reason: str) -> None:
        """Log a brace rejected by validation."""
        self._logger.debug("Brace invalidated", anchor=anchor, brace=brace, reason=reason)
        if reason == "narrow":
            self._stats.braces_narrow += 1
        elif reason == "crossing":
            self._stats.braces_crossing += 1

    def log_braces_drawn(self, count: int) -> None:
        """Log the number of braces emitted."""
        self._logger.info("Braces drawn", count=count)
        self._stats.braces_valid = count

    def log_gaps(self, rim: str, opened: int, failed: int) -> None:
        """Log gaps opened in a rim."""
        self._logger.debug("Rim gaps opened", rim=rim, opened=opened, failed=failed)
        self._stats.gaps_opened += opened
        self._stats.gaps_failed += failed
        if failed:
            self._stats.warnings.append(f"{failed} gaps could not be opened in the {rim} rim")

    def log_run_complete(self, ok: bool, duration_ms: float) -> None:
        """Log end of a run."""
        self._logger.info(
            "Lightening run complete",
            ok=ok,
            anchors=self._stats.anchors_placed,
            braces=self._stats.braces_valid,
            duration_ms=round(duration_ms, 2),
        )

    @property
    def stats(self) -> RunStats:
        """Get current run statistics."""
        return self._stats
