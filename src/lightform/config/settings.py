"""Configuration settings for lightform."""

from pathlib import Path

from pydantic import BaseModel, Field

from lightform.domain.primitives import Direction


class GeometryConfig(BaseModel):
    """Tolerances and step sizes used by the geometry kernel.

    All lengths are in millimetres.
    """

    snap_len: float = Field(
        default=1e-4,
        gt=0.0,
        le=0.1,
        description="Maximum endpoint separation treated as the same point when stitching",
    )
    simplify_error: float = Field(
        default=0.01,
        gt=0.0,
        le=1.0,
        description="Allowable error when simplifying paths",
    )
    trace_step: float = Field(
        default=0.5,
        gt=0.0,
        le=10.0,
        description="Maximum length of one offset-trace sampling step",
    )
    min_trace_steps: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Minimum number of offset-trace samples per segment",
    )
    fan_step_degrees: float = Field(
        default=3.0,
        gt=0.0,
        le=45.0,
        description="Angular increment of the candidate fan at convex corners",
    )

    @property
    def small_num(self) -> float:
        """Threshold below which lengths and cross products count as zero."""
        return self.snap_len * 1.0e-3


class LiteConfig(BaseModel):
    """Parameters for one lightening run."""

    rim_spacing: float = Field(
        default=10.0,
        gt=0.0,
        description="Distance from the outline to the outer edge of the inner rim",
    )
    outer_width: float = Field(
        default=3.0,
        gt=0.0,
        description="Width of the outer material rim",
    )
    inner_width: float = Field(
        default=2.0,
        ge=0.0,
        description="Width of the inner rim when girdering",
    )
    girder_width: float = Field(
        default=2.0,
        gt=0.0,
        description="Width of each bracing strut",
    )
    anchor_spacing: float = Field(
        default=20.0,
        gt=0.0,
        description="Target distance between anchors around the rim",
    )
    min_brace_angle: float = Field(
        default=20.0,
        ge=0.0,
        le=180.0,
        description="Minimum included angle between the two braces of an anchor (degrees)",
    )
    h_split_y: float = Field(
        default=0.0,
        description="Y position of the horizontal split line",
    )
    start_direction: Direction = Field(
        default=Direction.LEFT,
        description="Compass point at which the anchor reference path starts",
    )
    lighten: bool = Field(default=True, description="Cut the lightening hole")
    notch_detect: bool = Field(default=False, description="Bridge notches before offsetting")
    girder: bool = Field(default=False, description="Add bracing struts inside the hole")
    show_construction: bool = Field(default=False, description="Append construction geometry")
    anchor_at_notches: bool = Field(
        default=False,
        description="Place anchors between detected notches instead of evenly",
    )
    h_split: bool = Field(default=False, description="Split the result horizontally")
    v_split: bool = Field(default=False, description="Split the result vertically")
    split_offset: float = Field(
        default=5.0,
        ge=0.0,
        description="Distance one half is moved away after a split",
    )
    max_bisector_rotation: int = Field(
        default=60,
        ge=0,
        le=90,
        description="Largest rotation (degrees) tried when a bisector misses the inner rim",
    )
    clearance_step: float = Field(
        default=1.0,
        gt=0.0,
        description="Increment added to the rim spacing while the inner rim hits the clearance object",
    )
    max_clearance_growth: float = Field(
        default=100.0,
        ge=0.0,
        description="Largest extra rim spacing tried before giving up on clearance",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class LightformSettings(BaseModel):
    """Main application settings."""

    lite: LiteConfig = Field(default_factory=LiteConfig)
    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> LightformSettings:
    """Get default application settings."""
    return LightformSettings()
