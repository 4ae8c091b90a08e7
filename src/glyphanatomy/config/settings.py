"""Configuration settings for glyphanatomy.

Every tunable number used by the detectors and extractors lives here.
Field names encode their unit:

- ``*_units``: absolute font units
- ``*_ratio``: a fraction multiplied by a glyph or font dimension before use
- everything else is a count, an angle in degrees, or a dimensionless factor
"""

import json
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from glyphanatomy.exceptions import ConfigError


class _FrozenModel(BaseModel):
    """Base for read-only configuration tables."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class GeometryConfig(_FrozenModel):
    """Configuration for the shared geometry primitives."""

    overshoot_factor: float = Field(
        default=2.0,
        ge=1.0,
        le=10.0,
        description="Ray length as a multiple of max(bbox width, bbox height)",
    )
    ray_merge_min_units: float = Field(
        default=0.5,
        ge=0.0,
        le=10.0,
        description="Minimum distance below which ray hits merge",
    )
    ray_merge_ratio: float = Field(
        default=0.001,
        ge=0.0,
        le=0.1,
        description="Hit merge distance as a fraction of the ray length",
    )
    tessellation_tolerance_units: float = Field(
        default=0.25,
        ge=0.01,
        le=10.0,
        description="Maximum deviation of tessellated curves from the true curve",
    )
    degenerate_tolerance_units: float = Field(
        default=1e-6,
        ge=0.0,
        le=1.0,
        description="Control points closer than this to an endpoint collapse onto it",
    )
    inside_jitter_units: float = Field(
        default=0.013,
        ge=0.0,
        le=1.0,
        description="Perpendicular offset applied to inside/outside probes",
    )
    probe_margin_ratio: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Scanline origins sit this fraction of the overshoot outside the bbox",
    )
    analysis_flatten_units: float = Field(
        default=0.5,
        ge=0.01,
        le=10.0,
        description="Flattening tolerance used for contour classification",
    )
    eps_upm_ratio: float = Field(
        default=0.001,
        ge=0.0,
        le=0.1,
        description="Glyph epsilon as a fraction of UPM",
    )
    eps_bbox_ratio: float = Field(
        default=0.001,
        ge=0.0,
        le=0.1,
        description="Glyph epsilon as a fraction of the smaller bbox side",
    )
    upm_eps_ratio: float = Field(
        default=1e-4,
        ge=0.0,
        le=0.01,
        description="Font epsilon as a fraction of UPM (transform aware)",
    )
    stem_width_percentile: float = Field(
        default=0.25,
        ge=0.0,
        le=1.0,
        description="Percentile of mid x-height span widths used as stem width",
    )
    stem_width_fallback_ratio: float = Field(
        default=0.08,
        ge=0.01,
        le=0.5,
        description="Stem width as a fraction of bbox width when no spans are found",
    )

    def merge_distance(self, length: float) -> float:
        """Distance under which hits along a ray of this length merge."""
        return max(self.ray_merge_min_units, length * self.ray_merge_ratio)


class ScanConfig(_FrozenModel):
    """Configuration for generic scanline banding."""

    bands: int = Field(default=5, ge=2, le=64, description="Default bands per metric range")
    min_bands: int = Field(
        default=2,
        ge=1,
        le=32,
        description="Qualifying bands required by band-counting detectors",
    )
    grid_bands: int = Field(
        default=8,
        ge=1,
        le=128,
        description="Scanlines per axis laid out by precompute_scanlines",
    )
    batch_size: int = Field(default=4, ge=1, le=256)


class StemConfig(_FrozenModel):
    """Configuration for stem, foot and cross stroke banding."""

    bands: int = Field(default=5, ge=2, le=32, description="Scan bands between baseline and top")
    min_bands: int = Field(default=2, ge=1, le=16, description="Qualifying bands required")
    thickness_upm_ratio: float = Field(
        default=0.03,
        ge=0.001,
        le=0.5,
        description="Minimum stem thickness as a fraction of UPM",
    )
    uppercase_margin_ratio: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Glyphs taller than x-height by this fraction of bbox height use cap height",
    )
    group_tolerance_ratio: float = Field(
        default=0.5,
        ge=0.05,
        le=2.0,
        description="Span centres within this fraction of stem width belong to one stem",
    )
    foot_tolerance_ratio: float = Field(
        default=0.03,
        ge=0.0,
        le=0.5,
        description="Stem bottoms within this fraction of bbox height of the baseline are feet",
    )
    cross_bands: int = Field(default=9, ge=3, le=32, description="Bands searched for a cross stroke")
    cross_zone_low_ratio: float = Field(default=0.4, ge=0.0, le=1.0)
    cross_zone_high_ratio: float = Field(default=0.95, ge=0.0, le=1.0)
    cross_width_ratio: float = Field(
        default=2.2,
        ge=1.1,
        le=10.0,
        description="Cross stroke span must be this many times wider than the stem",
    )


class BarConfig(_FrozenModel):
    """Configuration for bar (crossbar) detection."""

    column_ratios: tuple[float, ...] = Field(
        default=(0.35, 0.5, 0.65),
        description="Vertical probe positions as fractions of bbox width",
    )
    max_thickness_ratio: float = Field(
        default=0.25,
        ge=0.01,
        le=1.0,
        description="Bar run thickness limit as a fraction of bbox height",
    )
    edge_margin_ratio: float = Field(
        default=0.12,
        ge=0.0,
        le=0.5,
        description="Bars must sit this fraction of bbox height away from top and bottom",
    )
    min_aspect: float = Field(
        default=1.5,
        ge=1.0,
        le=10.0,
        description="Bar span width over bar thickness",
    )
    min_columns: int = Field(default=2, ge=1, le=8)
    width_tolerance_ratio: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Allowed standard deviation of bar span widths as a fraction of bbox width",
    )


class SerifConfig(_FrozenModel):
    """Configuration for serif, bracket and serif-style detection."""

    width_ratio: float = Field(
        default=1.15,
        ge=1.0,
        le=3.0,
        description="Foot span over stem span ratio above which a serif is present",
    )
    sans_ratio: float = Field(
        default=1.08,
        ge=1.0,
        le=3.0,
        description="Foot span over stem span ratio below which the glyph is sans",
    )
    foot_offset_ratio: float = Field(
        default=0.03,
        ge=0.001,
        le=0.3,
        description="Serif probes sit this fraction of bbox height inside the baseline/top",
    )
    bracket_zone_ratio: float = Field(
        default=0.15,
        ge=0.01,
        le=0.5,
        description="Height of the stem-serif junction zone as a fraction of bbox height",
    )


class CavityConfig(_FrozenModel):
    """Configuration for counter, bowl, eye, aperture, loop and link."""

    counter_bands: int = Field(default=5, ge=2, le=32)
    counter_min_bands: int = Field(default=2, ge=1, le=16)
    nudge_ratio: float = Field(
        default=0.01,
        ge=0.0,
        le=0.2,
        description="Seed nudge step as a fraction of bbox width",
    )
    nudge_steps: tuple[int, ...] = Field(
        default=(0, -1, 1, -2, 2),
        description="Nudge multiples tried in order",
    )
    trace_step_degrees: float = Field(default=6.0, gt=0.0, le=90.0)
    min_trace_points: int = Field(default=6, ge=3, le=360)
    bowl_columns: int = Field(default=5, ge=2, le=32)
    bowl_min_hits: int = Field(default=4, ge=2, le=16)
    bowl_min_columns: int = Field(default=2, ge=1, le=16)
    bowl_margin_ratio: float = Field(default=0.1, ge=0.0, le=0.5)
    bowl_trace_step_degrees: float = Field(default=12.0, gt=0.0, le=90.0)
    bowl_min_outline_points: int = Field(default=8, ge=3, le=360)
    aperture_levels: int = Field(default=7, ge=2, le=32)
    aperture_min_levels: int = Field(default=2, ge=1, le=16)
    aperture_gap_stem_ratio: float = Field(default=0.3, ge=0.0, le=5.0)
    aperture_gap_width_ratio: float = Field(default=0.05, ge=0.0, le=1.0)
    loop_bands: int = Field(default=4, ge=2, le=32)
    loop_min_hits: int = Field(default=4, ge=2, le=16)
    link_bands: int = Field(default=5, ge=2, le=32)
    link_max_width_ratio: float = Field(
        default=0.35,
        ge=0.01,
        le=1.0,
        description="Link span width limit as a fraction of bbox width",
    )
    link_extent_ratio: float = Field(
        default=1.5,
        ge=1.0,
        le=10.0,
        description="Ink around a link must be this much wider than the link",
    )
    link_min_descent_ratio: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Glyph must reach this fraction of the descender depth",
    )


class ConvergenceConfig(_FrozenModel):
    """Configuration for apex and vertex detection."""

    ray_length_ratio: float = Field(default=1.5, gt=0.0, le=10.0)
    ray_angle_degrees: float = Field(
        default=45.0,
        gt=0.0,
        lt=90.0,
        description="Ray angle from the horizontal; mirrored for the second ray",
    )
    probe_level_ratios: tuple[float, ...] = Field(default=(0.1, 0.2, 0.3))
    probe_x_ratios: tuple[float, ...] = Field(default=(0.2, 0.35, 0.5, 0.65, 0.8))
    band_ratio: float = Field(
        default=0.2,
        ge=0.01,
        le=1.0,
        description="Extreme band height as a fraction of bbox height",
    )
    y_tolerance_eps: float = Field(default=20.0, ge=0.0)
    corner_radius_eps: float = Field(default=30.0, ge=0.0)
    y_tolerance_ratio: float = Field(default=0.05, ge=0.0, le=1.0)
    sharp_eps: float = Field(default=8.0, ge=0.0)
    sharp_ratio: float = Field(default=0.05, ge=0.0, le=1.0)
    ridge_ratio: float = Field(default=0.3, ge=0.0, le=1.0)
    tip_level_ratio: float = Field(
        default=0.08,
        ge=0.0,
        le=0.5,
        description="Width gate probe distance from the tip as a fraction of bbox height",
    )
    body_level_ratio: float = Field(default=0.35, ge=0.05, le=0.9)
    convergence_ratio: float = Field(
        default=0.75,
        gt=0.0,
        le=1.0,
        description="Ink extent near the tip must be below this fraction of the body extent",
    )
    corner_angle_degrees: float = Field(
        default=25.0,
        gt=0.0,
        lt=180.0,
        description="Minimum tangent turn at a segment junction that counts as a corner",
    )
    corner_radius_ratio: float = Field(
        default=0.1,
        gt=0.0,
        le=1.0,
        description="A corner must lie within this fraction of bbox width of the tip",
    )


class WedgeConfig(_FrozenModel):
    """Configuration for arc-probe detectors (ear, spur, crotch)."""

    ear_center_x_ratio: float = Field(default=0.2, ge=0.0, le=1.0)
    ear_center_y_ratio: float = Field(default=0.2, ge=0.0, le=1.0)
    ear_radius_ratio: float = Field(default=0.3, gt=0.0, le=2.0)
    ear_start_degrees: float = Field(default=45.0)
    ear_sweep_degrees: float = Field(default=90.0, gt=0.0, le=360.0)
    ear_min_hits: int = Field(default=1, ge=1)
    spur_center_x_ratio: float = Field(default=0.2, ge=0.0, le=1.0)
    spur_center_y_ratio: float = Field(default=0.2, ge=0.0, le=1.0)
    spur_radius_ratio: float = Field(default=0.3, gt=0.0, le=2.0)
    spur_start_degrees: float = Field(default=225.0)
    spur_sweep_degrees: float = Field(default=90.0, gt=0.0, le=360.0)
    spur_min_hits: int = Field(default=1, ge=1)
    crotch_center_y_ratio: float = Field(default=0.2, ge=0.0, le=1.0)
    crotch_radius_ratio: float = Field(default=0.25, gt=0.0, le=2.0)
    crotch_start_degrees: float = Field(default=80.0)
    crotch_sweep_degrees: float = Field(default=30.0, gt=0.0, le=360.0)
    crotch_min_hits: int = Field(default=2, ge=1)


class TittleConfig(_FrozenModel):
    """Configuration for tittle detection and mark contour classification."""

    bands: int = Field(default=4, ge=1, le=32)
    min_gap_ratio: float = Field(
        default=0.05,
        ge=0.0,
        le=1.0,
        description="Bands start this fraction of bbox height above x-height",
    )
    max_width_ratio: float = Field(
        default=0.35,
        gt=0.0,
        le=1.0,
        description="Tittle span width limit as a fraction of bbox width",
    )
    mark_size_ratio: float = Field(
        default=0.3,
        gt=0.0,
        le=1.0,
        description="Mark contours are smaller than this fraction of the glyph in both axes",
    )
    mark_x_height_ratio: float = Field(
        default=0.8,
        ge=0.0,
        le=2.0,
        description="Mark contours start above this fraction of x-height",
    )
    min_radius_units: float = Field(default=1.0, ge=0.0)


class TerminalConfig(_FrozenModel):
    """Configuration for terminal and finial classification."""

    opening_level_ratios: tuple[float, ...] = Field(default=(0.35, 0.45, 0.55, 0.65))
    region_x_ratio: float = Field(
        default=0.15,
        ge=0.0,
        le=0.5,
        description="Stroke ends are probed this fraction of bbox width inside the edge",
    )
    max_run_ratio: float = Field(
        default=0.4,
        gt=0.0,
        le=1.0,
        description="Stroke-end runs are shorter than this fraction of bbox height",
    )
    ball_rays: int = Field(default=8, ge=4, le=64)
    ball_roundness: float = Field(
        default=0.25,
        ge=0.0,
        le=1.0,
        description="Maximum radius spread (stddev / mean) for a ball terminal",
    )
    ball_max_radius_ratio: float = Field(default=0.15, gt=0.0, le=1.0)
    ball_min_thickness_ratio: float = Field(
        default=1.2,
        ge=1.0,
        le=5.0,
        description="Ball diameter over the stroke thickness behind it",
    )
    teardrop_ratio: float = Field(default=1.25, ge=1.0, le=5.0)
    clean_probe_ratio: float = Field(default=0.1, gt=0.0, le=1.0)
    clean_max_hits: int = Field(default=1, ge=0)
    finial_taper_ratio: float = Field(default=0.7, gt=0.0, le=1.0)
    body_offset_ratio: float = Field(
        default=0.2,
        gt=0.0,
        le=1.0,
        description="Body thickness is measured this fraction of bbox width behind the end",
    )


class StrokeConfig(_FrozenModel):
    """Configuration for directional stroke detectors."""

    tail_min_depth_ratio: float = Field(
        default=0.15,
        ge=0.0,
        le=1.0,
        description="Ink must reach this fraction of the descender depth",
    )
    hook_zone_ratio: float = Field(default=0.2, gt=0.0, le=0.5)
    hook_bands: int = Field(default=3, ge=1, le=16)
    hook_min_extension_ratio: float = Field(default=0.15, gt=0.0, le=1.0)
    hook_clearance_ratio: float = Field(default=0.12, gt=0.0, le=1.0)
    arc_column_ratios: tuple[float, ...] = Field(default=(0.4, 0.5, 0.6))
    arc_open_ratio: float = Field(default=0.5, gt=0.0, lt=1.0)
    arc_upright_ratio: float = Field(default=0.75, gt=0.0, lt=1.0)
    beak_ratio: float = Field(default=1.3, ge=1.0, le=10.0)
    beak_end_ratio: float = Field(default=0.04, gt=0.0, le=0.5)
    beak_body_ratio: float = Field(default=0.3, gt=0.0, le=1.0)
    beak_zone_ratio: float = Field(default=0.25, gt=0.0, le=1.0)
    arm_step_ratio: float = Field(default=0.02, gt=0.0, le=0.5)
    arm_max_thickness_ratio: float = Field(default=0.25, gt=0.0, le=1.0)
    arm_min_length_ratio: float = Field(default=0.35, gt=0.0, le=1.0)
    leg_bands: int = Field(default=6, ge=3, le=32)
    leg_min_bands: int = Field(default=3, ge=2, le=32)
    leg_min_shift_ratio: float = Field(default=0.15, gt=0.0, le=1.0)
    shoulder_column_ratios: tuple[float, ...] = Field(default=(0.4, 0.5, 0.6))
    shoulder_arch_ratio: float = Field(default=0.5, gt=0.0, lt=1.0)
    shoulder_min_columns: int = Field(default=2, ge=1)
    spine_level_ratios: tuple[float, ...] = Field(default=(0.25, 0.35, 0.65, 0.75))
    neck_bands: int = Field(default=9, ge=3, le=32)
    neck_zone_low_ratio: float = Field(default=0.2, ge=0.0, le=1.0)
    neck_zone_high_ratio: float = Field(default=0.8, ge=0.0, le=1.0)
    neck_width_ratio: float = Field(default=0.75, gt=0.0, le=1.0)


class ExtractorConfig(_FrozenModel):
    """Configuration for segment extraction zones."""

    aspect_ratio: float = Field(
        default=2.0,
        ge=1.0,
        le=20.0,
        description="Width over height for horizontal segments (inverse for vertical)",
    )
    loose_aspect_ratio: float = Field(default=1.5, ge=1.0, le=20.0)
    zone_ratio: float = Field(default=0.2, ge=0.0, le=1.0)
    edge_zone_ratio: float = Field(default=0.1, ge=0.0, le=1.0)
    serif_max_length_ratio: float = Field(default=0.15, gt=0.0, le=1.0)
    near_ratio: float = Field(
        default=0.15,
        gt=0.0,
        le=1.0,
        description="Segments within this fraction of bbox size of an anchor are near it",
    )
    shoulder_low_ratio: float = Field(default=0.55, ge=0.0, le=1.0)
    shoulder_high_ratio: float = Field(default=1.2, ge=0.0, le=2.0)
    apex_clip_ratio: float = Field(default=0.3, ge=0.0, le=1.0)
    crotch_clip_ratio: float = Field(default=0.4, ge=0.0, le=1.0)
    vertex_clip_ratio: float = Field(default=0.3, ge=0.0, le=1.0)


class DetectionConfig(_FrozenModel):
    """Process-wide, read-only numeric tuning table for all detectors."""

    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
    stem: StemConfig = Field(default_factory=StemConfig)
    bar: BarConfig = Field(default_factory=BarConfig)
    serif: SerifConfig = Field(default_factory=SerifConfig)
    cavity: CavityConfig = Field(default_factory=CavityConfig)
    convergence: ConvergenceConfig = Field(default_factory=ConvergenceConfig)
    wedge: WedgeConfig = Field(default_factory=WedgeConfig)
    tittle: TittleConfig = Field(default_factory=TittleConfig)
    terminal: TerminalConfig = Field(default_factory=TerminalConfig)
    stroke: StrokeConfig = Field(default_factory=StrokeConfig)
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)


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


class AnatomySettings(BaseModel):
    """Main application settings."""

    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache(maxsize=1)
def get_default_config() -> DetectionConfig:
    """Get the process-wide default detection configuration.

    Returns:
        Shared DetectionConfig instance (loaded once)
    """
    return DetectionConfig()


def load_detection_config(path: Path) -> DetectionConfig:
    """Load a detection configuration from a JSON file.

    Missing keys keep their defaults.

    Args:
        path: Path to a JSON document shaped like DetectionConfig

    Returns:
        Validated DetectionConfig

    Raises:
        ConfigError: If the file cannot be read or fails validation
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e

    try:
        return DetectionConfig.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ConfigError(f"{path}: {e}") from e


def get_default_settings() -> AnatomySettings:
    """Get default application settings.

    Returns:
        AnatomySettings with default values
    """
    return AnatomySettings()
