"""Feature detection entry points.

detect() is the single dispatch point: it resolves a feature name, builds a
DetectionContext and runs the registered detector, turning any failure into
a not-found result with a logged warning.
"""

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from glyphanatomy.config import DetectionConfig
from glyphanatomy.core.analysis import DetectionContext
from glyphanatomy.core.detectors import DETECTORS
from glyphanatomy.domain import (
    FEATURE_ALIASES,
    FeatureName,
    FeatureResult,
    FontInfo,
    GlyphOutline,
    Metrics,
)
from glyphanatomy.exceptions import UnknownFeatureError


def _normalize_key(name: str) -> str:
    return name.strip().lower().replace("-", "_").replace(" ", "_")


def resolve_feature(name: str | FeatureName) -> FeatureName | None:
    """Map a feature name, display name or alias to a FeatureName.

    Matching is case-insensitive and treats space, hyphen and underscore
    as the same character.

    Returns:
        The feature, or None when nothing matches
    """
    if isinstance(name, FeatureName):
        return name
    if not isinstance(name, str):
        return None

    key = _normalize_key(name)
    try:
        return FeatureName(key)
    except ValueError:
        pass

    alias = FEATURE_ALIASES.get(key) or FEATURE_ALIASES.get(key.replace("_", ""))
    return alias


def require_feature(name: str | FeatureName) -> FeatureName:
    """Like resolve_feature, but raise for unknown names.

    Raises:
        UnknownFeatureError: If the name matches no feature
    """
    feature = resolve_feature(name)
    if feature is None:
        raise UnknownFeatureError(str(name))
    return feature


def available_features() -> list[str]:
    """Display names of all registered features, in registration order."""
    return [feature.display_name for feature in DETECTORS]


def _to_result(output: Any) -> FeatureResult:
    if isinstance(output, FeatureResult):
        return output
    if isinstance(output, Mapping):
        return FeatureResult(
            found=bool(output.get("found", False)),
            shape=output.get("shape"),
            location=output.get("location"),
            label=output.get("label"),
        )
    return FeatureResult(found=bool(output))


def detect(
    name: str | FeatureName,
    outline: GlyphOutline,
    metrics: Metrics,
    font: FontInfo | None = None,
    *,
    config: DetectionConfig | None = None,
    logger: Any = None,
) -> FeatureResult:
    """Run one feature detector on a glyph outline.

    Args:
        name: Feature name, display name or alias
        outline: Glyph outline (not modified)
        metrics: Font metrics
        font: Font constants (defaults to 1000 UPM, no transform)
        config: Detection tuning (defaults to the cached default config)
        logger: structlog logger to bind (defaults to "glyphanatomy")

    Returns:
        FeatureResult; found is False for unknown names, unusable outlines
        and detector failures
    """
    log = logger if logger is not None else structlog.get_logger("glyphanatomy")
    feature = resolve_feature(name)
    if feature is None:
        log.debug("Unknown feature requested", feature=str(name), glyph=outline.name)
        return FeatureResult.not_found()

    ctx = DetectionContext.create(outline, metrics, font, config, log).bind(
        feature=feature.value
    )
    if not ctx.usable:
        ctx.log.debug("Outline not usable")
        return FeatureResult.not_found()

    func = DETECTORS[feature]
    try:
        result = _to_result(func(ctx))
    except Exception as e:
        ctx.log.warning("Detector failed", error=str(e), error_type=type(e).__name__)
        return FeatureResult.not_found()

    ctx.log.debug("Detector finished", found=result.found, label=result.label)
    return result


def detect_many(
    names: Iterable[str | FeatureName],
    outline: GlyphOutline,
    metrics: Metrics,
    font: FontInfo | None = None,
    *,
    config: DetectionConfig | None = None,
    logger: Any = None,
) -> dict[str, FeatureResult]:
    """Run several detectors on one outline.

    Returns:
        Results keyed by the feature value (or the name as given, when it
        does not resolve)
    """
    results: dict[str, FeatureResult] = {}
    for name in names:
        feature = resolve_feature(name)
        key = feature.value if feature is not None else str(name)
        results[key] = detect(name, outline, metrics, font, config=config, logger=logger)
    return results
