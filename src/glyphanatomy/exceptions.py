"""Exception hierarchy for glyphanatomy."""


class GlyphAnatomyError(Exception):
    """Base exception for all glyphanatomy errors."""

    pass


class FontError(GlyphAnatomyError):
    """Errors related to font loading."""

    pass


class FontLoadError(FontError):
    """Error loading a font file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load font '{path}': {reason}")


class FontFormatError(FontError):
    """Unsupported or invalid font format."""

    def __init__(self, path: str, details: str) -> None:
        self.path = path
        self.details = details
        super().__init__(f"Invalid font format '{path}': {details}")


class GlyphError(GlyphAnatomyError):
    """Errors related to glyph lookup or conversion."""

    pass


class GlyphNotFoundError(GlyphError):
    """Requested glyph not found in font."""

    def __init__(self, glyph_name: str) -> None:
        self.glyph_name = glyph_name
        super().__init__(f"Glyph '{glyph_name}' not found in font")


class OutlineConversionError(GlyphError):
    """Error converting a font glyph into an outline."""

    def __init__(self, glyph_name: str, reason: str) -> None:
        self.glyph_name = glyph_name
        self.reason = reason
        super().__init__(f"Could not convert glyph '{glyph_name}': {reason}")


class GeometryError(GlyphAnatomyError):
    """Errors in geometric calculations."""

    pass


class OutlineError(GeometryError):
    """Malformed outline data."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class IntersectionError(GeometryError):
    """Error calculating intersections."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class FeatureError(GlyphAnatomyError):
    """Errors related to feature names."""

    pass


class UnknownFeatureError(FeatureError):
    """Feature name does not match any registered detector."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown feature '{name}'")


class ConfigError(GlyphAnatomyError):
    """Invalid or unreadable configuration."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid configuration: {reason}")
