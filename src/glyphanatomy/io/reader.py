"""Font reader for loading TTF/OTF fonts.

This module provides the FontReader class for loading font files and
extracting glyph outlines, metrics and font constants as domain models.
"""

from collections.abc import Iterator
from pathlib import Path

import structlog
from fontTools.ttLib import TTFont, TTLibError

from glyphanatomy.domain import FontInfo, GlyphOutline, Metrics
from glyphanatomy.exceptions import FontFormatError, FontLoadError, OutlineConversionError
from glyphanatomy.io.converter import fonttools_glyph_to_outline, glyph_bbox

logger = structlog.get_logger(__name__)


class FontReader:
    """Loads TTF/OTF fonts and extracts glyph outlines.

    Example:
        with FontReader(Path("font.ttf")) as reader:
            outline = reader.outline_for_char("a")
            result = detect("bowl", outline, reader.metrics, reader.font_info)
    """

    def __init__(self, font_path: Path) -> None:
        """Initialize the font reader.

        Args:
            font_path: Path to the TTF or OTF font file
        """
        self._font_path = font_path
        self._font: TTFont | None = None
        self._metrics: Metrics | None = None

    def load(self) -> None:
        """Load the font file.

        Raises:
            FontLoadError: If the file does not exist or cannot be parsed
            FontFormatError: If the font has no glyf, CFF or CFF2 outlines
        """
        if not self._font_path.exists():
            raise FontLoadError(str(self._font_path), "file not found")

        try:
            self._font = TTFont(str(self._font_path))
        except (TTLibError, OSError, AssertionError) as e:
            raise FontLoadError(str(self._font_path), str(e)) from e

        if not any(tag in self._font for tag in ("glyf", "CFF ", "CFF2")):
            self._font.close()
            self._font = None
            raise FontFormatError(str(self._font_path), "no glyf, CFF or CFF2 table")

    def _require_font(self) -> TTFont:
        if self._font is None:
            raise RuntimeError("Font not loaded. Call load() first.")
        return self._font

    @property
    def format(self) -> str:
        """Return font format.

        Returns:
            'TrueType' for TTF fonts, 'OpenType' for OTF fonts

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        font = self._require_font()
        if "CFF " in font or "CFF2" in font:
            return "OpenType"
        return "TrueType"

    @property
    def units_per_em(self) -> int:
        """Return font's units per em.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        return self._require_font()["head"].unitsPerEm  # type: ignore[attr-defined]

    @property
    def glyph_count(self) -> int:
        """Return total number of glyphs in the font.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        return self._require_font()["maxp"].numGlyphs

    @property
    def font_info(self) -> FontInfo:
        """Units per em and italic angle.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        font = self._require_font()
        italic_angle = 0.0
        if "post" in font:
            italic_angle = float(font["post"].italicAngle)  # type: ignore[attr-defined]
        return FontInfo(units_per_em=self.units_per_em, italic_angle=italic_angle)

    def _glyph_top(self, char: str) -> float | None:
        name = self.glyph_name_for_char(char)
        if name is None:
            return None
        glyph_set = self._require_font().getGlyphSet()
        bbox = glyph_bbox(glyph_set[name], glyph_set)
        return bbox.max_y if bbox is not None else None

    @property
    def metrics(self) -> Metrics:
        """Vertical metrics from the OS/2, hhea and head tables.

        x-height and cap height come from OS/2 when it records them and
        otherwise from the tops of 'x' and 'H'. The result is cached.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        if self._metrics is not None:
            return self._metrics

        font = self._require_font()
        upm = self.units_per_em
        os2 = font["OS/2"] if "OS/2" in font else None

        if "hhea" in font:
            ascent = float(font["hhea"].ascent)  # type: ignore[attr-defined]
            descent = float(font["hhea"].descent)  # type: ignore[attr-defined]
        elif os2 is not None:
            ascent = float(os2.sTypoAscender)  # type: ignore[attr-defined]
            descent = float(os2.sTypoDescender)  # type: ignore[attr-defined]
        else:
            ascent = float(font["head"].yMax)  # type: ignore[attr-defined]
            descent = float(font["head"].yMin)  # type: ignore[attr-defined]

        x_height = float(getattr(os2, "sxHeight", 0) or 0) if os2 is not None else 0.0
        cap_height = float(getattr(os2, "sCapHeight", 0) or 0) if os2 is not None else 0.0
        if x_height <= 0:
            x_height = self._glyph_top("x") or upm * 0.5
        if cap_height <= 0:
            cap_height = self._glyph_top("H") or upm * 0.7

        self._metrics = Metrics(
            baseline=0.0,
            x_height=x_height,
            cap_height=max(cap_height, x_height),
            ascent=max(ascent, cap_height, x_height),
            descent=min(descent, -1.0),
        )
        return self._metrics

    def glyph_name_for_char(self, char: str) -> str | None:
        """Glyph name mapped to a character by the best cmap, if any."""
        cmap = self._require_font().getBestCmap()
        if not cmap or not char:
            return None
        return cmap.get(ord(char[0]))

    def get_outline(self, name: str) -> GlyphOutline | None:
        """Get a specific glyph outline by name.

        Args:
            name: Name of the glyph to retrieve

        Returns:
            GlyphOutline, or None if the glyph is missing or cannot be drawn

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        font = self._require_font()
        if name not in font.getGlyphOrder():
            return None

        glyph_set = font.getGlyphSet()
        try:
            return fonttools_glyph_to_outline(name, glyph_set[name], glyph_set)
        except OutlineConversionError as e:
            logger.warning("Glyph conversion failed", glyph=name, error=e.reason)
            return None

    def outline_for_char(self, char: str) -> GlyphOutline | None:
        """Outline of the glyph mapped to a character."""
        name = self.glyph_name_for_char(char)
        if name is None:
            return None
        return self.get_outline(name)

    def iter_outlines(self) -> Iterator[GlyphOutline]:
        """Iterate over all glyph outlines in glyph order.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        for glyph_name in self._require_font().getGlyphOrder():
            outline = self.get_outline(glyph_name)
            if outline is not None:
                yield outline

    def close(self) -> None:
        """Close the font file and free resources."""
        if self._font is not None:
            self._font.close()
            self._font = None
            self._metrics = None

    def __enter__(self) -> "FontReader":
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
