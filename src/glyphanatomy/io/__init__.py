"""Font I/O layer for glyphanatomy.

This module handles reading font files using fonttools. It provides a
clean abstraction layer between fonttools and the domain models.

Key responsibilities:
- Load TTF/OTF fonts
- Convert fonttools glyphs to GlyphOutline
- Read vertical metrics and font constants

Key classes:
- FontReader: Load fonts and extract outlines
"""

from glyphanatomy.io.converter import fonttools_glyph_to_outline, recording_to_commands
from glyphanatomy.io.reader import FontReader

__all__ = [
    "FontReader",
    "fonttools_glyph_to_outline",
    "recording_to_commands",
]
