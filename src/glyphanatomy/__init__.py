"""glyphanatomy - Detect typographic anatomy features in glyph outlines.

glyphanatomy inspects a single glyph's vector outline and decides whether it
exhibits named typographic features (stem, bowl, counter, serif, apex, tittle,
and some two dozen others). For each feature it returns a found/not-found
verdict with an optional shape or anchor, and can extract the outline segments
that make up the feature for highlighting.

Example:
    >>> from glyphanatomy.core import detect
    >>> result = detect("Stem", outline, metrics, font)
    >>> result.found
    True

The command-line inspector runs the same detectors on characters of a font:

    $ glyphanatomy detect Roboto-Regular.ttf "Hamburg"
"""

__version__ = "0.1.0"
__author__ = "Dimosthenis Kaponis"

__all__ = ["__author__", "__version__"]
