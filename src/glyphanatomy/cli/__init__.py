"""Command-line interface for glyphanatomy.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Key features:
- Feature tables per character, or JSON output
- Segment extraction for a single feature
- Glyph inspection (scale primitives, contour classes, scanlines)
- Detailed error reporting
"""

from glyphanatomy.cli.app import cli, main

__all__ = ["cli", "main"]
