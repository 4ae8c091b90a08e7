"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with tables and formatted messages.
"""

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from glyphanatomy.domain import FeatureHighlight, FeatureResult

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success / found
SYM_ERR = "✗"  # Error / not found
SYM_DOT = "·"  # Separator/secondary info


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]glyphanatomy[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_font_info(font_path: str, font_type: str, glyph_count: int, upm: int) -> None:
    """Print font information.

    Args:
        font_path: Path to the font file
        font_type: Font format type (e.g., "TrueType", "OpenType")
        glyph_count: Total number of glyphs in font
        upm: Units per em value
    """
    # Use Text to safely handle paths with special characters
    line1 = Text("  ")
    line1.append(font_path)
    line1.append(f" ({font_type})")
    console.print(line1)
    console.print(f"  {glyph_count:,} glyphs {SYM_DOT} {upm:,} UPM")


def _describe(result: FeatureResult) -> str:
    parts = []
    if result.label:
        parts.append(result.label)
    if result.location is not None:
        parts.append(f"at ({result.location.x:.0f}, {result.location.y:.0f})")
    if result.shape is not None:
        parts.append(type(result.shape).__name__.removesuffix("Shape").lower())
    return f" {SYM_DOT} ".join(parts)


def print_feature_table(char: str, glyph_name: str, results: dict[str, FeatureResult]) -> None:
    """Print one table of feature verdicts for a character.

    Args:
        char: Character that was examined
        glyph_name: Glyph the character maps to
        results: Verdicts keyed by feature value
    """
    table = Table(title=f"{char} ({glyph_name})", title_justify="left", show_edge=False)
    table.add_column("Feature")
    table.add_column("Found", justify="center")
    table.add_column("Details")

    for key, result in results.items():
        mark = f"[green]{SYM_OK}[/green]" if result.found else f"[dim]{SYM_ERR}[/dim]"
        table.add_row(key.replace("_", " "), mark, _describe(result))

    console.print()
    console.print(table)


def print_highlight(feature: str, highlight: FeatureHighlight | None) -> None:
    """Print the outline segments of an extracted feature.

    Args:
        feature: Feature display name
        highlight: Extracted segments, or None when nothing was extracted
    """
    if highlight is None or highlight.is_empty():
        console.print(f"\n  {feature}: [dim]no segments[/dim]")
        return

    closed = " (closed)" if highlight.closed else ""
    console.print(f"\n[bold]{feature}[/bold] {len(highlight.segments)} segments{closed}")
    for segment in highlight.segments:
        points = " ".join(f"({p.x:.0f},{p.y:.0f})" for p in segment.points)
        console.print(f"  {segment.kind.value:<6} c{segment.contour} {points}")


def print_summary(summary: dict[str, Any]) -> None:
    """Print scale primitives, contour classes and serif style of a glyph.

    Args:
        summary: Mapping produced by glyph_summary
    """
    if not summary.get("usable"):
        console.print("  [dim]Outline is empty or malformed[/dim]")
        return

    bbox = summary["bbox"]
    console.print(
        f"  bbox ({bbox['min_x']:.0f}, {bbox['min_y']:.0f}) "
        f"{SYM_DOT} ({bbox['max_x']:.0f}, {bbox['max_y']:.0f})"
    )
    for key, value in summary["scale"].items():
        console.print(f"  {key:<12} {value:.2f}")
    contours = ", ".join(f"{count} {kind}" for kind, count in summary["contours"].items())
    console.print(f"  contours     {contours}")
    serif = {True: "serif", False: "sans"}.get(summary["serif"], "unknown")
    console.print(f"  style        {serif}")
    console.print(f"  segments     {summary['segments']}")


def print_features(names: list[str]) -> None:
    """Print available feature names, one per line."""
    console.print(f"\n[bold]{len(names)} features[/bold]\n")
    for name in names:
        console.print(f"  {name}")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {escape(message)}")
    if details:
        console.print(f"  {escape(details)}")
