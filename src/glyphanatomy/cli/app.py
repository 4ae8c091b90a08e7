"""CLI application entry point for glyphanatomy.

This module provides the main CLI interface using Typer.
"""

import json
import time
from pathlib import Path
from typing import Annotated

import structlog
import typer

from glyphanatomy import __version__
from glyphanatomy.cli.output import (
    console,
    print_error,
    print_feature_table,
    print_features,
    print_font_info,
    print_header,
    print_highlight,
    print_step,
    print_summary,
)
from glyphanatomy.config import AnatomySettings, DetectionConfig, LoggingConfig, load_detection_config
from glyphanatomy.core import (
    DETECTORS,
    DetectionContext,
    available_features,
    batch_scanlines,
    detect_many,
    extract,
    features_for_character,
    glyph_summary,
    precompute_scanlines,
    require_feature,
)
from glyphanatomy.domain import FeatureName, GlyphOutline
from glyphanatomy.exceptions import FontLoadError, GlyphAnatomyError, GlyphNotFoundError
from glyphanatomy.io import FontReader
from glyphanatomy.utils import DetectionLogger, configure_logging

# Create the Typer app
app = typer.Typer(
    name="glyphanatomy",
    help="Detect typographic anatomy features (stems, bowls, serifs, ...) in font glyphs.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]glyphanatomy[/bold blue] v{__version__}")
        raise typer.Exit()


FontArgument = Annotated[
    Path,
    typer.Argument(
        help="Path to input TTF/OTF font file",
        show_default=False,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="JSON file overriding detection tuning values",
    ),
]

LogFileOption = Annotated[
    Path | None,
    typer.Option(
        "--log-file",
        help="Write detailed logs to file",
    ),
]

LogLevelOption = Annotated[
    str,
    typer.Option(
        "--log-level",
        help="Logging level (DEBUG|INFO|WARNING|ERROR)",
    ),
]

QuietOption = Annotated[
    bool,
    typer.Option(
        "--quiet",
        "-q",
        help="Minimal console output",
    ),
]

VersionOption = Annotated[
    bool | None,
    typer.Option(
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
]


@app.callback()
def main_callback(_version: VersionOption = None) -> None:  # noqa: ARG001
    """Detect typographic anatomy features in font glyphs."""


def _check_font_path(font: Path) -> None:
    if not font.exists():
        print_error(
            f"Input file not found: {font}",
            details=f"The file '{font}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    if not font.is_file():
        print_error(
            f"Input path is not a file: {font}",
            details="Please provide a path to a TTF or OTF font file.",
        )
        raise typer.Exit(code=1)


def _settings(
    config_path: Path | None, log_file: Path | None, log_level: str, quiet: bool
) -> AnatomySettings:
    detection = load_detection_config(config_path) if config_path else DetectionConfig()
    return AnatomySettings(
        detection=detection,
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level if not quiet else "ERROR",
        ),
    )


def _setup_logging(settings: AnatomySettings, quiet: bool) -> structlog.stdlib.BoundLogger:
    return configure_logging(
        log_file=settings.logging.log_file,
        console_level=settings.logging.log_level,
        file_level=settings.logging.file_log_level,
        quiet=quiet,
    )


def _outline_for(reader: FontReader, char: str) -> tuple[str, GlyphOutline]:
    glyph_name = reader.glyph_name_for_char(char)
    if glyph_name is None:
        raise GlyphNotFoundError(char)
    outline = reader.get_outline(glyph_name)
    if outline is None:
        raise GlyphNotFoundError(glyph_name)
    return glyph_name, outline


def _features_to_run(
    char: str, requested: list[FeatureName], all_features: bool
) -> list[FeatureName]:
    if all_features:
        return list(DETECTORS)
    if requested:
        return requested
    return list(features_for_character(char)) or list(DETECTORS)


@app.command()
def detect(
    font: FontArgument,
    text: Annotated[
        str,
        typer.Argument(
            help="Characters to examine",
            show_default=False,
        ),
    ],
    feature: Annotated[
        list[str] | None,
        typer.Option(
            "--feature",
            "-f",
            help="Feature to detect (repeatable; default: features hinted for each letter)",
        ),
    ] = None,
    all_features: Annotated[
        bool,
        typer.Option(
            "--all",
            help="Run every detector on every character",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print results as JSON",
        ),
    ] = False,
    config_path: ConfigOption = None,
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
    quiet: QuietOption = False,
    _version: VersionOption = None,  # noqa: ARG001
) -> None:
    """Detect anatomy features in the glyphs of some characters.

    Without --feature, each letter is checked for the features it usually
    shows (every feature for characters with no hint).

    Example:
        glyphanatomy detect Roboto-Regular.ttf "Hamburg" -f stem -f bowl
    """
    _check_font_path(font)

    try:
        requested = [require_feature(name) for name in feature or []]
        settings = _settings(config_path, log_file, log_level, quiet)
        logger = _setup_logging(settings, quiet)
        run_log = DetectionLogger(logger)

        show = not quiet and not json_output
        if show:
            print_header(__version__)
            print_step("Loading font")

        report: dict[str, dict[str, object]] = {}
        with FontReader(font) as reader:
            if show:
                print_font_info(
                    font_path=str(font),
                    font_type=reader.format,
                    glyph_count=reader.glyph_count,
                    upm=reader.units_per_em,
                )
                print_step("Detecting features")

            metrics = reader.metrics
            font_info = reader.font_info
            run_log.start()

            for char in dict.fromkeys(text):
                if char.isspace():
                    continue

                glyph_name = reader.glyph_name_for_char(char)
                outline = reader.get_outline(glyph_name) if glyph_name else None
                if glyph_name is None or outline is None:
                    run_log.log_glyph_skipped(char, "no glyph")
                    if show:
                        console.print(f"\n  [yellow]{char}[/yellow]: no glyph in font")
                    continue

                run_log.log_glyph_start(glyph_name)
                started = time.perf_counter()
                results = detect_many(
                    _features_to_run(char, requested, all_features),
                    outline,
                    metrics,
                    font_info,
                    config=settings.detection,
                    logger=logger,
                )
                found = sum(1 for result in results.values() if result.found)
                run_log.log_glyph_complete(
                    glyph_name, found, (time.perf_counter() - started) * 1000
                )

                report[char] = {
                    "glyph": glyph_name,
                    "features": {key: result.to_dict() for key, result in results.items()},
                }
                if show:
                    print_feature_table(char, glyph_name, results)

            run_log.finish()

        if json_output:
            typer.echo(json.dumps(report, indent=2))

    except FontLoadError as e:
        print_error(f"Could not load font: {e.reason}")
        raise typer.Exit(code=1)
    except GlyphAnatomyError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


@app.command("extract")
def extract_command(
    font: FontArgument,
    char: Annotated[
        str,
        typer.Argument(
            help="Character whose glyph is examined",
            show_default=False,
        ),
    ],
    feature: Annotated[
        str,
        typer.Argument(
            help="Feature to extract",
            show_default=False,
        ),
    ],
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print segments as JSON",
        ),
    ] = False,
    config_path: ConfigOption = None,
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Print the outline segments that make up a feature.

    Example:
        glyphanatomy extract Roboto-Regular.ttf H bar
    """
    _check_font_path(font)

    try:
        target = require_feature(feature)
        settings = _settings(config_path, log_file, log_level, quiet=False)
        _setup_logging(settings, quiet=False)

        with FontReader(font) as reader:
            _, outline = _outline_for(reader, char)
            highlight = extract(
                target, outline, reader.metrics, reader.font_info, config=settings.detection
            )

        if json_output:
            payload = highlight.to_dict() if highlight is not None else None
            typer.echo(json.dumps({"feature": target.value, "highlight": payload}, indent=2))
        else:
            print_highlight(target.display_name, highlight)

    except FontLoadError as e:
        print_error(f"Could not load font: {e.reason}")
        raise typer.Exit(code=1)
    except GlyphAnatomyError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


@app.command()
def features() -> None:
    """List the features that can be detected."""
    print_features(available_features())


@app.command()
def inspect(
    font: FontArgument,
    char: Annotated[
        str,
        typer.Argument(
            help="Character whose glyph is examined",
            show_default=False,
        ),
    ],
    config_path: ConfigOption = None,
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Show scale primitives, contour classes and scanline ink of a glyph.

    Example:
        glyphanatomy inspect Roboto-Regular.ttf g
    """
    _check_font_path(font)

    try:
        settings = _settings(config_path, log_file, log_level, quiet=False)
        logger = _setup_logging(settings, quiet=False)

        with FontReader(font) as reader:
            print_step("Loading font")
            print_font_info(
                font_path=str(font),
                font_type=reader.format,
                glyph_count=reader.glyph_count,
                upm=reader.units_per_em,
            )
            glyph_name, outline = _outline_for(reader, char)
            ctx = DetectionContext.create(
                outline, reader.metrics, reader.font_info, settings.detection, logger
            )

            print_step(f"Glyph {glyph_name}")
            summary = glyph_summary(ctx)
            print_summary(summary)
            if not summary["usable"]:
                return

            print_step("Scanlines")
            grid = precompute_scanlines(
                ctx.bbox, ctx.overshoot, bands=settings.detection.scan.grid_bands
            )
            for batch in batch_scanlines(grid.rows, settings.detection.scan.batch_size):
                for y in batch:
                    widths = ", ".join(f"{x1 - x0:.0f}" for x0, x1 in ctx.spans(y))
                    console.print(f"  y={y:<8.0f} {widths or '-'}")

    except FontLoadError as e:
        print_error(f"Could not load font: {e.reason}")
        raise typer.Exit(code=1)
    except GlyphAnatomyError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
