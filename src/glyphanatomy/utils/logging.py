"""Logging utilities for glyphanatomy."""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

import structlog

# Handlers installed by the last configure_logging call
_installed_handlers: list[logging.Handler] = []


@dataclass
class DetectionStats:
    """Statistics from a detection run."""

    scanned_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    features_found: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate run duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure structured logging.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        root_logger.addHandler(file_handler)
        _installed_handlers.append(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(
        logging.ERROR if quiet else getattr(logging, console_level.upper())
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)
    _installed_handlers.append(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("glyphanatomy")
    logger.debug(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


def get_logger(name: str = "glyphanatomy") -> structlog.stdlib.BoundLogger:
    """Get a named structlog logger."""
    return structlog.get_logger(name)


class DetectionLogger:
    """Logger for tracking detection progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = DetectionStats()

    def start(self) -> None:
        """Mark the start of a run."""
        self._stats.start_time = time.perf_counter()

    def finish(self) -> None:
        """Mark the end of a run."""
        self._stats.end_time = time.perf_counter()
        self._logger.info(
            "Detection run complete",
            scanned=self._stats.scanned_count,
            skipped=self._stats.skipped_count,
            errors=self._stats.error_count,
            found=self._stats.features_found,
            duration_s=round(self._stats.duration_seconds, 3),
        )

    def log_glyph_start(self, glyph_name: str) -> None:
        """Log start of glyph scanning."""
        self._logger.debug("Scanning glyph", glyph=glyph_name)

    def log_glyph_complete(
        self,
        glyph_name: str,
        features_found: int,
        duration_ms: float,
    ) -> None:
        """Log a scanned glyph."""
        self._logger.info(
            "Glyph scanned",
            glyph=glyph_name,
            found=features_found,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.scanned_count += 1
        self._stats.features_found += features_found

    def log_glyph_skipped(self, glyph_name: str, reason: str) -> None:
        """Log skipped glyph."""
        self._logger.debug("Glyph skipped", glyph=glyph_name, reason=reason)
        self._stats.skipped_count += 1

    def log_glyph_error(
        self,
        glyph_name: str,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log glyph scanning error."""
        self._logger.error(
            "Glyph scanning failed",
            glyph=glyph_name,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((glyph_name, str(error)))

    def log_feature(self, glyph_name: str, feature: str, found: bool) -> None:
        """Log a single feature verdict."""
        self._logger.debug("Feature checked", glyph=glyph_name, feature=feature, found=found)

    @property
    def stats(self) -> DetectionStats:
        """Get current run statistics."""
        return self._stats
