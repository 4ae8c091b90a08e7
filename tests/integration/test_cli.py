"""End-to-end tests for the command-line interface."""

import json
import logging
from pathlib import Path

import pytest
import structlog
from typer.testing import CliRunner

from glyphanatomy.cli.app import app
from glyphanatomy.utils import logging as logging_utils

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    root = logging.getLogger()
    for handler in logging_utils._installed_handlers:
        root.removeHandler(handler)
    logging_utils._installed_handlers.clear()
    structlog.reset_defaults()


class TestInfoCommands:
    """Tests for commands that need no font."""

    def test_features(self) -> None:
        """Test the feature list uses display names."""
        result = runner.invoke(app, ["features"])
        assert result.exit_code == 0
        assert "Stem" in result.output
        assert "Cross stroke" in result.output

    def test_version(self) -> None:
        """Test --version prints the version and exits cleanly."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "glyphanatomy" in result.output


class TestDetectCommand:
    """Tests for the detect command."""

    def test_json_output(self, test_font: Path) -> None:
        """Test JSON results per character."""
        result = runner.invoke(app, ["detect", str(test_font), "I", "-f", "stem", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["I"]["glyph"] == "I"
        assert data["I"]["features"]["stem"]["found"] is True

    def test_hinted_features(self, test_font: Path) -> None:
        """Test letters without --feature get their hinted features."""
        result = runner.invoke(app, ["detect", str(test_font), "H", "--json"])
        assert result.exit_code == 0, result.output
        features = json.loads(result.stdout)["H"]["features"]
        assert set(features) == {"bar", "stem", "foot"}
        assert features["bar"]["found"] is True

    def test_table_output(self, test_font: Path) -> None:
        """Test the rich table run completes and skips unmapped characters."""
        result = runner.invoke(app, ["detect", str(test_font), "oZ", "-f", "counter"])
        assert result.exit_code == 0, result.output
        assert "no glyph in font" in result.output

    def test_unknown_feature(self, test_font: Path) -> None:
        """Test an unknown feature name fails with exit code 1."""
        result = runner.invoke(app, ["detect", str(test_font), "I", "-f", "swash"])
        assert result.exit_code == 1
        assert "Unknown feature" in result.output

    def test_missing_font(self, tmp_path: Path) -> None:
        """Test a missing font path fails with exit code 1."""
        result = runner.invoke(app, ["detect", str(tmp_path / "missing.ttf"), "I"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_bad_config(self, test_font: Path, tmp_path: Path) -> None:
        """Test an invalid tuning file fails with exit code 1."""
        config = tmp_path / "tuning.json"
        config.write_text('{"scan": {"bands": 0}}', encoding="utf-8")
        result = runner.invoke(app, ["detect", str(test_font), "I", "--config", str(config)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_log_file(self, test_font: Path, tmp_path: Path) -> None:
        """Test --log-file receives the run log."""
        log_file = tmp_path / "run.log"
        result = runner.invoke(
            app,
            ["detect", str(test_font), "I", "-f", "stem", "--json", "--log-file", str(log_file)],
        )
        assert result.exit_code == 0, result.output
        for handler in logging_utils._installed_handlers:
            handler.flush()
        assert "Detection run complete" in log_file.read_text(encoding="utf-8")


class TestExtractCommand:
    """Tests for the extract command."""

    def test_bar_json(self, test_font: Path) -> None:
        """Test the crossbar of H comes back as two segments."""
        result = runner.invoke(app, ["extract", str(test_font), "H", "bar", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["feature"] == "bar"
        assert len(data["highlight"]["segments"]) == 2

    def test_missing_character(self, test_font: Path) -> None:
        """Test a character without a glyph fails with exit code 1."""
        result = runner.invoke(app, ["extract", str(test_font), "Z", "bar"])
        assert result.exit_code == 1


class TestInspectCommand:
    """Tests for the inspect command."""

    def test_summary(self, test_font: Path) -> None:
        """Test the contour summary of o lists its hole."""
        result = runner.invoke(app, ["inspect", str(test_font), "o"])
        assert result.exit_code == 0, result.output
        assert "hole" in result.output
        assert "Scanlines" in result.output
