"""Tests for shelfwise.cli module.

Tests cover:
- CLI argument parsing
- detect command
- extract command
- parse command
- prompt command
- Error handling and logging setup
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from shelfwise import cli
from shelfwise.cli import create_parser, run_cli, setup_logging
from shelfwise.config import AppConfig

STANDARD_RESPONSE = """\
##**##
I. 1. Atomic Habits
   2. James Clear
   3.
   4.
##**##
"""

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_logging(monkeypatch: pytest.MonkeyPatch):
    """Remove handlers installed by setup_logging after each test."""
    monkeypatch.delenv("SHELFWISE_DEBUG", raising=False)
    monkeypatch.delenv("SHELFWISE_LOG_LEVEL", raising=False)
    monkeypatch.delenv("SHELFWISE_LOG_FILE", raising=False)
    root_logger = logging.getLogger()
    level = root_logger.level
    yield
    for handler in cli._log_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    cli._log_handlers.clear()
    root_logger.setLevel(level)


@pytest.fixture
def response_file(tmp_path: Path) -> Path:
    """Write a standard recognition response to a file."""
    path = tmp_path / "response.txt"
    path.write_text(STANDARD_RESPONSE, encoding="utf-8")
    return path


def run_json(capsys: pytest.CaptureFixture[str], args: list[str]) -> tuple[int, dict]:
    code = run_cli(args)
    return code, json.loads(capsys.readouterr().out)


# =============================================================================
# Parser Tests
# =============================================================================


class TestParser:
    """Tests for argument parser."""

    def test_create_parser(self) -> None:
        """Test parser creation."""
        parser = create_parser()
        assert parser.prog == "shelfwise"

    def test_parser_detect(self) -> None:
        """Test parsing 'detect' command."""
        args = create_parser().parse_args(["detect", "scan these", "--image", "--json"])

        assert args.command == "detect"
        assert args.message == "scan these"
        assert args.image is True
        assert args.json is True
        assert hasattr(args, "func")

    def test_parser_parse_defaults_to_stdin(self) -> None:
        args = create_parser().parse_args(["parse"])
        assert args.source == "-"
        assert args.json is False

    def test_parser_project_option(self, tmp_path: Path) -> None:
        args = create_parser().parse_args(["-p", str(tmp_path), "prompt"])
        assert args.project_path == str(tmp_path)
        assert args.command == "prompt"


# =============================================================================
# Command Tests
# =============================================================================


class TestDetect:
    """Tests for the detect command."""

    def test_detect_json(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Update messages come back as update_book with their fields."""
        code, data = run_json(
            capsys,
            ["-p", str(tmp_path), "detect", "Update price of Atomic Habits to 350", "--json"],
        )

        assert code == 0
        assert data == {
            "kind": "update_book",
            "message": "Update price of Atomic Habits to 350",
            "update_type": "PRICE",
            "book_identifier": "Atomic Habits",
            "new_value": "350",
        }

    def test_detect_image(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code, data = run_json(
            capsys, ["-p", str(tmp_path), "detect", "Scan these books", "-i", "--json"]
        )
        assert code == 0
        assert data["kind"] == "book_cataloging"
        assert data["has_image"] is True

    def test_detect_table(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Table output is titled with the intent description."""
        code = run_cli(["-p", str(tmp_path), "detect", "Find books by James Clear"])
        out = capsys.readouterr().out

        assert code == 0
        assert "Search inventory: by_author" in out
        assert "BY_AUTHOR" in out

    def test_detect_chat(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code, data = run_json(capsys, ["-p", str(tmp_path), "detect", "Hello!", "--json"])
        assert code == 0
        assert data == {"kind": "regular_chat", "message": "Hello!"}


class TestExtract:
    """Tests for the extract command."""

    def test_extract_json(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code, data = run_json(
            capsys,
            [
                "-p",
                str(tmp_path),
                "extract",
                "Add book: Atomic Habits by James Clear price ₹299 qty 5 location A-1 used",
                "--json",
            ],
        )

        assert code == 0
        assert data["book"]["title"] == "Atomic Habits"
        assert data["book"]["author"] == "James Clear"
        assert data["book"]["price"] == 299.0
        assert data["book"]["condition"] == "Used"
        assert data["issues"] == []

    def test_extract_reports_issues(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Missing fields are reported but do not fail the command."""
        code = run_cli(["-p", str(tmp_path), "extract", "price ₹100"])
        out = capsys.readouterr().out

        assert code == 0
        assert "Book title is required" in out
        assert "Book author is required" in out


class TestParse:
    """Tests for the parse command."""

    def test_parse_file_json(
        self, tmp_path: Path, response_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code, data = run_json(
            capsys, ["-p", str(tmp_path), "parse", str(response_file), "--json"]
        )

        assert code == 0
        assert data["success"] is True
        assert data["summary"] == "Successfully parsed 1 book(s)"
        assert data["records"][0]["title_english"] == "Atomic Habits"
        assert data["records"][0]["source_type"] == "AI"
        assert data["issues"] == []

    def test_parse_table(
        self, tmp_path: Path, response_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = run_cli(["-p", str(tmp_path), "parse", str(response_file)])
        out = capsys.readouterr().out

        assert code == 0
        assert "Atomic Habits" in out
        assert "Successfully parsed 1 book(s)" in out

    def test_parse_failure_exit_code(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Responses without books exit with 1."""
        path = tmp_path / "empty.txt"
        path.write_text("Sorry, the photo is too blurry.", encoding="utf-8")

        code, data = run_json(capsys, ["-p", str(tmp_path), "parse", str(path), "--json"])

        assert code == 1
        assert data["success"] is False
        assert data["error_message"] == "No book information found in response"

    def test_parse_stdin(
        self,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        import io

        monkeypatch.setattr("sys.stdin", io.StringIO("Title: Sapiens\nAuthor: Yuval Noah Harari"))
        code, data = run_json(capsys, ["-p", str(tmp_path), "parse", "-", "--json"])

        assert code == 0
        assert data["books"][0]["parsing_method"] == "alternative_2"

    def test_parse_uses_config_delimiter(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config_dir = tmp_path / ".shelfwise"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("parser:\n  delimiter: '~~~'\n")
        path = tmp_path / "response.txt"
        path.write_text("~~~\nI. 1. Sapiens\n2. Yuval Noah Harari\n~~~", encoding="utf-8")

        code, data = run_json(capsys, ["-p", str(tmp_path), "parse", str(path), "--json"])

        assert code == 0
        assert data["books"][0]["parsing_method"] == "standard"


class TestPrompt:
    """Tests for the prompt command."""

    def test_prompt_prints_layout(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Brackets in the prompt are printed literally."""
        code = run_cli(["-p", str(tmp_path), "prompt"])
        out = capsys.readouterr().out

        assert code == 0
        assert "##**##" in out
        assert "[English Title]" in out


# =============================================================================
# run_cli Tests
# =============================================================================


class TestRunCli:
    """Tests for run_cli error handling."""

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_cli([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_invalid_config_returns_error(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Config errors are reported and exit with 1."""
        config_dir = tmp_path / ".shelfwise"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("parser:\n  min_field_length: 0\n")

        code = run_cli(["-p", str(tmp_path), "prompt"])

        assert code == 1
        assert "Error:" in capsys.readouterr().out

    def test_missing_file_returns_error(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = run_cli(["-p", str(tmp_path), "parse", str(tmp_path / "missing.txt")])
        assert code == 1
        assert "Error:" in capsys.readouterr().out

    def test_keyboard_interrupt(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def interrupted(args, config):
            raise KeyboardInterrupt

        monkeypatch.setattr(cli, "prompt", interrupted)
        assert run_cli(["-p", str(tmp_path), "prompt"]) == 130


class TestSetupLogging:
    """Tests for logging setup."""

    def test_level_from_config(self, tmp_path: Path) -> None:
        setup_logging(AppConfig(project_path=tmp_path, log_level="INFO"))
        assert logging.getLogger().level == logging.INFO

    def test_debug_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHELFWISE_DEBUG", "1")
        setup_logging(AppConfig(project_path=tmp_path))
        assert logging.getLogger().level == logging.DEBUG

    def test_log_file(self, tmp_path: Path) -> None:
        """A configured log file receives records."""
        log_file = tmp_path / "logs" / "shelfwise.log"
        logger = setup_logging(AppConfig(project_path=tmp_path, log_file=log_file))

        logger.warning("shelf check")
        for handler in cli._log_handlers:
            handler.flush()

        assert "shelf check" in log_file.read_text(encoding="utf-8")

    def test_reconfigure_replaces_handlers(self, tmp_path: Path) -> None:
        config = AppConfig(project_path=tmp_path)
        setup_logging(config)
        setup_logging(config)
        assert len(cli._log_handlers) == 1
