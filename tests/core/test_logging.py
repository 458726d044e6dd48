# tests/core/test_logging.py
"""Tests for structured logging configuration."""

import json
import logging
from collections.abc import Iterator

import pytest
import structlog


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Drop the handler bound to the captured stdout after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        """get_logger returns a bound logger."""
        from dough.core.logging import get_logger

        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")
        assert hasattr(logger, "bind")

    def test_logger_outputs_structured(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logger outputs structured JSON."""
        from dough.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        logger = get_logger("test")

        logger.info("config.initialized", files=2)

        captured = capsys.readouterr()
        log_line = captured.out.strip().split("\n")[-1]
        data = json.loads(log_line)
        assert data["event"] == "config.initialized"
        assert data["files"] == 2
        assert data["level"] == "info"
        assert "timestamp" in data

    def test_logger_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logger outputs human-readable in console mode."""
        from dough.core.logging import configure_logging, get_logger

        configure_logging(json_output=False)
        logger = get_logger("test")

        logger.info("config.initialized", files=2)

        captured = capsys.readouterr()
        assert "config.initialized" in captured.out
        assert not captured.out.strip().startswith("{")

    def test_level_filters_records(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Records below the configured level are dropped."""
        from dough.core.logging import configure_logging, get_logger

        configure_logging(json_output=True, level="WARNING")
        logger = get_logger("test")

        logger.info("config.value_loaded")
        logger.warning("config.file_save_skipped")

        lines = [line for line in capsys.readouterr().out.splitlines() if line]
        assert [json.loads(line)["event"] for line in lines] == ["config.file_save_skipped"]

    def test_level_is_case_insensitive(self) -> None:
        from dough.core.logging import configure_logging

        configure_logging(level="debug")

        assert logging.getLogger().level == logging.DEBUG

    def test_noisy_third_party_loggers_silenced(self) -> None:
        """Dynaconf stays at WARNING even in DEBUG mode."""
        from dough.core.logging import configure_logging

        configure_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("dynaconf").getEffectiveLevel() == logging.WARNING

    def test_noisy_loggers_follow_stricter_root_level(self) -> None:
        """A root level above WARNING is not loosened for noisy loggers."""
        from dough.core.logging import configure_logging

        configure_logging(level="ERROR")

        assert logging.getLogger("dynaconf").level == logging.ERROR

    def test_stdlib_loggers_emit_json_when_json_output_enabled(self, capsys: pytest.CaptureFixture[str]) -> None:
        """stdlib loggers go through the same JSON renderer as structlog."""
        from dough.core.logging import configure_logging

        configure_logging(json_output=True)

        logging.getLogger("test.stdlib.module").info("message from stdlib logger")

        captured = capsys.readouterr()
        data = json.loads(captured.out.strip().split("\n")[-1])
        assert data["event"] == "message from stdlib logger"
        assert "level" in data
        assert "timestamp" in data
        assert "_record" not in data

    def test_stdlib_loggers_emit_console_when_console_mode(self, capsys: pytest.CaptureFixture[str]) -> None:
        from dough.core.logging import configure_logging

        configure_logging(json_output=False)

        logging.getLogger("test.stdlib.console").info("message from stdlib logger")

        captured = capsys.readouterr()
        assert "message from stdlib logger" in captured.out
        assert not captured.out.strip().split("\n")[-1].startswith("{")

    def test_reconfigure_replaces_handler(self) -> None:
        """Calling configure_logging twice leaves one root handler."""
        from dough.core.logging import configure_logging

        configure_logging()
        configure_logging(json_output=True)

        assert len(logging.getLogger().handlers) == 1

    def test_unknown_level_rejected(self) -> None:
        from dough.core.logging import configure_logging

        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging(level="CHATTY")

    def test_custom_stream(self) -> None:
        """Output goes to the given stream instead of stdout."""
        import io

        from dough.core.logging import configure_logging, get_logger

        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)

        get_logger("test").error("config.file_write_failed", file="Audio.cfg")

        data = json.loads(stream.getvalue().strip().split("\n")[-1])
        assert data["event"] == "config.file_write_failed"
        assert data["file"] == "Audio.cfg"
