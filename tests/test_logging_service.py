"""Tests for the logging service."""

import json
import logging
import os
from io import StringIO
from pathlib import Path
from unittest.mock import patch

from hypothesis import given, strategies as st

from oplfs.services.logging import LoggingService, setup_logging


def _json_lines(text: str) -> list[dict]:
    return [json.loads(line) for line in text.splitlines() if line.strip()]


class TestLoggingService:
    """Test cases for LoggingService."""

    def test_development_logging_format(self) -> None:
        """Development logging on the console is human-readable."""
        with patch.dict(os.environ, {"ENVIRONMENT": "development"}):
            with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
                service = LoggingService(log_level="INFO")
                service.configure()

                service.get_logger("test").info("test message", key="value")
                output = mock_stderr.getvalue()

        assert "test message" in output
        assert not output.strip().startswith("{")

    def test_console_logs_go_to_stderr(self) -> None:
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            with patch("sys.stdout", new_callable=StringIO) as mock_stdout, \
                    patch("sys.stderr", new_callable=StringIO) as mock_stderr:
                service = LoggingService(log_level="INFO")
                service.configure()

                service.get_logger("test").info("test message", key="value")

        assert mock_stdout.getvalue() == ""
        parsed = _json_lines(mock_stderr.getvalue())[0]
        assert parsed["event"] == "test message"
        assert parsed["key"] == "value"
        assert "timestamp" in parsed
        assert "level" in parsed

    def test_quiet_disables_console(self) -> None:
        with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
            service = LoggingService(log_level="DEBUG", quiet=True)
            service.configure()

            service.get_logger("test").warning("not shown")

        assert mock_stderr.getvalue() == ""
        assert logging.getLogger().handlers == []

    def test_level_filters_messages(self) -> None:
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
                service = LoggingService(log_level="warning")
                service.configure()

                logger = service.get_logger("test")
                logger.info("dropped")
                logger.warning("kept")

        assert [entry["event"] for entry in _json_lines(mock_stderr.getvalue())] == ["kept"]

    def test_file_logging_setup(self, tmp_path: Path) -> None:
        """File logging writes JSON to oplfs.log."""
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            service = LoggingService(log_level="INFO", log_dir=tmp_path, quiet=True)
            service.configure()

            service.get_logger("test").info("test file message", data="test")

        app_log = tmp_path / "oplfs.log"
        error_log = tmp_path / "error.log"
        assert app_log.exists()
        assert error_log.exists()

        parsed = _json_lines(app_log.read_text(encoding="utf-8"))[0]
        assert parsed["event"] == "test file message"
        assert parsed["data"] == "test"
        assert error_log.read_text(encoding="utf-8") == ""

    def test_file_logging_is_json_in_development(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {"ENVIRONMENT": "development"}):
            service = LoggingService(log_level="INFO", log_dir=tmp_path, quiet=True)
            service.configure()

            service.get_logger("test").info("dev file message")

        parsed = _json_lines((tmp_path / "oplfs.log").read_text(encoding="utf-8"))[0]
        assert parsed["event"] == "dev file message"

    def test_error_file_logging(self, tmp_path: Path) -> None:
        """Errors are also logged to error.log."""
        log_dir = tmp_path / "logs"
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            service = LoggingService(log_level="DEBUG", log_dir=log_dir, quiet=True)
            service.configure()

            logger = service.get_logger("test")
            logger.warning("only in main log")
            logger.error("test error message", error_code=500)

        entries = _json_lines((log_dir / "error.log").read_text(encoding="utf-8"))
        assert len(entries) == 1
        assert entries[0]["event"] == "test error message"
        assert entries[0]["error_code"] == 500
        assert entries[0]["level"] == "error"

        events = [entry["event"] for entry in _json_lines((log_dir / "oplfs.log").read_text(encoding="utf-8"))]
        assert events == ["only in main log", "test error message"]


class TestStructuredLoggingProperties:
    """Property-based tests for structured logging consistency."""

    @given(
        log_level=st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
        logger_name=st.text(min_size=1, max_size=50).filter(lambda x: x.isidentifier()),
        message=st.text(min_size=1, max_size=200),
        context_data=st.dictionaries(
            keys=st.text(min_size=1, max_size=20).filter(lambda x: x.isidentifier()),
            values=st.one_of(
                st.text(max_size=100),
                st.integers(),
                st.booleans()
            ),
            max_size=5
        )
    )
    def test_structured_logging_consistency(
        self,
        log_level: str,
        logger_name: str,
        message: str,
        context_data: dict[str, str | int | bool]
    ) -> None:
        """Every event carries its level, logger name, timestamp and context."""
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
                service = LoggingService(log_level="DEBUG")
                service.configure()

                logger = service.get_logger(logger_name)
                getattr(logger, log_level.lower())(message, **context_data)

                output = mock_stderr.getvalue()

        parsed = _json_lines(output)[0]
        assert parsed["event"] == message
        assert parsed["level"].upper() == log_level
        assert parsed["logger"] == logger_name
        for key, value in context_data.items():
            assert parsed[key] == value
        assert "T" in parsed["timestamp"]
        assert parsed["timestamp"].endswith("Z")

    @given(
        error_message=st.text(min_size=1, max_size=100).filter(lambda x: x.isprintable()),
        exception_type=st.sampled_from([ValueError, RuntimeError, OSError]),
    )
    def test_error_logging_completeness(self, error_message: str, exception_type: type[Exception]) -> None:
        """Logged exceptions include the traceback."""
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
                service = LoggingService(log_level="DEBUG")
                service.configure()
                logger = service.get_logger("crawler")

                try:
                    raise exception_type(error_message)
                except exception_type:
                    logger.error("Error occurred during operation", exc_info=True, error_type=exception_type.__name__)

                output = mock_stderr.getvalue()

        parsed = _json_lines(output)[0]
        assert parsed["level"] == "error"
        assert parsed["error_type"] == exception_type.__name__
        assert "Traceback" in parsed["exception"]
        assert exception_type.__name__ in parsed["exception"]


def test_setup_logging_function(tmp_path: Path) -> None:
    """The setup_logging convenience function configures file logging."""
    with patch.dict(os.environ, {"ENVIRONMENT": "development"}):
        service = setup_logging(
            log_level="DEBUG",
            log_dir=tmp_path,
            environment="production",
            quiet=True,
        )

        assert isinstance(service, LoggingService)
        assert os.environ["ENVIRONMENT"] == "production"
        assert service.log_level == "DEBUG"

        service.get_logger("test_setup").info("setup test", component="test")

    parsed = _json_lines((tmp_path / "oplfs.log").read_text(encoding="utf-8"))[0]
    assert parsed["event"] == "setup test"
    assert parsed["component"] == "test"
