"""
Tests for structured logging configuration and JSON formatter.
"""
import json
import logging
from unittest.mock import patch

from screener.core.logging_config import (
    JSONFormatter,
    session_id_context,
    setup_logging,
)


def _record(msg="Test message", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for the JSONFormatter class."""

    def test_basic_log_entry(self):
        """Test that basic log entry produces valid JSON with required fields."""
        log_entry = json.loads(JSONFormatter().format(_record()))

        assert "timestamp" in log_entry
        assert log_entry["level"] == "INFO"
        assert log_entry["logger"] == "test_logger"
        assert log_entry["message"] == "Test message"
        assert "session_id" not in log_entry

    def test_session_id_from_context(self):
        """Test that session_id is included when set in context."""
        token = session_id_context.set("session-abc")
        try:
            log_entry = json.loads(JSONFormatter().format(_record()))
            assert log_entry["session_id"] == "session-abc"
        finally:
            session_id_context.reset(token)

    def test_explicit_session_id_wins(self):
        """Test that an explicit extra overrides the context variable."""
        token = session_id_context.set("session-context")
        try:
            record = _record(session_id="session-extra")
            log_entry = json.loads(JSONFormatter().format(record))
            assert log_entry["session_id"] == "session-extra"
        finally:
            session_id_context.reset(token)

    def test_structured_extras(self):
        """Test that known extra fields are copied into the entry."""
        record = _record(student_id="student-9", question_id="q-4", theta=0.42)
        log_entry = json.loads(JSONFormatter().format(record))

        assert log_entry["student_id"] == "student-9"
        assert log_entry["question_id"] == "q-4"
        assert log_entry["theta"] == 0.42

    def test_error_includes_source(self):
        """Test that error-level entries carry their source location."""
        log_entry = json.loads(JSONFormatter().format(_record(level=logging.ERROR)))
        assert log_entry["source"] == "test.py:10"


class TestSetupLogging:
    """Tests for the setup_logging function."""

    @patch("screener.core.logging_config.settings")
    def test_production_uses_json_formatter(self, mock_settings):
        """Test that production environment uses JSON formatter."""
        mock_settings.ENV = "production"
        mock_settings.DEBUG = False
        mock_settings.LOG_LEVEL = "INFO"

        with patch("logging.config.dictConfig") as mock_dictconfig:
            setup_logging()

            config = mock_dictconfig.call_args[0][0]
            assert config["handlers"]["console"]["formatter"] == "json"
            selection_logger = config["loggers"]["screener.core.adaptive.item_selection"]
            assert selection_logger["level"] == logging.WARNING

    @patch("screener.core.logging_config.settings")
    def test_development_uses_default_formatter(self, mock_settings):
        """Test that development environment uses human-readable formatter."""
        mock_settings.ENV = "development"
        mock_settings.DEBUG = True
        mock_settings.LOG_LEVEL = "DEBUG"

        with patch("logging.config.dictConfig") as mock_dictconfig:
            setup_logging()

            config = mock_dictconfig.call_args[0][0]
            assert config["handlers"]["console"]["formatter"] == "default"
            assert config["loggers"]["screener"]["level"] == logging.DEBUG
            selection_logger = config["loggers"]["screener.core.adaptive.item_selection"]
            assert selection_logger["level"] == logging.DEBUG



class TestAdaptiveLogFields:
    """Engine log calls carry the structured fields the JSON formatter emits."""

    def test_session_creation_fields(self, caplog):
        from screener.core.adaptive.session import create_session

        with caplog.at_level(logging.INFO, logger="screener.core.adaptive.session"):
            create_session("student-7", "Mathematics", "5")

        log_entry = json.loads(JSONFormatter().format(caplog.records[-1]))
        assert log_entry["student_id"] == "student-7"
        assert log_entry["subject"] == "Mathematics"
        assert log_entry["grade_level"] == "5"

    def test_selection_fields(self, caplog, math_pool, math_session):
        from screener.core.adaptive.item_selection import select_next_question

        with caplog.at_level(
            logging.DEBUG, logger="screener.core.adaptive.item_selection"
        ):
            select_next_question(math_pool, math_session)

        record = [r for r in caplog.records if hasattr(r, "question_id")][-1]
        log_entry = json.loads(JSONFormatter().format(record))
        assert log_entry["question_id"] == "m13"
        assert log_entry["theta"] == 0
        assert log_entry["num_questions"] == 0

    def test_finalize_fields(self, caplog, math_session):
        from screener.core.adaptive.session import finalize_session

        with caplog.at_level(logging.INFO, logger="screener.core.adaptive.session"):
            finalize_session(math_session)

        log_entry = json.loads(JSONFormatter().format(caplog.records[-1]))
        assert log_entry["student_id"] == math_session.student_id
        assert log_entry["standard_error"] == 1.0
        assert log_entry["num_questions"] == 0
