"""Unit tests for logging_config module."""

import logging

import pytest

from callboard import _init_logging
from callboard.logging_config import (
    NO_EXPORT_ID,
    ExportIdFilter,
    configure_logging,
    console_handler,
    export_context,
    get_export_id,
)

pytestmark = pytest.mark.unit


class TestExportContext:
    """Tests for export id propagation."""

    def test_default_export_id(self):
        assert get_export_id() == NO_EXPORT_ID

    def test_context_sets_and_resets(self):
        with export_context("abc123") as export_id:
            assert export_id == "abc123"
            assert get_export_id() == "abc123"
        assert get_export_id() == NO_EXPORT_ID

    def test_generated_id(self):
        with export_context() as export_id:
            assert len(export_id) == 8
            assert export_id != NO_EXPORT_ID

    def test_filter_stamps_records(self):
        record = logging.LogRecord("callboard", logging.INFO, __file__, 1, "msg", None, None)
        with export_context("xyz"):
            assert ExportIdFilter().filter(record) is True
        assert record.export_id == "xyz"


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_debug_mode(self):
        configure_logging(debug_mode=True)

        assert logging.getLogger("callboard").level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_force_debug_overrides_env(self, monkeypatch):
        monkeypatch.setenv("CALLBOARD_DEBUG", "true")
        configure_logging(force_debug=False)
        assert logging.getLogger("callboard").level == logging.INFO

    def test_env_debug(self, monkeypatch):
        monkeypatch.setenv("CALLBOARD_DEBUG", "1")
        configure_logging()
        assert logging.getLogger("callboard.deduplicator").getEffectiveLevel() == logging.DEBUG

    def test_env_log_level_sets_root(self, monkeypatch):
        monkeypatch.setenv("CALLBOARD_LOG_LEVEL", "warning")
        configure_logging()
        assert logging.getLogger().level == logging.WARNING

    def test_quiets_http_and_pdf_libraries(self):
        configure_logging()

        assert logging.getLogger("callboard").level == logging.INFO
        for name in ("httpx", "httpcore", "reportlab"):
            assert logging.getLogger(name).level == logging.WARNING

    def test_console_handler_formats_export_id(self):
        handler = console_handler()
        record = logging.LogRecord("callboard.ics_export", logging.INFO, __file__, 1, "Wrote %d events", (3,), None)

        with export_context("run42"):
            assert handler.filter(record)
        line = handler.format(record)

        assert "[run42] callboard.ics_export: Wrote 3 events" in line
        assert "INFO" in line

    def test_handlers_get_export_filter(self):
        configure_logging()
        for handler in logging.getLogger().handlers:
            assert any(isinstance(f, ExportIdFilter) for f in handler.filters)


class TestInitLogging:
    def test_level_from_name(self):
        _init_logging("warning")
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_defaults_to_info(self):
        _init_logging("LOUD")
        assert logging.getLogger().level == logging.INFO

    def test_debug_env_forces_debug(self, monkeypatch):
        monkeypatch.setenv("CALLBOARD_DEBUG", "on")
        _init_logging("ERROR")
        assert logging.getLogger().level == logging.DEBUG
