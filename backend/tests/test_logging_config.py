# tests/test_logging_config.py
"""
Tests for ops.logging_config.
"""

import json
import logging
import sys

from ops.logging_config import APP_LOGGERS, JsonFormatter, get_logging_config


def _record(msg="Recorded transaction", exc_info=None, **extra):
    record = logging.LogRecord(
        name="ledger.commands",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_basic_fields(self):
        entry = json.loads(JsonFormatter().format(_record()))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "ledger.commands"
        assert entry["message"] == "Recorded transaction"
        assert entry["timestamp"].endswith("Z")
        assert entry["location"]["line"] == 10
        assert "extra" not in entry

    def test_extra_fields_are_lifted(self):
        record = _record(company_id=7, transaction_number="TXN-2024-000001", source="invoice")

        entry = json.loads(JsonFormatter().format(record))

        assert entry["extra"] == {
            "company_id": 7,
            "transaction_number": "TXN-2024-000001",
            "source": "invoice",
        }

    def test_unserializable_extra_is_stringified(self):
        entry = json.loads(JsonFormatter().format(_record(amount=object())))
        assert entry["extra"]["amount"].startswith("<object object")

    def test_exception_text(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record(exc_info=sys.exc_info())

        entry = json.loads(JsonFormatter().format(record))
        assert "ValueError: boom" in entry["exception"]


class TestGetLoggingConfig:
    def test_json_by_default_outside_debug(self, monkeypatch):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        config = get_logging_config(debug=False)

        assert config["handlers"]["console"]["formatter"] == "json"
        assert config["loggers"][""]["level"] == "INFO"
        for name in APP_LOGGERS:
            assert config["loggers"][name]["propagate"] is False

    def test_console_format_in_debug(self, monkeypatch):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        config = get_logging_config(debug=True)

        assert config["handlers"]["console"]["formatter"] == "verbose"
        assert config["loggers"]["ledger"]["level"] == "DEBUG"
        assert config["loggers"]["django.db.backends"]["handlers"] == ["console"]

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "console")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")

        config = get_logging_config(debug=False)

        assert "verbose" in config["formatters"]
        assert config["loggers"]["finance"]["level"] == "WARNING"
