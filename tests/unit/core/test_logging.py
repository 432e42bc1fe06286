"""
Tests for structured logging setup
"""
import json
import logging

import pytest

from core.config import Settings
from core.logging import CustomJsonFormatter, LoggerAdapter, get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLogging:
    def test_get_logger_returns_adapter_with_context(self):
        logger = get_logger("test.module", domain="registry")

        assert isinstance(logger, LoggerAdapter)
        assert logger.extra == {"domain": "registry"}

    def test_with_context_extends_extra(self):
        logger = get_logger("test.module", domain="adapter").with_context(script="a")

        assert logger.extra == {"domain": "adapter", "script": "a"}

    def test_process_merges_extra(self):
        logger = get_logger("test.module", domain="adapter")

        msg, kwargs = logger.process("hello", {"extra": {"count": 2}})

        assert msg == "hello"
        assert kwargs["extra"] == {"count": 2, "domain": "adapter"}

    def test_setup_logging_json(self, restore_root_logger):
        setup_logging(Settings(_env_file=None, log_level="DEBUG", log_format="json"))

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, CustomJsonFormatter)

    def test_setup_logging_text(self, restore_root_logger):
        setup_logging(Settings(_env_file=None, log_level="WARNING", log_format="text"))

        assert restore_root_logger.level == logging.WARNING
        assert not isinstance(restore_root_logger.handlers[0].formatter, CustomJsonFormatter)

    def test_json_formatter_fields(self):
        formatter = CustomJsonFormatter("%(message)s", app_name="redis-scripts", environment="test")
        record = logging.LogRecord("redis_scripts.adapter", logging.INFO, __file__, 1, "Loaded", None, None)
        record.script = "a"

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "Loaded"
        assert payload["app"] == "redis-scripts"
        assert payload["environment"] == "test"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "redis_scripts.adapter"
        assert payload["script"] == "a"
