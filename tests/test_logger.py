"""
Logging setup tests.
"""

import logging
import time

import blockql.logger as log_module
from blockql.constants import ConfigString
from blockql.logger import LogManager, SanitizingFormatter, build_formatter, get_logger, set_log_level


class TestLogManager:

    def test_singleton(self):
        assert LogManager() is LogManager()

    def test_get_logger_configures_root(self):
        logger = get_logger("blockql.tests")
        assert logger.name == "blockql.tests"
        assert logging.getLogger().handlers

    def test_set_log_level(self):
        root = logging.getLogger()
        previous = root.level
        try:
            set_log_level("DEBUG")
            assert root.level == logging.DEBUG
        finally:
            root.setLevel(previous)
            for handler in root.handlers:
                handler.setLevel(previous)


class TestFormats:

    def test_malformed_format_falls_back(self, monkeypatch):
        default = "%(levelname)s %(message)s"
        monkeypatch.setattr(log_module, "LOG_FORMAT", ConfigString("%(asctime", default))
        assert build_formatter()._fmt == default

    def test_timestamps_are_utc(self):
        formatter = build_formatter()
        assert formatter.converter is time.gmtime
        assert formatter.datefmt.endswith(" UTC")

    def test_sanitize_strips_escapes(self):
        assert SanitizingFormatter.sanitize("\x1b[31m0xabc\x1b[0m\r\x07") == "0xabc"

    def test_sanitize_keeps_tabs_and_newlines(self):
        assert SanitizingFormatter.sanitize("a\tb\nc") == "a\tb\nc"
