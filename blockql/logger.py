"""
BlockQL logging.

Console output goes through ``rich`` with highlighting for block
identifiers, upstream calls and selector types; a rotating log file is
added when ``LOG_TO_FILE`` is set.

Usage:
    >>> from blockql.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Service started")
"""

import logging
import logging.handlers
import re
import sys
import threading
import time
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import (
    LOG_LEVEL,
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    LOG_MAX_FILE_SIZE,
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_TO_FILE,
)


LOG_FILE_PATH = Path(__file__).parent.parent / "logs" / "blockql.log"

# Libraries whose request chatter stays out of the console
QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "uvicorn": logging.ERROR,
    "uvicorn.error": logging.ERROR,
    "uvicorn.access": logging.WARNING,
}

THEME = Theme(
    {
        "blockql.arrow":          "bold yellow",
        "blockql.identifier":     "cyan",
        "blockql.level_error":    "bold red",
        "blockql.level_warning":  "bold yellow",
        "blockql.level_info":     "bold green",
        "blockql.level_debug":    "bold dim",
        "blockql.method":         "bold white",
        "blockql.network_error":  "bold red",
        "blockql.selector":       "bold magenta",
        "blockql.timestamp":      "bold cyan",
        "blockql.url":            "cyan",
    }
)


def _level(name) -> int:
    return getattr(logging, str(name).upper(), logging.INFO)


class SanitizingFormatter(logging.Formatter):
    """
    Strips ANSI escapes and control characters from formatted records.

    Hashes and tags are logged as callers sent them, so nothing they
    contain may reach a terminal unfiltered.
    """

    _unsafe = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b[@-Z\\-_]|[\x00-\x08\x0B-\x1F\x7F]")

    @classmethod
    def sanitize(cls, text: str) -> str:
        return cls._unsafe.sub("", text) if text else text

    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


def build_formatter() -> SanitizingFormatter:
    """UTC formatter from ``LOG_FORMAT``; a malformed format falls back to the default."""
    try:
        formatter = SanitizingFormatter(fmt=str(LOG_FORMAT), datefmt=f"{LOG_DATE_FORMAT} UTC")
    except ValueError as e:
        print(f"blockql.logger - invalid LOG_FORMAT ({e}), using default", file=sys.stderr)
        formatter = SanitizingFormatter(
            fmt=str(LOG_FORMAT.default()),
            datefmt=f"{LOG_DATE_FORMAT.default()} UTC",
        )
    formatter.converter = time.gmtime
    return formatter


class BlockQLLogHighlighter(RegexHighlighter):
    """Rich highlighter for selector, upstream call and level tokens."""

    base_style = "blockql."
    highlights = [
        r"(?P<arrow>(\-\->)|(<--))",
        r"(?P<identifier>\b0x[0-9a-fA-F]{6,}\b)",
        r"(?P<level_error>\b(ERROR|CRITICAL)\b)",
        r"(?P<level_warning>\bWARNING\b)",
        r"(?P<level_info>\bINFO\b)",
        r"(?P<level_debug>\bDEBUG\b)",
        r"(?P<method>\b(eth|net|web3|ql)_\w+\b)",
        r"(?P<network_error>NETWORK_ERROR)",
        r"(?P<selector>\bBy(Exact|Offset|ContiguousRange|ExplicitList|EndpointRange)\b)",
        r"(?P<timestamp>^(.*?)UTC)",
        r"(?P<url>https?://\S+)",
    ]


class LogManager:
    """
    Process-wide logging setup (singleton).

    ``configure`` runs once; later calls are no-ops. ``set_level`` adjusts
    the level afterwards, e.g. from ``[server] log_level``.
    """

    _instance: Optional["LogManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "LogManager":
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._configured = False
        return cls._instance

    def _console_handler(self) -> logging.Handler:
        if LOG_CONSOLE_HIGHLIGHTING:
            return RichHandler(
                console=Console(theme=THEME, highlight=False),
                highlighter=BlockQLLogHighlighter(),
                keywords=[],
                rich_tracebacks=True,
                show_path=False,
                show_time=False,
                show_level=False,
                markup=False,
            )
        return logging.StreamHandler(sys.stdout)

    def configure(
        self,
        log_level: Optional[str] = None,
        log_file: Optional[Path] = None,
        console_output: bool = True,
        file_output: Optional[bool] = None,
    ) -> None:
        """
        Install the root handlers.

        Args:
            log_level: Level name; defaults to ``LOG_LEVEL``
            log_file: Rotating log file; defaults to ``logs/blockql.log``
            console_output: Log to the terminal
            file_output: Log to ``log_file``; defaults to ``LOG_TO_FILE``
        """
        with self._lock:
            if self._configured:
                return

            level = _level(log_level or LOG_LEVEL)
            root = logging.getLogger()
            root.setLevel(level)
            root.handlers.clear()

            for name, lib_level in QUIET_LOGGERS.items():
                logging.getLogger(name).setLevel(lib_level)

            handlers = []
            if console_output:
                handlers.append(self._console_handler())

            if file_output is None:
                file_output = bool(LOG_TO_FILE)
            if file_output:
                path = log_file or LOG_FILE_PATH
                path.parent.mkdir(parents=True, exist_ok=True)
                handlers.append(logging.handlers.RotatingFileHandler(
                    filename=str(path),
                    maxBytes=LOG_MAX_FILE_SIZE,
                    backupCount=LOG_BACKUP_COUNT,
                    encoding="utf-8",
                ))

            formatter = build_formatter()
            for handler in handlers:
                handler.setLevel(level)
                handler.setFormatter(formatter)
                root.addHandler(handler)

            self._configured = True

    def set_level(self, log_level: str) -> None:
        level = _level(log_level)
        root = logging.getLogger()
        root.setLevel(level)
        for handler in root.handlers:
            handler.setLevel(level)

    def get_logger(self, name: str) -> logging.Logger:
        if not self._configured:
            self.configure()
        return logging.getLogger(name)

    @property
    def is_configured(self) -> bool:
        return self._configured


_manager = LogManager()


def get_logger(name: str) -> logging.Logger:
    """Module logger; configures logging on first use."""
    return _manager.get_logger(name)


def set_log_level(log_level: str) -> None:
    """Apply a configured log level to the root logger and its handlers."""
    _manager.set_level(log_level)


_manager.configure()
