"""
BlockQL TOML Configuration Loader

Loads every section of config.toml at startup with environment variable
overrides (dataclass + from_dict + apply_env per section).

Environment variable mapping:
    [query] max_size      → BLOCKQL_QUERY_MAX_SIZE
    [query] default_block → BLOCKQL_DEFAULT_BLOCK
    [source] url          → BLOCKQL_SOURCE_URL
    [source] timeout      → BLOCKQL_SOURCE_TIMEOUT
    [server] log_level    → BLOCKQL_LOG_LEVEL
    [rpc.http] host       → BLOCKQL_RPC_HTTP_HOST
    [rpc.http] port       → BLOCKQL_RPC_HTTP_PORT
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..constants import (
    BLOCKQL_SERVER_HOST,
    BLOCKQL_SERVER_PORT,
    BLOCKQL_SOURCE_URL,
    CONNECTION_TIMEOUT,
    DEFAULT_BLOCK,
    DEFAULT_QUERY_MAX_SIZE,
    LOG_LEVEL,
)
from ..exceptions import ConfigurationError
from ..logger import get_logger
from ..rpc.config import RPCConfig

logger = get_logger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _block_ref(value: Union[int, str]) -> Union[int, str]:
    """Decimal strings name a block height; anything else is a tag or hash."""
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value)
    return value


@dataclass
class QueryConfig:
    """[query] section."""
    max_size: int = DEFAULT_QUERY_MAX_SIZE
    # Block height or tag used when a single-block query names none
    default_block: Union[int, str] = DEFAULT_BLOCK

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryConfig":
        return cls(
            max_size=data.get("max_size", DEFAULT_QUERY_MAX_SIZE),
            default_block=_block_ref(data.get("default_block", DEFAULT_BLOCK)),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("BLOCKQL_QUERY_MAX_SIZE"):
            self.max_size = int(v)
        if v := os.environ.get("BLOCKQL_DEFAULT_BLOCK"):
            self.default_block = _block_ref(v)


@dataclass
class SourceConfig:
    """[source] section: upstream JSON-RPC node."""
    url: str = str(BLOCKQL_SOURCE_URL)
    timeout: float = CONNECTION_TIMEOUT
    full_transactions: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourceConfig":
        return cls(
            url=data.get("url", str(BLOCKQL_SOURCE_URL)),
            timeout=data.get("timeout", CONNECTION_TIMEOUT),
            full_transactions=data.get("full_transactions", False),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("BLOCKQL_SOURCE_URL"):
            self.url = v
        if v := os.environ.get("BLOCKQL_SOURCE_TIMEOUT"):
            self.timeout = float(v)


@dataclass
class ServerSectionConfig:
    """[server] section."""
    log_level: str = str(LOG_LEVEL)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerSectionConfig":
        return cls(log_level=data.get("log_level", str(LOG_LEVEL)))

    def apply_env(self) -> None:
        if v := os.environ.get("BLOCKQL_LOG_LEVEL"):
            self.log_level = v


def _default_rpc() -> RPCConfig:
    return RPCConfig.from_dict({"http": {"host": str(BLOCKQL_SERVER_HOST), "port": int(BLOCKQL_SERVER_PORT)}})


@dataclass
class BlockQLConfig:
    """
    Unified service configuration.

    Single source of truth at runtime, built from config.toml plus
    environment variable overrides.
    """
    query: QueryConfig = field(default_factory=QueryConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    server: ServerSectionConfig = field(default_factory=ServerSectionConfig)
    rpc: RPCConfig = field(default_factory=_default_rpc)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BlockQLConfig":
        """Create BlockQLConfig from a parsed TOML dict."""
        rpc_data = dict(data.get("rpc", {}))
        http_data = {"host": str(BLOCKQL_SERVER_HOST), "port": int(BLOCKQL_SERVER_PORT)}
        http_data.update(rpc_data.get("http", {}))
        rpc_data["http"] = http_data

        return cls(
            query=QueryConfig.from_dict(data.get("query", {})),
            source=SourceConfig.from_dict(data.get("source", {})),
            server=ServerSectionConfig.from_dict(data.get("server", {})),
            rpc=RPCConfig.from_dict(rpc_data),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "BlockQLConfig":
        """
        Load configuration from a TOML file.

        A missing file yields defaults (with environment overrides).
        """
        path = Path(config_path)
        if not path.exists():
            logger.debug("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        try:
            cfg = cls.from_dict(raw)
        except TypeError as e:
            raise ConfigurationError(f"Unknown setting in {config_path}: {e}") from e
        cfg.apply_env()
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.query.apply_env()
        self.source.apply_env()
        self.server.apply_env()

        if v := os.environ.get("BLOCKQL_RPC_HTTP_HOST"):
            self.rpc.http.host = v
        if v := os.environ.get("BLOCKQL_RPC_HTTP_PORT"):
            self.rpc.http.port = int(v)

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        if not isinstance(self.query.max_size, int) or self.query.max_size < 1:
            raise ConfigurationError("query.max_size must be >= 1")
        if not self.source.url:
            raise ConfigurationError("source.url must be set")
        if self.source.timeout <= 0:
            raise ConfigurationError("source.timeout must be positive")
        if self.server.log_level.upper() not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.server.log_level}")
        if not 0 < self.rpc.http.port < 65536:
            raise ConfigurationError(f"Invalid rpc.http.port: {self.rpc.http.port}")
        return True

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics)."""
        return {
            "query": {
                "max_size": self.query.max_size,
                "default_block": self.query.default_block,
            },
            "source": {
                "url": self.source.url,
                "timeout": self.source.timeout,
                "full_transactions": self.source.full_transactions,
            },
            "server": {
                "log_level": self.server.log_level,
            },
            "rpc": {
                "http": {
                    "host": self.rpc.http.host,
                    "port": self.rpc.http.port,
                    "cors_enabled": self.rpc.http.cors_enabled,
                },
                "modules": {
                    "ql": self.rpc.modules.ql,
                    "web3": self.rpc.modules.web3,
                },
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> BlockQLConfig:
    """
    Load service configuration.

    Resolution order:
        1. Explicit *path* argument
        2. BLOCKQL_CONFIG env var
        3. ./config.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("BLOCKQL_CONFIG", "config.toml")

    return BlockQLConfig.from_file(path)
