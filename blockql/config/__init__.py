"""
BlockQL Unified Configuration

Loads all sections of config.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    BlockQLConfig,
    QueryConfig,
    ServerSectionConfig,
    SourceConfig,
    load_config,
)

__all__ = [
    "BlockQLConfig",
    "QueryConfig",
    "ServerSectionConfig",
    "SourceConfig",
    "load_config",
]
