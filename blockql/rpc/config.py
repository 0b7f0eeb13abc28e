"""
BlockQL RPC Configuration
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class HTTPConfig:
    """HTTP RPC configuration."""

    # Listen address
    host: str = "127.0.0.1"

    # Listen port
    port: int = 4000

    # Enable CORS
    cors_enabled: bool = True

    # CORS allowed origins
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class ModulesConfig:
    """RPC modules configuration."""

    # ql_* namespace (block selection queries)
    ql: bool = True

    # web3_* namespace (service info)
    web3: bool = True


@dataclass
class RPCConfig:
    """RPC configuration."""

    # HTTP configuration
    http: HTTPConfig = field(default_factory=HTTPConfig)

    # Enabled modules
    modules: ModulesConfig = field(default_factory=ModulesConfig)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "RPCConfig":
        """Create from dictionary."""
        config = dict(config)
        http_dict = config.pop("http", {})
        modules_dict = config.pop("modules", {})

        return cls(
            **config,
            http=HTTPConfig(**http_dict),
            modules=ModulesConfig(**modules_dict),
        )
