"""
BlockQL RPC Module

Provides the JSON-RPC 2.0 interface for block selection queries.
"""

from .server import RPCServer, RPCError, RPCErrorCode
from .config import RPCConfig

__all__ = [
    "RPCServer",
    "RPCError",
    "RPCErrorCode",
    "RPCConfig",
]
