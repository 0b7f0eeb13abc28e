"""
BlockQL RPC Modules

JSON-RPC method implementations.
"""

from .query import QueryModule
from .web3 import Web3Module

__all__ = [
    "QueryModule",
    "Web3Module",
]
