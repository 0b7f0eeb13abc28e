"""
BlockQL data sources
"""

from .base import Block, BlockIdentifier, BlockSource, parse_quantity
from .http import JSONRPCBlockSource

__all__ = [
    "Block",
    "BlockIdentifier",
    "BlockSource",
    "JSONRPCBlockSource",
    "parse_quantity",
]
