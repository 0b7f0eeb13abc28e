"""
Shared test doubles for the block selection suite.
"""

import asyncio
import os
import sys
from typing import Dict, Optional

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from blockql.exceptions import BlockSourceError
from blockql.source.base import Block, BlockSource


def block_hash(number: int) -> str:
    """Deterministic 32-byte hash for block ``number``."""
    return "0x" + f"{number:064x}"


def make_block(number: int) -> Block:
    return Block(
        number=number,
        hash=block_hash(number),
        parent_hash=block_hash(number - 1) if number > 0 else "0x" + "0" * 64,
        timestamp=1_700_000_000 + number * 12,
    )


class MemoryBlockSource(BlockSource):
    """
    In-memory chain of blocks 0..height.

    ``delays`` maps identifiers to seconds slept before answering, so tests
    can force a completion order. ``failures`` maps identifiers to the
    exception raised instead of answering.
    """

    def __init__(
        self,
        height: int = 100,
        delays: Optional[Dict] = None,
        failures: Optional[Dict] = None,
    ):
        self.height = height
        self.blocks = {n: make_block(n) for n in range(height + 1)}
        self.by_hash = {b.hash: b for b in self.blocks.values()}
        self.delays = delays or {}
        self.failures = failures or {}
        self.calls = []
        self.completed = []
        self.height_calls = 0
        self.closed = False

    async def fetch_block(self, identifier):
        self.calls.append(identifier)
        await asyncio.sleep(self.delays.get(identifier, 0))
        if identifier in self.failures:
            raise self.failures[identifier]
        self.completed.append(identifier)

        if isinstance(identifier, int):
            return self.blocks.get(identifier)
        if identifier in ("latest", "pending", "safe", "finalized"):
            return self.blocks[self.height]
        if identifier == "earliest":
            return self.blocks[0]
        return self.by_hash.get(identifier)

    async def current_height(self) -> int:
        self.height_calls += 1
        return self.height

    async def estimate_gas(self, call) -> int:
        return 21000 + len(call.get("data", "0x")) // 2

    async def gas_price(self) -> int:
        return 1_000_000_000

    async def protocol_version(self) -> str:
        return "0x41"

    async def fetch_transaction(self, tx_hash):
        if tx_hash == "0x" + "ab" * 32:
            return {"hash": tx_hash, "blockNumber": "0x5"}
        return None

    async def balance(self, address, identifier="latest") -> int:
        return 10**18

    async def aclose(self) -> None:
        self.closed = True


class MinimalSource(BlockSource):
    """Implements only the required capabilities."""

    async def fetch_block(self, identifier):
        return make_block(1)

    async def current_height(self) -> int:
        return 1


UPSTREAM_DOWN = BlockSourceError("Upstream eth_getBlockByNumber request failed: connection refused")
