"""
Block query service.

Wires the selection pipeline to a block source and exposes one coroutine
per query shape, plus the sibling chain queries served alongside them.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from eth_utils import is_address, is_hex, to_checksum_address

from .constants import DEFAULT_BLOCK, DEFAULT_QUERY_MAX_SIZE
from .exceptions import ValidationError
from .logger import get_logger
from .selection import (
    BlockSelector,
    EndpointResolver,
    FetchOrchestrator,
    RangeExpander,
    SelectorValidator,
)
from .source.base import Block, BlockIdentifier, BlockSource

logger = get_logger(__name__)


@dataclass
class Account:
    """An externally owned or contract account."""
    address: str
    balance: int

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, "balance": self.balance}


class BlockQueryService:
    """
    Resolves block queries against a :class:`BlockSource`.

    Args:
        source: Data source for blocks and chain state
        query_max_size: Ceiling on blocks per multi-block query
        default_anchor: Block used when a single-block query names none;
            defaults to the ``latest`` tag
    """

    def __init__(
        self,
        source: BlockSource,
        query_max_size: int = DEFAULT_QUERY_MAX_SIZE,
        default_anchor: Optional[Callable[[], BlockIdentifier]] = None,
    ):
        self.source = source
        self.query_max_size = query_max_size
        self.validator = SelectorValidator(query_max_size, default_anchor or (lambda: DEFAULT_BLOCK))
        self.resolver = EndpointResolver(source)
        self.expander = RangeExpander(source, self.resolver, query_max_size)
        self.orchestrator = FetchOrchestrator(source)

    async def select(self, selector: BlockSelector) -> List[Block]:
        """Expand a validated selector and fetch its blocks in order."""
        resolved = await self.expander.expand(selector)
        return await self.orchestrator.fetch(resolved)

    # ── query shapes ──

    async def block(
        self,
        number: Optional[int] = None,
        hash: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Block:
        logger.debug(f"Fetching block: number={number} hash={hash} tag={tag}")
        blocks = await self.select(self.validator.exact(number, hash, tag))
        return blocks[0]

    async def block_offset(
        self,
        number: Optional[int] = None,
        hash: Optional[str] = None,
        tag: Optional[str] = None,
        offset: Optional[int] = None,
    ) -> Block:
        blocks = await self.select(self.validator.offset(number, hash, tag, offset))
        return blocks[0]

    async def blocks(self, start: Optional[int] = None, end: Optional[int] = None) -> List[Block]:
        return await self.select(self.validator.contiguous(start, end))

    async def block_list(
        self,
        numbers: Optional[Sequence[int]] = None,
        hashes: Optional[Sequence[str]] = None,
    ) -> List[Block]:
        return await self.select(self.validator.explicit_list(numbers, hashes))

    async def blocks_range(
        self,
        number_range: Optional[Sequence[int]] = None,
        hash_range: Optional[Sequence[str]] = None,
    ) -> List[Block]:
        return await self.select(self.validator.endpoint_range(number_range, hash_range))

    # ── sibling queries ──

    async def estimate_gas(self, call: Dict[str, Any]) -> int:
        """Check the call shape, then delegate the estimate to the source."""
        logger.debug(f"EstimateGas {call}")

        if not is_address(call.get("to")):
            raise ValidationError("A valid contract address is required.")

        data = call.get("data")
        if not isinstance(data, str) or not is_hex(data):
            raise ValidationError("Parameter (data): missing or not hex encoded.")

        return await self.source.estimate_gas(call)

    async def gas_price(self) -> int:
        return await self.source.gas_price()

    async def protocol_version(self) -> str:
        return await self.source.protocol_version()

    async def transaction(self, hash: str) -> Optional[Dict[str, Any]]:
        if hash is None:
            raise ValidationError("Argument hash is required.")
        return await self.source.fetch_transaction(hash.strip())

    async def account(self, address: str) -> Account:
        if not is_address(address):
            raise ValidationError("A valid account address is required.")
        checksummed = to_checksum_address(address)
        return Account(address=checksummed, balance=await self.source.balance(checksummed))
