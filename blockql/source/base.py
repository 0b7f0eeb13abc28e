"""
Block source capability surface.

The selection pipeline only ever talks to a :class:`BlockSource`. Concrete
sources wrap an upstream node (see :mod:`blockql.source.http`) or, in tests,
an in-memory chain.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from eth_typing import BlockNumber, HexStr
from eth_utils import to_int

from ..exceptions import BlockSourceError

# A concrete block reference: height, 0x-prefixed hash, or symbolic tag
BlockIdentifier = Union[BlockNumber, int, HexStr, str]


def parse_quantity(value: Any, default: int = 0) -> int:
    """Coerce an Ethereum JSON-RPC quantity (hex string or int) to int."""
    if value is None:
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        if value.startswith(("0x", "0X")):
            return to_int(hexstr=value)
        return int(value)
    raise TypeError(f"Unsupported quantity: {value!r}")


@dataclass(frozen=True)
class Block:
    """A fetched block record."""

    number: int
    hash: str
    parent_hash: str = ""
    timestamp: int = 0
    transactions: Tuple[Any, ...] = ()
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "Block":
        """Build from an ``eth_getBlockBy*`` result object."""
        return cls(
            number=parse_quantity(data.get("number")),
            hash=data.get("hash") or "",
            parent_hash=data.get("parentHash") or "",
            timestamp=parse_quantity(data.get("timestamp")),
            transactions=tuple(data.get("transactions") or ()),
            raw=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = dict(self.raw)
        result.update({
            "number": self.number,
            "hash": self.hash,
            "parentHash": self.parent_hash,
            "timestamp": self.timestamp,
            "transactions": list(self.transactions),
        })
        return result


class BlockSource(ABC):
    """
    Data source consulted by the selection pipeline.

    ``fetch_block`` and ``current_height`` are required. The remaining
    methods back the sibling query operations and are optional.
    """

    @abstractmethod
    async def fetch_block(self, identifier: BlockIdentifier) -> Optional[Block]:
        """
        Fetch one block.

        Args:
            identifier: Block height, hash or tag

        Returns:
            The block, or None if no block matches the identifier

        Raises:
            BlockSourceError: the upstream could not be queried
        """

    @abstractmethod
    async def current_height(self) -> int:
        """Return the height of the most recent block."""

    async def estimate_gas(self, call: Dict[str, Any]) -> int:
        raise BlockSourceError(f"{type(self).__name__} does not support gas estimation")

    async def gas_price(self) -> int:
        raise BlockSourceError(f"{type(self).__name__} does not support gas price queries")

    async def protocol_version(self) -> str:
        raise BlockSourceError(f"{type(self).__name__} does not support protocol version queries")

    async def fetch_transaction(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        raise BlockSourceError(f"{type(self).__name__} does not support transaction lookups")

    async def balance(self, address: str, identifier: BlockIdentifier = "latest") -> int:
        raise BlockSourceError(f"{type(self).__name__} does not support balance queries")

    async def aclose(self) -> None:
        """Release any resources held by the source."""
