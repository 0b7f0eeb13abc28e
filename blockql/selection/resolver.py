"""
Endpoint resolution: hash or tag to block height.
"""

import asyncio
from typing import Tuple

from ..exceptions import BlockSourceError, ResolutionError
from ..logger import get_logger
from ..source.base import BlockIdentifier, BlockSource

logger = get_logger(__name__)


class EndpointResolver:
    """Resolves symbolic block endpoints through a single fetch each."""

    def __init__(self, source: BlockSource):
        self.source = source

    async def resolve_height(self, identifier: BlockIdentifier) -> int:
        """
        Resolve one anchor to its block height.

        Raises:
            ResolutionError: no block matches, or the source failed
        """
        try:
            block = await self.source.fetch_block(identifier)
        except BlockSourceError as e:
            raise ResolutionError(f"Could not resolve the block associated with {identifier}: {e}") from e

        if block is None:
            raise ResolutionError(f"Could not resolve the block associated with {identifier}.")

        logger.debug(f"Resolved {identifier} to height {block.number}")
        return block.number

    async def resolve_pair(self, start: BlockIdentifier, end: BlockIdentifier) -> Tuple[int, int]:
        """
        Resolve both endpoints of a range concurrently.

        A missing endpoint fails the pair as a whole; the error does not
        say which endpoint was missing.
        """
        try:
            blocks = await asyncio.gather(
                self.source.fetch_block(start),
                self.source.fetch_block(end),
            )
        except BlockSourceError as e:
            raise ResolutionError(f"Could not resolve the block associated with one or all hashes: {e}") from e

        if any(block is None for block in blocks):
            raise ResolutionError("Could not resolve the block associated with one or all hashes.")

        start_block, end_block = blocks
        return start_block.number, end_block.number
