"""
Concurrent block fan-out.
"""

import asyncio
from typing import List

from ..exceptions import FetchError
from ..logger import get_logger
from ..source.base import Block, BlockIdentifier, BlockSource
from .types import ResolvedRange

logger = get_logger(__name__)


class FetchOrchestrator:
    """
    Fetches every block of a resolved range concurrently.

    Results are index-aligned with the range. The request is all-or-nothing:
    every fetch is awaited, then the failure of the earliest failing
    position (in range order) is raised and all results are discarded.
    """

    def __init__(self, source: BlockSource):
        self.source = source

    async def _fetch_one(self, identifier: BlockIdentifier) -> Block:
        block = await self.source.fetch_block(identifier)
        if block is None:
            raise FetchError(f"Block not found: {identifier}", identifier)
        return block

    async def fetch(self, resolved: ResolvedRange) -> List[Block]:
        identifiers = list(resolved)
        logger.debug(f"Fetching {len(identifiers)} block(s)")

        results = await asyncio.gather(
            *(self._fetch_one(identifier) for identifier in identifiers),
            return_exceptions=True,
        )

        for identifier, result in zip(identifiers, results):
            if isinstance(result, FetchError):
                raise result
            if isinstance(result, Exception):
                raise FetchError(f"Failed to fetch block {identifier}: {result}", identifier) from result
            if isinstance(result, BaseException):
                raise result

        return list(results)
