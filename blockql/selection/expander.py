"""
Range expansion.

Every selector shape funnels into one :class:`ResolvedRange`, so the fetch
orchestrator has a single contract however the range was derived.
"""

from ..constants import DEFAULT_QUERY_MAX_SIZE
from ..exceptions import ValidationError
from ..logger import get_logger
from ..source.base import BlockSource
from .resolver import EndpointResolver
from .types import (
    BlockSelector,
    ByContiguousRange,
    ByEndpointRange,
    ByExact,
    ByExplicitList,
    ByOffset,
    ResolvedRange,
    check_selection_size,
)

logger = get_logger(__name__)

INVERTED_RANGE_MESSAGE = "Start block in the range must be prior to the end block."


class RangeExpander:
    """Expands validated selectors into bounded, ordered identifier ranges."""

    def __init__(
        self,
        source: BlockSource,
        resolver: EndpointResolver = None,
        query_max_size: int = DEFAULT_QUERY_MAX_SIZE,
    ):
        self.source = source
        self.resolver = resolver or EndpointResolver(source)
        self.query_max_size = query_max_size

    async def expand(self, selector: BlockSelector) -> ResolvedRange:
        logger.debug(f"Expanding {type(selector).__name__}: {selector}")

        if isinstance(selector, ByExact):
            return self._range((selector.anchor,))

        if isinstance(selector, ByOffset):
            if selector.number is not None:
                height = selector.number
            else:
                height = await self.resolver.resolve_height(selector.anchor)
            return self._range((height + selector.offset,))

        if isinstance(selector, ByContiguousRange):
            end = selector.end
            if end is None:
                end = await self.source.current_height()
            return self._inclusive(selector.start, end)

        if isinstance(selector, ByExplicitList):
            return self._range(tuple(selector.identifiers))

        if isinstance(selector, ByEndpointRange):
            if selector.number_range is not None:
                start, end = selector.number_range
            else:
                start, end = await self.resolver.resolve_pair(*selector.hash_range)
            return self._inclusive(start, end)

        raise TypeError(f"Unknown block selector: {selector!r}")

    def _range(self, identifiers) -> ResolvedRange:
        return ResolvedRange(identifiers=identifiers, max_size=self.query_max_size)

    def _inclusive(self, start: int, end: int) -> ResolvedRange:
        if start > end:
            raise ValidationError(INVERTED_RANGE_MESSAGE)
        # Checked before the range is materialised
        check_selection_size(end - start + 1, self.query_max_size)
        return self._range(tuple(range(start, end + 1)))
