"""
Block selection pipeline

raw arguments -> SelectorValidator -> (EndpointResolver) -> RangeExpander
-> FetchOrchestrator -> ordered blocks
"""

from .expander import RangeExpander
from .orchestrator import FetchOrchestrator
from .resolver import EndpointResolver
from .types import (
    BlockSelector,
    ByContiguousRange,
    ByEndpointRange,
    ByExact,
    ByExplicitList,
    ByOffset,
    ResolvedRange,
)
from .validator import SelectorValidator

__all__ = [
    "BlockSelector",
    "ByContiguousRange",
    "ByEndpointRange",
    "ByExact",
    "ByExplicitList",
    "ByOffset",
    "EndpointResolver",
    "FetchOrchestrator",
    "RangeExpander",
    "ResolvedRange",
    "SelectorValidator",
]
