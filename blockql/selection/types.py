"""
Block selector types.

A request names its blocks in one of five shapes. Each shape is a frozen
dataclass; together they form the closed :data:`BlockSelector` union that
the validator produces and the expander consumes.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

from ..exceptions import ValidationError
from ..source.base import BlockIdentifier


def too_large_message(max_size: int) -> str:
    return f"Too large a multiple selection. Maximum length allowed: {max_size}."


def check_selection_size(length: int, max_size: int) -> None:
    """Reject a multiple selection longer than ``max_size``."""
    if length > max_size:
        raise ValidationError(too_large_message(max_size))


@dataclass(frozen=True)
class ByExact:
    """A single block by number, hash or tag."""
    number: Optional[int] = None
    hash: Optional[str] = None
    tag: Optional[str] = None

    @property
    def anchor(self) -> Optional[BlockIdentifier]:
        for value in (self.number, self.hash, self.tag):
            if value is not None:
                return value
        return None


@dataclass(frozen=True)
class ByOffset:
    """A single block at ``offset`` from an anchor block."""
    offset: int
    number: Optional[int] = None
    hash: Optional[str] = None
    tag: Optional[str] = None

    @property
    def anchor(self) -> BlockIdentifier:
        for value in (self.number, self.hash, self.tag):
            if value is not None:
                return value
        raise ValidationError("Expected either number, tag or hash argument and offset argument.")


@dataclass(frozen=True)
class ByContiguousRange:
    """Blocks ``start`` through ``end`` inclusive; ``end`` defaults to the chain head."""
    start: int
    end: Optional[int] = None


@dataclass(frozen=True)
class ByExplicitList:
    """An explicit, ordered list of block numbers or hashes."""
    numbers: Optional[Tuple[int, ...]] = None
    hashes: Optional[Tuple[str, ...]] = None

    @property
    def identifiers(self) -> Tuple[BlockIdentifier, ...]:
        return self.numbers if self.numbers is not None else self.hashes


@dataclass(frozen=True)
class ByEndpointRange:
    """An inclusive range delimited by two block numbers or two block hashes."""
    number_range: Optional[Tuple[int, int]] = None
    hash_range: Optional[Tuple[str, str]] = None


BlockSelector = Union[ByExact, ByOffset, ByContiguousRange, ByExplicitList, ByEndpointRange]


@dataclass(frozen=True)
class ResolvedRange:
    """
    Concrete, ordered block identifiers for one request.

    Construction enforces the selection ceiling; a range never holds more
    than ``max_size`` identifiers.
    """
    identifiers: Tuple[BlockIdentifier, ...]
    max_size: int

    def __post_init__(self):
        check_selection_size(len(self.identifiers), self.max_size)

    def __len__(self) -> int:
        return len(self.identifiers)

    def __iter__(self) -> Iterator[BlockIdentifier]:
        return iter(self.identifiers)
