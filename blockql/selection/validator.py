"""
Selector validation.

Turns the raw, optional arguments of each query shape into exactly one
:data:`~blockql.selection.types.BlockSelector`. Every check here is local
and synchronous; nothing touches the block source.
"""

from typing import Callable, Optional, Sequence

from ..constants import DEFAULT_QUERY_MAX_SIZE, VALID_HASH_PATTERN
from ..exceptions import ValidationError
from ..logger import get_logger
from ..source.base import BlockIdentifier
from .types import (
    ByContiguousRange,
    ByEndpointRange,
    ByExact,
    ByExplicitList,
    ByOffset,
    check_selection_size,
)

logger = get_logger(__name__)

ONE_ANCHOR_MESSAGE = "Only one of number, hash or tag argument should be provided."


def _clean_hash(value: Optional[str]) -> Optional[str]:
    return value.strip() if value is not None else None


def _clean_tag(value: Optional[str]) -> Optional[str]:
    return value.strip().lower() if value is not None else None


def _count_present(*values) -> int:
    return sum(1 for value in values if value is not None)


def _is_int(value) -> bool:
    # bool is an int subclass but never a block number
    return isinstance(value, int) and not isinstance(value, bool)


def _is_str(value) -> bool:
    return isinstance(value, str)


def _check_int(name: str, value) -> None:
    if value is not None and not _is_int(value):
        raise ValidationError(f"Argument {name} must be an integer.")


def _check_str(name: str, value) -> None:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"Argument {name} must be a string.")


def _check_list(name: str, value, item_check) -> None:
    """Require a list or tuple whose every element passes ``item_check``."""
    if value is None:
        return
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"Argument {name} must be a list.")
    if not all(item_check(item) for item in value):
        kind = "integers" if item_check is _is_int else "strings"
        raise ValidationError(f"Argument {name} must contain only {kind}.")


class SelectorValidator:
    """
    Validates raw query arguments into block selectors.

    Args:
        query_max_size: Ceiling on the length of a multiple selection
        default_anchor: Supplies the block used when a single-block query
            names no number, hash or tag
    """

    def __init__(
        self,
        query_max_size: int = DEFAULT_QUERY_MAX_SIZE,
        default_anchor: Optional[Callable[[], BlockIdentifier]] = None,
    ):
        self.query_max_size = query_max_size
        self.default_anchor = default_anchor or (lambda: "latest")

    @staticmethod
    def _check_anchor_types(number, hash, tag) -> None:
        _check_int("number", number)
        _check_str("hash", hash)
        _check_str("tag", tag)

    def exact(
        self,
        number: Optional[int] = None,
        hash: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> ByExact:
        self._check_anchor_types(number, hash, tag)
        hash = _clean_hash(hash)
        tag = _clean_tag(tag)

        if _count_present(number, hash, tag) > 1:
            raise ValidationError(ONE_ANCHOR_MESSAGE)

        if _count_present(number, hash, tag) == 0:
            anchor = self.default_anchor()
            logger.debug(f"No block argument provided, using default anchor {anchor!r}")
            if isinstance(anchor, int):
                return ByExact(number=anchor)
            if VALID_HASH_PATTERN.match(anchor.strip()):
                return ByExact(hash=anchor.strip())
            return ByExact(tag=_clean_tag(anchor))

        return ByExact(number=number, hash=hash, tag=tag)

    def offset(
        self,
        number: Optional[int] = None,
        hash: Optional[str] = None,
        tag: Optional[str] = None,
        offset: Optional[int] = None,
    ) -> ByOffset:
        self._check_anchor_types(number, hash, tag)
        _check_int("offset", offset)
        hash = _clean_hash(hash)
        tag = _clean_tag(tag)
        anchors = _count_present(number, hash, tag)

        # Offset 0 is allowed.
        if offset is None or anchors == 0:
            raise ValidationError("Expected either number, tag or hash argument and offset argument.")

        if anchors > 1:
            raise ValidationError(ONE_ANCHOR_MESSAGE)

        return ByOffset(offset=offset, number=number, hash=hash, tag=tag)

    def contiguous(self, start: Optional[int] = None, end: Optional[int] = None) -> ByContiguousRange:
        if start is None:
            raise ValidationError("Argument from is required.")
        _check_int("from", start)
        _check_int("to", end)
        if start < 0 or (end is not None and end < 0):
            raise ValidationError("Invalid block number provided.")
        return ByContiguousRange(start=start, end=end)

    def explicit_list(
        self,
        numbers: Optional[Sequence[int]] = None,
        hashes: Optional[Sequence[str]] = None,
    ) -> ByExplicitList:
        if numbers is not None and hashes is not None:
            raise ValidationError("Only one of numbers or hashes should be provided.")

        if numbers is None and hashes is None:
            raise ValidationError("At least one of numbers or hashes must be provided.")

        _check_list("numbers", numbers, _is_int)
        _check_list("hashes", hashes, _is_str)

        selected = numbers if numbers is not None else hashes
        check_selection_size(len(selected), self.query_max_size)

        if numbers is not None:
            return ByExplicitList(numbers=tuple(numbers))
        return ByExplicitList(hashes=tuple(hashes))

    def endpoint_range(
        self,
        number_range: Optional[Sequence[int]] = None,
        hash_range: Optional[Sequence[str]] = None,
    ) -> ByEndpointRange:
        if number_range is not None and hash_range is not None:
            raise ValidationError("Only one of numberRange or hashRange should be provided.")

        if number_range is None and hash_range is None:
            raise ValidationError("Expected either a number range or a hash range.")

        if number_range is not None:
            name, pair, item_check = "numberRange", number_range, _is_int
        else:
            name, pair, item_check = "hashRange", hash_range, _is_str

        if not isinstance(pair, (list, tuple)):
            raise ValidationError(f"Argument {name} must be a list.")
        if len(pair) != 2:
            raise ValidationError("Exactly two elements were expected: the start and end blocks.")
        _check_list(name, pair, item_check)

        if number_range is not None:
            start, end = number_range
            if start < 0 or end < 0:
                raise ValidationError("Invalid block number provided.")
            return ByEndpointRange(number_range=(start, end))

        start_hash, end_hash = hash_range
        return ByEndpointRange(hash_range=(start_hash.strip(), end_hash.strip()))
