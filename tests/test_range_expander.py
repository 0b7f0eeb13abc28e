"""
Range Expander and Endpoint Resolver Test Suite
"""

import pytest

from conftest import MemoryBlockSource, UPSTREAM_DOWN, block_hash

from blockql.exceptions import ResolutionError, ValidationError
from blockql.selection import (
    ByContiguousRange,
    ByEndpointRange,
    ByExact,
    ByExplicitList,
    ByOffset,
    EndpointResolver,
    RangeExpander,
    ResolvedRange,
)

MISSING_HASH = "0x" + "ff" * 32


def make_expander(height=100, max_size=100, **source_kwargs):
    source = MemoryBlockSource(height=height, **source_kwargs)
    return RangeExpander(source, query_max_size=max_size), source


class TestResolvedRange:

    def test_ceiling_enforced_on_construction(self):
        with pytest.raises(ValidationError, match="Maximum length allowed: 2"):
            ResolvedRange(identifiers=(1, 2, 3), max_size=2)

    def test_iterates_in_order(self):
        resolved = ResolvedRange(identifiers=(5, 3, 9), max_size=10)
        assert list(resolved) == [5, 3, 9]
        assert len(resolved) == 3


class TestExpandExact:

    @pytest.mark.asyncio
    async def test_single_anchor(self):
        expander, source = make_expander()
        resolved = await expander.expand(ByExact(hash=block_hash(4)))
        assert list(resolved) == [block_hash(4)]
        assert source.calls == []


class TestExpandOffset:

    @pytest.mark.asyncio
    async def test_number_offset_zero(self):
        expander, source = make_expander()
        resolved = await expander.expand(ByOffset(offset=0, number=40))
        assert list(resolved) == [40]
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_number_negative_offset(self):
        expander, _ = make_expander()
        resolved = await expander.expand(ByOffset(offset=-3, number=40))
        assert list(resolved) == [37]

    @pytest.mark.asyncio
    async def test_number_zero_anchor_is_not_resolved(self):
        expander, source = make_expander()
        resolved = await expander.expand(ByOffset(offset=2, number=0))
        assert list(resolved) == [2]
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_hash_anchor_resolved_with_one_fetch(self):
        expander, source = make_expander()
        resolved = await expander.expand(ByOffset(offset=5, hash=block_hash(10)))
        assert list(resolved) == [15]
        assert source.calls == [block_hash(10)]

    @pytest.mark.asyncio
    async def test_tag_anchor(self):
        expander, _ = make_expander(height=50)
        resolved = await expander.expand(ByOffset(offset=-1, tag="latest"))
        assert list(resolved) == [49]

    @pytest.mark.asyncio
    async def test_result_beyond_head_not_checked(self):
        expander, _ = make_expander(height=50)
        resolved = await expander.expand(ByOffset(offset=10, tag="latest"))
        assert list(resolved) == [60]

    @pytest.mark.asyncio
    async def test_unknown_anchor_fails_resolution(self):
        expander, _ = make_expander()
        with pytest.raises(ResolutionError):
            await expander.expand(ByOffset(offset=1, hash=MISSING_HASH))


class TestExpandContiguous:

    @pytest.mark.asyncio
    async def test_end_defaults_to_current_height(self):
        expander, source = make_expander(height=20)
        resolved = await expander.expand(ByContiguousRange(start=15))
        assert list(resolved) == [15, 16, 17, 18, 19, 20]
        assert source.height_calls == 1

    @pytest.mark.asyncio
    async def test_explicit_end_skips_height_lookup(self):
        expander, source = make_expander()
        resolved = await expander.expand(ByContiguousRange(start=3, end=5))
        assert list(resolved) == [3, 4, 5]
        assert source.height_calls == 0

    @pytest.mark.asyncio
    async def test_end_zero_is_not_treated_as_absent(self):
        expander, source = make_expander()
        resolved = await expander.expand(ByContiguousRange(start=0, end=0))
        assert list(resolved) == [0]
        assert source.height_calls == 0

    @pytest.mark.asyncio
    async def test_too_large_rejected(self):
        expander, _ = make_expander(height=10_000, max_size=100)
        with pytest.raises(ValidationError, match="Too large a multiple selection. Maximum length allowed: 100."):
            await expander.expand(ByContiguousRange(start=0))

    @pytest.mark.asyncio
    async def test_start_after_head_rejected(self):
        expander, _ = make_expander(height=10)
        with pytest.raises(ValidationError, match="prior to the end block"):
            await expander.expand(ByContiguousRange(start=11))


class TestExpandExplicitList:

    @pytest.mark.asyncio
    async def test_order_unchanged(self):
        expander, _ = make_expander()
        resolved = await expander.expand(ByExplicitList(numbers=(5, 3, 9, 3)))
        assert list(resolved) == [5, 3, 9, 3]

    @pytest.mark.asyncio
    async def test_hashes_kept_as_identifiers(self):
        expander, source = make_expander()
        hashes = (block_hash(2), block_hash(1))
        resolved = await expander.expand(ByExplicitList(hashes=hashes))
        assert tuple(resolved) == hashes
        assert source.calls == []


class TestExpandEndpointRange:

    @pytest.mark.asyncio
    async def test_number_range(self):
        expander, _ = make_expander()
        resolved = await expander.expand(ByEndpointRange(number_range=(7, 10)))
        assert list(resolved) == [7, 8, 9, 10]

    @pytest.mark.asyncio
    async def test_equal_endpoints_single_block(self):
        expander, _ = make_expander()
        resolved = await expander.expand(ByEndpointRange(number_range=(12, 12)))
        assert list(resolved) == [12]

    @pytest.mark.asyncio
    async def test_inverted_range_rejected(self):
        expander, _ = make_expander()
        with pytest.raises(ValidationError) as exc:
            await expander.expand(ByEndpointRange(number_range=(10, 7)))
        assert str(exc.value) == "Start block in the range must be prior to the end block."

    @pytest.mark.asyncio
    async def test_size_ceiling(self):
        expander, _ = make_expander(max_size=5)
        assert len(await expander.expand(ByEndpointRange(number_range=(1, 5)))) == 5
        with pytest.raises(ValidationError, match="Maximum length allowed: 5"):
            await expander.expand(ByEndpointRange(number_range=(1, 6)))

    @pytest.mark.asyncio
    async def test_hash_range_resolved(self):
        expander, source = make_expander()
        resolved = await expander.expand(ByEndpointRange(hash_range=(block_hash(20), block_hash(23))))
        assert list(resolved) == [20, 21, 22, 23]
        assert sorted(source.calls) == sorted([block_hash(20), block_hash(23)])

    @pytest.mark.asyncio
    async def test_unresolved_end_fails_whole_range(self):
        expander, source = make_expander()
        with pytest.raises(ResolutionError) as exc:
            await expander.expand(ByEndpointRange(hash_range=(block_hash(20), MISSING_HASH)))
        assert str(exc.value) == "Could not resolve the block associated with one or all hashes."
        assert block_hash(20) in source.completed

    @pytest.mark.asyncio
    async def test_inverted_hash_range_rejected(self):
        expander, _ = make_expander()
        with pytest.raises(ValidationError, match="prior to the end block"):
            await expander.expand(ByEndpointRange(hash_range=(block_hash(9), block_hash(2))))


class TestEndpointResolver:

    @pytest.mark.asyncio
    async def test_source_failure_becomes_resolution_error(self):
        source = MemoryBlockSource(failures={"latest": UPSTREAM_DOWN})
        resolver = EndpointResolver(source)
        with pytest.raises(ResolutionError, match="connection refused"):
            await resolver.resolve_height("latest")

    @pytest.mark.asyncio
    async def test_pair_source_failure_becomes_resolution_error(self):
        source = MemoryBlockSource(failures={block_hash(2): UPSTREAM_DOWN})
        resolver = EndpointResolver(source)
        with pytest.raises(ResolutionError):
            await resolver.resolve_pair(block_hash(1), block_hash(2))
