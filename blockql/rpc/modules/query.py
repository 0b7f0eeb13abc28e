"""
BlockQL ql_* RPC Methods

Block selection queries and the chain queries served alongside them.

Architecture:
    - self.context.service → BlockQueryService (selection pipeline + source)

Parameter names follow the query arguments callers already use
(``numberRange``, ``hashRange``, ``from``), so both positional and
by-name params work.
"""

from typing import Any, Dict, List, Optional

from ..server import RPCModule, rpc_method, RPCError, RPCErrorCode


class QueryModule(RPCModule):
    """
    Block selection methods (ql_* namespace).
    """

    namespace = "ql"

    def _service(self):
        service = getattr(self.context, "service", None) if self.context else None
        if service is None:
            raise RPCError(RPCErrorCode.INTERNAL_ERROR, "Query service not available")
        return service

    # ══════════════════════════════════════════════════════════════════════════
    #  BLOCKS
    # ══════════════════════════════════════════════════════════════════════════

    @rpc_method
    async def block(
        self,
        number: Optional[int] = None,
        hash: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Dict:
        """Returns one block by number, hash or tag (default block if none given)."""
        block = await self._service().block(number=number, hash=hash, tag=tag)
        return block.to_dict()

    @rpc_method
    async def blockOffset(
        self,
        number: Optional[int] = None,
        hash: Optional[str] = None,
        tag: Optional[str] = None,
        offset: Optional[int] = None,
    ) -> Dict:
        """Returns the block ``offset`` blocks away from an anchor block."""
        block = await self._service().block_offset(number=number, hash=hash, tag=tag, offset=offset)
        return block.to_dict()

    @rpc_method
    async def blocks(self, *args: Any, **kwargs: Any) -> List[Dict]:
        """
        Returns blocks ``from`` through ``to`` inclusive.

        ``to`` defaults to the current chain head. Accepts ``[from, to]``
        or ``{"from": ..., "to": ...}``.
        """
        if len(args) > 2:
            raise RPCError(RPCErrorCode.INVALID_PARAMS, "Expected at most two params: from and to")
        start = args[0] if args else kwargs.pop("from", None)
        end = args[1] if len(args) > 1 else kwargs.pop("to", None)
        if kwargs:
            raise RPCError(RPCErrorCode.INVALID_PARAMS, f"Unexpected params: {', '.join(sorted(kwargs))}")

        blocks = await self._service().blocks(start, end)
        return [b.to_dict() for b in blocks]

    @rpc_method
    async def blockList(
        self,
        numbers: Optional[List[int]] = None,
        hashes: Optional[List[str]] = None,
    ) -> List[Dict]:
        """Returns the listed blocks in the order given."""
        blocks = await self._service().block_list(numbers=numbers, hashes=hashes)
        return [b.to_dict() for b in blocks]

    @rpc_method
    async def blocksRange(
        self,
        numberRange: Optional[List[int]] = None,
        hashRange: Optional[List[str]] = None,
    ) -> List[Dict]:
        """Returns the inclusive range delimited by two numbers or two hashes."""
        blocks = await self._service().blocks_range(number_range=numberRange, hash_range=hashRange)
        return [b.to_dict() for b in blocks]

    # ══════════════════════════════════════════════════════════════════════════
    #  CHAIN
    # ══════════════════════════════════════════════════════════════════════════

    @rpc_method
    async def estimateGas(self, data: Dict) -> int:
        """Estimates gas for a call to a contract address with hex call data."""
        if not isinstance(data, dict):
            raise RPCError(RPCErrorCode.INVALID_PARAMS, "Parameter (data) must be an object")
        return await self._service().estimate_gas(data)

    @rpc_method
    async def gasPrice(self) -> int:
        return await self._service().gas_price()

    @rpc_method
    async def protocolVersion(self) -> str:
        return await self._service().protocol_version()

    @rpc_method
    async def transaction(self, hash: str) -> Optional[Dict]:
        return await self._service().transaction(hash)

    @rpc_method
    async def account(self, address: str) -> Dict:
        account = await self._service().account(address)
        return account.to_dict()
