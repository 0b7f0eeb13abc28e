"""
Upstream Ethereum JSON-RPC block source.

Thin httpx transport adapter: every capability maps to one upstream
JSON-RPC call. No caching and no retries; upstream failures surface as
:class:`~blockql.exceptions.BlockSourceError`.
"""

import itertools
import json
import time
from typing import Any, Dict, Optional

import httpx

from ..constants import (
    BLOCK_TAGS,
    CONNECTION_TIMEOUT,
    LOG_INCLUDE_REQUEST_CONTENT,
    LOG_INCLUDE_RESPONSE_CONTENT,
    LOG_MAX_PATH_LENGTH,
    VALID_HASH_PATTERN,
)
from ..exceptions import BlockSourceError
from ..logger import get_logger
from .base import Block, BlockIdentifier, BlockSource, parse_quantity

logger = get_logger(__name__)


class JSONRPCBlockSource(BlockSource):
    """
    Block source backed by an Ethereum-compatible JSON-RPC endpoint.

    Usage:
        async with JSONRPCBlockSource("http://127.0.0.1:8545") as source:
            block = await source.fetch_block(17_000_000)
    """

    def __init__(
        self,
        url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = CONNECTION_TIMEOUT,
        full_transactions: bool = False,
    ):
        """
        Args:
            url: Upstream JSON-RPC URL
            client: Shared HTTP client; one is created (and owned) when omitted
            timeout: Request timeout in seconds for an owned client
            full_transactions: Request full transaction objects with blocks
        """
        self.url = url
        self.full_transactions = full_transactions
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "JSONRPCBlockSource":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _call(self, method: str, *params: Any) -> Any:
        """Perform one JSON-RPC call and return its ``result``."""
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": list(params)}

        log_url = self.url
        if len(log_url) > LOG_MAX_PATH_LENGTH:
            log_url = log_url[:LOG_MAX_PATH_LENGTH] + "...[TRUNCATED]"
        body = f" {json.dumps(payload['params'])}" if LOG_INCLUDE_REQUEST_CONTENT else ""
        logger.debug(f"--> \"{method} {log_url}\"{body}")

        start_time = time.time()
        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.RequestError as e:
            logger.warning(f"<-- \"{method} {log_url}\" NETWORK_ERROR ({time.time() - start_time:.3f}s)")
            raise BlockSourceError(f"Upstream {method} request failed: {e}") from e
        except (json.JSONDecodeError, httpx.HTTPStatusError) as e:
            logger.warning(f"<-- \"{method} {log_url}\" ERROR ({time.time() - start_time:.3f}s): {e}")
            raise BlockSourceError(f"Upstream {method} returned an invalid response: {e}") from e

        process_time = time.time() - start_time
        result_log = f" {json.dumps(data.get('result'))}" if LOG_INCLUDE_RESPONSE_CONTENT else ""
        logger.debug(f"<-- \"{method} {log_url}\" {response.status_code} ({process_time:.3f}s){result_log}")

        error = data.get("error")
        if error:
            message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
            raise BlockSourceError(f"Upstream {method} error: {message}")
        return data.get("result")

    async def fetch_block(self, identifier: BlockIdentifier) -> Optional[Block]:
        if isinstance(identifier, int):
            result = await self._call("eth_getBlockByNumber", hex(identifier), self.full_transactions)
        elif VALID_HASH_PATTERN.match(identifier):
            result = await self._call("eth_getBlockByHash", identifier, self.full_transactions)
        elif identifier in BLOCK_TAGS:
            result = await self._call("eth_getBlockByNumber", identifier, self.full_transactions)
        else:
            # Unknown tags and malformed hashes name no block
            logger.debug(f"Unrecognised block identifier: {identifier!r}")
            return None

        if result is None:
            return None
        return Block.from_rpc(result)

    async def current_height(self) -> int:
        return parse_quantity(await self._call("eth_blockNumber"))

    async def estimate_gas(self, call: Dict[str, Any]) -> int:
        return parse_quantity(await self._call("eth_estimateGas", call))

    async def gas_price(self) -> int:
        return parse_quantity(await self._call("eth_gasPrice"))

    async def protocol_version(self) -> str:
        return str(await self._call("eth_protocolVersion"))

    async def fetch_transaction(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self._call("eth_getTransactionByHash", tx_hash)

    async def balance(self, address: str, identifier: BlockIdentifier = "latest") -> int:
        block = hex(identifier) if isinstance(identifier, int) else identifier
        return parse_quantity(await self._call("eth_getBalance", address, block))
