"""
BlockQL JSON-RPC 2.0 Server

Implements the JSON-RPC 2.0 specification with support for:
- Method registration and namespacing
- Batch requests
- Translation of query failures into standard error codes
"""

import json
import asyncio
import inspect
from typing import Any, Callable, Dict, List, Optional, Union
from dataclasses import dataclass
from enum import IntEnum

from ..exceptions import (
    BlockQLException,
    BlockSourceError,
    FetchError,
    ResolutionError,
    ValidationError,
)
from ..logger import get_logger

logger = get_logger(__name__)


class RPCErrorCode(IntEnum):
    """Standard JSON-RPC 2.0 error codes."""

    # Standard errors
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Server errors (-32000 to -32099)
    SERVER_ERROR = -32000
    RESOURCE_NOT_FOUND = -32001
    RESOURCE_UNAVAILABLE = -32002
    METHOD_NOT_SUPPORTED = -32004
    LIMIT_EXCEEDED = -32005


# Most specific first
_ERROR_CODES = (
    (ValidationError, RPCErrorCode.INVALID_PARAMS),
    (ResolutionError, RPCErrorCode.RESOURCE_NOT_FOUND),
    (FetchError, RPCErrorCode.RESOURCE_UNAVAILABLE),
    (BlockSourceError, RPCErrorCode.SERVER_ERROR),
)


@dataclass
class RPCError(Exception):
    """JSON-RPC error."""

    code: int
    message: str
    data: Optional[Any] = None

    def to_dict(self) -> dict:
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = self.data
        return result

    @classmethod
    def from_exception(cls, exc: BlockQLException) -> "RPCError":
        """Map a query failure onto its JSON-RPC error code."""
        code = RPCErrorCode.INTERNAL_ERROR
        for exc_type, exc_code in _ERROR_CODES:
            if isinstance(exc, exc_type):
                code = exc_code
                break
        data = None
        if isinstance(exc, FetchError) and exc.identifier is not None:
            data = {"identifier": exc.identifier}
        return cls(code, str(exc), data)


@dataclass
class RPCRequest:
    """JSON-RPC request."""

    jsonrpc: str
    method: str
    params: Union[List, Dict, None]
    id: Union[str, int, None]

    @classmethod
    def from_dict(cls, data: dict) -> "RPCRequest":
        return cls(
            jsonrpc=data.get("jsonrpc", "2.0"),
            method=data.get("method", ""),
            params=data.get("params"),
            id=data.get("id"),
        )

    @property
    def is_notification(self) -> bool:
        """Check if this is a notification (no id)."""
        return self.id is None


@dataclass
class RPCResponse:
    """JSON-RPC response."""

    jsonrpc: str = "2.0"
    result: Optional[Any] = None
    error: Optional[Dict] = None
    id: Union[str, int, None] = None

    def to_dict(self) -> dict:
        response = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            response["error"] = self.error
        else:
            response["result"] = self.result
        return response

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


# Type for RPC method handlers
RPCMethod = Callable[..., Any]


class RPCModule:
    """
    Base class for RPC modules.

    Subclass this to create method namespaces like ql_, web3_, etc.
    """

    # Namespace prefix (e.g., "ql", "web3")
    namespace: str = ""

    def __init__(self, context: Any = None):
        """
        Args:
            context: Application context (query service, config, ...)
        """
        self.context = context

    def get_methods(self) -> Dict[str, RPCMethod]:
        """Map full method names to the public ``@rpc_method`` callables."""
        methods = {}
        for name in dir(self):
            if name.startswith("_"):
                continue
            attr = getattr(self, name)
            if callable(attr) and hasattr(attr, "__rpc_method__"):
                full_name = f"{self.namespace}_{name}" if self.namespace else name
                methods[full_name] = attr
        return methods


def rpc_method(func: RPCMethod) -> RPCMethod:
    """
    Decorator to mark a method as an RPC endpoint.

    Usage:
        @rpc_method
        async def gasPrice(self) -> int:
            return await self.context.service.gas_price()
    """
    func.__rpc_method__ = True
    return func


class RPCServer:
    """
    JSON-RPC 2.0 server.

    Manages method registration and request handling; transport agnostic.
    """

    def __init__(self):
        self._methods: Dict[str, RPCMethod] = {}
        self._modules: Dict[str, RPCModule] = {}

    def register_module(self, module: RPCModule):
        methods = module.get_methods()
        self._methods.update(methods)
        self._modules[module.namespace] = module
        logger.info(f"Registered RPC module: {module.namespace} ({len(methods)} methods)")

    def get_methods(self) -> List[str]:
        """Get list of registered method names."""
        return list(self._methods.keys())

    async def handle_request(self, data: Union[str, bytes, dict, list]) -> Optional[str]:
        """
        Handle a JSON-RPC request.

        Args:
            data: Request data (JSON string or parsed object)

        Returns:
            JSON response string, or None for notifications
        """
        try:
            if isinstance(data, (str, bytes)):
                parsed = json.loads(data)
            else:
                parsed = data
        except json.JSONDecodeError as e:
            error = RPCError(RPCErrorCode.PARSE_ERROR, f"Parse error: {e}")
            return RPCResponse(error=error.to_dict()).to_json()

        if isinstance(parsed, list):
            if not parsed:
                error = RPCError(RPCErrorCode.INVALID_REQUEST, "Empty batch")
                return RPCResponse(error=error.to_dict()).to_json()

            responses = await asyncio.gather(*[
                self._handle_single(req) for req in parsed
            ])

            # Notifications produce no response
            responses = [r for r in responses if r is not None]
            if not responses:
                return None
            return json.dumps(responses)

        response = await self._handle_single(parsed)
        if response is None:
            return None
        return json.dumps(response)

    async def _handle_single(self, data: Any) -> Optional[dict]:
        """Handle a single request and return response dict."""
        if not isinstance(data, dict):
            return RPCResponse(
                error=RPCError(RPCErrorCode.INVALID_REQUEST, "Invalid request").to_dict()
            ).to_dict()

        request = RPCRequest.from_dict(data)

        if request.jsonrpc != "2.0":
            return RPCResponse(
                id=request.id,
                error=RPCError(RPCErrorCode.INVALID_REQUEST, "Invalid JSON-RPC version").to_dict()
            ).to_dict()

        if not request.method:
            return RPCResponse(
                id=request.id,
                error=RPCError(RPCErrorCode.INVALID_REQUEST, "Missing method").to_dict()
            ).to_dict()

        handler = self._methods.get(request.method)
        if handler is None:
            if request.is_notification:
                return None
            return RPCResponse(
                id=request.id,
                error=RPCError(
                    RPCErrorCode.METHOD_NOT_FOUND,
                    f"Method not found: {request.method}"
                ).to_dict()
            ).to_dict()

        try:
            if request.params is None:
                args, kwargs = (), {}
            elif isinstance(request.params, list):
                args, kwargs = tuple(request.params), {}
            elif isinstance(request.params, dict):
                args, kwargs = (), dict(request.params)
            else:
                raise RPCError(RPCErrorCode.INVALID_PARAMS, "Invalid params type")

            try:
                inspect.signature(handler).bind(*args, **kwargs)
            except TypeError as e:
                # Unknown or missing arguments for the handler signature
                raise RPCError(RPCErrorCode.INVALID_PARAMS, str(e)) from e

            result = await handler(*args, **kwargs)

            if request.is_notification:
                return None

            return RPCResponse(id=request.id, result=result).to_dict()

        except RPCError as e:
            if e.code == RPCErrorCode.INVALID_PARAMS:
                logger.debug(f"{request.method} called with bad params: {e.message}")
            error = e

        except BlockQLException as e:
            logger.info(f"{request.method} rejected: {e}")
            error = RPCError.from_exception(e)

        except Exception as e:
            logger.exception(f"Error handling RPC method {request.method}")
            error = RPCError(RPCErrorCode.INTERNAL_ERROR, str(e))

        if request.is_notification:
            return None
        return RPCResponse(id=request.id, error=error.to_dict()).to_dict()
