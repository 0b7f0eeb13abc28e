"""
BlockQL web3_* RPC Methods

Service information methods.
"""

from typing import Dict

from ..server import RPCModule, rpc_method
from ...constants import SERVICE_VERSION


class Web3Module(RPCModule):
    """
    Service information methods (web3_* namespace).
    """

    namespace = "web3"

    @rpc_method
    async def clientVersion(self) -> str:
        """
        Returns the client version string.

        Returns:
            Client version
        """
        return f"BlockQL/{SERVICE_VERSION}/python"

    @rpc_method
    async def queryLimits(self) -> Dict:
        """Returns the selection ceiling applied to multi-block queries."""
        service = getattr(self.context, "service", None) if self.context else None
        return {"queryMaxSize": service.query_max_size if service else None}
