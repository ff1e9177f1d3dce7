"""
L2 bridge RPC service.

The L2 node exposes the pegin bridge through custom ``eth_`` JSON-RPC
methods. Requests go through the web3 provider so the node is reached the
same way as any other EVM endpoint.
"""

from typing import Any, Dict, List, Optional

from hexbytes import HexBytes
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.types import RPCEndpoint

from pegin_toolkit.proofs.types import GatewayAddress
from pegin_toolkit.shared.exceptions import ConfigurationException, UpstreamException
from pegin_toolkit.shared.logging import get_logger
from pegin_toolkit.shared.retry import RPC_RETRY_CONFIG, RetryConfig

_logger = get_logger(__name__)

GET_GATEWAY_ADDRESS = "eth_getGatewayAddress"
GET_MERKLE_PROOF = "eth_getMerkleProof"


class BridgeService:
    """BridgeRpc implementation over the L2 node's JSON-RPC"""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        retry_config: RetryConfig = RPC_RETRY_CONFIG,
        w3: Optional[AsyncWeb3] = None,
    ):
        if w3 is None:
            if not rpc_url:
                raise ConfigurationException("L2 RPC URL is required for the bridge")
            w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        self.rpc_url = rpc_url
        self.w3 = w3
        self.retry_config = retry_config

    async def _make_request(self, method: str, params: List[Any]) -> Dict[str, Any]:
        return await self.w3.provider.make_request(RPCEndpoint(method), params)

    async def _call(self, method: str, params: List[Any]) -> Any:
        try:
            response = await self.retry_config.run(
                self._make_request, method, params, operation_name=method
            )
        except Exception as e:
            _logger.error(f"Bridge RPC {method} failed: {e}")
            raise UpstreamException(
                f"Bridge RPC {method} failed: {e}", operation=method
            ) from e

        error = response.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else error
            _logger.error(f"Bridge RPC {method} returned an error: {message}")
            raise UpstreamException(
                f"Bridge RPC {method} returned an error: {message}", operation=method
            )
        return response.get("result")

    async def get_gateway_address(self, eth_address: str) -> GatewayAddress:
        """
        Derive the gateway address for an L2 recipient.

        Args:
            eth_address: Recipient address as hex without 0x prefix

        Raises:
            UpstreamException: If the bridge call fails or returns no result
        """
        result = await self._call(GET_GATEWAY_ADDRESS, [eth_address])
        if result is None:
            _logger.error(f"No gateway address returned for {eth_address}")
            raise UpstreamException(
                "Failed to get gateway address", operation=GET_GATEWAY_ADDRESS
            )

        return GatewayAddress(
            gateway_address=result.get("gateway_address") or "",
            aggregate_public_key=result.get("aggregate_public_key") or "",
        )

    async def get_merkle_proof(self, txid: str, block_hash: str) -> bytes:
        """
        Fetch the merkle inclusion proof of ``txid`` in ``block_hash``.

        Raises:
            UpstreamException: If the bridge call fails or returns no result
        """
        result = await self._call(GET_MERKLE_PROOF, [txid, block_hash])
        if result is None:
            _logger.error(f"No merkle proof returned for {txid} in {block_hash}")
            raise UpstreamException(
                "Failed to get merkle proof", operation=GET_MERKLE_PROOF
            )
        try:
            return bytes(HexBytes(result))
        except ValueError as e:
            raise UpstreamException(
                f"Malformed merkle proof for {txid}: {e}", operation=GET_MERKLE_PROOF
            ) from e
