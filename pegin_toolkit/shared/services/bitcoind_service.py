"""
Bitcoind JSON-RPC client.

Thin async wrapper over a bitcoin node's RPC interface covering the calls the
pegin flow needs: block hashes, raw headers, chain tip and verbose
transactions.
"""

import itertools
from typing import Any, Dict, List, Optional

import httpx

from pegin_toolkit.shared.config import BitcoindConfig
from pegin_toolkit.shared.exceptions import UpstreamException
from pegin_toolkit.shared.logging import get_logger
from pegin_toolkit.shared.retry import RPC_RETRY_CONFIG, RetryConfig
from pegin_toolkit.shared.services.http_client import (
    build_async_client,
    build_jsonrpc_payload,
)

_logger = get_logger(__name__)


class BitcoindRPCError(Exception):
    """Bitcoind answered with an error object."""

    def __init__(self, code: int, message: str):
        super().__init__(f"RPC Error {code}: {message}")
        self.code = code
        self.message = message


class BitcoindService:
    """
    Async JSON-RPC client for bitcoind.

    Usage:
        async with BitcoindService(config) as rpc:
            tip = await rpc.get_block_count()
    """

    def __init__(
        self,
        config: BitcoindConfig,
        retry_config: RetryConfig = RPC_RETRY_CONFIG,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self.retry_config = retry_config
        self._client = client or build_async_client(
            auth=(config.username, config.password)
        )
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "BitcoindService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _post(self, method: str, params: List[Any]) -> Any:
        payload = build_jsonrpc_payload(method, params, next(self._ids))
        response = await self._client.post(self.config.url, json=payload)

        # bitcoind reports RPC errors with a 500 and a JSON body
        try:
            body: Dict[str, Any] = response.json()
        except ValueError:
            response.raise_for_status()
            raise

        error = body.get("error")
        if error:
            raise BitcoindRPCError(error.get("code", -1), error.get("message", ""))
        response.raise_for_status()
        return body.get("result")

    async def call(self, method: str, *params: Any) -> Any:
        """
        Call an RPC method, retrying transport failures.

        Raises:
            UpstreamException: If the node is unreachable or returns an error
        """
        try:
            return await self.retry_config.run(
                self._post, method, list(params), operation_name=f"bitcoind.{method}"
            )
        except (BitcoindRPCError, httpx.HTTPError, OSError, ValueError) as e:
            _logger.error(f"Failed to call bitcoind {method}: {e}")
            raise UpstreamException(
                f"Failed to call bitcoind {method}: {e}", operation=method
            ) from e

    async def get_block_hash(self, height: int) -> str:
        return await self.call("getblockhash", height)

    async def get_block_header(self, block_hash: str) -> str:
        """Serialized (80-byte) header as hex."""
        return await self.call("getblockheader", block_hash, False)

    async def get_block_count(self) -> int:
        info = await self.call("getblockchaininfo")
        return int(info["blocks"])

    async def get_raw_transaction(self, txid: str, verbose: bool = True) -> Any:
        return await self.call("getrawtransaction", txid, verbose)
