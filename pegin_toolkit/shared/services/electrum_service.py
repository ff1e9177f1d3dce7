"""
Electrum protocol client.

Electrum servers speak newline-delimited JSON-RPC over TCP or TLS. Each call
opens its own connection, negotiates the protocol version, sends its
requests and closes the socket again, so no connection state outlives a call.
"""

import asyncio
import itertools
import json
import ssl
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pegin_toolkit.shared.config import ElectrumConfig
from pegin_toolkit.shared.exceptions import UpstreamException
from pegin_toolkit.shared.logging import get_logger
from pegin_toolkit.shared.retry import RPC_RETRY_CONFIG, RetryConfig
from pegin_toolkit.shared.services.http_client import (
    DEFAULT_TIMEOUT,
    build_jsonrpc_payload,
)

_logger = get_logger(__name__)

CLIENT_NAME = "pegin-toolkit"
PROTOCOL_VERSION = "1.4"


class ElectrumRPCError(Exception):
    """Electrum server answered with an error object."""

    def __init__(self, code: int, message: str):
        super().__init__(f"Electrum error {code}: {message}")
        self.code = code
        self.message = message


class ElectrumService:
    """Async Electrum client, one connection per call"""

    def __init__(
        self,
        config: ElectrumConfig,
        retry_config: RetryConfig = RPC_RETRY_CONFIG,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.config = config
        self.retry_config = retry_config
        self.timeout = timeout

    def _ssl_context(self) -> Optional[ssl.SSLContext]:
        if not self.config.use_ssl:
            return None
        context = ssl.create_default_context()
        if not self.config.verify_ssl:
            # Most public Electrum servers use self-signed certificates
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    async def _open(self) -> Tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        return await asyncio.wait_for(
            asyncio.open_connection(
                self.config.host, self.config.port, ssl=self._ssl_context()
            ),
            timeout=self.timeout,
        )

    async def _exchange(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        request_id: int,
        method: str,
        params: List[Any],
    ) -> Any:
        payload = build_jsonrpc_payload(method, params, request_id)
        writer.write((json.dumps(payload) + "\n").encode())
        await writer.drain()

        while True:
            line = await asyncio.wait_for(reader.readline(), timeout=self.timeout)
            if not line:
                raise ConnectionError("Electrum server closed the connection")
            message: Dict[str, Any] = json.loads(line)
            # Skip subscription notifications and stray responses
            if message.get("id") != request_id:
                continue
            error = message.get("error")
            if error:
                if isinstance(error, dict):
                    raise ElectrumRPCError(
                        error.get("code", -1), error.get("message", "")
                    )
                raise ElectrumRPCError(-1, str(error))
            return message.get("result")

    async def _session(self, calls: Sequence[Tuple[str, List[Any]]]) -> List[Any]:
        reader, writer = await self._open()
        ids = itertools.count(1)
        try:
            await self._exchange(
                reader,
                writer,
                next(ids),
                "server.version",
                [CLIENT_NAME, PROTOCOL_VERSION],
            )
            return [
                await self._exchange(reader, writer, next(ids), method, params)
                for method, params in calls
            ]
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, ssl.SSLError):
                pass

    async def request_many(self, calls: Sequence[Tuple[str, List[Any]]]) -> List[Any]:
        """
        Run several requests over a single connection.

        Raises:
            UpstreamException: If the server is unreachable or returns an error
        """
        operation = ",".join(sorted({method for method, _ in calls}))
        try:
            return await self.retry_config.run(
                self._session, list(calls), operation_name=f"electrum.{operation}"
            )
        except (ElectrumRPCError, OSError, asyncio.TimeoutError, ValueError) as e:
            _logger.error(f"Failed to call Electrum {operation}: {e}")
            raise UpstreamException(
                f"Failed to call Electrum {operation}: {e}", operation=operation
            ) from e

    async def request(self, method: str, *params: Any) -> Any:
        results = await self.request_many([(method, list(params))])
        return results[0]

    async def get_transaction(self, txid: str) -> str:
        """Raw transaction hex."""
        return await self.request("blockchain.transaction.get", txid)

    async def list_unspent(self, script_hashes: Sequence[str]) -> List[List[Dict[str, Any]]]:
        """``blockchain.scripthash.listunspent`` for each script hash."""
        return await self.request_many(
            [("blockchain.scripthash.listunspent", [h]) for h in script_hashes]
        )
