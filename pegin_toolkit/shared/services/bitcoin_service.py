"""
Bitcoin chain data provider.

Combines an Electrum server (transactions and script hash lookups) with a
bitcoind node (block hashes, headers, tip, transaction inputs) behind the
ChainDataProvider interface used by the pegin engine.
"""

from typing import Any, Dict, List, Optional, Sequence

from pegin_toolkit.proofs.types import UTXO
from pegin_toolkit.shared.config import PeginConfig
from pegin_toolkit.shared.constants import PeginConstants
from pegin_toolkit.shared.exceptions import (
    ConfigurationException,
    UpstreamException,
)
from pegin_toolkit.shared.logging import get_logger
from pegin_toolkit.shared.retry import RPC_RETRY_CONFIG
from pegin_toolkit.shared.services.bitcoind_service import BitcoindService
from pegin_toolkit.shared.services.electrum_service import ElectrumService

_logger = get_logger(__name__)


class BitcoinService:
    """ChainDataProvider backed by Electrum and bitcoind"""

    def __init__(
        self,
        electrum: Optional[ElectrumService] = None,
        bitcoind: Optional[BitcoindService] = None,
    ):
        self._electrum = electrum
        self._bitcoind = bitcoind

    @classmethod
    def from_config(cls, config: PeginConfig) -> "BitcoinService":
        retry_config = RPC_RETRY_CONFIG.with_attempts(config.rpc_max_attempts)
        return cls(
            electrum=(
                ElectrumService(config.electrum, retry_config=retry_config)
                if config.electrum
                else None
            ),
            bitcoind=(
                BitcoindService(config.bitcoind, retry_config=retry_config)
                if config.bitcoind
                else None
            ),
        )

    async def close(self) -> None:
        if self._bitcoind is not None:
            await self._bitcoind.close()

    @property
    def electrum(self) -> ElectrumService:
        if self._electrum is None:
            raise ConfigurationException("Electrum server configuration is required")
        return self._electrum

    @property
    def bitcoind(self) -> BitcoindService:
        if self._bitcoind is None:
            raise ConfigurationException("Bitcoind RPC configuration is required")
        return self._bitcoind

    async def get_transaction(self, txid: str) -> str:
        """
        Get a transaction from the Bitcoin blockchain

        Args:
            txid: Transaction ID

        Returns:
            Raw transaction hex
        """
        return await self.electrum.get_transaction(txid)

    async def get_block_header_from_hash(self, block_hash: str) -> str:
        return await self.bitcoind.get_block_header(block_hash)

    async def get_block_hash(self, height: int) -> str:
        return await self.bitcoind.get_block_hash(height)

    async def get_tip(self) -> int:
        """Current blockchain tip height."""
        return await self.bitcoind.get_block_count()

    async def get_unspent_outputs(self, script_hashes: Sequence[str]) -> List[UTXO]:
        """
        List unspent outputs for Electrum script hashes.

        Raises:
            UpstreamException: If Electrum returns an unexpected entry
        """
        results = await self.electrum.list_unspent(script_hashes)

        utxos: List[UTXO] = []
        for entries in results:
            for entry in entries or []:
                if entry.get("tx_hash") is None or entry.get("tx_pos") is None:
                    _logger.error(f"Unexpected listunspent entry: {entry}")
                    raise UpstreamException(
                        "Error getting UTXOs. Unexpected object returned from Electrum",
                        operation="blockchain.scripthash.listunspent",
                    )
                utxos.append(UTXO.from_dict(entry))
        return utxos

    async def is_coinbase_tx(self, txid: str) -> bool:
        """
        Check if a bitcoin transaction is a coinbase transaction.

        A coinbase transaction has exactly one input, spending the null
        outpoint (bitcoind marks it with a ``coinbase`` field).
        """
        tx: Dict[str, Any] = await self.bitcoind.get_raw_transaction(txid, True)
        vin = tx.get("vin") or []
        if len(vin) != 1:
            return False
        return "coinbase" in vin[0] or vin[0].get("txid") == PeginConstants.NULL_TXID
