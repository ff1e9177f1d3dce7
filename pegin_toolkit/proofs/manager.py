from typing import List, Sequence, Tuple

from eth_utils import remove_0x_prefix

from pegin_toolkit.proofs.assembler import ProofComponentAssembler
from pegin_toolkit.proofs.encoder import encode_pegin_proof
from pegin_toolkit.proofs.interfaces import BridgeRpc, ChainDataProvider
from pegin_toolkit.proofs.policy import get_confirmation_depth
from pegin_toolkit.proofs.types import (
    UTXO,
    GatewayAddress,
    PeginProofResult,
    ProofComponents,
    UTXOWithCheckpoint,
)
from pegin_toolkit.shared.config import validate_network
from pegin_toolkit.shared.exceptions import (
    ConfirmationPolicyException,
    UpstreamException,
    UtxoNotFoundException,
)
from pegin_toolkit.shared.logging import get_logger
from pegin_toolkit.utils.address import get_script_hash

_logger = get_logger(__name__)


class PeginService:
    """Builds pegin proofs for UTXOs locked at a gateway address"""

    def __init__(
        self,
        chain: ChainDataProvider,
        bridge: BridgeRpc,
        bitcoin_network: str,
    ):
        self.chain = chain
        self.bridge = bridge
        self.bitcoin_network = validate_network(bitcoin_network)
        self.assembler = ProofComponentAssembler(chain, bridge)

    async def generate_gateway_address(self, ethereum_address: str) -> GatewayAddress:
        """
        Derive the gateway address for an Ethereum address.

        Args:
            ethereum_address: Recipient address, with or without 0x prefix

        Returns:
            GatewayAddress: Bitcoin gateway address and aggregate public key
        """
        return await self.bridge.get_gateway_address(
            remove_0x_prefix(ethereum_address)
        )

    def get_confirmation_depth(self, is_coinbase: bool) -> int:
        """Confirmations required on the configured network."""
        return get_confirmation_depth(is_coinbase, self.bitcoin_network)

    async def get_gateway_utxos(self, gateway_address: str) -> List[UTXO]:
        """List the unspent outputs currently held at a gateway address."""
        try:
            script_hash = get_script_hash(gateway_address, self.bitcoin_network)
        except ValueError as e:
            _logger.error(f"Cannot query UTXOs for {gateway_address}: {e}")
            raise UpstreamException(
                f"Failed to get UTXOs for address {gateway_address}: {e}",
                operation="get_gateway_utxos",
            ) from e
        return await self.chain.get_unspent_outputs([script_hash])

    async def process_utxos(
        self,
        utxos: Sequence[UTXOWithCheckpoint],
        eth_address: str,
        aggregate_public_key: str,
        tip: int,
    ) -> Tuple[List[ProofComponents], int]:
        """
        Assemble proof components for UTXOs confirmed in the same block.

        Unconfirmed UTXOs (height <= 0) are skipped and don't count towards
        the aggregate value.

        Returns:
            Tuple of (proof components, aggregate value in satoshis)
        """
        proofs: List[ProofComponents] = []
        aggregate_value = 0

        for utxo in utxos:
            if utxo is None or not utxo.is_confirmed:
                continue

            proofs.append(
                await self.assembler.assemble(
                    utxo, eth_address, aggregate_public_key, tip
                )
            )
            aggregate_value += utxo.value

        return proofs, aggregate_value

    async def generate_pegin_proof(
        self,
        ethereum_address: str,
        bitcoin_txid: str,
        utxos_with_checkpoint: Sequence[UTXOWithCheckpoint],
    ) -> PeginProofResult:
        """
        Generate serialized pegin proofs for a deposit to a gateway address.

        Every candidate confirmed in the same block as ``bitcoin_txid`` is
        proven alongside it, so a single header range backs the whole batch.

        Args:
            ethereum_address: L2 recipient, with or without 0x prefix
            bitcoin_txid: Transaction that funded the gateway address
            utxos_with_checkpoint: Candidate UTXOs, optionally checkpointed

        Returns:
            PeginProofResult: Encoded proofs, UTXO height and aggregate value

        Raises:
            UpstreamException: If the bridge returns no gateway address or a
                collaborator call fails
            UtxoNotFoundException: If the transaction is not unspent at the gateway
            ConfirmationPolicyException: If the UTXO is not deep enough yet
            ProofValidationException: If a proof field is malformed
        """
        eth_address = remove_0x_prefix(ethereum_address)

        try:
            gateway = await self.generate_gateway_address(ethereum_address)
            if not gateway.gateway_address:
                raise UpstreamException(
                    "Failed to generate gateway address",
                    operation="get_gateway_address",
                )

            utxos = await self.get_gateway_utxos(gateway.gateway_address)
            utxo = next((u for u in utxos if u.hash == bitcoin_txid), None)
            if utxo is None:
                raise UtxoNotFoundException(bitcoin_txid, gateway.gateway_address)

            tip = await self.chain.get_tip()
            is_coinbase = await self.chain.is_coinbase_tx(bitcoin_txid)
            required_confirmations = self.get_confirmation_depth(is_coinbase)
            current_confirmations = tip - utxo.height + 1
            if current_confirmations < required_confirmations:
                raise ConfirmationPolicyException(
                    current_confirmations, required_confirmations
                )

            same_block_utxos = [
                candidate
                for candidate in utxos_with_checkpoint
                if candidate.height == utxo.height
            ]

            components, aggregate_value = await self.process_utxos(
                same_block_utxos,
                eth_address,
                gateway.aggregate_public_key,
                tip,
            )

            proofs = [encode_pegin_proof(c) for c in components]
        except Exception as e:
            _logger.error(f"Error creating pegin proof for {bitcoin_txid}: {e}")
            raise

        _logger.info(
            f"Generated {len(proofs)} pegin proof(s) at height {utxo.height} "
            f"for {aggregate_value} sats"
        )
        return PeginProofResult(
            proofs=proofs,
            utxo_height=utxo.height,
            aggregate_value=aggregate_value,
        )
