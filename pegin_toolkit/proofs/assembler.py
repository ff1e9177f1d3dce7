"""Pegin proof component assembler"""

import asyncio
from typing import List, Tuple

from hexbytes import HexBytes

from pegin_toolkit.proofs.interfaces import BridgeRpc, ChainDataProvider
from pegin_toolkit.proofs.types import (
    PeginVersion,
    ProofComponents,
    UTXOWithCheckpoint,
)
from pegin_toolkit.shared.exceptions import ProofValidationException
from pegin_toolkit.shared.logging import get_logger

_logger = get_logger(__name__)


class ProofComponentAssembler:
    """Gathers the chain context needed to prove one UTXO"""

    def __init__(self, chain: ChainDataProvider, bridge: BridgeRpc):
        self.chain = chain
        self.bridge = bridge

    async def assemble(
        self,
        utxo: UTXOWithCheckpoint,
        eth_address: str,
        aggregate_public_key: str,
        current_tip: int,
    ) -> ProofComponents:
        """
        Build the proof components for a confirmed UTXO.

        Headers run from the confirmation height up to the checkpoint height
        when the UTXO carries a checkpoint (V1), otherwise up to the current
        tip (V0).

        Args:
            utxo: The UTXO to prove
            eth_address: L2 recipient, hex without 0x
            aggregate_public_key: Compressed key controlling the gateway address
            current_tip: Bitcoin tip height observed by the caller

        Returns:
            ProofComponents: Ready to be encoded
        """
        raw_tx = await self.chain.get_transaction(utxo.hash)
        confirmation_hash = await self.chain.get_block_hash(utxo.height)
        merkle_proof = await self.bridge.get_merkle_proof(
            utxo.hash, confirmation_hash
        )

        checkpoint = utxo.bitcoin_checkpoint
        end_height = checkpoint.utxo_height if checkpoint else current_tip
        block_headers = await self.get_block_headers(utxo.height, end_height)

        _logger.debug(
            "Assembled %s:%d with %d headers (%d..%d)",
            utxo.hash,
            utxo.index,
            len(block_headers),
            utxo.height,
            end_height,
        )

        if checkpoint:
            return ProofComponents(
                tx_id=utxo.hash,
                vout=utxo.index,
                merkle_proof=merkle_proof,
                block_headers=block_headers,
                eth_address=eth_address,
                aggregate_public_key=aggregate_public_key,
                raw_tx=raw_tx,
                version=PeginVersion.V1,
                ref_l2_block_hash=checkpoint.l2_block_hash,
            )

        return ProofComponents(
            tx_id=utxo.hash,
            vout=utxo.index,
            merkle_proof=merkle_proof,
            block_headers=block_headers,
            eth_address=eth_address,
            aggregate_public_key=aggregate_public_key,
            raw_tx=raw_tx,
            version=PeginVersion.V0,
        )

    async def get_block_headers(
        self, start_height: int, end_height: int
    ) -> Tuple[bytes, ...]:
        """
        Fetch headers for every height in [start_height, end_height].

        All heights are fetched concurrently; the first failure aborts the
        whole range and cancels the fetches still in flight. Results are
        ordered by height, not by completion.
        """
        if end_height < start_height:
            raise ProofValidationException(
                "block_headers",
                f"Empty header range: end height {end_height} is below "
                f"confirmation height {start_height}",
            )

        tasks = [
            asyncio.ensure_future(self._fetch_header(height))
            for height in range(start_height, end_height + 1)
        ]
        try:
            results: List[Tuple[int, bytes]] = await asyncio.gather(*tasks)
        except Exception:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            # Wait for the cancelled fetches to unwind
            await asyncio.gather(*pending, return_exceptions=True)
            _logger.debug(
                "Header range %d..%d failed, cancelled %d pending fetches",
                start_height,
                end_height,
                len(pending),
            )
            raise

        return tuple(header for _, header in sorted(results, key=lambda r: r[0]))

    async def _fetch_header(self, height: int) -> Tuple[int, bytes]:
        block_hash = await self.chain.get_block_hash(height)
        header_hex = await self.chain.get_block_header_from_hash(block_hash)
        return height, bytes(HexBytes(header_hex))
