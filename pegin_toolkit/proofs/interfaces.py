"""
Collaborator interfaces of the pegin proof engine.

The engine only talks to bitcoin and the L2 bridge through these two
capabilities; ``shared.services`` ships the concrete implementations.
"""

from typing import List, Protocol, Sequence

from pegin_toolkit.proofs.types import UTXO, GatewayAddress


class ChainDataProvider(Protocol):
    """Read access to the bitcoin chain."""

    async def get_transaction(self, txid: str) -> str:
        """Raw transaction hex."""
        ...

    async def get_block_hash(self, height: int) -> str:
        ...

    async def get_block_header_from_hash(self, block_hash: str) -> str:
        """80-byte serialized header, hex."""
        ...

    async def get_tip(self) -> int:
        ...

    async def is_coinbase_tx(self, txid: str) -> bool:
        ...

    async def get_unspent_outputs(self, script_hashes: Sequence[str]) -> List[UTXO]:
        ...


class BridgeRpc(Protocol):
    """L2 bridge endpoints used for pegins."""

    async def get_gateway_address(self, eth_address: str) -> GatewayAddress:
        """Derive the gateway address for an L2 recipient (hex, no 0x)."""
        ...

    async def get_merkle_proof(self, txid: str, block_hash: str) -> bytes:
        ...
