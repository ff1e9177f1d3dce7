"""
Type definitions for pegin proofs.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Mapping, Optional, Tuple

# =============================================================================
# ENUMS
# =============================================================================


class PeginVersion(IntEnum):
    """Wire version of an encoded pegin proof."""

    V0 = 0  # No L2 checkpoint, headers run to the bitcoin tip
    V1 = 1  # Checkpointed, carries a reference L2 block hash


# =============================================================================
# CHAIN SNAPSHOT TYPES
# =============================================================================


@dataclass(frozen=True)
class UTXO:
    """Unspent output as reported by the chain data provider."""

    index: int  # Output index (vout)
    hash: str  # Transaction id, display (big-endian) hex
    value: int  # Satoshis
    height: int  # Confirmation height, <= 0 when unconfirmed

    @property
    def is_confirmed(self) -> bool:
        return self.height > 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UTXO":
        """Build from our own keys or Electrum's ``listunspent`` keys."""
        return cls(
            index=int(_first(data, "index", "tx_pos", "vout")),
            hash=str(_first(data, "hash", "tx_hash", "txid")),
            value=int(data["value"]),
            height=int(data["height"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "hash": self.hash,
            "value": self.value,
            "height": self.height,
        }


@dataclass(frozen=True)
class BitcoinCheckpoint:
    """L2-attested commitment to a bitcoin height."""

    l2_block_hash: str
    l1_checkpoint_hash: str
    utxo_height: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BitcoinCheckpoint":
        return cls(
            l2_block_hash=str(_first(data, "l2_block_hash", "l2BlockHash")),
            l1_checkpoint_hash=str(
                _first(data, "l1_checkpoint_hash", "l1CheckpointHash")
            ),
            utxo_height=int(_first(data, "utxo_height", "utxoHeight")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "l2_block_hash": self.l2_block_hash,
            "l1_checkpoint_hash": self.l1_checkpoint_hash,
            "utxo_height": self.utxo_height,
        }


@dataclass(frozen=True)
class UTXOWithCheckpoint(UTXO):
    """Candidate UTXO, optionally annotated with an L2 checkpoint."""

    bitcoin_checkpoint: Optional[BitcoinCheckpoint] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UTXOWithCheckpoint":
        base = UTXO.from_dict(data)
        checkpoint_data = _first(
            data, "bitcoin_checkpoint", "bitcoinCheckpoint", default=None
        )
        return cls(
            index=base.index,
            hash=base.hash,
            value=base.value,
            height=base.height,
            bitcoin_checkpoint=(
                BitcoinCheckpoint.from_dict(checkpoint_data)
                if checkpoint_data
                else None
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.bitcoin_checkpoint is not None:
            data["bitcoin_checkpoint"] = self.bitcoin_checkpoint.to_dict()
        return data


# =============================================================================
# BRIDGE TYPES
# =============================================================================


@dataclass(frozen=True)
class GatewayAddress:
    """Gateway address derived by the bridge for an L2 recipient."""

    gateway_address: str
    aggregate_public_key: str


# =============================================================================
# PROOF TYPES
# =============================================================================


@dataclass(frozen=True)
class ProofComponents:
    """Everything needed to encode one pegin proof."""

    tx_id: str  # Display hex, reversed on the wire
    vout: int
    merkle_proof: bytes
    block_headers: Tuple[bytes, ...]  # Ascending height, 80 bytes each
    eth_address: str  # 20 bytes hex, no 0x
    aggregate_public_key: str  # 33 bytes compressed key hex
    raw_tx: str  # Raw transaction hex
    version: PeginVersion
    ref_l2_block_hash: Optional[str] = None  # V1 only


@dataclass(frozen=True)
class DecodedPeginProof:
    """Fields recovered from an encoded proof."""

    version: PeginVersion
    tx_id: str
    vout: int
    eth_address: str
    aggregate_public_key: str
    block_headers: Tuple[bytes, ...]
    payload: bytes  # merkle proof followed by raw tx, unseparated
    ref_l2_block_hash: Optional[str] = None


@dataclass
class PeginProofResult:
    """Output of a pegin proof generation run."""

    proofs: List[bytes] = field(default_factory=list)
    utxo_height: int = 0
    aggregate_value: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "proofs": ["0x" + proof.hex() for proof in self.proofs],
            "utxo_height": self.utxo_height,
            "value": self.aggregate_value,
        }


_MISSING = object()


def _first(data: Mapping[str, Any], *keys: str, default: Any = _MISSING) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    if default is _MISSING:
        raise KeyError(f"Missing field, expected one of {keys}")
    return default
