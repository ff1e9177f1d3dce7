from pegin_toolkit.proofs.assembler import ProofComponentAssembler
from pegin_toolkit.proofs.encoder import decode_pegin_proof, encode_pegin_proof
from pegin_toolkit.proofs.manager import PeginService
from pegin_toolkit.proofs.policy import get_confirmation_depth
from pegin_toolkit.proofs.types import (
    UTXO,
    BitcoinCheckpoint,
    DecodedPeginProof,
    GatewayAddress,
    PeginProofResult,
    PeginVersion,
    ProofComponents,
    UTXOWithCheckpoint,
)

__all__ = [
    "PeginService",
    "ProofComponentAssembler",
    "encode_pegin_proof",
    "decode_pegin_proof",
    "get_confirmation_depth",
    "UTXO",
    "UTXOWithCheckpoint",
    "BitcoinCheckpoint",
    "GatewayAddress",
    "ProofComponents",
    "DecodedPeginProof",
    "PeginProofResult",
    "PeginVersion",
]
