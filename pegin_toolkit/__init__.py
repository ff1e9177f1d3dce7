"""Pegin Toolkit - Python SDK for building bitcoin pegin proofs."""

__version__ = "0.3.0"

from .client import PeginToolkit
from .proofs import PeginService, ProofComponentAssembler, encode_pegin_proof
from .shared.config import PeginConfig

__all__ = [
    "PeginToolkit",
    "PeginService",
    "PeginConfig",
    "ProofComponentAssembler",
    "encode_pegin_proof",
]
