"""Pegin proof encoder"""

from typing import Optional, Union

from hexbytes import HexBytes

from pegin_toolkit.proofs.types import (
    DecodedPeginProof,
    PeginVersion,
    ProofComponents,
)
from pegin_toolkit.proofs.varint import (
    VarintRangeError,
    decode_varint,
    encode_varint,
    sanitize_varint_value,
)
from pegin_toolkit.shared.constants import PeginConstants
from pegin_toolkit.shared.exceptions import ProofValidationException


def _to_bytes(field: str, value: Union[str, bytes]) -> bytes:
    """Decode a hex string (optional 0x) or pass bytes through."""
    if isinstance(value, str):
        digits = value[2:] if value[:2] in ("0x", "0X") else value
        # HexBytes would left-pad odd input with a zero nibble
        if len(digits) % 2:
            raise ProofValidationException(
                field,
                f"Invalid {field} length: odd number of hex digits ({len(digits)})",
            )
    try:
        return bytes(HexBytes(value))
    except (ValueError, TypeError) as e:
        raise ProofValidationException(field, f"Invalid {field} encoding: {e}")


def _check_length(field: str, value: bytes, expected: int) -> bytes:
    if len(value) != expected:
        raise ProofValidationException(
            field,
            f"Invalid {field} length: expected {expected} bytes, got {len(value)}",
        )
    return value


def encode_pegin_proof(components: ProofComponents) -> bytes:
    """
    Serialize proof components into the canonical pegin proof.

    Every field is validated before any bytes are produced:
    reversed tx id (32), eth address (20), aggregate public key (33),
    block headers (80 each) and, for V1, the reference L2 block hash (32).

    Layout:
        version (4 LE) | tx id (32, reversed) | vout (4 LE) | eth address (20)
        | aggregate public key (33) | varint header count | headers
        | merkle proof | raw tx | [V1: ref L2 block hash (32)]

    Raises:
        ProofValidationException: Naming the first malformed field
    """
    tx_id = _check_length(
        "tx_id", _to_bytes("tx_id", components.tx_id)[::-1], PeginConstants.TXID_LENGTH
    )

    if not 0 <= components.vout <= 0xFFFFFFFF:
        raise ProofValidationException(
            "vout", f"Invalid vout: {components.vout} does not fit in uint32"
        )
    vout = components.vout.to_bytes(PeginConstants.VOUT_FIELD_LENGTH, "little")

    eth_address = _check_length(
        "eth_address",
        _to_bytes("eth_address", components.eth_address),
        PeginConstants.ETH_ADDRESS_LENGTH,
    )
    aggregate_public_key = _check_length(
        "aggregate_public_key",
        _to_bytes("aggregate_public_key", components.aggregate_public_key),
        PeginConstants.AGGREGATE_PUBLIC_KEY_LENGTH,
    )

    for position, header in enumerate(components.block_headers):
        if len(header) != PeginConstants.BLOCK_HEADER_LENGTH:
            raise ProofValidationException(
                "block_headers",
                f"Invalid block_headers length at position {position}: "
                f"expected {PeginConstants.BLOCK_HEADER_LENGTH} bytes, got {len(header)}",
            )

    try:
        header_count = encode_varint(
            sanitize_varint_value(len(components.block_headers))
        )
    except VarintRangeError as e:
        raise ProofValidationException("block_headers", str(e))

    raw_tx = _to_bytes("raw_tx", components.raw_tx)
    ref_l2_block_hash = _encode_reference_hash(
        components.version, components.ref_l2_block_hash
    )

    return b"".join(
        [
            int(components.version).to_bytes(
                PeginConstants.VERSION_FIELD_LENGTH, "little"
            ),
            tx_id,
            vout,
            eth_address,
            aggregate_public_key,
            header_count,
            *components.block_headers,
            bytes(components.merkle_proof),
            raw_tx,
            ref_l2_block_hash,
        ]
    )


def _encode_reference_hash(
    version: PeginVersion, ref_l2_block_hash: Optional[str]
) -> bytes:
    if version == PeginVersion.V0:
        if ref_l2_block_hash:
            raise ProofValidationException(
                "ref_l2_block_hash", "V0 proofs must not carry a reference L2 block hash"
            )
        return b""

    if version != PeginVersion.V1:
        raise ProofValidationException("version", f"Unknown pegin version: {version}")
    if not ref_l2_block_hash:
        raise ProofValidationException(
            "ref_l2_block_hash", "V1 proofs require a reference L2 block hash"
        )
    return _check_length(
        "ref_l2_block_hash",
        _to_bytes("ref_l2_block_hash", ref_l2_block_hash),
        PeginConstants.L2_BLOCK_HASH_LENGTH,
    )


def decode_pegin_proof(proof: bytes) -> DecodedPeginProof:
    """
    Parse the fixed-layout parts of an encoded pegin proof.

    The merkle proof and raw transaction carry no length prefix, so they are
    returned together as ``payload``.

    Raises:
        ProofValidationException: If the proof is truncated or the version unknown
    """
    offset = 0

    def take(field: str, length: int) -> bytes:
        nonlocal offset
        if offset + length > len(proof):
            raise ProofValidationException(field, f"Proof truncated while reading {field}")
        chunk = proof[offset : offset + length]
        offset += length
        return chunk

    version_tag = int.from_bytes(
        take("version", PeginConstants.VERSION_FIELD_LENGTH), "little"
    )
    try:
        version = PeginVersion(version_tag)
    except ValueError:
        raise ProofValidationException("version", f"Unknown pegin version: {version_tag}")

    tx_id = take("tx_id", PeginConstants.TXID_LENGTH)[::-1].hex()
    vout = int.from_bytes(take("vout", PeginConstants.VOUT_FIELD_LENGTH), "little")
    eth_address = take("eth_address", PeginConstants.ETH_ADDRESS_LENGTH).hex()
    aggregate_public_key = take(
        "aggregate_public_key", PeginConstants.AGGREGATE_PUBLIC_KEY_LENGTH
    ).hex()

    try:
        header_count, offset = decode_varint(proof, offset)
    except VarintRangeError as e:
        raise ProofValidationException("block_headers", str(e))
    block_headers = tuple(
        take("block_headers", PeginConstants.BLOCK_HEADER_LENGTH)
        for _ in range(header_count)
    )

    tail = proof[offset:]
    ref_l2_block_hash = None
    if version == PeginVersion.V1:
        if len(tail) < PeginConstants.L2_BLOCK_HASH_LENGTH:
            raise ProofValidationException(
                "ref_l2_block_hash", "Proof truncated while reading ref_l2_block_hash"
            )
        ref_l2_block_hash = tail[-PeginConstants.L2_BLOCK_HASH_LENGTH :].hex()
        tail = tail[: -PeginConstants.L2_BLOCK_HASH_LENGTH]

    return DecodedPeginProof(
        version=version,
        tx_id=tx_id,
        vout=vout,
        eth_address=eth_address,
        aggregate_public_key=aggregate_public_key,
        block_headers=block_headers,
        payload=tail,
        ref_l2_block_hash=ref_l2_block_hash,
    )
