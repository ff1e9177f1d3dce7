"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests.
"""

from typing import Callable, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
from bitcointx import ChainParams
from bitcointx.core.script import CScript
from bitcointx.wallet import CCoinAddress

from pegin_toolkit.proofs.types import (
    BitcoinCheckpoint,
    GatewayAddress,
    PeginVersion,
    ProofComponents,
    UTXO,
    UTXOWithCheckpoint,
)

SAMPLE_TXID = "a1" * 32
SAMPLE_RAW_TX = "0200000001" + "00" * 60
SAMPLE_MERKLE_PROOF = bytes.fromhex("cd" * 64)


def header_for_height(height: int) -> bytes:
    """Deterministic 80-byte header whose first 4 bytes encode the height."""
    return height.to_bytes(4, "little") + b"\x11" * 76


def block_hash_for_height(height: int) -> str:
    return f"{height:064x}"


@pytest.fixture
def sample_eth_address() -> str:
    """Sample L2 recipient (checksummed, with 0x)."""
    return "0x52f541764E6e90eeBc5c21Ff570De0e2D63766B6"


@pytest.fixture
def sample_aggregate_public_key() -> str:
    """Sample compressed aggregate public key."""
    return "02" + "79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"


@pytest.fixture
def sample_gateway_address() -> str:
    """Testnet P2PKH gateway address."""
    script = CScript(b"\x76\xa9\x14" + b"\x22" * 20 + b"\x88\xac")
    with ChainParams("bitcoin/testnet"):
        return str(CCoinAddress.from_scriptPubKey(script))


@pytest.fixture
def sample_txid() -> str:
    return SAMPLE_TXID


@pytest.fixture
def sample_raw_tx() -> str:
    return SAMPLE_RAW_TX


@pytest.fixture
def sample_merkle_proof() -> bytes:
    return SAMPLE_MERKLE_PROOF


@pytest.fixture
def make_header() -> Callable[[int], bytes]:
    return header_for_height


@pytest.fixture
def sample_checkpoint() -> BitcoinCheckpoint:
    return BitcoinCheckpoint(
        l2_block_hash="0x" + "ef" * 32,
        l1_checkpoint_hash="0x" + "be" * 32,
        utxo_height=104,
    )


@pytest.fixture
def sample_components(
    sample_eth_address, sample_aggregate_public_key
) -> Dict[PeginVersion, ProofComponents]:
    """Valid V0 and V1 proof components over heights 100..102."""
    headers = tuple(header_for_height(h) for h in range(100, 103))
    base = dict(
        tx_id=SAMPLE_TXID,
        vout=1,
        merkle_proof=SAMPLE_MERKLE_PROOF,
        block_headers=headers,
        eth_address=sample_eth_address[2:],
        aggregate_public_key=sample_aggregate_public_key,
        raw_tx=SAMPLE_RAW_TX,
    )
    return {
        PeginVersion.V0: ProofComponents(version=PeginVersion.V0, **base),
        PeginVersion.V1: ProofComponents(
            version=PeginVersion.V1,
            ref_l2_block_hash="0x" + "ef" * 32,
            **base,
        ),
    }


@pytest.fixture
def mock_chain():
    """ChainDataProvider mock whose hashes and headers derive from height."""
    chain = MagicMock()
    chain.get_transaction = AsyncMock(return_value=SAMPLE_RAW_TX)
    chain.get_block_hash = AsyncMock(side_effect=block_hash_for_height)
    chain.get_block_header_from_hash = AsyncMock(
        side_effect=lambda block_hash: header_for_height(int(block_hash, 16)).hex()
    )
    chain.get_tip = AsyncMock(return_value=105)
    chain.is_coinbase_tx = AsyncMock(return_value=False)
    chain.get_unspent_outputs = AsyncMock(
        return_value=[UTXO(index=1, hash=SAMPLE_TXID, value=100000, height=100)]
    )
    return chain


@pytest.fixture
def mock_bridge(sample_gateway_address, sample_aggregate_public_key):
    """BridgeRpc mock returning a fixed gateway and merkle proof."""
    bridge = MagicMock()
    bridge.get_gateway_address = AsyncMock(
        return_value=GatewayAddress(
            gateway_address=sample_gateway_address,
            aggregate_public_key=sample_aggregate_public_key,
        )
    )
    bridge.get_merkle_proof = AsyncMock(return_value=SAMPLE_MERKLE_PROOF)
    return bridge


@pytest.fixture
def same_block_candidates():
    """Two deposits in block 100 plus one unconfirmed deposit."""
    return [
        UTXOWithCheckpoint(index=1, hash=SAMPLE_TXID, value=100000, height=100),
        UTXOWithCheckpoint(index=0, hash="b2" * 32, value=200000, height=100),
        UTXOWithCheckpoint(index=0, hash="c3" * 32, value=500000, height=0),
    ]


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
