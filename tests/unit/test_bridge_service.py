"""
Unit tests for the L2 bridge RPC service.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from pegin_toolkit.shared.exceptions import (
    ConfigurationException,
    UpstreamException,
)
from pegin_toolkit.shared.retry import RetryConfig
from pegin_toolkit.shared.services.bridge_service import (
    GET_GATEWAY_ADDRESS,
    GET_MERKLE_PROOF,
    BridgeService,
)

SINGLE_ATTEMPT = RetryConfig(max_attempts=1)


def make_bridge(response=None, side_effect=None) -> BridgeService:
    w3 = MagicMock()
    w3.provider.make_request = AsyncMock(return_value=response, side_effect=side_effect)
    return BridgeService(w3=w3, retry_config=SINGLE_ATTEMPT)


class TestGatewayAddress:
    @pytest.mark.asyncio
    async def test_maps_result(self, sample_gateway_address, sample_aggregate_public_key):
        bridge = make_bridge(
            {
                "jsonrpc": "2.0",
                "id": 1,
                "result": {
                    "gateway_address": sample_gateway_address,
                    "aggregate_public_key": sample_aggregate_public_key,
                },
            }
        )

        gateway = await bridge.get_gateway_address("52" * 20)

        assert gateway.gateway_address == sample_gateway_address
        assert gateway.aggregate_public_key == sample_aggregate_public_key
        bridge.w3.provider.make_request.assert_awaited_once_with(
            GET_GATEWAY_ADDRESS, ["52" * 20]
        )

    @pytest.mark.asyncio
    async def test_null_result(self):
        bridge = make_bridge({"jsonrpc": "2.0", "id": 1, "result": None})

        with pytest.raises(UpstreamException, match="Failed to get gateway address"):
            await bridge.get_gateway_address("52" * 20)

    @pytest.mark.asyncio
    async def test_missing_fields_become_empty(self):
        """An empty gateway is left for the caller to reject."""
        bridge = make_bridge({"jsonrpc": "2.0", "id": 1, "result": {}})

        gateway = await bridge.get_gateway_address("52" * 20)

        assert gateway.gateway_address == ""

    @pytest.mark.asyncio
    async def test_error_response(self):
        bridge = make_bridge(
            {
                "jsonrpc": "2.0",
                "id": 1,
                "error": {"code": -32601, "message": "method not found"},
            }
        )

        with pytest.raises(UpstreamException, match="method not found") as exc_info:
            await bridge.get_gateway_address("52" * 20)

        assert exc_info.value.operation == GET_GATEWAY_ADDRESS

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        bridge = make_bridge(side_effect=ConnectionError("connection reset"))

        with pytest.raises(UpstreamException, match="connection reset"):
            await bridge.get_gateway_address("52" * 20)


class TestMerkleProof:
    @pytest.mark.asyncio
    async def test_returns_bytes(self, sample_merkle_proof):
        bridge = make_bridge(
            {"jsonrpc": "2.0", "id": 1, "result": "0x" + sample_merkle_proof.hex()}
        )

        proof = await bridge.get_merkle_proof("a1" * 32, "00" * 32)

        assert proof == sample_merkle_proof
        bridge.w3.provider.make_request.assert_awaited_once_with(
            GET_MERKLE_PROOF, ["a1" * 32, "00" * 32]
        )

    @pytest.mark.asyncio
    async def test_null_result(self):
        bridge = make_bridge({"jsonrpc": "2.0", "id": 1, "result": None})

        with pytest.raises(UpstreamException, match="Failed to get merkle proof"):
            await bridge.get_merkle_proof("a1" * 32, "00" * 32)


class TestConstruction:
    def test_requires_url_or_web3(self):
        with pytest.raises(ConfigurationException):
            BridgeService()
