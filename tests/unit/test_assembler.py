"""
Unit tests for ProofComponentAssembler.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from pegin_toolkit.proofs.assembler import ProofComponentAssembler
from pegin_toolkit.proofs.types import PeginVersion, UTXOWithCheckpoint
from pegin_toolkit.shared.exceptions import (
    ProofValidationException,
    UpstreamException,
)


@pytest.fixture
def assembler(mock_chain, mock_bridge):
    return ProofComponentAssembler(mock_chain, mock_bridge)


@pytest.fixture
def utxo(sample_txid):
    return UTXOWithCheckpoint(index=1, hash=sample_txid, value=100000, height=100)


class TestAssemble:
    @pytest.mark.asyncio
    async def test_without_checkpoint_is_v0_up_to_tip(
        self,
        assembler,
        utxo,
        make_header,
        sample_eth_address,
        sample_aggregate_public_key,
        sample_raw_tx,
        sample_merkle_proof,
    ):
        components = await assembler.assemble(
            utxo, sample_eth_address[2:], sample_aggregate_public_key, 105
        )

        assert components.version == PeginVersion.V0
        assert components.ref_l2_block_hash is None
        assert components.block_headers == tuple(
            make_header(h) for h in range(100, 106)
        )
        assert components.tx_id == utxo.hash
        assert components.vout == 1
        assert components.raw_tx == sample_raw_tx
        assert components.merkle_proof == sample_merkle_proof

    @pytest.mark.asyncio
    async def test_with_checkpoint_is_v1_up_to_checkpoint(
        self,
        assembler,
        utxo,
        make_header,
        sample_checkpoint,
        sample_eth_address,
        sample_aggregate_public_key,
    ):
        checkpointed = UTXOWithCheckpoint(
            index=utxo.index,
            hash=utxo.hash,
            value=utxo.value,
            height=utxo.height,
            bitcoin_checkpoint=sample_checkpoint,
        )

        components = await assembler.assemble(
            checkpointed, sample_eth_address[2:], sample_aggregate_public_key, 500
        )

        assert components.version == PeginVersion.V1
        assert components.ref_l2_block_hash == sample_checkpoint.l2_block_hash
        assert components.block_headers == tuple(
            make_header(h) for h in range(100, 105)
        )

    @pytest.mark.asyncio
    async def test_merkle_proof_uses_confirmation_block(
        self, assembler, utxo, mock_bridge, sample_aggregate_public_key
    ):
        await assembler.assemble(utxo, "52" * 20, sample_aggregate_public_key, 100)

        mock_bridge.get_merkle_proof.assert_awaited_once_with(
            utxo.hash, f"{100:064x}"
        )

    @pytest.mark.asyncio
    async def test_confirmed_at_tip_gets_single_header(
        self, assembler, utxo, make_header, sample_aggregate_public_key
    ):
        components = await assembler.assemble(
            utxo, "52" * 20, sample_aggregate_public_key, 100
        )

        assert components.block_headers == (make_header(100),)

    @pytest.mark.asyncio
    async def test_checkpoint_below_confirmation_height(
        self, assembler, sample_txid, sample_checkpoint, sample_aggregate_public_key
    ):
        utxo = UTXOWithCheckpoint(
            index=0,
            hash=sample_txid,
            value=1,
            height=200,
            bitcoin_checkpoint=sample_checkpoint,
        )

        with pytest.raises(ProofValidationException, match="Empty header range"):
            await assembler.assemble(utxo, "52" * 20, sample_aggregate_public_key, 300)

    @pytest.mark.asyncio
    async def test_raw_tx_failure_propagates(
        self, assembler, utxo, mock_chain, sample_aggregate_public_key
    ):
        mock_chain.get_transaction.side_effect = UpstreamException("electrum down")

        with pytest.raises(UpstreamException, match="electrum down"):
            await assembler.assemble(utxo, "52" * 20, sample_aggregate_public_key, 105)


class TestGetBlockHeaders:
    @pytest.mark.asyncio
    async def test_ordered_by_height_not_completion(
        self, assembler, mock_chain, make_header
    ):
        async def slow_for_low_heights(block_hash):
            height = int(block_hash, 16)
            # Lower heights finish last
            await asyncio.sleep((110 - height) * 0.001)
            return make_header(height).hex()

        mock_chain.get_block_header_from_hash = AsyncMock(
            side_effect=slow_for_low_heights
        )

        headers = await assembler.get_block_headers(100, 109)

        assert headers == tuple(make_header(h) for h in range(100, 110))

    @pytest.mark.asyncio
    async def test_fetches_every_height_once(self, assembler, mock_chain):
        await assembler.get_block_headers(100, 104)

        heights = sorted(c.args[0] for c in mock_chain.get_block_hash.await_args_list)
        assert heights == [100, 101, 102, 103, 104]
        assert mock_chain.get_block_header_from_hash.await_count == 5

    @pytest.mark.asyncio
    async def test_single_failure_fails_whole_range(self, assembler, mock_chain):
        def failing_hash(height):
            if height == 102:
                raise UpstreamException("bitcoind unreachable")
            return f"{height:064x}"

        mock_chain.get_block_hash = AsyncMock(side_effect=failing_hash)

        with pytest.raises(UpstreamException, match="bitcoind unreachable"):
            await assembler.get_block_headers(100, 104)

    @pytest.mark.asyncio
    async def test_failure_cancels_pending_fetches(self, assembler, mock_chain):
        completed = []
        cancelled = []

        async def slow_or_failing_hash(height):
            if height == 102:
                raise UpstreamException("bitcoind unreachable")
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(height)
                raise
            completed.append(height)
            return f"{height:064x}"

        mock_chain.get_block_hash = AsyncMock(side_effect=slow_or_failing_hash)

        with pytest.raises(UpstreamException, match="bitcoind unreachable"):
            await asyncio.wait_for(assembler.get_block_headers(100, 104), timeout=5)

        assert sorted(cancelled) == [100, 101, 103, 104]
        assert completed == []
        mock_chain.get_block_header_from_hash.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_range_rejected(self, assembler, mock_chain):
        with pytest.raises(ProofValidationException) as exc_info:
            await assembler.get_block_headers(105, 104)

        assert exc_info.value.field == "block_headers"
        mock_chain.get_block_hash.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_accepts_0x_prefixed_header_hex(
        self, assembler, mock_chain, make_header
    ):
        mock_chain.get_block_header_from_hash = AsyncMock(
            return_value="0x" + make_header(7).hex()
        )

        assert await assembler.get_block_headers(7, 7) == (make_header(7),)
