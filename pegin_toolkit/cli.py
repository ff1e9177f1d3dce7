#!/usr/bin/env python3
"""
Unified CLI for the Pegin Toolkit.

Configuration comes from the environment (or a local .env file):
PEGIN_BITCOIN_NETWORK, PEGIN_L2_RPC_URL, PEGIN_BITCOIND_*, PEGIN_ELECTRUM_*.

Examples:
  - Gateway address
    pegin gateway-address --eth-address 0x...

  - Confirmation policy
    pegin confirmation-depth --network testnet [--coinbase]

  - Pegin proofs
    pegin pegin-proof --eth-address 0x... --txid <txid> --utxos utxos.json
"""

import argparse
import asyncio
import dataclasses
from typing import List, Optional

from pegin_toolkit.client import PeginToolkit
from pegin_toolkit.commands.helpers import handle_command_error
from pegin_toolkit.commands.validation import (
    validate_eth_address,
    validate_network,
    validate_txid,
)
from pegin_toolkit.proofs.policy import get_confirmation_depth
from pegin_toolkit.shared.config import PeginConfig
from pegin_toolkit.shared.logging import set_log_level
from pegin_toolkit.utils.formatters import (
    console,
    format_hex,
    load_utxos,
    save_json_output,
    utxo_table,
)


def _load_config(args: argparse.Namespace) -> PeginConfig:
    config = PeginConfig.from_env()
    if getattr(args, "network", None):
        config = dataclasses.replace(
            config, bitcoin_network=validate_network(args.network)
        )
    return config


def cmd_gateway_address(args: argparse.Namespace) -> None:
    eth_address = validate_eth_address(args.eth_address, "eth_address")

    async def run():
        async with PeginToolkit(_load_config(args)) as toolkit:
            return await toolkit.pegin.generate_gateway_address(eth_address)

    gateway = asyncio.run(run())
    console.print(f"[cyan]Gateway address:[/cyan] {gateway.gateway_address}")
    console.print(
        f"[cyan]Aggregate public key:[/cyan] {gateway.aggregate_public_key}"
    )


def cmd_confirmation_depth(args: argparse.Namespace) -> None:
    network = validate_network(args.network)
    depth = get_confirmation_depth(args.coinbase, network)
    kind = "coinbase" if args.coinbase else "regular"
    console.print(
        f"{network}: {depth} confirmation(s) required for {kind} outputs"
    )


def cmd_pegin_proof(args: argparse.Namespace) -> None:
    eth_address = validate_eth_address(args.eth_address, "eth_address")
    txid = validate_txid(args.txid)
    candidates = load_utxos(args.utxos)
    console.print(utxo_table(candidates, "Candidate UTXOs"))

    async def run():
        async with PeginToolkit(_load_config(args)) as toolkit:
            return await toolkit.pegin.generate_pegin_proof(
                eth_address, txid, candidates
            )

    result = asyncio.run(run())

    output_data = {
        "eth_address": eth_address,
        "txid": txid,
        **result.to_dict(),
    }
    filename = args.output or f"pegin_proof_{txid[:16]}.json"
    save_json_output(output_data, filename)

    console.print(
        f"Generated {len(result.proofs)} proof(s) for {format_hex(txid)} "
        f"at height {result.utxo_height}, value {result.aggregate_value:,} sats"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pegin",
        description="Unified CLI for the Pegin Toolkit",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # gateway-address
    p_ga = sub.add_parser(
        "gateway-address", help="Derive the gateway address for an L2 recipient"
    )
    p_ga.add_argument("--eth-address", type=str, required=True)
    p_ga.add_argument("--network", type=str, help="Override bitcoin network")
    p_ga.set_defaults(func=cmd_gateway_address)

    # confirmation-depth
    p_cd = sub.add_parser(
        "confirmation-depth", help="Show required pegin confirmations"
    )
    p_cd.add_argument("--network", type=str, required=True)
    p_cd.add_argument(
        "--coinbase", action="store_true", help="Coinbase output"
    )
    p_cd.set_defaults(func=cmd_confirmation_depth)

    # pegin-proof
    p_pp = sub.add_parser("pegin-proof", help="Generate pegin proofs")
    p_pp.add_argument("--eth-address", type=str, required=True)
    p_pp.add_argument("--txid", type=str, required=True)
    p_pp.add_argument(
        "--utxos",
        type=str,
        required=True,
        help="JSON file with candidate UTXOs (and optional checkpoints)",
    )
    p_pp.add_argument("--network", type=str, help="Override bitcoin network")
    p_pp.add_argument("--output", type=str, help="Output filename")
    p_pp.set_defaults(func=cmd_pegin_proof)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        set_log_level("DEBUG")
    try:
        args.func(args)
    except Exception as e:
        handle_command_error(e)


if __name__ == "__main__":
    main()
