"""Shared formatting and file utilities for commands."""

import json
from pathlib import Path
from typing import Any, Dict, List

from rich.console import Console
from rich.table import Table

from pegin_toolkit.proofs.types import UTXOWithCheckpoint

# Shared console instance
console = Console()


def load_utxos(file_path: str) -> List[UTXOWithCheckpoint]:
    """
    Load candidate UTXOs from a JSON file.

    Accepts either a list of UTXOs or an object with a ``utxos`` list. Keys
    may be snake_case or the camelCase used by the JavaScript SDK.
    """
    with open(file_path, "r") as file:
        data = json.load(file)

    entries = data.get("utxos", []) if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ValueError(f"{file_path} must contain a list of UTXOs")
    return [UTXOWithCheckpoint.from_dict(entry) for entry in entries]


def format_hex(value: str, length: int = 10) -> str:
    """
    Shorten a long hex string for display.

    Returns:
        Formatted value like "0x1234...5678"
    """
    if not value:
        return "N/A"
    if len(value) <= length:
        return value
    return f"{value[:6]}...{value[-4:]}"


def utxo_table(utxos: List[UTXOWithCheckpoint], title: str) -> Table:
    """Render candidate UTXOs as a Rich table."""
    table = Table(title=title)
    table.add_column("Outpoint", style="cyan")
    table.add_column("Height", justify="right")
    table.add_column("Value (sats)", justify="right", style="green")
    table.add_column("Checkpoint")

    for utxo in utxos:
        checkpoint = utxo.bitcoin_checkpoint
        table.add_row(
            f"{format_hex(utxo.hash)}:{utxo.index}",
            str(utxo.height),
            f"{utxo.value:,}",
            (
                f"V1 @ {checkpoint.utxo_height}"
                if checkpoint
                else "[dim]V0[/dim]"
            ),
        )
    return table


def save_json_output(
    data: Dict[str, Any],
    filename: str,
    output_dir: str = "output",
    print_path: bool = True,
) -> str:
    """
    Save data to JSON file in output directory.

    Args:
        data: Data to save
        filename: Output filename (can include subdirectories)
        output_dir: Base output directory (default: 'output')
        print_path: Whether to print the saved file path

    Returns:
        Full path to saved file
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    filepath = output_path / filename
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)

    if print_path:
        console.print(f"[cyan]Data saved to:[/cyan] {filepath}")

    return str(filepath)
