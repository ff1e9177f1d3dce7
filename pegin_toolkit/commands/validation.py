import re

from eth_utils import is_address, to_checksum_address

from pegin_toolkit.shared.constants import NetworkConstants

_TXID_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def validate_eth_address(address: str, param_name: str = "address") -> str:
    """Validate and return checksum ethereum address"""
    if not address or not isinstance(address, str):
        raise ValueError(
            f"Invalid {param_name}: address must be a non-empty string"
        )
    if not is_address(address):
        raise ValueError(
            f"Invalid {param_name}: {address} is not a valid Ethereum address"
        )
    return to_checksum_address(address)


def validate_txid(txid: str) -> str:
    """Validate a bitcoin transaction id and return it lowercase"""
    if not txid or not _TXID_RE.match(txid):
        raise ValueError(
            f"Invalid txid: {txid} must be 64 hexadecimal characters"
        )
    return txid.lower()


def validate_network(network: str) -> str:
    """Validate and normalize bitcoin network name"""
    network = network.lower()
    if network not in NetworkConstants.SUPPORTED_NETWORKS:
        raise ValueError(
            f"Invalid network: {network}. Must be one of {NetworkConstants.SUPPORTED_NETWORKS}"
        )
    return network
