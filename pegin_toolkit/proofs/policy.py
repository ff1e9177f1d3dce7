"""Confirmation depth policy for pegins"""

from pegin_toolkit.shared.config import validate_network
from pegin_toolkit.shared.constants import NetworkConstants, PeginConstants


def get_confirmation_depth(is_coinbase: bool, network: str) -> int:
    """
    Minimum confirmations a UTXO needs before it can back a pegin.

    Coinbase outputs wait for coinbase maturity on every network. Other
    outputs need a deep buffer against reorganizations on mainnet and a
    single confirmation on test networks.

    Raises:
        ConfigurationException: If ``network`` is not a supported network
    """
    validate_network(network)
    if is_coinbase:
        return PeginConstants.COINBASE_MATURITY
    if network == NetworkConstants.MAINNET:
        return PeginConstants.MAINNET_CONFIRMATIONS
    return PeginConstants.TESTNET_CONFIRMATIONS
