"""Bitcoin address helpers: output scripts and Electrum script hashes"""

import hashlib

from bitcointx import ChainParams
from bitcointx.wallet import CCoinAddress, CCoinAddressError

from pegin_toolkit.shared.config import validate_network
from pegin_toolkit.shared.constants import NetworkConstants


def address_to_output_script(address: str, network: str) -> bytes:
    """
    Build the scriptPubKey paying to ``address`` on ``network``.

    Any address type the chain knows is accepted: P2PKH and P2SH
    (base58check), segwit v0 (bech32) and v1+ (bech32m).

    Raises:
        ValueError: If the address is malformed or belongs to another network
    """
    validate_network(network)
    with ChainParams(NetworkConstants.CHAIN_PARAMS[network]):
        try:
            return bytes(CCoinAddress(address).to_scriptPubKey())
        except (CCoinAddressError, ValueError) as e:
            raise ValueError(f"Invalid {network} address {address}: {e}") from e


def get_script_hash(address: str, network: str) -> str:
    """
    Electrum script hash of an address: sha256 of the output script,
    byte-reversed, as hex.
    """
    script = address_to_output_script(address, network)
    return hashlib.sha256(script).digest()[::-1].hex()
