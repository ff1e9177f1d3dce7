"""All constants for the project"""

from dotenv import load_dotenv

load_dotenv()


class NetworkConstants:
    """Bitcoin network names and their address encodings"""

    MAINNET = "mainnet"
    TESTNET = "testnet"
    REGTEST = "regtest"
    SIGNET = "signet"

    SUPPORTED_NETWORKS = (MAINNET, TESTNET, REGTEST, SIGNET)

    # python-bitcointx chain parameter names (address prefixes, bech32 HRPs)
    CHAIN_PARAMS = {
        MAINNET: "bitcoin",
        TESTNET: "bitcoin/testnet",
        SIGNET: "bitcoin/signet",
        REGTEST: "bitcoin/regtest",
    }


class PeginConstants:
    """Constants for pegin proof construction and confirmation policy"""

    # Coinbase outputs can't be spent before 100 blocks on any network
    COINBASE_MATURITY = 100
    MAINNET_CONFIRMATIONS = 19
    TESTNET_CONFIRMATIONS = 1

    TXID_LENGTH = 32
    ETH_ADDRESS_LENGTH = 20
    AGGREGATE_PUBLIC_KEY_LENGTH = 33
    BLOCK_HEADER_LENGTH = 80
    L2_BLOCK_HASH_LENGTH = 32

    VERSION_FIELD_LENGTH = 4
    VOUT_FIELD_LENGTH = 4

    NULL_TXID = "0" * 64


class GlobalConstants:
    """Environment variable names and defaults"""

    ENV_NETWORK = "PEGIN_BITCOIN_NETWORK"
    ENV_L2_RPC_URL = "PEGIN_L2_RPC_URL"
    ENV_BITCOIND_HOST = "PEGIN_BITCOIND_HOST"
    ENV_BITCOIND_PORT = "PEGIN_BITCOIND_PORT"
    ENV_BITCOIND_USER = "PEGIN_BITCOIND_USER"
    ENV_BITCOIND_PASSWORD = "PEGIN_BITCOIND_PASSWORD"
    ENV_ELECTRUM_HOST = "PEGIN_ELECTRUM_HOST"
    ENV_ELECTRUM_PORT = "PEGIN_ELECTRUM_PORT"
    ENV_ELECTRUM_PROTOCOL = "PEGIN_ELECTRUM_PROTOCOL"
    ENV_ELECTRUM_VERIFY_SSL = "PEGIN_ELECTRUM_VERIFY_SSL"
    ENV_RPC_MAX_ATTEMPTS = "PEGIN_RPC_MAX_ATTEMPTS"

    DEFAULT_NETWORK = NetworkConstants.MAINNET

    DEFAULT_BITCOIND_PORT = {
        NetworkConstants.MAINNET: 8332,
        NetworkConstants.TESTNET: 18332,
        NetworkConstants.SIGNET: 38332,
        NetworkConstants.REGTEST: 18443,
    }

    DEFAULT_ELECTRUM_PORT = {
        "tcp": 50001,
        "ssl": 50002,
    }

    DEFAULT_RPC_MAX_ATTEMPTS = 3
