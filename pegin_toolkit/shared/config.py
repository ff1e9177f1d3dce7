"""
Runtime configuration for the Pegin toolkit.

Values are read from the environment (a local ``.env`` is loaded by
``shared.constants``) each time ``PeginConfig.from_env`` is called, so tests
and long-running callers can change them without re-importing the package.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from pegin_toolkit.shared.constants import GlobalConstants, NetworkConstants
from pegin_toolkit.shared.exceptions import ConfigurationException


@dataclass(frozen=True)
class BitcoindConfig:
    """Connection settings for a bitcoind JSON-RPC endpoint."""

    host: str
    port: int
    username: str
    password: str

    @property
    def url(self) -> str:
        if self.host.startswith(("http://", "https://")):
            return f"{self.host}:{self.port}"
        return f"http://{self.host}:{self.port}"


@dataclass(frozen=True)
class ElectrumConfig:
    """Connection settings for an Electrum server."""

    host: str
    port: int
    protocol: str = "ssl"
    verify_ssl: bool = True

    @property
    def use_ssl(self) -> bool:
        return self.protocol in ("ssl", "tls")


@dataclass(frozen=True)
class PeginConfig:
    """Everything the pegin service needs to reach its collaborators."""

    bitcoin_network: str
    l2_rpc_url: str
    bitcoind: Optional[BitcoindConfig] = None
    electrum: Optional[ElectrumConfig] = None
    rpc_max_attempts: int = GlobalConstants.DEFAULT_RPC_MAX_ATTEMPTS

    def __post_init__(self):
        validate_network(self.bitcoin_network)
        if not self.l2_rpc_url:
            raise ConfigurationException("L2 RPC URL is required")
        if self.rpc_max_attempts < 1:
            raise ConfigurationException(
                f"rpc_max_attempts must be at least 1, got {self.rpc_max_attempts}"
            )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "PeginConfig":
        """
        Build a configuration from environment variables.

        Args:
            env: Mapping to read from (defaults to ``os.environ``)

        Raises:
            ConfigurationException: If a required variable is missing or invalid
        """
        env = os.environ if env is None else env

        network = (
            env.get(GlobalConstants.ENV_NETWORK) or GlobalConstants.DEFAULT_NETWORK
        ).lower()
        validate_network(network)

        l2_rpc_url = env.get(GlobalConstants.ENV_L2_RPC_URL)
        if not l2_rpc_url:
            raise ConfigurationException(
                f"{GlobalConstants.ENV_L2_RPC_URL} environment variable is not set"
            )

        bitcoind = None
        bitcoind_host = env.get(GlobalConstants.ENV_BITCOIND_HOST)
        if bitcoind_host:
            bitcoind = BitcoindConfig(
                host=bitcoind_host,
                port=_parse_int(
                    env,
                    GlobalConstants.ENV_BITCOIND_PORT,
                    GlobalConstants.DEFAULT_BITCOIND_PORT[network],
                ),
                username=env.get(GlobalConstants.ENV_BITCOIND_USER, ""),
                password=env.get(GlobalConstants.ENV_BITCOIND_PASSWORD, ""),
            )

        electrum = None
        electrum_host = env.get(GlobalConstants.ENV_ELECTRUM_HOST)
        if electrum_host:
            protocol = env.get(GlobalConstants.ENV_ELECTRUM_PROTOCOL, "ssl").lower()
            if protocol not in ("tcp", "ssl", "tls"):
                raise ConfigurationException(
                    f"Unsupported Electrum protocol: {protocol}"
                )
            electrum = ElectrumConfig(
                host=electrum_host,
                port=_parse_int(
                    env,
                    GlobalConstants.ENV_ELECTRUM_PORT,
                    GlobalConstants.DEFAULT_ELECTRUM_PORT[
                        "tcp" if protocol == "tcp" else "ssl"
                    ],
                ),
                protocol=protocol,
                verify_ssl=env.get(
                    GlobalConstants.ENV_ELECTRUM_VERIFY_SSL, "true"
                ).lower()
                not in ("0", "false", "no"),
            )

        return cls(
            bitcoin_network=network,
            l2_rpc_url=l2_rpc_url,
            bitcoind=bitcoind,
            electrum=electrum,
            rpc_max_attempts=_parse_int(
                env,
                GlobalConstants.ENV_RPC_MAX_ATTEMPTS,
                GlobalConstants.DEFAULT_RPC_MAX_ATTEMPTS,
            ),
        )


def validate_network(network: str) -> str:
    """Return the network name if supported, else raise ConfigurationException."""
    if network not in NetworkConstants.SUPPORTED_NETWORKS:
        raise ConfigurationException(
            f"Unsupported Bitcoin network: {network}. "
            f"Must be one of {NetworkConstants.SUPPORTED_NETWORKS}"
        )
    return network


def _parse_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationException(f"{key} must be an integer, got {raw!r}")
