from typing import Optional

from pegin_toolkit.proofs.manager import PeginService
from pegin_toolkit.shared.config import PeginConfig
from pegin_toolkit.shared.retry import RPC_RETRY_CONFIG
from pegin_toolkit.shared.services.bitcoin_service import BitcoinService
from pegin_toolkit.shared.services.bridge_service import BridgeService


class PeginToolkit:
    """Wires the pegin service to live bitcoin and bridge endpoints"""

    def __init__(self, config: PeginConfig):
        self.config = config
        self.bitcoin_service = BitcoinService.from_config(config)
        self.bridge_service = BridgeService(
            config.l2_rpc_url,
            retry_config=RPC_RETRY_CONFIG.with_attempts(config.rpc_max_attempts),
        )
        self.pegin = PeginService(
            self.bitcoin_service, self.bridge_service, config.bitcoin_network
        )

    @classmethod
    def from_env(cls, env: Optional[dict] = None) -> "PeginToolkit":
        return cls(PeginConfig.from_env(env))

    async def __aenter__(self) -> "PeginToolkit":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.bitcoin_service.close()
