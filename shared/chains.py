"""
Supported EVM chains and their whale thresholds.
"""
from dataclasses import dataclass
from types import MappingProxyType
from shared.config import settings

DEFAULT_WHALE_THRESHOLD = 100_000


@dataclass(frozen=True)
class ChainConfig:
    name: str
    label: str
    rpc_url: str
    explorer_api: str
    native_currency: str
    whale_threshold: float  # USD


CHAIN_CONFIGS = MappingProxyType({
    "ethereum": ChainConfig(
        name="ethereum",
        label="Ethereum",
        rpc_url=settings.ETHEREUM_RPC_URL,
        explorer_api="https://api.etherscan.io/api",
        native_currency="ETH",
        whale_threshold=100_000,
    ),
    "polygon": ChainConfig(
        name="polygon",
        label="Polygon",
        rpc_url=settings.POLYGON_RPC_URL,
        explorer_api="https://api.polygonscan.com/api",
        native_currency="MATIC",
        whale_threshold=50_000,
    ),
    "arbitrum": ChainConfig(
        name="arbitrum",
        label="Arbitrum",
        rpc_url=settings.ARBITRUM_RPC_URL,
        explorer_api="https://api.arbiscan.io/api",
        native_currency="ETH",
        whale_threshold=50_000,
    ),
    "optimism": ChainConfig(
        name="optimism",
        label="Optimism",
        rpc_url=settings.OPTIMISM_RPC_URL,
        explorer_api="https://api-optimistic.etherscan.io/api",
        native_currency="ETH",
        whale_threshold=50_000,
    ),
    "bsc": ChainConfig(
        name="bsc",
        label="BSC",
        rpc_url=settings.BSC_RPC_URL,
        explorer_api="https://api.bscscan.com/api",
        native_currency="BNB",
        whale_threshold=50_000,
    ),
})


def get_chain(chain: str | None) -> ChainConfig | None:
    if not chain:
        return None
    return CHAIN_CONFIGS.get(chain)


def whale_threshold_for(chain: str | None) -> float:
    config = get_chain(chain)
    return config.whale_threshold if config else DEFAULT_WHALE_THRESHOLD
