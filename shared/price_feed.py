"""
Shared price feed: DefiLlama current prices with a 60 second read-through cache.

PriceOracle owns the cache. The clock and the fetch function are injected so
callers (and tests) control time and the network.
"""
import time
from typing import Awaitable, Callable
import httpx
from shared.config import settings
from shared.fetch import FetchResult, open_client
import structlog

logger = structlog.get_logger()

# Symbol -> DefiLlama coin id
COIN_IDS = {
    "ETH": "coingecko:ethereum",
    "BTC": "coingecko:bitcoin",
    "USDC": "coingecko:usd-coin",
    "USDT": "coingecko:tether",
    "DAI": "coingecko:dai",
    "MATIC": "coingecko:matic-network",
    "BNB": "coingecko:binancecoin",
    "WETH": "coingecko:weth",
    "WBTC": "coingecko:wrapped-bitcoin",
}

# Used when the price API is unreachable
FALLBACK_PRICES = {
    "ETH": 3500.0,
    "BTC": 95000.0,
    "USDC": 1.0,
    "USDT": 1.0,
    "DAI": 1.0,
    "MATIC": 0.5,
    "BNB": 650.0,
    "WETH": 3500.0,
    "WBTC": 95000.0,
}
UNKNOWN_SYMBOL_PRICE = 1.0

PriceFetcher = Callable[[str], Awaitable[FetchResult[float]]]


def coin_id_for(symbol: str) -> str:
    return COIN_IDS.get(symbol, f"coingecko:{symbol.lower()}")


def fallback_price(symbol: str) -> float:
    return FALLBACK_PRICES.get(symbol, UNKNOWN_SYMBOL_PRICE)


class DefiLlamaPriceClient:
    """GET {base}/prices/current/{coin_id} -> {"coins": {coin_id: {"price": ...}}}"""

    def __init__(self, base_url: str | None = None, client: httpx.AsyncClient | None = None):
        self.base_url = (base_url or settings.DEFILLAMA_API_URL).rstrip("/")
        self._client = client

    async def fetch_price(self, coin_id: str) -> FetchResult[float]:
        try:
            async with open_client(self._client) as client:
                resp = await client.get(f"{self.base_url}/prices/current/{coin_id}")
            if resp.status_code >= 400:
                return FetchResult.failure("defillama", f"http {resp.status_code}")
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            return FetchResult.failure("defillama", str(e))

        price = ((data.get("coins") or {}).get(coin_id) or {}).get("price")
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            return FetchResult.failure("defillama", "price missing")
        return FetchResult.success(float(price))


class PriceOracle:
    """
    Read-through USD price cache.

    Fresh entries are served without a fetch. A failed fetch returns the
    static fallback price and leaves the cache untouched, so callers always
    get a usable number.
    """

    def __init__(
        self,
        fetch: PriceFetcher,
        clock: Callable[[], float] = time.monotonic,
        ttl: float | None = None,
    ):
        self._fetch = fetch
        self._clock = clock
        self.ttl = settings.PRICE_CACHE_TTL_SECONDS if ttl is None else ttl
        # symbol -> (price_usd, fetched_at)
        self._cache: dict[str, tuple[float, float]] = {}

    def cached(self, symbol: str) -> float | None:
        entry = self._cache.get(symbol)
        if entry is None:
            return None
        price, fetched_at = entry
        if (self._clock() - fetched_at) < self.ttl:
            return price
        return None

    async def get_price(self, symbol: str) -> float:
        price = self.cached(symbol)
        if price is not None:
            return price

        result = await self._fetch(coin_id_for(symbol))
        if result.ok:
            self._cache[symbol] = (result.value, self._clock())
            return result.value

        logger.warning("price_fetch_failed", symbol=symbol, error=result.error.reason)
        return fallback_price(symbol)

    async def get_prices(self, symbols: list[str]) -> dict[str, float]:
        """Prices for several symbols, fetched one at a time."""
        return {symbol: await self.get_price(symbol) for symbol in symbols}


def build_price_oracle(client: httpx.AsyncClient | None = None) -> PriceOracle:
    return PriceOracle(fetch=DefiLlamaPriceClient(client=client).fetch_price)
