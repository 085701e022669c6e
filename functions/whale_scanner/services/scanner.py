"""
Whale Scanner: reads the latest blocks of each configured chain, prices native
transfers, classifies the ones above the chain's whale threshold and appends
them to the store (insert-or-ignore on the transaction hash).
"""
import math
from datetime import datetime, timezone
from functools import lru_cache
from typing import Iterable, Mapping
import httpx
from shared.chains import CHAIN_CONFIGS, ChainConfig
from shared.database import RestStore, get_store
from shared.errors import UpstreamError
from shared.price_feed import PriceOracle, build_price_oracle
from shared.rpc import ChainReader, RawBlock, RawTransaction
from functions.whale_scanner.config import SCAN_BLOCK_COUNT, SCAN_RESULT_PREVIEW, TRANSACTIONS_TABLE
from functions.whale_scanner.models.schemas import ScanSummary, WhaleTransaction
from functions.whale_scanner.services.classifier import pattern_type, risk_level, whale_score
import structlog

logger = structlog.get_logger()


def _block_time(block: RawBlock) -> str:
    ts = datetime.fromtimestamp(block.timestamp, tz=timezone.utc)
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_whale_transaction(
    tx: RawTransaction,
    block: RawBlock,
    config: ChainConfig,
    price_usd: float,
) -> WhaleTransaction | None:
    """Classified record for `tx`, or None when it is not a whale transfer."""
    if not tx.to_address:
        return None  # contract creation

    value_native = tx.value_native
    value_usd = value_native * price_usd
    if value_usd < config.whale_threshold:
        return None

    score = whale_score(value_usd, config.name)
    return WhaleTransaction(
        hash=tx.hash,
        from_address=tx.from_address,
        to_address=tx.to_address,
        amount=f"{value_native:.6f}",
        value_usd=math.floor(value_usd),
        token_symbol=config.native_currency,
        blockchain=config.name,
        block_number=block.number,
        whale_score=score,
        risk_level=risk_level(value_usd, score),
        pattern_type=pattern_type(tx.to_address, value_usd),
        transaction_type="transfer",
        timestamp=_block_time(block),
    )


class ScanOrchestrator:
    def __init__(
        self,
        prices: PriceOracle,
        reader: ChainReader,
        store: RestStore,
        chains: Mapping[str, ChainConfig] = CHAIN_CONFIGS,
        block_count: int = SCAN_BLOCK_COUNT,
    ):
        self.prices = prices
        self.reader = reader
        self.store = store
        self.chains = chains
        self.block_count = block_count

    async def _persist(self, whale_tx: WhaleTransaction) -> None:
        try:
            await self.store.insert(
                TRANSACTIONS_TABLE,
                whale_tx.to_row(),
                returning=False,
                ignore_duplicates=True,
            )
        except (UpstreamError, httpx.HTTPError) as e:
            logger.debug("whale_tx_insert_failed", tx_hash=whale_tx.hash[:10], error=str(e))

    async def scan_chain(self, chain: str) -> list[WhaleTransaction]:
        config = self.chains.get(chain)
        if config is None:
            return []

        # One price snapshot for the whole scan
        price = await self.prices.get_price(config.native_currency)
        blocks = await self.reader.fetch_latest_blocks(chain, self.block_count)

        found: list[WhaleTransaction] = []
        for block in blocks:
            for tx in block.transactions:
                whale_tx = build_whale_transaction(tx, block, config, price)
                if whale_tx is None:
                    continue
                found.append(whale_tx)
                await self._persist(whale_tx)

        if found:
            logger.info("whale_txns_found", chain=chain, count=len(found), blocks=len(blocks))
        return found

    async def scan_all(self, chains: Iterable[str] | None = None) -> ScanSummary:
        """Scan chains one after another. A failing chain is logged and skipped."""
        targets = list(chains) if chains is not None else list(self.chains)
        found: list[WhaleTransaction] = []
        for chain in targets:
            try:
                found.extend(await self.scan_chain(chain))
            except Exception as e:
                logger.error("chain_scan_failed", chain=chain, error=str(e))

        return ScanSummary(
            scanned_chains=targets,
            new_transactions=len(found),
            transactions=found[:SCAN_RESULT_PREVIEW],
        )


@lru_cache
def get_price_oracle() -> PriceOracle:
    """Process-wide price cache shared by every scan and request."""
    return build_price_oracle()


@lru_cache
def get_chain_reader() -> ChainReader:
    return ChainReader()


def get_scanner() -> ScanOrchestrator:
    return ScanOrchestrator(get_price_oracle(), get_chain_reader(), get_store())


async def scan_all_chains() -> ScanSummary:
    """Entry point for the scheduled scan job."""
    return await get_scanner().scan_all()
