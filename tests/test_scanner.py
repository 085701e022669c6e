from conftest import FakeClock, FakeStore
from shared.chains import CHAIN_CONFIGS
from shared.fetch import FetchResult
from shared.price_feed import PriceOracle
from shared.rpc import RawBlock, RawTransaction
from functions.whale_scanner.models.schemas import PatternType, RiskLevel
from functions.whale_scanner.services.scanner import ScanOrchestrator, build_whale_transaction

ETHER = 10**18


class StaticReader:
    def __init__(self, blocks_by_chain: dict[str, list[RawBlock]], failing: set[str] = frozenset()):
        self.blocks_by_chain = blocks_by_chain
        self.failing = failing
        self.calls: list[tuple[str, int]] = []

    async def fetch_latest_blocks(self, chain: str, count: int = 5) -> list[RawBlock]:
        self.calls.append((chain, count))
        if chain in self.failing:
            raise RuntimeError("rpc exploded")
        return self.blocks_by_chain.get(chain, [])


def oracle(prices: dict[str, float]) -> PriceOracle:
    async def fetch(coin_id: str) -> FetchResult[float]:
        if coin_id in prices:
            return FetchResult.success(prices[coin_id])
        return FetchResult.failure("test", "missing")
    return PriceOracle(fetch, clock=FakeClock())


def tx(n: int, ether: float, to: str | None = "0x00000000000000000000000000000000000000bb") -> RawTransaction:
    return RawTransaction(hash=f"0x{n:064x}", from_address="0xaaa", to_address=to, value_wei=int(ether * ETHER))


def eth_block(*txs: RawTransaction) -> RawBlock:
    return RawBlock(number=19_000_000, timestamp=1_700_000_000, transactions=list(txs))


def make_scanner(store, blocks, failing=frozenset(), prices=None):
    return ScanOrchestrator(
        prices=oracle(prices if prices is not None else {"coingecko:ethereum": 2500.0, "coingecko:binancecoin": 500.0}),
        reader=StaticReader(blocks, failing),
        store=store,
    )


def test_build_whale_transaction_fields():
    record = build_whale_transaction(tx(1, 100), eth_block(), CHAIN_CONFIGS["ethereum"], 2500.0)
    assert record.value_usd == 250_000
    assert record.amount == "100.000000"
    assert record.whale_score == 52
    assert record.risk_level == RiskLevel.MEDIUM
    assert record.pattern_type == PatternType.LARGE_TRANSFER
    assert record.token_symbol == "ETH"
    assert record.transaction_type == "transfer"
    assert record.timestamp == "2023-11-14T22:13:20.000Z"


def test_contract_creation_and_small_transfers_are_ignored():
    config = CHAIN_CONFIGS["ethereum"]
    assert build_whale_transaction(tx(1, 1000, to=None), eth_block(), config, 2500.0) is None
    assert build_whale_transaction(tx(2, 39.9), eth_block(), config, 2500.0) is None


async def test_scan_chain_persists_only_whales(store):
    blocks = {"ethereum": [eth_block(tx(1, 100), tx(2, 1), tx(3, 500, to=None))]}
    found = await make_scanner(store, blocks).scan_chain("ethereum")

    assert [t.hash for t in found] == [f"0x{1:064x}"]
    rows = store.tables["whale_transactions"]
    assert len(rows) == 1
    assert rows[0]["value_usd"] >= CHAIN_CONFIGS["ethereum"].whale_threshold


async def test_rescan_does_not_duplicate(store):
    blocks = {"ethereum": [eth_block(tx(1, 100), tx(2, 200))]}
    scanner = make_scanner(store, blocks)
    await scanner.scan_chain("ethereum")
    await scanner.scan_chain("ethereum")

    hashes = [r["hash"] for r in store.tables["whale_transactions"]]
    assert len(hashes) == 2
    assert len(set(hashes)) == 2


async def test_insert_failures_do_not_abort_the_scan(store):
    store.failing.add("whale_transactions")
    found = await make_scanner(store, {"ethereum": [eth_block(tx(1, 100))]}).scan_chain("ethereum")
    assert len(found) == 1


async def test_unknown_chain_scans_nothing(store):
    scanner = make_scanner(store, {})
    assert await scanner.scan_chain("solana") == []
    assert scanner.reader.calls == []


async def test_scan_reads_three_blocks(store):
    scanner = make_scanner(store, {})
    await scanner.scan_chain("ethereum")
    assert scanner.reader.calls == [("ethereum", 3)]


async def test_scan_all_tolerates_a_failing_chain(store):
    bsc_block = RawBlock(number=1, timestamp=1_700_000_000, transactions=[tx(9, 200)])
    blocks = {"ethereum": [eth_block(tx(1, 100))], "bsc": [bsc_block]}
    summary = await make_scanner(store, blocks, failing={"polygon"}).scan_all()

    assert summary.scanned_chains == list(CHAIN_CONFIGS)
    assert summary.new_transactions == 2
    assert {t.blockchain for t in summary.transactions} == {"ethereum", "bsc"}


async def test_scan_all_preview_is_capped_at_ten(store):
    blocks = {"ethereum": [eth_block(*[tx(i, 100) for i in range(15)])]}
    summary = await make_scanner(store, blocks).scan_all(["ethereum"])
    assert summary.new_transactions == 15
    assert len(summary.transactions) == 10


async def test_price_outage_uses_fallback_price(store):
    scanner = make_scanner(store, {"ethereum": [eth_block(tx(1, 100))]}, prices={})
    found = await scanner.scan_chain("ethereum")
    assert found[0].value_usd == 350_000
