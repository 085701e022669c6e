"""
Whale Scanner routes: one action-dispatched POST endpoint.
"""
import math
from dataclasses import dataclass
from enum import Enum
from fastapi import APIRouter, Depends, Request
from shared.actions import ActionDispatcher, preflight_response
from shared.auth import SupabaseAuth, get_auth
from shared.chains import CHAIN_CONFIGS
from shared.database import RestStore, eq, get_store, gte
from functions.whale_scanner.config import (
    ERROR_CODE, FUNCTION_NAME, TRANSACTIONS_TABLE, DEFAULT_PAGE_SIZE,
    STATS_COLUMNS, PRICE_SYMBOLS, SCAN_INTERVAL,
)
from functions.whale_scanner.models.schemas import (
    TransactionQuery, ScanRequest, EmptyPayload, ScanSummary, WhaleStats, HealthResponse,
)
from functions.whale_scanner.services.scanner import ScanOrchestrator, get_scanner
from functions.whale_scanner.services.stats import summarize_transactions

router = APIRouter(prefix="/functions/v1", tags=["whale-scanner"])


class WhaleAction(str, Enum):
    GET_TRANSACTIONS = "get_transactions"
    GET_STATS = "get_stats"
    SCAN_NEW = "scan_new"
    GET_PRICES = "get_prices"


@dataclass
class WhaleContext:
    store: RestStore
    scanner: ScanOrchestrator
    user: dict


dispatcher: ActionDispatcher[WhaleAction, WhaleContext] = ActionDispatcher(WhaleAction, ERROR_CODE)


def _chain_filter(blockchain: str | None) -> str | None:
    if not blockchain or blockchain == "all":
        return None
    return blockchain


@dispatcher.on(WhaleAction.GET_TRANSACTIONS, TransactionQuery)
async def get_transactions(ctx: WhaleContext, req: TransactionQuery) -> list[dict]:
    filters = []
    chain = _chain_filter(req.blockchain)
    if chain:
        filters.append(("blockchain", eq(chain)))
    if req.filters and req.filters.risk_level:
        filters.append(("risk_level", eq(req.filters.risk_level.value)))
    if req.filters and req.filters.min_amount:
        filters.append(("value_usd", gte(math.ceil(req.filters.min_amount))))

    return await ctx.store.select(
        TRANSACTIONS_TABLE,
        filters,
        order="timestamp.desc,created_at.desc",
        limit=req.limit or DEFAULT_PAGE_SIZE,
        offset=req.offset or 0,
        error="Failed to fetch transactions",
    )


@dispatcher.on(WhaleAction.GET_STATS, EmptyPayload)
async def get_stats(ctx: WhaleContext, req: EmptyPayload) -> WhaleStats:
    rows = await ctx.store.select(TRANSACTIONS_TABLE, columns=STATS_COLUMNS, error="Failed to fetch stats")
    return summarize_transactions(rows)


@dispatcher.on(WhaleAction.SCAN_NEW, ScanRequest)
async def scan_new(ctx: WhaleContext, req: ScanRequest) -> ScanSummary:
    chain = _chain_filter(req.blockchain)
    return await ctx.scanner.scan_all([chain] if chain else None)


@dispatcher.on(WhaleAction.GET_PRICES, EmptyPayload)
async def get_prices(ctx: WhaleContext, req: EmptyPayload) -> dict[str, float]:
    return await ctx.scanner.prices.get_prices(PRICE_SYMBOLS)


dispatcher.ensure_exhaustive()


@router.get(f"/{FUNCTION_NAME}/health", response_model=HealthResponse)
async def health():
    return HealthResponse(chains=list(CHAIN_CONFIGS), scan_interval_seconds=SCAN_INTERVAL)


@router.options(f"/{FUNCTION_NAME}")
async def whale_scanner_preflight():
    return preflight_response()


@router.post(f"/{FUNCTION_NAME}")
async def whale_scanner(
    request: Request,
    store: RestStore = Depends(get_store),
    scanner: ScanOrchestrator = Depends(get_scanner),
    auth: SupabaseAuth = Depends(get_auth),
):
    return await dispatcher.handle(
        request, auth, lambda user: WhaleContext(store=store, scanner=scanner, user=user)
    )
