"""
Analytics Engine routes. Every action runs over the same freshly loaded
window of historical whale transactions.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from fastapi import APIRouter, Depends, Request
from shared.actions import ActionDispatcher, preflight_response
from shared.auth import SupabaseAuth, get_auth
from shared.database import RestStore, get_store
from functions.analytics_engine.config import ERROR_CODE, FUNCTION_NAME
from functions.analytics_engine.models.schemas import AnalyticsRequest, HealthResponse, HistoricalTx
from functions.analytics_engine.services import analysis
from functions.analytics_engine.services.history import load_history

router = APIRouter(prefix="/functions/v1", tags=["analytics-engine"])


class AnalyticsAction(str, Enum):
    ANALYZE_PATTERNS = "analyze_patterns"
    CALCULATE_RISK = "calculate_risk"
    PREDICT_TRENDS = "predict_trends"
    DETECT_ANOMALIES = "detect_anomalies"
    CLUSTER_WALLETS = "cluster_wallets"
    COMPREHENSIVE_ANALYSIS = "comprehensive_analysis"
    DASHBOARD_STATS = "dashboard_stats"


@dataclass
class AnalyticsContext:
    store: RestStore
    user: dict


dispatcher: ActionDispatcher[AnalyticsAction, AnalyticsContext] = ActionDispatcher(AnalyticsAction, ERROR_CODE)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def _history(ctx: AnalyticsContext, req: AnalyticsRequest) -> list[HistoricalTx]:
    return await load_history(ctx.store, req.blockchain, req.limit)


@dispatcher.on(AnalyticsAction.ANALYZE_PATTERNS, AnalyticsRequest)
async def analyze_patterns(ctx: AnalyticsContext, req: AnalyticsRequest) -> dict:
    txs = await _history(ctx, req)
    return {
        "patterns": analysis.detect_patterns(txs),
        "analyzed_transactions": len(txs),
        "timeframe": req.timeframe or "all",
        "analysis_timestamp": _now(),
    }


@dispatcher.on(AnalyticsAction.CALCULATE_RISK, AnalyticsRequest)
async def calculate_risk(ctx: AnalyticsContext, req: AnalyticsRequest) -> dict:
    txs = await _history(ctx, req)
    return {
        **analysis.calculate_risk(txs, req.address),
        "address": req.address or "all",
        "transactions_analyzed": len(txs),
        "timestamp": _now(),
    }


@dispatcher.on(AnalyticsAction.PREDICT_TRENDS, AnalyticsRequest)
async def predict_trends(ctx: AnalyticsContext, req: AnalyticsRequest) -> dict:
    txs = await _history(ctx, req)
    return {
        **analysis.predict_trends(txs),
        "blockchain": req.blockchain or "all",
        "data_points": len(txs),
        "timestamp": _now(),
    }


@dispatcher.on(AnalyticsAction.DETECT_ANOMALIES, AnalyticsRequest)
async def detect_anomalies(ctx: AnalyticsContext, req: AnalyticsRequest) -> dict:
    txs = await _history(ctx, req)
    return {**analysis.detect_anomalies(txs), "blockchain": req.blockchain or "all", "timestamp": _now()}


@dispatcher.on(AnalyticsAction.CLUSTER_WALLETS, AnalyticsRequest)
async def cluster_wallets(ctx: AnalyticsContext, req: AnalyticsRequest) -> dict:
    txs = await _history(ctx, req)
    return {**analysis.cluster_wallets(txs), "blockchain": req.blockchain or "all", "timestamp": _now()}


@dispatcher.on(AnalyticsAction.COMPREHENSIVE_ANALYSIS, AnalyticsRequest)
async def comprehensive_analysis(ctx: AnalyticsContext, req: AnalyticsRequest) -> dict:
    txs = await _history(ctx, req)
    return {
        "patterns": analysis.detect_patterns(txs),
        "risk_assessment": analysis.calculate_risk(txs),
        "trend_analysis": analysis.predict_trends(txs),
        "anomaly_detection": analysis.detect_anomalies(txs),
        "wallet_clusters": analysis.cluster_wallets(txs),
        "total_transactions": len(txs),
        "timestamp": _now(),
    }


@dispatcher.on(AnalyticsAction.DASHBOARD_STATS, AnalyticsRequest)
async def dashboard_stats(ctx: AnalyticsContext, req: AnalyticsRequest) -> dict:
    return analysis.dashboard_stats(await _history(ctx, req))


dispatcher.ensure_exhaustive()


@router.get(f"/{FUNCTION_NAME}/health", response_model=HealthResponse)
async def health():
    return HealthResponse()


@router.options(f"/{FUNCTION_NAME}")
async def analytics_engine_preflight():
    return preflight_response()


@router.post(f"/{FUNCTION_NAME}")
async def analytics_engine(
    request: Request,
    store: RestStore = Depends(get_store),
    auth: SupabaseAuth = Depends(get_auth),
):
    return await dispatcher.handle(request, auth, lambda user: AnalyticsContext(store=store, user=user))
