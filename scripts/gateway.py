"""
API Gateway: unified entry point that mounts every handler group on a single port.

Handler groups keep their edge-function paths:
  /functions/v1/agent-deployment
  /functions/v1/alert-processor
  /functions/v1/whale-scanner
  /functions/v1/analytics-engine

The periodic whale scan runs inside this process.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from shared.chains import CHAIN_CONFIGS
from shared.config import settings
from shared.utils.logging import setup_logging
from shared.utils.scheduler import add_interval_job, start_scheduler, stop_scheduler
import structlog

from functions.agent_deployment.routes.api import router as agent_router
from functions.alert_processor.routes.api import router as alert_router
from functions.whale_scanner.routes.api import router as whale_router
from functions.analytics_engine.routes.api import router as analytics_router
from functions.whale_scanner.services.scanner import scan_all_chains

logger = structlog.get_logger()

FUNCTIONS = ["agent-deployment", "alert-processor", "whale-scanner", "analytics-engine"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging("gateway")
    logger.info("gateway_starting", functions=len(FUNCTIONS), environment=settings.ENVIRONMENT)
    start_scheduler()
    add_interval_job("gw_whale_scan", scan_all_chains, settings.SCAN_INTERVAL_SECONDS)

    yield

    stop_scheduler()
    logger.info("gateway_stopped")


app = FastAPI(
    title="ZKWatch Gateway",
    description="Unified API gateway for the ZKWatch whale-monitoring backend.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(agent_router)
app.include_router(alert_router)
app.include_router(whale_router)
app.include_router(analytics_router)


@app.get("/health")
async def gateway_health():
    """Combined health check for all handler groups."""
    store_ok = bool(settings.SUPABASE_URL and settings.SUPABASE_KEY)
    return {
        "status": "ok" if store_ok else "degraded",
        "gateway": "zkwatch",
        "version": "1.0.0",
        "store": "configured" if store_ok else "not configured",
        "chains": list(CHAIN_CONFIGS),
        "scan_interval_seconds": settings.SCAN_INTERVAL_SECONDS,
        "endpoints": [f"/functions/v1/{name}/health" for name in FUNCTIONS],
    }


@app.get("/")
async def root():
    return {
        "name": "ZKWatch",
        "description": "Multi-chain whale transaction monitoring",
        "docs": "/docs",
        "health": "/health",
        "functions": {name: f"/functions/v1/{name}" for name in FUNCTIONS},
    }
