"""
Whale Scanner - FastAPI application (port 8003)

Scans the latest blocks of every configured EVM chain for native transfers
above the chain's whale threshold, scores and classifies them, and serves
query, stats, scan and price actions over a single POST endpoint.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from shared.utils.logging import setup_logging
from shared.utils.scheduler import add_interval_job, start_scheduler, stop_scheduler
from functions.whale_scanner.config import FUNCTION_NAME, SCAN_INTERVAL
from functions.whale_scanner.routes.api import router
from functions.whale_scanner.services.scanner import scan_all_chains
import structlog

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(FUNCTION_NAME)
    logger.info("whale_scanner_starting", scan_interval=SCAN_INTERVAL)
    start_scheduler()
    add_interval_job("whale_scan", scan_all_chains, SCAN_INTERVAL)

    yield

    stop_scheduler()
    logger.info("whale_scanner_stopped")


app = FastAPI(
    title="ZKWatch Whale Scanner",
    description="Detects, scores and stores whale transfers across Ethereum, Polygon, Arbitrum, Optimism and BSC.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("functions.whale_scanner.main:app", host="0.0.0.0", port=8003, reload=True)
