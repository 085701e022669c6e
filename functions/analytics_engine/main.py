"""
Analytics Engine - FastAPI application (port 8004)
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from shared.utils.logging import setup_logging
from functions.analytics_engine.config import FUNCTION_NAME
from functions.analytics_engine.routes.api import router
import structlog

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(FUNCTION_NAME)
    logger.info("analytics_engine_starting")
    yield
    logger.info("analytics_engine_stopped")


app = FastAPI(
    title="ZKWatch Analytics Engine",
    description="Pattern, risk, trend, anomaly and clustering analysis over whale transactions.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("functions.analytics_engine.main:app", host="0.0.0.0", port=8004, reload=True)
