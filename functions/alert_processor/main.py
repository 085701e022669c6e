"""
Alert Processor - FastAPI application (port 8002)
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from shared.utils.logging import setup_logging
from functions.alert_processor.config import FUNCTION_NAME
from functions.alert_processor.routes.api import router
import structlog

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(FUNCTION_NAME)
    logger.info("alert_processor_starting")
    yield
    logger.info("alert_processor_stopped")


app = FastAPI(
    title="ZKWatch Alert Processor",
    description="Per-user alert inbox: list, create, mark read, delete and count alerts.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("functions.alert_processor.main:app", host="0.0.0.0", port=8002, reload=True)
