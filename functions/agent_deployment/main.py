"""
Agent Deployment - FastAPI application (port 8001)
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from shared.utils.logging import setup_logging
from functions.agent_deployment.config import FUNCTION_NAME
from functions.agent_deployment.routes.api import router
import structlog

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(FUNCTION_NAME)
    logger.info("agent_deployment_starting")
    yield
    logger.info("agent_deployment_stopped")


app = FastAPI(
    title="ZKWatch Agent Deployment",
    description="Deploy, stop, delete and inspect monitoring agents.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("functions.agent_deployment.main:app", host="0.0.0.0", port=8001, reload=True)
