"""
Agent Deployment routes: deploy, stop, delete and inspect a user's agents.
"""
from dataclasses import dataclass
from enum import Enum
from fastapi import APIRouter, Depends, Request
from shared.actions import ActionDispatcher, preflight_response
from shared.auth import SupabaseAuth, get_auth
from shared.database import RestStore, get_store
from functions.agent_deployment.config import ERROR_CODE, FUNCTION_NAME
from functions.agent_deployment.models.schemas import AgentRef, DeleteResult, DeployRequest, HealthResponse
from functions.agent_deployment.services.lifecycle import AgentLifecycle

router = APIRouter(prefix="/functions/v1", tags=["agent-deployment"])


class AgentAction(str, Enum):
    DEPLOY = "deploy"
    STOP = "stop"
    DELETE = "delete"
    STATUS = "status"


@dataclass
class AgentContext:
    lifecycle: AgentLifecycle
    user: dict


dispatcher: ActionDispatcher[AgentAction, AgentContext] = ActionDispatcher(AgentAction, ERROR_CODE)


@dispatcher.on(AgentAction.DEPLOY, DeployRequest)
async def deploy(ctx: AgentContext, req: DeployRequest) -> list[dict]:
    return await ctx.lifecycle.deploy(req.agent_id, req.agent_data)


@dispatcher.on(AgentAction.STOP, AgentRef)
async def stop(ctx: AgentContext, req: AgentRef) -> list[dict]:
    return await ctx.lifecycle.stop(req.agent_id)


@dispatcher.on(AgentAction.DELETE, AgentRef)
async def delete(ctx: AgentContext, req: AgentRef) -> DeleteResult:
    return await ctx.lifecycle.delete(req.agent_id)


@dispatcher.on(AgentAction.STATUS, AgentRef)
async def status(ctx: AgentContext, req: AgentRef) -> dict:
    return await ctx.lifecycle.status(req.agent_id)


dispatcher.ensure_exhaustive()


@router.get(f"/{FUNCTION_NAME}/health", response_model=HealthResponse)
async def health():
    return HealthResponse()


@router.options(f"/{FUNCTION_NAME}")
async def agent_deployment_preflight():
    return preflight_response()


@router.post(f"/{FUNCTION_NAME}")
async def agent_deployment(
    request: Request,
    store: RestStore = Depends(get_store),
    auth: SupabaseAuth = Depends(get_auth),
):
    return await dispatcher.handle(
        request, auth, lambda user: AgentContext(lifecycle=AgentLifecycle(store, user["id"]), user=user)
    )
