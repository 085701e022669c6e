"""
Alert Processor routes: the user's alert inbox.
"""
from dataclasses import dataclass
from enum import Enum
from fastapi import APIRouter, Depends, Request
from shared.actions import ActionDispatcher, preflight_response
from shared.auth import SupabaseAuth, get_auth
from shared.database import RestStore, get_store
from functions.alert_processor.config import ERROR_CODE, FUNCTION_NAME
from functions.alert_processor.models.schemas import (
    ActionResult, AlertQuery, AlertRef, CreateAlertRequest, EmptyPayload, HealthResponse, UnreadCount,
)
from functions.alert_processor.services.alerts import AlertInbox

router = APIRouter(prefix="/functions/v1", tags=["alert-processor"])


class AlertAction(str, Enum):
    GET_ALERTS = "get_alerts"
    MARK_READ = "mark_read"
    MARK_ALL_READ = "mark_all_read"
    CREATE_ALERT = "create_alert"
    DELETE_ALERT = "delete_alert"
    GET_UNREAD_COUNT = "get_unread_count"
    GENERATE_TEST_ALERTS = "generate_test_alerts"


@dataclass
class AlertContext:
    inbox: AlertInbox
    user: dict


dispatcher: ActionDispatcher[AlertAction, AlertContext] = ActionDispatcher(AlertAction, ERROR_CODE)


@dispatcher.on(AlertAction.GET_ALERTS, AlertQuery)
async def get_alerts(ctx: AlertContext, req: AlertQuery) -> list[dict]:
    return await ctx.inbox.get_alerts(req.filters)


@dispatcher.on(AlertAction.MARK_READ, AlertRef)
async def mark_read(ctx: AlertContext, req: AlertRef) -> list[dict]:
    return await ctx.inbox.mark_read(req.alert_id)


@dispatcher.on(AlertAction.MARK_ALL_READ, EmptyPayload)
async def mark_all_read(ctx: AlertContext, req: EmptyPayload) -> ActionResult:
    return await ctx.inbox.mark_all_read()


@dispatcher.on(AlertAction.CREATE_ALERT, CreateAlertRequest)
async def create_alert(ctx: AlertContext, req: CreateAlertRequest) -> list[dict]:
    return await ctx.inbox.create(req.alert_data)


@dispatcher.on(AlertAction.DELETE_ALERT, AlertRef)
async def delete_alert(ctx: AlertContext, req: AlertRef) -> ActionResult:
    return await ctx.inbox.delete(req.alert_id)


@dispatcher.on(AlertAction.GET_UNREAD_COUNT, EmptyPayload)
async def get_unread_count(ctx: AlertContext, req: EmptyPayload) -> UnreadCount:
    return await ctx.inbox.unread_count()


@dispatcher.on(AlertAction.GENERATE_TEST_ALERTS, EmptyPayload)
async def generate_test_alerts(ctx: AlertContext, req: EmptyPayload) -> list[dict]:
    return await ctx.inbox.generate_test_alerts()


dispatcher.ensure_exhaustive()


@router.get(f"/{FUNCTION_NAME}/health", response_model=HealthResponse)
async def health():
    return HealthResponse()


@router.options(f"/{FUNCTION_NAME}")
async def alert_processor_preflight():
    return preflight_response()


@router.post(f"/{FUNCTION_NAME}")
async def alert_processor(
    request: Request,
    store: RestStore = Depends(get_store),
    auth: SupabaseAuth = Depends(get_auth),
):
    return await dispatcher.handle(
        request, auth, lambda user: AlertContext(inbox=AlertInbox(store, user["id"]), user=user)
    )
