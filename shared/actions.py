"""
Action dispatch for the POST-per-group handler surface.

Each handler group declares an Enum of actions and registers one coroutine
per member together with the pydantic model its payload must satisfy.
`ensure_exhaustive()` is called at import time so a missing handler fails
fast instead of surfacing as "Unknown action" at runtime.
"""
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, TypeVar
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ValidationError
from shared.auth import SupabaseAuth
from shared.errors import AuthError, InvalidPayloadError, UnknownActionError, ZKWatchError
import structlog

logger = structlog.get_logger()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS, PUT, DELETE, PATCH",
    "Access-Control-Max-Age": "86400",
    "Access-Control-Allow-Credentials": "false",
}

A = TypeVar("A", bound=Enum)
C = TypeVar("C")


def data_response(result: Any) -> JSONResponse:
    return JSONResponse({"data": jsonable_encoder(result)}, headers=CORS_HEADERS)


def error_response(code: str, exc: Exception) -> JSONResponse:
    status = exc.status_code if isinstance(exc, ZKWatchError) else 500
    return JSONResponse(
        {"error": {"code": code, "message": str(exc) or exc.__class__.__name__}},
        status_code=status,
        headers=CORS_HEADERS,
    )


def preflight_response() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


async def read_json(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError as e:
        raise InvalidPayloadError("Request body must be valid JSON") from e
    if not isinstance(body, dict):
        raise InvalidPayloadError("Request body must be a JSON object")
    return body


def _describe(e: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
    )


class ActionDispatcher(Generic[A, C]):
    def __init__(self, actions: type[A], error_code: str):
        self.actions = actions
        self.error_code = error_code
        self._handlers: dict[A, tuple[type[BaseModel], Callable[[C, Any], Awaitable[Any]]]] = {}

    def on(self, action: A, payload: type[BaseModel]):
        """Register the handler for `action`; its payload is validated against `payload`."""
        def register(fn: Callable[[C, Any], Awaitable[Any]]):
            if action in self._handlers:
                raise RuntimeError(f"Duplicate handler for {action.value}")
            self._handlers[action] = (payload, fn)
            return fn
        return register

    def ensure_exhaustive(self) -> None:
        missing = [a.value for a in self.actions if a not in self._handlers]
        if missing:
            raise RuntimeError(f"{self.actions.__name__} has no handler for: {', '.join(missing)}")

    def parse_action(self, body: dict) -> A:
        raw = body.get("action")
        try:
            return self.actions(raw)
        except ValueError:
            raise UnknownActionError(raw) from None

    async def dispatch(self, body: dict, ctx: C) -> Any:
        action = self.parse_action(body)
        model, fn = self._handlers[action]
        try:
            payload = model.model_validate(body)
        except ValidationError as e:
            raise InvalidPayloadError(f"Invalid payload for {action.value}: {_describe(e)}") from e
        return await fn(ctx, payload)

    async def respond(self, run: Callable[[], Awaitable[Any]]) -> JSONResponse:
        """Run one request and wrap the outcome in the {data} / {error} envelope."""
        try:
            result = await run()
        except AuthError as e:
            logger.warning("auth_failed", code=self.error_code, error=str(e))
            return error_response(self.error_code, e)
        except Exception as e:
            logger.error("action_failed", code=self.error_code, error=str(e), exc_type=e.__class__.__name__)
            return error_response(self.error_code, e)
        return data_response(result)

    async def handle(
        self,
        request: Request,
        auth: SupabaseAuth,
        make_ctx: Callable[[dict], C],
    ) -> JSONResponse:
        """Authenticate the caller, then dispatch the JSON body."""
        async def run():
            user = await auth.get_user(request.headers.get("authorization"))
            body = await read_json(request)
            return await self.dispatch(body, make_ctx(user))

        return await self.respond(run)
