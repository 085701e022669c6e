"""
PostgREST client for the hosted Supabase store.

Filters are (column, "op.value") pairs, e.g. [("user_id", eq(uid))].
"""
import json
from functools import lru_cache
from typing import Any, Iterable
import httpx
from shared.config import settings
from shared.errors import UpstreamError
from shared.fetch import open_client
import structlog

logger = structlog.get_logger()

Filters = Iterable[tuple[str, str]]


def _fmt(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def eq(value: Any) -> str:
    return f"eq.{_fmt(value)}"


def gte(value: Any) -> str:
    return f"gte.{_fmt(value)}"


def parse_content_range(header: str | None) -> int:
    """'0-9/42' -> 42. Unknown totals ('*') count as 0."""
    if not header or "/" not in header:
        return 0
    total = header.split("/", 1)[1]
    return int(total) if total.isdigit() else 0


class RestStore:
    def __init__(
        self,
        base_url: str | None = None,
        service_key: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url or settings.rest_url).rstrip("/")
        self.service_key = service_key if service_key is not None else settings.SUPABASE_KEY
        self._client = client

    def _headers(self, prefer: list[str] | None = None, json_body: bool = False) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
        }
        if json_body:
            headers["Content-Type"] = "application/json"
        if prefer:
            headers["Prefer"] = ",".join(prefer)
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: list[tuple[str, str]],
        prefer: list[str] | None = None,
        body: Any = None,
        error: str = "Store request failed",
        with_detail: bool = False,
    ) -> httpx.Response:
        async with open_client(self._client) as client:
            resp = await client.request(
                method,
                f"{self.base_url}/{table}",
                params=params,
                headers=self._headers(prefer, json_body=body is not None),
                content=json.dumps(body) if body is not None else None,
            )
        if resp.status_code >= 400:
            logger.warning(
                "store_request_failed", method=method, table=table, status=resp.status_code, body=resp.text
            )
            message = f"{error}: {resp.text}" if with_detail and resp.text else error
            raise UpstreamError(message, resp.status_code, resp.text)
        return resp

    @staticmethod
    def _rows(resp: httpx.Response) -> list[dict]:
        if not resp.content:
            return []
        data = resp.json()
        return data if isinstance(data, list) else [data]

    async def select(
        self,
        table: str,
        filters: Filters = (),
        columns: str | None = None,
        order: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        error: str = "Failed to fetch rows",
    ) -> list[dict]:
        params = list(filters)
        if columns:
            params.append(("select", columns))
        if order:
            params.append(("order", order))
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset is not None:
            params.append(("offset", str(offset)))
        resp = await self._request("GET", table, params, error=error)
        return self._rows(resp)

    async def count(self, table: str, filters: Filters = (), error: str = "Failed to count rows") -> int:
        params = list(filters) + [("select", "id")]
        resp = await self._request("GET", table, params, prefer=["count=exact"], error=error)
        return parse_content_range(resp.headers.get("content-range"))

    async def insert(
        self,
        table: str,
        rows: dict | list[dict],
        returning: bool = True,
        ignore_duplicates: bool = False,
        error: str = "Failed to insert rows",
        with_detail: bool = False,
    ) -> list[dict]:
        prefer = []
        if returning:
            prefer.append("return=representation")
        if ignore_duplicates:
            prefer.append("resolution=ignore-duplicates")
        resp = await self._request("POST", table, [], prefer=prefer, body=rows, error=error, with_detail=with_detail)
        return self._rows(resp) if returning else []

    async def update(
        self,
        table: str,
        filters: Filters,
        values: dict,
        returning: bool = True,
        error: str = "Failed to update rows",
    ) -> list[dict]:
        prefer = ["return=representation"] if returning else None
        resp = await self._request("PATCH", table, list(filters), prefer=prefer, body=values, error=error)
        return self._rows(resp) if returning else []

    async def delete(self, table: str, filters: Filters, error: str = "Failed to delete rows") -> None:
        await self._request("DELETE", table, list(filters), error=error)


@lru_cache
def get_store() -> RestStore:
    if not settings.SUPABASE_URL:
        logger.warning("store_not_configured", hint="Set SUPABASE_URL in .env")
    return RestStore()
