import copy
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable
import httpx
import pytest
from shared.errors import AuthError, UpstreamError

TEST_USER = {"id": "user-1", "email": "whale@zkwatch.test"}
AUTH_HEADERS = {"Authorization": "Bearer good-token"}


def _fmt(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _matches(row: dict, filters) -> bool:
    for column, expr in filters:
        op, _, expected = expr.partition(".")
        actual = row.get(column)
        if op == "eq" and _fmt(actual) != expected:
            return False
        if op == "gte" and (actual is None or float(actual) < float(expected)):
            return False
    return True


class FakeStore:
    """In-memory stand-in for RestStore with PostgREST-like semantics."""

    def __init__(self, tables: dict[str, list[dict]] | None = None):
        self.tables: dict[str, list[dict]] = defaultdict(list)
        for name, rows in (tables or {}).items():
            self.tables[name] = [dict(r) for r in rows]
        self.calls: list[tuple] = []
        self.failing: set[str] = set()

    def _guard(self, table: str, error: str, with_detail: bool = False):
        if table in self.failing:
            raise UpstreamError(f"{error}: boom" if with_detail else error, 500, "boom")

    async def select(self, table, filters=(), columns=None, order=None, limit=None, offset=None,
                     error="Failed to fetch rows"):
        filters = list(filters)
        self.calls.append(("select", table, filters, order, limit, offset))
        self._guard(table, error)
        rows = [r for r in self.tables[table] if _matches(r, filters)]
        for part in reversed((order or "").split(",")):
            if not part:
                continue
            column, _, direction = part.partition(".")
            rows.sort(key=lambda r: str(r.get(column) or ""), reverse=direction == "desc")
        start = offset or 0
        rows = rows[start:start + limit] if limit is not None else rows[start:]
        if columns:
            wanted = columns.split(",")
            rows = [{k: r.get(k) for k in wanted} for r in rows]
        return copy.deepcopy(rows)

    async def count(self, table, filters=(), error="Failed to count rows"):
        filters = list(filters)
        self.calls.append(("count", table, filters))
        self._guard(table, error)
        return sum(1 for r in self.tables[table] if _matches(r, filters))

    async def insert(self, table, rows, returning=True, ignore_duplicates=False, error="Failed to insert rows",
                     with_detail=False):
        batch = rows if isinstance(rows, list) else [rows]
        self.calls.append(("insert", table, batch, ignore_duplicates))
        self._guard(table, error, with_detail)
        created = []
        for row in batch:
            if ignore_duplicates and "hash" in row and any(
                r.get("hash") == row["hash"] for r in self.tables[table]
            ):
                continue
            stored = {"id": str(uuid.uuid4()), "created_at": datetime.now(timezone.utc).isoformat(), **row}
            self.tables[table].append(stored)
            created.append(copy.deepcopy(stored))
        return created if returning else []

    async def update(self, table, filters, values, returning=True, error="Failed to update rows"):
        filters = list(filters)
        self.calls.append(("update", table, filters, values))
        self._guard(table, error)
        updated = []
        for row in self.tables[table]:
            if _matches(row, filters):
                row.update(copy.deepcopy(values))
                updated.append(copy.deepcopy(row))
        return updated if returning else []

    async def delete(self, table, filters, error="Failed to delete rows"):
        filters = list(filters)
        self.calls.append(("delete", table, filters))
        self._guard(table, error)
        self.tables[table] = [r for r in self.tables[table] if not _matches(r, filters)]


class FakeAuth:
    """Accepts exactly one bearer token."""

    def __init__(self, token: str = "good-token", user: dict | None = None):
        self.token = token
        self.user = user or TEST_USER

    async def get_user(self, authorization: str | None) -> dict:
        if not authorization:
            raise AuthError("No authorization header")
        if authorization.replace("Bearer ", "", 1) != self.token:
            raise AuthError("Invalid token")
        return dict(self.user)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def auth() -> FakeAuth:
    return FakeAuth()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
