"""
Explicit success/failure values for best-effort external calls.

Price and RPC clients return a FetchResult instead of raising; the caller
decides whether to fall back, skip or give up.
"""
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Generic, TypeVar
import httpx
from shared.config import settings

T = TypeVar("T")


@dataclass(frozen=True)
class FetchError:
    source: str
    reason: str


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    value: T | None = None
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "FetchResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, source: str, reason: str) -> "FetchResult[T]":
        return cls(error=FetchError(source=source, reason=reason))


@asynccontextmanager
async def open_client(client: httpx.AsyncClient | None = None) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a short-lived one built from settings."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as owned:
        yield owned
