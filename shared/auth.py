from functools import lru_cache
import httpx
from shared.config import settings
from shared.errors import AuthError
from shared.fetch import open_client


class SupabaseAuth:
    """Resolves the caller behind a bearer token via GET {auth_url}/user."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url or settings.auth_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.SUPABASE_KEY
        self._client = client

    async def get_user(self, authorization: str | None) -> dict:
        if not authorization:
            raise AuthError("No authorization header")

        token = authorization.replace("Bearer ", "", 1).strip()
        if not token:
            raise AuthError("Invalid token")

        try:
            async with open_client(self._client) as client:
                resp = await client.get(
                    f"{self.base_url}/user",
                    headers={"Authorization": f"Bearer {token}", "apikey": self.api_key},
                )
        except httpx.HTTPError as e:
            raise AuthError(f"Auth service unavailable: {e}") from e

        if resp.status_code >= 400:
            raise AuthError("Invalid token")
        user = resp.json()
        if not isinstance(user, dict) or not user.get("id"):
            raise AuthError("Invalid token")
        return user


@lru_cache
def get_auth() -> SupabaseAuth:
    return SupabaseAuth()
