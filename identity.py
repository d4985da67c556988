from dataclasses import dataclass
from typing import Optional

import httpx

from config import get_settings
from log_utils import get_logger

ROLES = ("admin", "staff")
auth_logger = get_logger("auth", "auth.log")


@dataclass(frozen=True)
class AuthIdentity:
    """What the auth provider vouches for: who, not what they may do."""
    id: str
    email: str


@dataclass(frozen=True)
class Caller:
    id: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class SupabaseIdentityResolver:
    """
    Resolves a Supabase access token to the user it was issued for.

    Calls GET {SUPABASE_URL}/auth/v1/user with the anon key, the same way the
    dashboard client does. Returns None when the provider rejects the token.
    """

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0, transport=None):
        self.user_url = f"{base_url}/auth/v1/user"
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def resolve(self, access_token: str) -> Optional[AuthIdentity]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token}",
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.get(self.user_url, headers=headers)

        if resp.status_code in (401, 403):
            auth_logger.info("Token rejected by auth provider (%s)", resp.status_code)
            return None
        if resp.status_code != 200:
            auth_logger.error("Auth provider error %s: %s", resp.status_code, resp.text[:200])
            raise httpx.HTTPStatusError(
                f"Auth provider returned {resp.status_code}",
                request=resp.request,
                response=resp,
            )

        user = resp.json()
        if not user.get("id"):
            return None
        return AuthIdentity(id=user["id"], email=user.get("email") or "")


def get_identity_resolver() -> SupabaseIdentityResolver:
    settings = get_settings()
    return SupabaseIdentityResolver(
        settings.SUPABASE_URL,
        settings.SUPABASE_ANON_KEY,
        timeout=settings.AUTH_TIMEOUT_SECONDS,
    )
