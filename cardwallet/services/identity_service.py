"""
Identity service client.

Accounts, passwords and verification e-mails live in Supabase Auth. We talk
to its REST API (GoTrue) directly with httpx; the account id it issues keys
the user's record in MongoDB.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from cardwallet.config import Settings, get_settings
from cardwallet.services.exceptions import RemoteServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityAccount:
    id: str
    email: str
    verification_sent: bool = False  # the service already mailed the confirmation link


@dataclass(frozen=True)
class IdentitySession:
    account_id: str
    email: str
    access_token: str
    refresh_token: Optional[str] = None


class IdentityService(Protocol):
    async def create_account(self, email: str, password: str) -> IdentityAccount:
        ...

    async def send_verification(self, account: IdentityAccount) -> None:
        ...

    async def sign_in(self, email: str, password: str) -> IdentitySession:
        ...


def _error_message(response: httpx.Response) -> str:
    """GoTrue reports errors under different keys depending on the endpoint and version."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        for key in ("msg", "error_description", "message", "error"):
            value = payload.get(key)
            if value:
                return str(value)
    return f"HTTP {response.status_code}"


class SupabaseIdentityService:
    """
    IdentityService backed by Supabase Auth.
    Owns an httpx.AsyncClient; call aclose() on shutdown.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        settings = settings or get_settings()
        headers = {"apikey": settings.supabase_anon_key or ""}
        self._client = client or httpx.AsyncClient(
            base_url=f"{settings.supabase_url.rstrip('/')}/auth/v1",
            headers=headers,
            timeout=settings.identity_timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, payload: dict, params: Optional[dict] = None) -> Any:
        try:
            response = await self._client.post(path, json=payload, params=params)
        except httpx.TimeoutException as e:
            raise RemoteServiceError(f"Identity service timed out: {e}", transient=True) from e
        except httpx.TransportError as e:
            raise RemoteServiceError(f"Identity service unreachable: {e}", transient=True) from e

        if response.is_success:
            return response.json() if response.content else {}
        message = _error_message(response)
        transient = response.status_code == 429 or response.status_code >= 500
        logger.debug("Supabase %s -> %d: %s", path, response.status_code, message)
        raise RemoteServiceError(message, transient=transient, status_code=response.status_code)

    async def create_account(self, email: str, password: str) -> IdentityAccount:
        payload = await self._post("/signup", {"email": email, "password": password})
        # With e-mail confirmation on, signup returns the user object itself;
        # with autoconfirm it returns {"user": ..., "session": ...}.
        user = payload.get("user") or payload
        account_id = user.get("id")
        if not account_id:
            raise RemoteServiceError("Identity service returned no account id")
        return IdentityAccount(
            id=str(account_id),
            email=user.get("email") or email,
            verification_sent=bool(user.get("confirmation_sent_at")),
        )

    async def send_verification(self, account: IdentityAccount) -> None:
        """
        Signup itself mails the confirmation link when confirmation is enabled;
        resend only when it did not. Supabase allows one such mail per address
        per interval, so a rate-limited resend means a mail is already on its way.
        """
        if account.verification_sent:
            logger.debug("Confirmation mail already sent to %s at signup", account.email)
            return
        try:
            await self._post("/resend", {"type": "signup", "email": account.email})
        except RemoteServiceError as e:
            if e.status_code != 429:
                raise
            logger.info("Confirmation mail for %s is rate limited; one was sent recently", account.email)

    async def sign_in(self, email: str, password: str) -> IdentitySession:
        payload = await self._post(
            "/token",
            {"email": email, "password": password},
            params={"grant_type": "password"},
        )
        user = payload.get("user") or {}
        access_token = payload.get("access_token")
        if not access_token or not user.get("id"):
            raise RemoteServiceError("Identity service returned an incomplete session")
        return IdentitySession(
            account_id=str(user["id"]),
            email=user.get("email") or email,
            access_token=access_token,
            refresh_token=payload.get("refresh_token"),
        )
