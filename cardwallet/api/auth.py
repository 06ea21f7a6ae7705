"""
Authentication: Supabase JWT validation and the current account dependency.

Sign-up and sign-in go through the identity service; afterwards clients send
the Supabase access token as a bearer token. Its "sub" claim is the account
id that keys the user's record.

Supabase signs JWTs either with RS256/ES256 (verified against the project's
JWKS) or with the legacy HS256 shared secret (SUPABASE_JWT_SECRET).
"""

import asyncio
import logging
from functools import lru_cache
from typing import Annotated, Any

import jwt
from jwt import PyJWKClient
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cardwallet.config import get_settings

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=True)

ASYMMETRIC_ALGORITHMS = ("RS256", "ES256")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _get_jwks_url() -> str:
    base = (get_settings().supabase_url or "").rstrip("/")
    if not base or "your-project" in base:
        raise ValueError("Set SUPABASE_URL in .env to your project URL (e.g. https://xxx.supabase.co)")
    return f"{base}/auth/v1/.well-known/jwks.json"


@lru_cache
def _jwks_client(jwks_url: str) -> PyJWKClient:
    """One client per JWKS URL; PyJWKClient caches the fetched keys."""
    return PyJWKClient(jwks_url)


def _signing_key(token: str, alg: str) -> Any:
    if alg in ASYMMETRIC_ALGORITHMS:
        try:
            jwks_url = _get_jwks_url()
        except ValueError as e:
            logger.warning("JWKS URL misconfigured: %s", e)
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
        return _jwks_client(jwks_url).get_signing_key_from_jwt(token).key
    if alg == "HS256":
        secret = get_settings().supabase_jwt_secret
        if not secret:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication not configured (SUPABASE_JWT_SECRET required for HS256).",
            )
        return secret
    raise _unauthorized(f"Unsupported token algorithm: {alg}")


def verify_token(token: str) -> dict[str, Any]:
    """Validate a Supabase access token and return its claims."""
    try:
        alg = jwt.get_unverified_header(token).get("alg")
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid JWT header: %s", e)
        raise _unauthorized("Invalid token format")
    if not alg:
        raise _unauthorized("Token missing algorithm")

    try:
        return jwt.decode(
            token,
            _signing_key(token, alg),
            algorithms=[alg],
            options={"verify_aud": False},
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.PyJWTError as e:
        # Covers invalid signatures/claims and JWKS fetch errors
        logger.warning("JWT verification failed (%s): %s", alg, e)
        raise _unauthorized("Invalid token")


async def get_current_account_id(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> str:
    """Dependency: the identity account id of the bearer token."""
    # A JWKS fetch is blocking HTTP; keep it off the event loop
    claims = await asyncio.to_thread(verify_token, credentials.credentials)
    account_id = claims.get("sub")
    if not account_id:
        raise _unauthorized("Token missing subject")
    return str(account_id)


def ensure_owner(user_id: str, account_id: str) -> None:
    """Other accounts' records are reported as missing, not forbidden."""
    if user_id != account_id:
        logger.info("Account %s tried to access records of %s", account_id, user_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
