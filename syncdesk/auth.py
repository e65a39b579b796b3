import logging
import time
from typing import Any, Optional

import httpx
from fastapi import Depends, HTTPException, Request
from jose import JWTError
from jose import jwt as jose_jwt

from . import config

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "__session"

UNAUTHORIZED_DETAIL = {
    "success": False,
    "error": {"code": "UNAUTHORIZED", "message": "Authentication required"},
}

# Cache for the session provider's signing keys
_cached_jwks: Optional[dict] = None
_last_forced_refresh: Optional[float] = None

# Unknown key ids force at most one refetch per interval
JWKS_REFRESH_INTERVAL_SECONDS = 60


class InvalidSessionError(Exception):
    """The session token could not be verified."""


async def _fetch_jwks() -> Optional[dict]:
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.get(config.CLERK_JWKS_URL)
    except httpx.HTTPError as e:
        logger.error(f"❌ Error fetching session signing keys: {e}")
        return None

    if response.status_code != 200:
        logger.error(f"❌ Failed to fetch session signing keys: HTTP {response.status_code}")
        return None

    jwks = response.json()
    logger.info(f"✅ Fetched {len(jwks.get('keys', []))} session signing keys")
    return jwks


async def get_clerk_jwks(force_refresh: bool = False) -> Optional[dict]:
    """
    The JSON Web Key Set used to sign session tokens, cached per process.

    A forced refresh is honoured at most once per JWKS_REFRESH_INTERVAL_SECONDS;
    inside that window the cached set is returned.
    """
    global _cached_jwks, _last_forced_refresh
    if _cached_jwks and not force_refresh:
        return _cached_jwks

    if force_refresh and _cached_jwks:
        now = time.monotonic()
        if _last_forced_refresh is not None and now - _last_forced_refresh < JWKS_REFRESH_INTERVAL_SECONDS:
            logger.debug("Signing key refresh skipped, refreshed recently")
            return _cached_jwks
        _last_forced_refresh = now

    jwks = await _fetch_jwks()
    if jwks is not None:
        _cached_jwks = jwks
    return _cached_jwks


def _find_key(jwks: Optional[dict], kid: Optional[str]) -> Optional[dict]:
    for key in (jwks or {}).get("keys", []):
        if key.get("kid") == kid:
            return key
    return None


async def verify_session_token(token: str) -> dict[str, Any]:
    """
    Verify a session JWT's RS256 signature, expiry and (when configured) issuer.

    Returns the token claims.
    """
    try:
        header = jose_jwt.get_unverified_header(token)
    except JWTError as e:
        raise InvalidSessionError(f"Malformed token: {e}") from e

    kid = header.get("kid")
    key = _find_key(await get_clerk_jwks(), kid)
    if key is None:
        logger.warning(f"⚠️ Key ID {kid} not found in signing keys, refreshing")
        key = _find_key(await get_clerk_jwks(force_refresh=True), kid)
        if key is None:
            raise InvalidSessionError(f"Unknown signing key {kid}")

    try:
        return jose_jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            issuer=config.CLERK_ISSUER or None,
            options={"verify_aud": False},
        )
    except JWTError as e:
        raise InvalidSessionError(str(e)) from e


def extract_session_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, else the session cookie"""
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(SESSION_COOKIE_NAME)


async def get_optional_user(request: Request) -> Optional[dict]:
    """
    The signed-in user as ``{"id", "email"}``, or None.

    Without CLERK_JWKS_URL no session can be verified and every request is
    anonymous.
    """
    if not config.CLERK_JWKS_URL:
        request.state.user = None
        return None

    token = extract_session_token(request)
    if not token:
        request.state.user = None
        return None

    try:
        claims = await verify_session_token(token)
    except InvalidSessionError as e:
        logger.warning(f"⚠️ Rejected session token on {request.url.path}: {e}")
        request.state.user = None
        return None

    user = {"id": claims.get("sub"), "email": claims.get("email")}
    request.state.user = user
    logger.debug(f"✅ User authenticated: {user['id']}")
    return user


async def require_user(user: Optional[dict] = Depends(get_optional_user)) -> dict:
    if not user or not user.get("id"):
        raise HTTPException(status_code=401, detail=UNAUTHORIZED_DETAIL)
    return user


async def api_auth_gate(user: Optional[dict] = Depends(get_optional_user)) -> Optional[dict]:
    """Router-level guard: enforces a session only when AUTH_REQUIRED is on"""
    if config.AUTH_REQUIRED:
        return await require_user(user)
    return user
