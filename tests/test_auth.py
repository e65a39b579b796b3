import asyncio
import base64
import json
import time

import pytest

from syncdesk import auth, config


def test_anonymous_without_session_config(client):
    response = client.get("/api/auth/user", headers={"Authorization": "Bearer whatever"})
    assert response.status_code == 200
    assert response.json() == {"user": None}


def test_auth_required_rejects_anonymous_requests(client, monkeypatch):
    monkeypatch.setattr(config, "AUTH_REQUIRED", True)

    response = client.get("/api/songs")

    assert response.status_code == 401
    assert response.json() == auth.UNAUTHORIZED_DETAIL
    # Status endpoint stays reachable
    assert client.get("/api/auth/user").status_code == 200


def test_verified_session_identifies_user(client, monkeypatch):
    seen = []

    async def fake_verify(token):
        seen.append(token)
        return {"sub": "user_123", "email": "ava@example.com"}

    monkeypatch.setattr(config, "CLERK_JWKS_URL", "https://clerk.example/.well-known/jwks.json")
    monkeypatch.setattr(config, "AUTH_REQUIRED", True)
    monkeypatch.setattr(auth, "verify_session_token", fake_verify)

    response = client.get("/api/auth/user", headers={"Authorization": "Bearer tok"})
    assert response.json() == {"user": {"id": "user_123", "email": "ava@example.com"}}

    client.cookies.set(auth.SESSION_COOKIE_NAME, "cookie-tok")
    assert client.get("/api/songs").status_code == 200
    assert seen == ["tok", "cookie-tok"]


def test_invalid_session_is_anonymous(client, monkeypatch):
    async def reject(token):
        raise auth.InvalidSessionError("expired")

    monkeypatch.setattr(config, "CLERK_JWKS_URL", "https://clerk.example/.well-known/jwks.json")
    monkeypatch.setattr(auth, "verify_session_token", reject)

    response = client.get("/api/auth/user", headers={"Authorization": "Bearer stale"})
    assert response.json() == {"user": None}


def test_find_key_matches_kid():
    jwks = {"keys": [{"kid": "a", "n": "1"}, {"kid": "b", "n": "2"}]}
    assert auth._find_key(jwks, "b") == {"kid": "b", "n": "2"}
    assert auth._find_key(jwks, "c") is None
    assert auth._find_key(None, "a") is None


@pytest.fixture
def jwks_fetches(monkeypatch):
    fetched = []

    async def fake_fetch():
        fetched.append(len(fetched) + 1)
        return {"keys": [{"kid": f"key-{len(fetched)}"}]}

    monkeypatch.setattr(auth, "_fetch_jwks", fake_fetch)
    monkeypatch.setattr(auth, "_cached_jwks", None)
    monkeypatch.setattr(auth, "_last_forced_refresh", None)
    return fetched


def test_forced_key_refresh_is_throttled(jwks_fetches):
    assert asyncio.run(auth.get_clerk_jwks())["keys"][0]["kid"] == "key-1"
    assert asyncio.run(auth.get_clerk_jwks(force_refresh=True))["keys"][0]["kid"] == "key-2"

    for _ in range(5):
        asyncio.run(auth.get_clerk_jwks(force_refresh=True))
    assert jwks_fetches == [1, 2]

    auth._last_forced_refresh = time.monotonic() - auth.JWKS_REFRESH_INTERVAL_SECONDS - 1
    assert asyncio.run(auth.get_clerk_jwks(force_refresh=True))["keys"][0]["kid"] == "key-3"


def test_unknown_key_ids_do_not_refetch_every_time(jwks_fetches):
    header = base64.urlsafe_b64encode(json.dumps({"alg": "RS256", "kid": "rotated"}).encode()).rstrip(b"=")
    token = f"{header.decode()}.e30.c2ln"

    for _ in range(3):
        with pytest.raises(auth.InvalidSessionError):
            asyncio.run(auth.verify_session_token(token))

    assert jwks_fetches == [1, 2]
