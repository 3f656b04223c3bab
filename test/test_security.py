import asyncio

import httpx
import pytest

from smarttrip.core.exceptions import AuthenticationError
from smarttrip.core.security import UserTokenVerifier, bearer_token


@pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer ", "Token abc"])
def test_bearer_token_rejects_bad_headers(header):
    with pytest.raises(AuthenticationError):
        bearer_token(header)


def test_bearer_token_extracts_token():
    assert bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"
    assert bearer_token("bearer xyz") == "xyz"


def verifier(handler, url="https://auth.test/auth/v1/user"):
    return UserTokenVerifier(url, api_key="anon-key", transport=httpx.MockTransport(handler))


def test_verify_returns_identity():
    def handler(request):
        assert request.headers["authorization"] == "Bearer tok"
        return httpx.Response(200, json={"id": "u-1", "email": "traveler@example.com"})

    identity = asyncio.run(verifier(handler).verify("tok"))

    assert identity.user_id == "u-1"
    assert identity.email == "traveler@example.com"


@pytest.mark.parametrize("response", [
    httpx.Response(401, json={"msg": "invalid JWT"}),
    httpx.Response(200, json={"email": "no-id@example.com"}),
    httpx.Response(200, text="not json"),
])
def test_verify_rejects_unresolved_tokens(response):
    with pytest.raises(AuthenticationError) as exc_info:
        asyncio.run(verifier(lambda request: response).verify("tok"))

    assert str(exc_info.value) == "Invalid or expired token"


def test_verify_without_provider_url():
    with pytest.raises(AuthenticationError):
        asyncio.run(verifier(lambda request: httpx.Response(200), url=None).verify("tok"))
