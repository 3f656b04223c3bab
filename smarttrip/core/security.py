"""
Caller identity lookup against the auth provider.

The service does not issue or validate tokens itself; it asks the provider's
user endpoint who the bearer token belongs to.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from smarttrip.core.exceptions import AuthenticationError

logger = logging.getLogger("smarttrip.auth")


@dataclass(frozen=True)
class CallerIdentity:
    user_id: str
    email: Optional[str] = None


def bearer_token(authorization: Optional[str]) -> str:
    """Extract the token from an `Authorization: Bearer ...` header value."""
    if not authorization:
        raise AuthenticationError("Authorization header required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authorization header must be a bearer token")
    return token.strip()


class UserTokenVerifier:
    def __init__(
        self,
        user_url: Optional[str],
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._user_url = user_url
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def verify(self, token: str) -> CallerIdentity:
        if not self._user_url:
            raise AuthenticationError("Authentication provider is not configured")

        headers = {"Authorization": f"Bearer {token}"}
        if self._api_key:
            headers["apikey"] = self._api_key

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self._user_url, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Auth provider request failed: %s", e)
            raise AuthenticationError("Invalid or expired token") from e

        if response.status_code != 200:
            raise AuthenticationError("Invalid or expired token")

        try:
            data = response.json()
        except ValueError as e:
            raise AuthenticationError("Invalid or expired token") from e

        user_id = data.get("id") if isinstance(data, dict) else None
        if not user_id:
            raise AuthenticationError("Invalid or expired token")
        return CallerIdentity(user_id=str(user_id), email=data.get("email"))
