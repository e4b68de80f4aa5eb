"""
PayPal OAuth token provider (client-credentials grant).

Tokens are cached in memory and shared by all requests in the process. A
single asyncio.Lock guards refresh so concurrent callers holding a stale token
trigger exactly one round trip; reads of a fresh token never take the lock.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from src.integrations.errors import OAuthFailure
from src.utils.config_loader import PayPalConfig

logger = logging.getLogger(__name__)

TOKEN_PATH = "/v1/oauth2/token"


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_at: float  # clock() reading after which the token must not be reused

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


def basic_auth_header(client_id: str, client_secret: str) -> str:
    creds = f"{client_id}:{client_secret}".encode("utf-8")
    return f"Basic {base64.b64encode(creds).decode('ascii')}"


class PayPalTokenProvider:
    def __init__(
        self,
        config: PayPalConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.base_url = config.api_base.rstrip("/")
        self._transport = transport
        self._clock = clock
        self._token: Optional[AccessToken] = None
        self._lock = asyncio.Lock()

    async def get_access_token(self) -> str:
        """Return a bearer token, fetching a new one only when the cached one is stale."""
        token = self._token
        if token is not None and token.is_fresh(self._clock()):
            return token.value

        async with self._lock:
            # another waiter may have refreshed while we queued
            token = self._token
            if token is not None and token.is_fresh(self._clock()):
                return token.value
            token = await self._fetch_token()
            self._token = token
            return token.value

    def invalidate(self) -> None:
        """Drop the cached token; the next call fetches a fresh one."""
        if self._token is not None:
            logger.info("Invalidating cached PayPal access token")
        self._token = None

    async def _fetch_token(self) -> AccessToken:
        headers = {
            "Authorization": basic_auth_header(self.config.client_id, self.config.client_secret),
            "Content-Type": "application/x-www-form-urlencoded",
        }
        url = f"{self.base_url}{TOKEN_PATH}"
        logger.info("Requesting PayPal access token from %s", url)

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds, transport=self._transport) as client:
                response = await client.post(url, content="grant_type=client_credentials", headers=headers)
        except httpx.RequestError as e:
            logger.error("Request error connecting to PayPal token endpoint: %s", e)
            raise OAuthFailure(None, str(e)) from e

        text = response.text
        if not response.is_success:
            logger.error("PayPal token request failed: status=%s", response.status_code)
            raise OAuthFailure(response.status_code, text)

        try:
            data = response.json()
        except ValueError as e:
            raise OAuthFailure(response.status_code, text) from e

        value = data.get("access_token") if isinstance(data, dict) else None
        if not value:
            raise OAuthFailure(response.status_code, text)

        now = self._clock()
        try:
            expires_in = float(data.get("expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0.0
        # tokens without a usable lifetime are returned but never reused
        expires_at = now + max(expires_in - self.config.token_refresh_skew_seconds, 0.0)
        logger.info("Obtained PayPal access token (expires_in=%ss)", int(expires_in))
        return AccessToken(value=value, expires_at=expires_at)
