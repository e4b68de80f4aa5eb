"""
Real PayPal REST client.

Used when integrations_mode is "real". Every call carries a bearer token from
PayPalTokenProvider and is attempted exactly once.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from src.integrations.clients.real_http.paypal_oauth import PayPalTokenProvider
from src.integrations.contracts.interfaces import BillingAgreementGateway
from src.integrations.errors import RemoteCallFailure
from src.utils.config_loader import PayPalConfig

logger = logging.getLogger(__name__)

AGREEMENT_TOKENS_PATH = "/v1/billing-agreements/agreement-tokens"
AGREEMENTS_PATH = "/v1/billing-agreements/agreements"
ORDERS_PATH = "/v2/checkout/orders"


class PayPalRestClient(BillingAgreementGateway):
    def __init__(
        self,
        config: PayPalConfig,
        token_provider: Optional[PayPalTokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.base_url = config.api_base.rstrip("/")
        self.timeout_seconds = config.timeout_seconds
        self._transport = transport
        self.token_provider = token_provider or PayPalTokenProvider(config, transport=transport)

    @property
    def mode(self) -> str:
        return "real"

    async def request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Perform one authenticated JSON call and return the decoded body.

        An empty response body decodes to {}.
        """
        token = await self.token_provider.get_access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        url = f"{self.base_url}{path}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.request(method, url, json=body, headers=headers)
        except httpx.RequestError as e:
            logger.error("Request error calling PayPal %s %s: %s", method, path, e)
            raise RemoteCallFailure(method, path, None, str(e)) from e

        logger.info("PayPal %s %s -> %s", method, path, response.status_code)
        text = response.text
        if not response.is_success:
            if response.status_code == 401:
                self.token_provider.invalidate()
            raise RemoteCallFailure(method, path, response.status_code, text)

        if not text.strip():
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteCallFailure(method, path, response.status_code, text) from e

    # ------------------------------------------------------------------
    # Gateway operations
    # ------------------------------------------------------------------

    async def create_agreement_token(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("POST", AGREEMENT_TOKENS_PATH, payload)

    async def create_agreement(self, token_id: str) -> Dict[str, Any]:
        return await self.request("POST", AGREEMENTS_PATH, {"token_id": token_id})

    async def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("POST", ORDERS_PATH, payload)

    async def capture_order(self, order_id: str) -> Dict[str, Any]:
        # the capture endpoint accepts an empty body
        return await self.request("POST", f"{ORDERS_PATH}/{order_id}/capture")
