"""
PayPal billing agreements: MOCK client.

⚠️  This is a mock implementation for development and testing.
    It keeps tokens, agreements and orders in memory and mimics the provider's
    response shapes closely enough for the service layer to normalise them.
    Failures are raised as RemoteCallFailure with 4xx statuses, like the real
    client would.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from src.integrations.clients.real_http.paypal_rest import (
    AGREEMENT_TOKENS_PATH,
    AGREEMENTS_PATH,
    ORDERS_PATH,
)
from src.integrations.contracts.interfaces import BillingAgreementGateway, OrderStatus
from src.integrations.errors import RemoteCallFailure

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error_body(name: str, message: str) -> str:
    return json.dumps({"name": name, "message": message, "debug_id": uuid.uuid4().hex[:13]})


class PayPalMockClient(BillingAgreementGateway):
    """
    Mock billing agreement gateway.

    Parameters
    ----------
    approval_base_url : str
        Base of the approval links handed back for new tokens.
    auto_approve : bool
        If True, every token counts as approved by the payer. If False,
        approve_token() must be called before create_agreement(). Default True.
    auto_complete_orders : bool
        If True, orders come back COMPLETED from creation, as the provider
        does for some billing agreement payment sources. Default False.
    """

    def __init__(
        self,
        approval_base_url: str = "https://www.sandbox.paypal.com/agreements/approve",
        auto_approve: bool = True,
        auto_complete_orders: bool = False,
    ):
        self._approval_base_url = approval_base_url
        self._auto_approve = auto_approve
        self._auto_complete_orders = auto_complete_orders

        # In-memory stores (reset on restart)
        self._tokens: Dict[str, Dict[str, Any]] = {}
        self._agreements: Dict[str, Dict[str, Any]] = {}
        self._orders: Dict[str, Dict[str, Any]] = {}

        logger.info("[PAYPAL MOCK] Client initialised (auto_approve=%s)", auto_approve)

    @property
    def mode(self) -> str:
        return "mock"

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    def approve_token(self, token_id: str) -> None:
        """Simulate the payer approving the token on the provider's page."""
        token = self._tokens.get(token_id)
        if token is None:
            raise KeyError(token_id)
        token["approved"] = True

    def get_order(self, order_id: str) -> Optional[Dict[str, Any]]:
        return self._orders.get(order_id)

    # ------------------------------------------------------------------
    # Consent
    # ------------------------------------------------------------------

    async def create_agreement_token(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        prefs = (payload.get("plan") or {}).get("merchant_preferences") or {}
        if not prefs.get("return_url") or not prefs.get("cancel_url"):
            raise RemoteCallFailure(
                "POST",
                AGREEMENT_TOKENS_PATH,
                400,
                _error_body("VALIDATION_ERROR", "return_url and cancel_url are required"),
            )

        token_id = f"BA-{uuid.uuid4().hex[:17].upper()}"
        self._tokens[token_id] = {"payload": payload, "approved": self._auto_approve}
        logger.info("[PAYPAL MOCK] Agreement token %s created", token_id)
        return {
            "token_id": token_id,
            "links": [
                {"href": f"{self._approval_base_url}?ba_token={token_id}", "rel": "approval_url", "method": "POST"},
                {"href": f"{AGREEMENT_TOKENS_PATH}/{token_id}", "rel": "self", "method": "GET"},
            ],
        }

    async def create_agreement(self, token_id: str) -> Dict[str, Any]:
        token = self._tokens.get(token_id)
        if token is None:
            raise RemoteCallFailure(
                "POST", AGREEMENTS_PATH, 404, _error_body("RESOURCE_NOT_FOUND", f"Token {token_id} not found")
            )
        if not token["approved"]:
            raise RemoteCallFailure(
                "POST",
                AGREEMENTS_PATH,
                422,
                _error_body("TOKEN_NOT_APPROVED", "The payer has not approved this agreement token"),
            )

        agreement_id = f"B-{uuid.uuid4().hex[:17].upper()}"
        agreement = {
            "id": agreement_id,
            "state": "ACTIVE",
            "description": token["payload"].get("description"),
            "create_time": _now(),
            "plan": token["payload"].get("plan"),
        }
        self._agreements[agreement_id] = agreement
        # a token is single use
        self._tokens.pop(token_id, None)
        logger.info("[PAYPAL MOCK] Billing agreement %s created from %s", agreement_id, token_id)
        return dict(agreement)

    # ------------------------------------------------------------------
    # Charging
    # ------------------------------------------------------------------

    async def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        source = (payload.get("payment_source") or {}).get("token") or {}
        agreement = self._agreements.get(source.get("id", ""))
        if agreement is None or agreement["state"] != "ACTIVE":
            raise RemoteCallFailure(
                "POST",
                ORDERS_PATH,
                422,
                _error_body("UNPROCESSABLE_ENTITY", "Billing agreement is not active or does not exist"),
            )

        order_id = uuid.uuid4().hex[:17].upper()
        order = {
            "id": order_id,
            "intent": payload.get("intent"),
            "status": OrderStatus.CREATED.value,
            "purchase_units": [dict(unit) for unit in payload.get("purchase_units") or []],
            "create_time": _now(),
        }
        self._orders[order_id] = order
        if self._auto_complete_orders:
            self._complete(order)
        logger.info("[PAYPAL MOCK] Order %s created (status=%s)", order_id, order["status"])
        return json.loads(json.dumps(order))

    async def capture_order(self, order_id: str) -> Dict[str, Any]:
        path = f"{ORDERS_PATH}/{order_id}/capture"
        order = self._orders.get(order_id)
        if order is None:
            raise RemoteCallFailure("POST", path, 404, _error_body("RESOURCE_NOT_FOUND", f"Order {order_id} not found"))
        if order["status"] == OrderStatus.COMPLETED.value:
            raise RemoteCallFailure(
                "POST", path, 422, _error_body("ORDER_ALREADY_CAPTURED", "Order already captured")
            )
        self._complete(order)
        logger.info("[PAYPAL MOCK] Order %s captured", order_id)
        return json.loads(json.dumps(order))

    def _complete(self, order: Dict[str, Any]) -> None:
        order["status"] = OrderStatus.COMPLETED.value
        for unit in order["purchase_units"]:
            unit["payments"] = {
                "captures": [
                    {
                        "id": uuid.uuid4().hex[:17].upper(),
                        "status": "COMPLETED",
                        "amount": unit.get("amount"),
                        "final_capture": True,
                        "create_time": _now(),
                    }
                ]
            }
