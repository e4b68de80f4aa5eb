"""
Billing agreement service.

Orchestrates the three-step consent flow against a BillingAgreementGateway:
- step A: create an agreement token and return the payer approval URL
- step B: exchange an approved token for a billing agreement
- step C: charge an agreement (create order, then capture it)

Nothing is persisted; the caller keeps the token and agreement ids.
"""

import logging
from typing import Optional

from src.integrations.contracts.billing_agreements import (
    build_agreement_token_payload,
    build_order_payload,
    require_field,
)
from src.integrations.contracts.interfaces import (
    BillingAgreementGateway,
    ChargeRequest,
    OrderStatus,
    RedirectUrls,
)
from src.integrations.policy.response_wrappers import (
    AgreementTokenResponseModel,
    BillingAgreementResponseModel,
    CaptureResponseModel,
    ChargeResponseModel,
    normalize_agreement_response,
    normalize_agreement_token_response,
    normalize_capture_response,
    normalize_order_response,
)
from src.utils.config_loader import ChargeDefaults

logger = logging.getLogger(__name__)


class BillingAgreementService:
    def __init__(self, gateway: BillingAgreementGateway, charge_defaults: Optional[ChargeDefaults] = None):
        self.gateway = gateway
        self.charge_defaults = charge_defaults or ChargeDefaults()

    async def create_agreement_token(self, urls: RedirectUrls) -> AgreementTokenResponseModel:
        payload = build_agreement_token_payload(urls)
        logger.info("Creating agreement token (return_url=%s)", urls.return_url)
        raw = await self.gateway.create_agreement_token(payload)
        token = normalize_agreement_token_response(raw)
        if token.id is None:
            logger.warning("Agreement token response carries no token id: %s", raw)
        if token.approve_url is None:
            logger.warning("Agreement token %s has no approval_url link", token.id)
        return token

    async def create_agreement(self, token_id: Optional[str]) -> BillingAgreementResponseModel:
        token_id = require_field(token_id, "token_id")
        logger.info("Creating billing agreement from token %s", token_id)
        raw = await self.gateway.create_agreement(token_id)
        agreement = normalize_agreement_response(raw)
        if agreement.agreement_id is None:
            logger.warning("Billing agreement response for token %s carries no id: %s", token_id, raw)
        return agreement

    def build_charge_request(
        self,
        agreement_id: Optional[str],
        amount: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> ChargeRequest:
        return ChargeRequest(
            agreement_id=require_field(agreement_id, "agreement_id"),
            amount=amount or self.charge_defaults.amount,
            currency=(currency or self.charge_defaults.currency).upper(),
        )

    async def charge(self, request: ChargeRequest) -> ChargeResponseModel:
        """
        Create an order against the agreement and capture it.

        An order the provider already completed on creation is not captured
        a second time.
        """
        logger.info(
            "Charging agreement %s: %s %s",
            request.agreement_id,
            request.amount,
            request.currency,
        )
        order = normalize_order_response(await self.gateway.create_order(build_order_payload(request)))

        if order.status == OrderStatus.COMPLETED.value:
            logger.info("Order %s completed on creation; skipping capture", order.order_id)
            capture: CaptureResponseModel = normalize_capture_response(order.raw)
        else:
            capture = normalize_capture_response(await self.gateway.capture_order(order.order_id))

        logger.info("Order %s captured (capture_id=%s, status=%s)", order.order_id, capture.id, capture.status)
        return ChargeResponseModel(order_id=order.order_id, capture=capture)
