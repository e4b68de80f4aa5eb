"""
Dependency wiring for the API.

Configuration and the gateway are built once per process. The choice between
mock and real provider clients happens here and nowhere else.
"""

import logging
from functools import lru_cache

from fastapi import Depends

from src.integrations.clients.mocks.paypal import PayPalMockClient
from src.integrations.clients.real_http.paypal_rest import PayPalRestClient
from src.integrations.contracts.interfaces import BillingAgreementGateway
from src.integrations.policy.billing_agreement_service import BillingAgreementService
from src.utils.config_loader import AppConfig, load_app_config

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_app_config() -> AppConfig:
    return load_app_config()


def select_gateway(config: AppConfig) -> BillingAgreementGateway:
    if config.integrations_mode == "mock":
        logger.info("Using mock PayPal gateway")
        return PayPalMockClient()
    return PayPalRestClient(config.paypal)


@lru_cache(maxsize=1)
def get_gateway() -> BillingAgreementGateway:
    # one instance per process so the token cache is shared across requests
    return select_gateway(get_app_config())


def get_billing_agreement_service(
    config: AppConfig = Depends(get_app_config),
    gateway: BillingAgreementGateway = Depends(get_gateway),
) -> BillingAgreementService:
    return BillingAgreementService(gateway, charge_defaults=config.charge_defaults)
