"""
Integrations layer.
This package contains all code used to communicate with the payment provider:
- OAuth client-credentials token acquisition (cached per process)
- Billing agreement consent (agreement tokens, agreements)
- Merchant-initiated charges (orders and captures)

Key rule:
- API endpoints MUST NOT call the provider directly.
- Endpoints call BillingAgreementService, which talks to a BillingAgreementGateway.
- We use the MOCK gateway during development and the REAL_HTTP client against the sandbox or live API.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (src/api/dependencies.py).
"""

from .contracts.interfaces import (
    BillingAgreementGateway,
    ChargeRequest,
    OrderIntent,
    OrderStatus,
    PaymentSourceType,
    PlanType,
    RedirectUrls,
)
from .errors import (
    MissingFieldError,
    OAuthFailure,
    PayPalIntegrationError,
    RemoteCallFailure,
)

__all__ = [
    # interfaces
    "BillingAgreementGateway", "ChargeRequest", "OrderIntent", "OrderStatus",
    "PaymentSourceType", "PlanType", "RedirectUrls",
    # errors
    "MissingFieldError", "OAuthFailure", "PayPalIntegrationError", "RemoteCallFailure",
]
