from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PlanType(str, Enum):
    MERCHANT_INITIATED_BILLING = "MERCHANT_INITIATED_BILLING"
    MERCHANT_INITIATED_BILLING_SINGLE_AGREEMENT = "MERCHANT_INITIATED_BILLING_SINGLE_AGREEMENT"


class PaymentSourceType(str, Enum):
    BILLING_AGREEMENT = "BILLING_AGREEMENT"


class OrderIntent(str, Enum):
    CAPTURE = "CAPTURE"
    AUTHORIZE = "AUTHORIZE"


class OrderStatus(str, Enum):
    CREATED = "CREATED"
    SAVED = "SAVED"
    APPROVED = "APPROVED"
    VOIDED = "VOIDED"
    COMPLETED = "COMPLETED"
    PAYER_ACTION_REQUIRED = "PAYER_ACTION_REQUIRED"


# ---------------------------------------------------------------------------
# Shared data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RedirectUrls:
    return_url: str
    cancel_url: str


@dataclass(frozen=True)
class ChargeRequest:
    agreement_id: str
    amount: str = "10.00"
    currency: str = "USD"


# ---------------------------------------------------------------------------
# Abstract interface
# ---------------------------------------------------------------------------

class BillingAgreementGateway(ABC):
    """Every billing agreement provider client must implement this interface.

    Methods return the provider's JSON body as a dict and raise
    PayPalIntegrationError subclasses on failure.
    """

    @property
    @abstractmethod
    def mode(self) -> str:
        """Return "real" or "mock"."""

    # -- Consent --

    @abstractmethod
    async def create_agreement_token(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create an agreement token the payer must approve."""

    @abstractmethod
    async def create_agreement(self, token_id: str) -> Dict[str, Any]:
        """Turn an approved agreement token into a billing agreement."""

    # -- Charging --

    @abstractmethod
    async def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create an order paid from a billing agreement."""

    @abstractmethod
    async def capture_order(self, order_id: str) -> Dict[str, Any]:
        """Capture a previously created order."""
