"""
Billing agreement contract: payload builders and request helpers.

These shapes are shared by the real HTTP client and the mock client so both
see identical provider payloads.
"""

from typing import Any, Dict, Iterable, Optional

from src.integrations.errors import MissingFieldError
from .interfaces import (
    ChargeRequest,
    OrderIntent,
    PaymentSourceType,
    PlanType,
    RedirectUrls,
)

AGREEMENT_DESCRIPTION = "Consent for future charges (BA)"
APPROVAL_REL = "approval_url"


# ---------------------------------------------------------------------------
# Redirect URLs
# ---------------------------------------------------------------------------

def forwarded_scheme(forwarded_proto: Optional[str], fallback: str) -> str:
    """Prefer the first X-Forwarded-Proto value over the request's own scheme."""
    if forwarded_proto:
        first = forwarded_proto.split(",")[0].strip()
        if first:
            return first
    return fallback or "https"


def resolve_redirect_urls(
    scheme: str,
    host: str,
    return_url: Optional[str] = None,
    cancel_url: Optional[str] = None,
    landing_page: str = "ba.html",
) -> RedirectUrls:
    base_url = f"{scheme}://{host}"
    return RedirectUrls(
        return_url=return_url or f"{base_url}/{landing_page}?approved=1",
        cancel_url=cancel_url or f"{base_url}/{landing_page}?canceled=1",
    )


# ---------------------------------------------------------------------------
# Provider payloads
# ---------------------------------------------------------------------------

def build_agreement_token_payload(
    urls: RedirectUrls,
    plan_type: PlanType = PlanType.MERCHANT_INITIATED_BILLING,
    description: str = AGREEMENT_DESCRIPTION,
) -> Dict[str, Any]:
    # shipping_address is left out on purpose; the provider rejects partial ones
    return {
        "description": description,
        "payer": {"payment_method": "PAYPAL"},
        "plan": {
            "type": plan_type.value,
            "merchant_preferences": {
                "return_url": urls.return_url,
                "cancel_url": urls.cancel_url,
            },
        },
    }


def build_order_payload(request: ChargeRequest) -> Dict[str, Any]:
    return {
        "intent": OrderIntent.CAPTURE.value,
        "payment_source": {
            "token": {
                "id": request.agreement_id,
                "type": PaymentSourceType.BILLING_AGREEMENT.value,
            },
        },
        "purchase_units": [
            {"amount": {"currency_code": request.currency, "value": request.amount}},
        ],
    }


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

def find_approval_url(links: Optional[Iterable[Dict[str, Any]]]) -> Optional[str]:
    """Return the href of the first approval_url link, or None."""
    for link in links or []:
        if isinstance(link, dict) and link.get("rel") == APPROVAL_REL:
            return link.get("href")
    return None


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def require_field(value: Optional[str], field: str) -> str:
    """Return the stripped value or raise MissingFieldError."""
    if value is None or not str(value).strip():
        raise MissingFieldError(field)
    return str(value).strip()
