from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from src.integrations.contracts.billing_agreements import find_approval_url


class IntegrationResponseError(ValueError):
    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.payload = payload or {}


class AgreementTokenResponseModel(BaseModel):
    id: Optional[str] = None
    approve_url: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class BillingAgreementResponseModel(BaseModel):
    agreement_id: Optional[str] = None
    state: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class OrderResponseModel(BaseModel):
    order_id: str
    status: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class CaptureResponseModel(BaseModel):
    id: Optional[str] = None
    status: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class ChargeResponseModel(BaseModel):
    order_id: str
    capture: CaptureResponseModel


def normalize_agreement_token_response(raw: Dict[str, Any]) -> AgreementTokenResponseModel:
    # None when the provider omits it; raw is always returned
    token_id = _first_non_empty(raw, "token_id", "id", required=False)
    links = raw.get("links") if isinstance(raw.get("links"), list) else []

    return _build_model(
        AgreementTokenResponseModel,
        {
            "id": str(token_id) if token_id is not None else None,
            "approve_url": find_approval_url(links),
            "raw": raw,
        },
        raw,
    )


def normalize_agreement_response(raw: Dict[str, Any]) -> BillingAgreementResponseModel:
    # agreement ids look like B-... or I-...
    agreement_id = _first_non_empty(raw, "id", "agreement_id", required=False)
    state = raw.get("state") or raw.get("status")

    return _build_model(
        BillingAgreementResponseModel,
        {
            "agreement_id": str(agreement_id) if agreement_id is not None else None,
            "state": str(state) if state is not None else None,
            "raw": raw,
        },
        raw,
    )


def normalize_order_response(raw: Dict[str, Any]) -> OrderResponseModel:
    order_id = _first_non_empty(raw, "id", "order_id")
    status = raw.get("status")

    return _build_model(
        OrderResponseModel,
        {
            "order_id": str(order_id),
            "status": str(status).upper() if status else None,
            "raw": raw,
        },
        raw,
    )


def normalize_capture_response(raw: Dict[str, Any]) -> CaptureResponseModel:
    """
    Extract the settled capture from an order (capture or create) response.

    Falls back to the order status when the response carries no capture entry.
    """
    captures = _captures(raw)
    first = captures[0] if captures else {}
    capture_id = first.get("id")
    status = first.get("status") or raw.get("status")

    return _build_model(
        CaptureResponseModel,
        {
            "id": str(capture_id) if capture_id else None,
            "status": str(status).upper() if status else None,
            "raw": raw,
        },
        raw,
    )


def _captures(raw: Dict[str, Any]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for unit in raw.get("purchase_units") or []:
        if not isinstance(unit, dict):
            continue
        payments = unit.get("payments") or {}
        for capture in payments.get("captures") or []:
            if isinstance(capture, dict):
                out.append(capture)
    return out


def _first_non_empty(data: Dict[str, Any], *keys: str, default: Any = None, required: bool = True) -> Any:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    if default is not None or not required:
        return default
    raise IntegrationResponseError(f"Missing required field. Checked keys: {', '.join(keys)}", payload=data)


def _build_model(model_type, payload: Dict[str, Any], raw: Dict[str, Any]):
    try:
        return model_type(**payload)
    except ValidationError as exc:
        raise IntegrationResponseError(f"Response validation failed: {exc}", payload=raw) from exc
