import json
from decimal import Decimal
from typing import Any, Dict, Optional, Type, TypeVar

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field, ValidationError, field_validator

from src.api.dependencies import get_app_config, get_billing_agreement_service
from src.integrations.contracts.billing_agreements import forwarded_scheme, resolve_redirect_urls
from src.integrations.policy.billing_agreement_service import BillingAgreementService
from src.utils.config_loader import AppConfig

api = APIRouter()
billing_agreements_api = api

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

BodyModel = TypeVar("BodyModel", bound=BaseModel)


class CreateTokenRequest(BaseModel):
    returnUrl: Optional[str] = Field(default=None, description="Where the payer lands after approving")
    cancelUrl: Optional[str] = Field(default=None, description="Where the payer lands after cancelling")


class CreateAgreementRequest(BaseModel):
    token_id: Optional[str] = Field(default=None, description="Agreement token approved by the payer")


class ChargeAgreementRequest(BaseModel):
    agreement_id: Optional[str] = Field(default=None, description="Billing agreement id (B-... or I-...)")
    amount: Optional[str] = Field(default=None, description="Decimal string, defaults to 10.00")
    currency: Optional[str] = Field(default=None, description="ISO 4217 code, defaults to USD")

    @field_validator("amount", mode="before")
    @classmethod
    def _stringify_amount(cls, value: Any) -> Any:
        # plain decimal notation; str(0.00001) would give "1e-05"
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return format(Decimal(str(value)), "f")
        return value


async def _parse_body(request: Request, model_type: Type[BodyModel]) -> BodyModel:
    """
    Read a JSON or form-encoded request body into model_type.

    An empty body yields the model's defaults.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type in _FORM_CONTENT_TYPES:
        form = await request.form()
        data: Any = {key: value for key, value in form.items() if isinstance(value, str)}
    else:
        raw = await request.body()
        if not raw.strip():
            data = {}
        else:
            try:
                data = json.loads(raw)
            except ValueError as exc:
                raise RequestValidationError(
                    [
                        {
                            "type": "json_invalid",
                            "loc": ("body",),
                            "msg": "JSON decode error",
                            "input": raw.decode("utf-8", "replace"),
                            "ctx": {"error": str(exc)},
                        }
                    ]
                ) from exc
            if data is None:
                data = {}

    if not isinstance(data, dict):
        raise RequestValidationError(
            [{"type": "model_attributes_type", "loc": ("body",), "msg": "Input should be an object", "input": data}]
        )
    try:
        return model_type.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc


async def create_token_body(request: Request) -> CreateTokenRequest:
    return await _parse_body(request, CreateTokenRequest)


async def create_agreement_body(request: Request) -> CreateAgreementRequest:
    return await _parse_body(request, CreateAgreementRequest)


async def charge_body(request: Request) -> ChargeAgreementRequest:
    return await _parse_body(request, ChargeAgreementRequest)


@api.post("/ba/create-token", tags=["Billing Agreements"])
async def create_token(
    request: Request,
    body: CreateTokenRequest = Depends(create_token_body),
    config: AppConfig = Depends(get_app_config),
    service: BillingAgreementService = Depends(get_billing_agreement_service),
) -> Dict[str, Any]:
    """Step A: create an agreement token and return the payer approval URL."""
    scheme = forwarded_scheme(request.headers.get("x-forwarded-proto"), request.url.scheme)
    host = request.headers.get("host") or request.url.netloc
    urls = resolve_redirect_urls(
        scheme,
        host,
        return_url=body.returnUrl,
        cancel_url=body.cancelUrl,
        landing_page=config.server.landing_page,
    )
    token = await service.create_agreement_token(urls)
    return token.model_dump()


@api.post("/ba/create-agreement", tags=["Billing Agreements"])
async def create_agreement(
    body: CreateAgreementRequest = Depends(create_agreement_body),
    service: BillingAgreementService = Depends(get_billing_agreement_service),
) -> Dict[str, Any]:
    """Step B: exchange an approved token for a billing agreement."""
    agreement = await service.create_agreement(body.token_id)
    return agreement.model_dump()


@api.post("/ba/charge", tags=["Billing Agreements"])
async def charge_agreement(
    body: ChargeAgreementRequest = Depends(charge_body),
    service: BillingAgreementService = Depends(get_billing_agreement_service),
) -> Dict[str, Any]:
    """Step C: charge a billing agreement (create order, then capture)."""
    charge_request = service.build_charge_request(body.agreement_id, body.amount, body.currency)
    result = await service.charge(charge_request)
    return result.model_dump()


@api.get("/config", tags=["Config"])
async def client_config(config: AppConfig = Depends(get_app_config)) -> Dict[str, Any]:
    return {"clientId": config.paypal.client_id, "base": config.paypal.api_base}
