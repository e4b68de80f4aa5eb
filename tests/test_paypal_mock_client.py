import pytest

from src.integrations.clients.mocks.paypal import PayPalMockClient
from src.integrations.errors import RemoteCallFailure


def _token_payload(return_url="https://shop/ok", cancel_url="https://shop/no"):
    return {
        "description": "Consent for future charges (BA)",
        "payer": {"payment_method": "PAYPAL"},
        "plan": {
            "type": "MERCHANT_INITIATED_BILLING",
            "merchant_preferences": {"return_url": return_url, "cancel_url": cancel_url},
        },
    }


@pytest.mark.asyncio
async def test_token_carries_approval_link():
    client = PayPalMockClient(approval_base_url="https://mock/approve")

    out = await client.create_agreement_token(_token_payload())

    approval = [link for link in out["links"] if link["rel"] == "approval_url"]
    assert approval == [{"href": f"https://mock/approve?ba_token={out['token_id']}", "rel": "approval_url", "method": "POST"}]
    assert client.mode == "mock"


@pytest.mark.asyncio
async def test_token_without_redirect_urls_is_rejected():
    client = PayPalMockClient()

    with pytest.raises(RemoteCallFailure) as excinfo:
        await client.create_agreement_token(_token_payload(return_url=""))

    assert excinfo.value.status_code == 400
    assert "VALIDATION_ERROR" in excinfo.value.body


@pytest.mark.asyncio
async def test_capture_twice_is_rejected():
    client = PayPalMockClient()
    token = await client.create_agreement_token(_token_payload())
    agreement = await client.create_agreement(token["token_id"])
    order = await client.create_order(
        {
            "intent": "CAPTURE",
            "payment_source": {"token": {"id": agreement["id"], "type": "BILLING_AGREEMENT"}},
            "purchase_units": [{"amount": {"currency_code": "USD", "value": "10.00"}}],
        }
    )

    captured = await client.capture_order(order["id"])
    assert captured["status"] == "COMPLETED"
    assert captured["purchase_units"][0]["payments"]["captures"][0]["amount"] == {"currency_code": "USD", "value": "10.00"}

    with pytest.raises(RemoteCallFailure) as excinfo:
        await client.capture_order(order["id"])
    assert excinfo.value.status_code == 422


@pytest.mark.asyncio
async def test_capture_of_unknown_order_is_not_found():
    client = PayPalMockClient()

    with pytest.raises(RemoteCallFailure) as excinfo:
        await client.capture_order("NOPE")

    assert excinfo.value.status_code == 404
    assert excinfo.value.path == "/v2/checkout/orders/NOPE/capture"


def test_approve_unknown_token_raises_key_error():
    with pytest.raises(KeyError):
        PayPalMockClient().approve_token("BA-missing")
