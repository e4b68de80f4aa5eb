"""
Mock integration clients.

These clients return fake (but realistic) responses without calling PayPal.
They are used when:
- sandbox credentials are not available
- we want to walk the consent and charge flow end-to-end without a browser approval

Important:
- Mock clients must follow the SAME interface as real HTTP clients (BillingAgreementGateway).
- Mock clients should return data shaped like the provider's responses.

Switching to real:
Set INTEGRATIONS_MODE=real (the default) and provide PAYPAL_CLIENT_ID / PAYPAL_CLIENT_SECRET.
"""
