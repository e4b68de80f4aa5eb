"""
Real HTTP integration clients.

These clients communicate with PayPal's REST API via httpx:
- paypal_oauth: client-credentials token provider with an in-process cache
- paypal_rest: authenticated JSON calls and the billing agreement gateway operations

Important:
- Must implement the same interface as the mock clients
- Failures raise OAuthFailure / RemoteCallFailure carrying the upstream status and body

Switching:
The selection of mock vs real clients happens in src/api/dependencies.py only.
"""
