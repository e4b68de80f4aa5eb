"""
Contracts (data models).

This folder defines the request/response shapes for the provider integration:
- agreement token and order payloads sent to the provider
- the BillingAgreementGateway interface both clients implement
- redirect URL and approval link helpers

Both mock and real HTTP clients should use these contracts.
"""
