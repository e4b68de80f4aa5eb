"""
Integration error hierarchy.

Provider failures keep the upstream status code and raw body so the API layer
can surface them verbatim to the (internal) caller.
"""

from __future__ import annotations

from typing import Optional


class PayPalIntegrationError(Exception):
    """Base exception for all failed calls to the payment provider."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class OAuthFailure(PayPalIntegrationError):
    """The client-credentials token request did not succeed."""

    def __init__(self, status_code: Optional[int], body: str) -> None:
        detail = body if status_code is None else f"{status_code} {body}"
        super().__init__(f"OAuth failed: {detail}", status_code=status_code, body=body)


class RemoteCallFailure(PayPalIntegrationError):
    """An authenticated REST call returned a non-success status or never completed."""

    def __init__(self, method: str, path: str, status_code: Optional[int], body: str) -> None:
        status = "" if status_code is None else f" {status_code}"
        super().__init__(
            f"PayPal {method} {path}{status}: {body}",
            status_code=status_code,
            body=body,
        )
        self.method = method
        self.path = path


class MissingFieldError(ValueError):
    """A required request field was absent or empty."""

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} required")
        self.field = field
