"""Error handling helpers for the billing agreement API."""
from typing import Any, Dict, Optional
import logging

from src.integrations.errors import MissingFieldError, PayPalIntegrationError
from src.integrations.policy.response_wrappers import IntegrationResponseError

logger = logging.getLogger(__name__)


class ErrorHandler:
    def status_for(self, exc: Exception) -> int:
        if isinstance(exc, MissingFieldError):
            return 400
        return 500

    def handle_exception(self, exc: Exception, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Log the failure and build the {"error": ...} response body."""
        context = context or {}
        if isinstance(exc, MissingFieldError):
            logger.info("Rejected request: %s (context=%s)", exc, context)
        elif isinstance(exc, (PayPalIntegrationError, IntegrationResponseError)):
            logger.warning("Provider call failed: %s (context=%s)", exc, context)
        else:
            logger.error("Unhandled exception in billing agreement API: %s", exc, exc_info=True)
        return {"error": str(exc)}


error_handler = ErrorHandler()
