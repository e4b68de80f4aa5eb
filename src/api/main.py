"""
FastAPI application - Main entry point

Run with:
  uvicorn src.api.main:app --host 0.0.0.0 --port 5174
or:
  python -m src.api.main
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from datetime import datetime
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from src.api.dependencies import get_app_config, get_gateway
from src.api.endpoints.billing_agreements import billing_agreements_api
from src.error_handler import error_handler
from src.integrations.contracts.interfaces import BillingAgreementGateway
from src.integrations.errors import MissingFieldError, PayPalIntegrationError
from src.integrations.policy.response_wrappers import IntegrationResponseError

config = get_app_config()

# Setup logging
logging.basicConfig(
    level=getattr(logging, config.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Billing Agreement Broker API",
    description="Brokers PayPal billing agreement consent and merchant-initiated charges",
    version="1.0.0",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register billing agreement + config API router
app.include_router(billing_agreements_api, prefix="/api")


# ============================================================================
# ERROR RESPONSES
# ============================================================================

def _error_response(request: Request, exc: Exception) -> JSONResponse:
    body = error_handler.handle_exception(exc, context={"path": request.url.path})
    return JSONResponse(status_code=error_handler.status_for(exc), content=body)


@app.exception_handler(MissingFieldError)
async def missing_field_handler(request: Request, exc: MissingFieldError):
    return _error_response(request, exc)


@app.exception_handler(PayPalIntegrationError)
async def provider_error_handler(request: Request, exc: PayPalIntegrationError):
    return _error_response(request, exc)


@app.exception_handler(IntegrationResponseError)
async def provider_response_handler(request: Request, exc: IntegrationResponseError):
    return _error_response(request, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("Malformed request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())})


@app.exception_handler(Exception)
async def general_error_handler(request: Request, exc: Exception):
    return _error_response(request, exc)


# ============================================================================
# ENDPOINTS
# ============================================================================

@app.get("/", tags=["Health"], include_in_schema=False)
async def root():
    """Send browsers to the consent page."""
    return RedirectResponse(url=f"/{config.server.landing_page}", status_code=302)


@app.get("/health", tags=["Health"])
async def health_check(gateway: BillingAgreementGateway = Depends(get_gateway)):
    return {"status": "healthy", "integrations_mode": gateway.mode, "timestamp": datetime.now().isoformat()}


def mount_static(target: FastAPI, static_dir: Path) -> bool:
    """Serve static_dir at the site root if it exists. Mount after the API routes."""
    if not static_dir.is_dir():
        logger.info("Static directory %s not found; static assets are not served", static_dir)
        return False
    target.mount("/", StaticFiles(directory=str(static_dir)), name="static")
    return True


mount_static(app, Path(config.server.static_dir))


if __name__ == "__main__":
    import uvicorn

    logger.info("BA v1 server at http://localhost:%d", config.server.port)
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_level=config.log_level.lower())
