"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.endpoints.checkout import checkout_api
from src.api.endpoints.generation import router as generation_router
from src.api.endpoints.purchases import router as purchases_router
from src.error_handler import ErrorHandler
from src.integrations.clients.mocks.automation import MockAutomationClient
from src.integrations.clients.mocks.identity import StaticIdentityVerifier
from src.integrations.clients.real_http.automation import RealAutomationClient
from src.integrations.clients.real_http.supabase_auth import SupabaseIdentityVerifier
from src.integrations.contracts.interfaces import AutomationClient, IdentityVerifier, MarketplaceStore
from src.integrations.errors import GatewayError
from src.integrations.policy.callback_service import CallbackAuthenticator, PurchaseUpdateService
from src.integrations.policy.checkout_service import CheckoutService
from src.integrations.policy.generation_service import GenerationService
from src.utils.config_loader import GatewaySettings, load_gateway_settings

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

error_handler = ErrorHandler()


# ============================================================================
# DEPENDENCY SELECTION
# ============================================================================

def _should_use_real_integrations(settings: GatewaySettings) -> bool:
    mode = (settings.integrations_mode or "").strip().lower()
    if mode in {"real", "live"}:
        return True
    if mode in {"mock", "test"}:
        return False
    return bool(settings.supabase_url)


def _select_store(settings: GatewaySettings) -> MarketplaceStore:
    # Real Postgres when DATABASE_URL is set, else the in-memory stub
    if settings.database_url:
        from src.database.postgres_real import PostgresDB

        return PostgresDB(connection_string=settings.database_url)

    from src.database.postgres import PostgresDB

    logger.warning("DATABASE_URL not set; using in-memory marketplace store")
    return PostgresDB()


def _select_identity_verifier(settings: GatewaySettings) -> IdentityVerifier:
    if _should_use_real_integrations(settings):
        return SupabaseIdentityVerifier(
            settings.supabase_url,
            settings.supabase_anon_key,
            timeout_seconds=settings.identity_timeout_seconds,
        )
    logger.warning("Identity provider in mock mode; no bearer token will be accepted")
    return StaticIdentityVerifier()


def _select_automation_client(settings: GatewaySettings) -> AutomationClient:
    if _should_use_real_integrations(settings):
        return RealAutomationClient()
    return MockAutomationClient()


# ============================================================================
# APPLICATION FACTORY
# ============================================================================

def create_app(
    settings: Optional[GatewaySettings] = None,
    *,
    identity_verifier: Optional[IdentityVerifier] = None,
    store: Optional[MarketplaceStore] = None,
    automation_client: Optional[AutomationClient] = None,
) -> FastAPI:
    settings = settings or load_gateway_settings()
    identity_verifier = identity_verifier or _select_identity_verifier(settings)
    store = store or _select_store(settings)
    automation_client = automation_client or _select_automation_client(settings)

    app = FastAPI(
        title="Automation Gateway API",
        description="Checkout and generation-approval gateway between the marketplace and n8n",
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

    app.state.settings = settings
    app.state.store = store
    app.state.checkout_service = CheckoutService(settings, identity_verifier, store, automation_client)
    app.state.generation_service = GenerationService(settings, identity_verifier, automation_client)
    app.state.callback_authenticator = CallbackAuthenticator(settings.purchase_update_secret)
    app.state.purchase_update_service = PurchaseUpdateService(store)

    app.include_router(checkout_api, prefix="/api")
    app.include_router(generation_router, prefix="/api")
    app.include_router(purchases_router, prefix="/api")

    @app.get("/api/health", tags=["Health"])
    async def health():
        return {"ok": True}

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        status_code, body = error_handler.handle_gateway_error(exc)
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Request validation failed on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        status_code, body = error_handler.handle_exception(exc, context={"path": request.url.path})
        return JSONResponse(status_code=status_code, content=body)

    return app


app = create_app()
