"""
FastAPI application entry point.

Sets up logging, the lifespan (Motor client, Supabase identity client and
the persistence gateway built on them), CORS and the API routers.

Run with: uvicorn cardwallet.main:app
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cardwallet.api import accounts, cards
from cardwallet.config import get_settings
from cardwallet.database import close_mongo_connection, connect_to_mongo, users_store
from cardwallet.services.gateway import PersistenceGateway
from cardwallet.services.identity_service import SupabaseIdentityService
from cardwallet.services.notifier import LoggingNotifier

# Configure logging - single place for log format and level
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create the Mongo and Supabase clients and the gateway on app.state.
    Shutdown: close both clients.
    """
    settings = get_settings()
    if not settings.supabase_anon_key:
        logger.warning("SUPABASE_ANON_KEY is not set; sign-up and sign-in will be rejected by Supabase.")
    if not settings.supabase_jwt_secret:
        logger.warning("SUPABASE_JWT_SECRET is not set; only RS256/ES256 tokens can be verified.")

    mongo_client = connect_to_mongo()
    identity = SupabaseIdentityService(settings)
    app.state.gateway = PersistenceGateway(
        identity=identity,
        store=users_store(mongo_client),
        notifier=LoggingNotifier(),
    )
    try:
        yield
    finally:
        await identity.aclose()
        close_mongo_connection(mongo_client)


def create_application() -> FastAPI:
    """Factory for the FastAPI app. Keeps main.py clean and testable."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Store loyalty and discount cards (QR / Code 128) per account.",
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Restrict in production to the mobile/web client origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(accounts.router, prefix="/api/accounts", tags=["accounts"])
    app.include_router(cards.router, prefix="/api/users", tags=["cards"])

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_application()
