"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from accounts.dependencies.gateways import close_gateways
from accounts.presentation import routes as account_routes
from infrastructure.database.dependencies import close_database_connections
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.settings import (
    get_auction_service_settings,
    get_settings,
    get_valuation_service_settings,
)
from infrastructure.version import __version__


@asynccontextmanager
async def limcoin_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Remote gateway HTTP clients (created lazily, closed on shutdown)
    - Database engine lifecycle (created lazily, disposed on shutdown)
    """
    settings = get_settings()
    configure_logging(debug=settings.debug, log_format=settings.log_format)
    probe = DefaultStartupProbe()
    probe.application_started(
        version=__version__,
        auction_url=get_auction_service_settings().base_url,
        valuation_url=get_valuation_service_settings().base_url,
    )

    yield

    await close_gateways()
    probe.remote_gateways_closed()
    await close_database_connections()
    probe.application_stopped()


app = FastAPI(
    title=get_settings().app_name,
    description="User accounts, LimCoin balances and bid orchestration",
    version=__version__,
    lifespan=limcoin_lifespan,
)

# Include accounts bounded context routes
app.include_router(account_routes.router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
