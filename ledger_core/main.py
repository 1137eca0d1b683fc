"""
Ledger Core: FastAPI application.

create_app() is the process entry point: it builds the ledger store
(unless one is handed in), attaches it to the application and
registers all routers. Run it with:

    uvicorn ledger_core.main:create_app --factory
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from ledger_core.config import Settings, get_settings
from ledger_core.logging_config import setup_logging
from ledger_core.api.health import router as health_router
from ledger_core.api.accounts import router as accounts_router
from ledger_core.api.transfers import (
    amount_validation_handler,
    router as transfers_router,
)
from ledger_core.store import create_store
from ledger_core.store.base import LedgerStore


def create_app(
    store: LedgerStore | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Build the application around a ledger store.

    A store passed in stays owned by the caller. A store built here
    from settings is closed when the application shuts down.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    owns_store = store is None
    if store is None:
        store = create_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_store:
            store.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Double-entry ledger with atomic account-to-account transfers",
        lifespan=lifespan,
    )
    app.state.store = store

    # Register routers
    app.include_router(health_router)
    app.include_router(accounts_router)
    app.include_router(transfers_router)
    app.add_exception_handler(RequestValidationError, amount_validation_handler)

    return app
