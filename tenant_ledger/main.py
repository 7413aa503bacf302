"""
Tenant Ledger: FastAPI application.

This is the entry point for the application.
Logging is configured and all routers are registered here.
"""

import logging

from fastapi import FastAPI

from tenant_ledger.config import get_settings
from tenant_ledger.api.health import router as health_router
from tenant_ledger.api.tenants import router as tenants_router
from tenant_ledger.api.accounts import router as accounts_router
from tenant_ledger.api.journal import router as journal_router
from tenant_ledger.api.reference import router as reference_router

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


settings = get_settings()
configure_logging(settings.LOG_LEVEL)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Multi-tenant double-entry bookkeeping ledger",
)

# Register routers
app.include_router(health_router)
app.include_router(tenants_router)
app.include_router(accounts_router)
app.include_router(journal_router)
app.include_router(reference_router)

logger.info(
    "%s %s started (%s)",
    settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT,
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
