"""Webapp API: FastAPI application factory.

Services are built once per app and hung on ``app.state``; routers reach them
through the accessors in webapp.routers.deps, so tests can hand in fakes.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from webapp.core.config import get_settings
from webapp.core.observability import setup_logging
from webapp.db.session import init_db
from webapp.routers import health as health_router
from webapp.routers import images as images_router
from webapp.routers import products as products_router
from webapp.routers import users as users_router
from webapp.routers import verification as verification_router
from webapp.routers.errors import register_error_handlers
from webapp.services.access_service import AccessService
from webapp.services.account_service import AccountService
from webapp.services.catalog_service import CatalogService
from webapp.services.health_service import LivenessProber

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db()
    logger.info("Webapp API started (%s)", settings.app_env)
    yield
    logger.info("Webapp API shutting down")


def create_app(
    *,
    account_service: AccountService | None = None,
    catalog_service: CatalogService | None = None,
    liveness_prober: LivenessProber | None = None,
) -> FastAPI:
    app = FastAPI(title="Webapp API", lifespan=lifespan)

    accounts = account_service or AccountService()
    app.state.account_service = accounts
    app.state.access_service = AccessService(accounts)
    app.state.catalog_service = catalog_service or CatalogService(accounts=accounts.repository)
    app.state.liveness_prober = liveness_prober or LivenessProber()

    app.include_router(health_router.router)
    app.include_router(verification_router.router)
    app.include_router(users_router.router)
    app.include_router(products_router.router)
    app.include_router(images_router.router)

    register_error_handlers(app)
    return app


app = create_app()
