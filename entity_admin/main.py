"""Entity Admin: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map AdminError -> error page / JSON
    - Site, settings and templates stored on app.state for route dependencies
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - create_app factory: hosts and tests build apps around their own AdminSite;
      module-level `app` serves `uvicorn entity_admin.main:app`
    - registration_modules are imported before the app is built, so their
      default_site registrations are visible to the first request
"""

import importlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from entity_admin import __version__
from entity_admin.admin.site import AdminSite, default_site
from entity_admin.api.error_handlers import register_error_handlers
from entity_admin.api.routes import admin_views, health
from entity_admin.config import Settings, get_settings
from entity_admin.core.urls import AdminUrls
from entity_admin.infrastructure.database import close_db, init_db
from entity_admin.infrastructure.observability import setup_logging
from entity_admin.infrastructure.templates import AdminTemplates

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(
        f"Entity Admin started with {len(app.state.admin_site.get_section_list())} sections",
    )
    yield
    await close_db()
    logger.info("Entity Admin shutting down")


def create_app(
    site: AdminSite | None = None, settings: Settings | None = None,
) -> FastAPI:
    """Build the admin application around a site."""
    settings = settings or get_settings()
    for module in settings.registration_modules:
        importlib.import_module(module)

    app = FastAPI(
        title=settings.admin_title, version=__version__, lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.admin_site = site if site is not None else default_site
    app.state.templates = AdminTemplates(
        AdminUrls(settings.admin_prefix),
        site_title=settings.admin_title,
        template_dirs=settings.template_dirs,
    )

    register_error_handlers(app)

    # Routes: explicit registration
    app.include_router(health.router)
    app.include_router(admin_views.router, prefix=settings.admin_prefix)
    return app


app = create_app()
