"""Small-business ERP — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from erp.accounting.router import router as accounting_router
from erp.auth.router import router as auth_router
from erp.automation.router import router as automation_router
from erp.common.exceptions import register_exception_handlers
from erp.common.logging_config import setup_logging
from erp.common.rate_limit import limiter
from erp.config import settings
from erp.crm.router import router as crm_router
from erp.database import async_session_factory, init_models
from erp.hr.router import router as hr_router
from erp.insights.router import router as insights_router
from erp.inventory.router import router as inventory_router
from erp.notifications.router import router as notifications_router
from erp.notifications.service import EmailService
from erp.notifications.transport import SMTPTransport
from erp.projects.router import router as projects_router
from erp.reports.router import router as reports_router
from erp.search.router import router as search_router

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


async def seed_email_templates() -> None:
    async with async_session_factory() as db:
        service = EmailService(db, SMTPTransport.from_settings(settings), sender=settings.mail_sender)
        await service.seed_default_templates(reset=settings.EMAIL_TEMPLATES_RESET_ON_STARTUP)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    setup_logging()
    if settings.DB_AUTO_CREATE:
        await init_models()
    await seed_email_templates()
    logger.info("ERP API started (%s)", settings.ENVIRONMENT)
    yield
    logger.info("ERP API shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Small-business ERP",
        description="HR, accounting, inventory, CRM, projects and business automation",
        version=VERSION,
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": VERSION,
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(hr_router, prefix="/api/hr", tags=["hr"])
    app.include_router(accounting_router, prefix="/api/accounting", tags=["accounting"])
    app.include_router(inventory_router, prefix="/api/inventory", tags=["inventory"])
    app.include_router(crm_router, prefix="/api/crm", tags=["crm"])
    app.include_router(projects_router, prefix="/api/projects", tags=["projects"])
    app.include_router(reports_router, prefix="/api/reports", tags=["reports"])
    app.include_router(automation_router, prefix="/api/automation", tags=["automation"])
    app.include_router(notifications_router, prefix="/api/automation", tags=["notifications"])
    app.include_router(insights_router, prefix="/api/insights", tags=["insights"])
    app.include_router(search_router, prefix="/api/search", tags=["search"])

    return app


app = create_app()
