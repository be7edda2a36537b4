"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request logging), registers exception handlers and includes all API routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from unipivot.core.database import async_session_maker, init_db
from unipivot.core.logging_config import get_logger, setup_logging
from unipivot.core.monitoring import initialize_logfire

from .api.v1 import (
    admin,
    attendance,
    auth,
    badges,
    banners,
    blog,
    calendar,
    documents,
    donations,
    evaluation,
    floating_buttons,
    health,
    history,
    notices,
    points,
    popups,
    programs,
    projects,
    refunds,
    registrations,
    reports,
    seo,
    site,
    users,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import RequestLoggingMiddleware
from .services.badges import seed_badges

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    On startup the schema is created when configured and missing badge
    definitions are seeded.
    """
    try:
        logger.info("Starting up UniPivot Server...")
        await init_db()
        async with async_session_maker() as session:
            await seed_badges(session)
            await session.commit()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down UniPivot Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    UniPivot Server API

    Backend services for the UniPivot nonprofit: member accounts, programs and
    registrations, attendance and deposit refunds, donations, points and badges,
    book reports, site content and the versioned site design.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
)
app.add_middleware(RequestLoggingMiddleware)

setup_exception_handlers(app)
initialize_logfire(app)


app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_V1_STR}/auth")
app.include_router(users.router, prefix=f"{constant.API_V1_STR}/users")
app.include_router(programs.router, prefix=f"{constant.API_V1_STR}/programs")
app.include_router(registrations.router, prefix=constant.API_V1_STR)
app.include_router(attendance.router, prefix=f"{constant.API_V1_STR}/attendance")
app.include_router(refunds.router, prefix=f"{constant.API_V1_STR}/refunds")
app.include_router(donations.router, prefix=f"{constant.API_V1_STR}/donations")
app.include_router(points.router, prefix=f"{constant.API_V1_STR}/points")
app.include_router(reports.router, prefix=f"{constant.API_V1_STR}/reports")
app.include_router(badges.router, prefix=f"{constant.API_V1_STR}/badges")
app.include_router(evaluation.router, prefix=f"{constant.API_V1_STR}/evaluation")
app.include_router(notices.router, prefix=f"{constant.API_V1_STR}/notices")
app.include_router(blog.router, prefix=f"{constant.API_V1_STR}/blog")
app.include_router(banners.router, prefix=f"{constant.API_V1_STR}/banners")
app.include_router(popups.router, prefix=f"{constant.API_V1_STR}/popups")
app.include_router(floating_buttons.router, prefix=f"{constant.API_V1_STR}/floating-buttons")
app.include_router(seo.router, prefix=f"{constant.API_V1_STR}/seo")
app.include_router(site.router, prefix=f"{constant.API_V1_STR}/site")
app.include_router(history.router, prefix=f"{constant.API_V1_STR}/history")
app.include_router(calendar.router, prefix=f"{constant.API_V1_STR}/calendar")
app.include_router(projects.router, prefix=f"{constant.API_V1_STR}/projects")
app.include_router(documents.router, prefix=f"{constant.API_V1_STR}/documents")
app.include_router(admin.router, prefix=f"{constant.API_V1_STR}/admin")
