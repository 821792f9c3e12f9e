"""
SportsMeet API - FastAPI application entry point.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from .config import get_settings
from .database import engine, Base, SessionLocal
from .logging_config import db_logger
from .middleware import SecurityHeadersMiddleware, RequestLoggingMiddleware
from .limiter import limiter
from .responses import register_exception_handlers
from . import models  # noqa: F401  (registers tables on Base.metadata)
from .routes import (
    users_router,
    activities_router,
    registrations_router,
    orders_router,
    comments_router,
)

settings = get_settings()

# Create tables (in production, use migrations instead)
Base.metadata.create_all(bind=engine)


app = FastAPI(
    title=settings.app_name,
    description="Backend API for organizing sports activities",
    version="1.0.0",
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Envelope rendering for business and transport errors
register_exception_handlers(app)

# Security headers middleware
app.add_middleware(SecurityHeadersMiddleware)

# Request logging middleware (only in debug mode)
if settings.debug:
    app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Authorization",
        "Content-Type",
        "Accept",
    ],
    max_age=3600,
)

# Routes
app.include_router(users_router)
app.include_router(activities_router)
app.include_router(registrations_router)
app.include_router(orders_router)
app.include_router(comments_router)


@app.get("/api/health")
def health_check():
    """Health check endpoint for load balancers and monitoring."""
    database = "healthy"
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        db_logger.error("Database health check failed", error=e)
        database = "unhealthy"
    finally:
        db.close()

    return {
        "success": database == "healthy",
        "data": {
            "status": "healthy" if database == "healthy" else "degraded",
            "database": database,
            "environment": settings.environment,
            "version": "1.0.0",
        },
    }
