"""
FastAPI Application Entry Point.

This is the main application file for the BookCourier Backend.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from bookcourier.app.core.config import settings
from bookcourier.app.api.router import router as api_router
from bookcourier.app.core.identity import build_identity_verifier
from bookcourier.app.core.logging_config import setup_logging
from bookcourier.app.core.observability import ObservabilityMiddleware
from bookcourier.app.db.session import engine, Base
from bookcourier.app.services.payment_gateway import build_payment_gateway
from bookcourier.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from bookcourier.app.models.user import User
from bookcourier.app.models.book import Book
from bookcourier.app.models.order import Order
from bookcourier.app.models.wishlist import Wishlist
from bookcourier.app.models.payment import Payment
from bookcourier.app.models.tracking_event import TrackingEvent
from bookcourier.app.models.audit_log import AuditLog
from bookcourier.app.models.dlq import DeadLetterQueue

logger = logging.getLogger("bookcourier")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Configures logging and creates database tables.
    2. Builds the identity verifier and payment gateway held for the process lifetime.
    3. Closes external clients and disposes the engine on shutdown.
    """
    setup_logging(settings.log_level)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    app.state.identity_verifier = build_identity_verifier(settings)
    app.state.payment_gateway = build_payment_gateway(settings)
    logger.info("Startup complete", extra={"payment_gateway": settings.payment_gateway})

    yield

    await app.state.payment_gateway.aclose()
    await app.state.identity_verifier.aclose()
    await engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Backend for the BookCourier book ordering marketplace",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
    }


app.include_router(api_router)


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Hello from BookCourier Server..",
        "docs": "/docs",
        "health": "/health",
    }
