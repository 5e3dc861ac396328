"""FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import DEFAULT_JWT_SECRET_KEY, settings
from .domain_errors import DomainError
from .problem_details import domain_error_handler
from .routers import auth, insights, management, prestations, production, stock
from .store import get_record_store

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

# Production safety checks (fail closed on insecure config).
if settings.ENV.lower() == "production" and settings.JWT_SECRET_KEY == DEFAULT_JWT_SECRET_KEY:
    raise RuntimeError("JWT_SECRET_KEY must be set in production.")
if settings.ENV.lower() == "production" and not settings.cors_origins:
    raise RuntimeError("ALLOWED_ORIGINS must be set in production (explicit frontend origin required).")
if settings.ENV.lower() == "production" and any(origin.strip() == "*" for origin in settings.cors_origins):
    raise RuntimeError("ALLOWED_ORIGINS must be explicit in production (no wildcard).")


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Load every collection once before serving.
    store = get_record_store()
    logger.info("app.startup env=%s production=%s", settings.ENV, len(store.snapshot().production))
    yield


# Create app
app = FastAPI(
    title="Packhouse Production Control",
    version="1.0.0",
    description="Backend API for packhouse production, stock and service ledgers",
    lifespan=lifespan,
)
app.add_exception_handler(DomainError, domain_error_handler)

# CORS
cors_methods = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
cors_headers = ["Authorization", "Content-Type"]
if settings.ENV.lower() != "production":
    cors_headers = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=cors_methods,
    allow_headers=cors_headers,
)

# Include routers
app.include_router(auth.router, prefix="/api/v1")
app.include_router(production.router, prefix="/api/v1")
app.include_router(stock.router, prefix="/api/v1")
app.include_router(prestations.router, prefix="/api/v1")
app.include_router(management.router, prefix="/api/v1")
app.include_router(insights.router, prefix="/api/v1")


@app.get("/api/v1/system/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "1.0.0",
    }


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Packhouse Production Control API",
        "version": "1.0.0",
        "docs": "/docs",
    }
