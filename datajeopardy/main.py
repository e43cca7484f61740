"""
DataJeopardy Main Application
"""

import logging

# ── Production Logging ────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("DataJeopardy")

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import settings
from .database import engine, SessionLocal
from .exceptions import DataJeopardyException
from .init_db import init_db
from .models import Base
from .api import logs, routines, users
from .middleware.rate_limit import limiter

# --- Monitoring & Error Tracking ---
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from .middleware.monitoring import PrometheusMiddleware, get_metrics

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[FastApiIntegration()],
        traces_sample_rate=1.0,
    )


# ── Lifespan: create tables and seed reference data ──────────────────────────
@asynccontextmanager
async def lifespan(app):
    settings.print_startup_summary()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        summary = init_db(db)
        logger.info(f"Reference data ready: {summary}")
    finally:
        db.close()
    yield


# --- App Initialization ---
app = FastAPI(
    title="DataJeopardy API",
    version="1.0.0",
    description="Query threat classification and risk-based account locking",
    lifespan=lifespan
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# 1. Prometheus Middleware
app.add_middleware(PrometheusMiddleware)

# 2. CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Global Exception Handler ---
@app.exception_handler(DataJeopardyException)
async def domain_error_handler(request: Request, exc: DataJeopardyException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse({"ok": False, "error": exc.message}, status_code=exc.status_code)


# --- Routes ---

@app.get("/health")
def health_check():
    """Health check endpoint for load balancers."""
    return {
        "status": "ok",
        "auto_lock_threshold": settings.AUTO_LOCK_RISK_THRESHOLD,
    }

@app.get("/metrics")
def metrics():
    return get_metrics()

app.include_router(users.router)
app.include_router(logs.router)
app.include_router(routines.router)
