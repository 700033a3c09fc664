# app/main.py
"""
FastAPI application entry point.
Includes request timing middleware, global error handlers, and all routers.
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.routers import attendance, branches, health
from app.config import settings
from app.database import dispose_engine
from app.errors import GymTrackerError
from app.services.branch_store import build_store
from app.services.upstream_client import UpstreamClient
from app.utils.gcp import resolve_project_id
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Gym occupancy tracker starting up...")
    # Missing DB_* variables raise ConfigurationError here and abort startup
    settings.validate_startup()

    app.state.project_id = resolve_project_id()
    app.state.store = build_store()
    logger.info(f"✅ Storage backend ready: {app.state.store.backend}")

    http = httpx.AsyncClient(timeout=settings.UPSTREAM_TIMEOUT_SECONDS)
    app.state.upstream = UpstreamClient(http)
    logger.info(f"☁️  Project: {app.state.project_id or 'unknown'}")
    logger.info(f"🌐 Listening on http://{settings.HOST}:{settings.PORT}")
    try:
        yield
    finally:
        logger.info("🛑 Gym occupancy tracker shutting down...")
        await http.aclose()
        app.state.store.close()
        dispose_engine()


app = FastAPI(
    title="Gym Occupancy Tracker",
    description="Polls Urban Climb occupancy and expected attendance and re-serves it as JSON.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── CORS (dashboards call the API from the browser) ─────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(GymTrackerError)
async def tracker_exception_handler(request: Request, exc: GymTrackerError):
    logger.error(f"{exc.kind} error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=exc.to_envelope(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"kind": "internal", "message": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(health.router,     tags=["💚 Health"])
app.include_router(branches.router,   tags=["🧗 Occupancy"])
app.include_router(attendance.router, tags=["📈 Expected Attendance"])
