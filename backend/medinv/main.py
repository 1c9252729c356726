"""
MedInv Backend: medical inventory admin API.

ARCHITECTURE:
- FastAPI app built by create_app(), the composition root
- One Database (async engine + connection gate) per app, created here,
  opened in the lifespan startup and closed on shutdown
- Session gate middleware: every non-public route needs a valid JWT

The order endpoint is the only multi-statement write; everything else is a
single query on a pooled connection.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from medinv.api.routes import admin, auth, orders
from medinv.core.config import Settings, settings as default_settings
from medinv.core.exceptions import register_exception_handlers
from medinv.core.session_gate import SessionAuthMiddleware
from medinv.db.database import Database
from medinv.db.init_db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
    1. Open the database pool
    2. Create tables, default staff account, demo data (demo mode)

    Shutdown:
    1. Close all pooled connections
    """
    database: Database = app.state.database
    logger.info("Initializing database...")
    try:
        await database.init()
        await init_db(database)
    except Exception:
        logger.exception("Startup failed")
        await database.shutdown()
        raise
    logger.info("Database initialized")

    yield

    await database.shutdown()


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="MedInv API",
        description="Medical inventory admin backend: orders, stock and staff sessions.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database or Database(settings)

    register_exception_handlers(app)

    app.add_middleware(SessionAuthMiddleware)

    @app.middleware("http")
    async def add_security_headers(request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    # CORS outermost so preflight requests never reach the session gate
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin"],
        max_age=600,
    )

    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(orders.router, prefix="/orders", tags=["orders"])
    app.include_router(admin.router, prefix="/admin", tags=["admin"])

    @app.get("/health")
    async def health():
        return {"status": "ok", "pool": app.state.database.stats()}

    @app.get("/deployment-mode")
    async def deployment_mode():
        return {"mode": app.state.settings.DEPLOYMENT_MODE}

    return app


app = create_app()
