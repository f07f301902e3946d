"""FastAPI application configuration (escrow API)."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..envs.escrow_env import get_settings
from ..infrastructure.scripts import ESCROW_SCRIPTS
from .dependencies import get_database_client_dependency, get_store_dependency
from .metrics import metrics_asgi_app
from .routers import accounts, pay_requests, zk_pay_requests

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    store = get_store_dependency()
    for name, script in ESCROW_SCRIPTS.items():
        await store.register_script(name, script)
    yield
    await get_database_client_dependency().close()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="VeilPay escrow API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(accounts.router, prefix="/api/v1")
    app.include_router(pay_requests.router, prefix="/api/v1")
    app.include_router(zk_pay_requests.router, prefix="/api/v1")
    app.mount("/metrics", metrics_asgi_app())

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": f"Welcome to {settings.app_name} API",
            "version": settings.app_version,
            "program_id": settings.program_id,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint; reports whether the ledger store answers."""
        redis_up = await get_database_client_dependency().is_available()
        return {
            "status": "healthy" if redis_up else "degraded",
            "service": settings.app_name,
            "version": settings.app_version,
            "ledger_store": "ok" if redis_up else "unavailable",
        }

    return app


app = create_app()
