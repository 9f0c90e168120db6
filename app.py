"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires all services, registers routers, and runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from kino.controllers.admin_controller import router as admin_router
from kino.controllers.reservation_controller import router as reservation_router
from kino.repository.data_repository import DataRepository
from kino.services.auth_service import AdminAuthService
from kino.services.price_adjustment_service import PriceAdjustmentService
from kino.services.pricing_service import ReservationPricingService
from kino.services.reservation_service import ReservationService
from kino.utils.config import Settings, get_settings
from kino.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Every service is constructed here and exposed through app.state.
    """
    settings = settings or get_settings()

    repository = DataRepository(settings)
    pricing_service = ReservationPricingService(
        repository=repository,
        settings=settings,
    )
    reservation_service = ReservationService(
        repository=repository,
        settings=settings,
    )
    price_adjustment_service = PriceAdjustmentService(
        repository=repository,
        settings=settings,
    )
    auth_service = AdminAuthService(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app, settings)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(reservation_router)
    app.include_router(admin_router)

    app.state.repository = repository
    app.state.pricing_service = pricing_service
    app.state.reservation_service = reservation_service
    app.state.price_adjustment_service = price_adjustment_service
    app.state.auth_service = auth_service

    return app


def _startup(app: FastAPI, settings: Settings) -> None:
    """Idempotent startup sequence: schema first, then the optional demo seed."""
    repository: DataRepository = app.state.repository

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    if settings.seed_demo_data:
        logger.info("Startup: seeding demo cinema (skipped if movies exist)")
        repository.seed_demo_data()

    logger.info("Startup complete, system ready")


app = create_app()
