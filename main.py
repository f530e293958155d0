"""
Composition root: builds the engine, the order store, the notifier and the
order service once per process and wires them into the FastAPI app.

    uvicorn main:create_app --factory
"""
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI

from shared.config.database import create_tables, make_engine, make_session_factory
from shared.config.settings import Settings
from shared.errors import register_exception_handlers
from shared.observability import setup_observability

# IMPORTANT: import models so they register with Base
from services.order_service import models as order_models  # noqa: F401
from services.order_service.repository import OrderRepository
from services.order_service.router import public_router, router as order_router
from services.order_service.service import OrderService
from services.notification_service.notifier import build_notifier

logger = structlog.get_logger(__name__)


def create_app(settings: Optional[Settings] = None, notifier=None) -> FastAPI:
    settings = settings or Settings.from_env()

    engine = make_engine(settings.database_url, echo=settings.database_echo)
    repository = OrderRepository(make_session_factory(engine))
    notifier = notifier if notifier is not None else build_notifier(settings)
    order_service = OrderService(
        repository,
        notifier,
        support_removal_fee=settings.support_removal_fee,
        trust_client_estimates=settings.trust_client_estimates,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await create_tables(engine)
        logger.info("service_started", service=settings.service_name, trust_client_estimates=settings.trust_client_estimates)
        yield
        await notifier.aclose()
        await engine.dispose()

    app = FastAPI(title="Print Order Intake", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.order_service = order_service

    # --- OBSERVABILITY BOOTSTRAP ---
    setup_observability(
        app,
        settings.service_name,
        metrics=settings.metrics_enabled,
        otlp_endpoint=settings.otlp_endpoint,
    )
    register_exception_handlers(app)

    app.include_router(public_router, prefix="/api")
    app.include_router(order_router, prefix="/api")

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=8000)
