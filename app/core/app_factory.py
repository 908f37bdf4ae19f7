from __future__ import annotations

"""Application factory for the FastAPI app.

Builds the app and its long-lived collaborators (rate limiter, store,
notification dispatcher, signup service) exactly once. They are kept on
``app.state`` and resolved by route dependencies, so tests can build fully
isolated apps with their own instances.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.adapters.email import AbstractNotifier, create_notifier
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.storage import (
    AbstractWaitlistStore,
    SqlAlchemyWaitlistStore,
    create_store_engine,
    init_schema,
)
from app.api.routes import health_router, waitlist_router
from app.core.config import Settings, settings as default_settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.rate_limit import build_rate_limiter
from app.services.notification_dispatcher import NotificationDispatcher
from app.services.waitlist_service import WaitlistService

logger = logging.getLogger(__name__)


def _build_store(config: Settings) -> AbstractWaitlistStore:
    engine = create_store_engine(config.database.url, echo=config.database.echo)
    init_schema(engine)
    return SqlAlchemyWaitlistStore.from_engine(engine)


def create_app(
    config: Settings | None = None,
    *,
    store: AbstractWaitlistStore | None = None,
    notifier: AbstractNotifier | None = None,
    limiter: AbstractRateLimiter | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        config: Settings to use; defaults to the global settings.
        store: Waitlist store override (defaults to SQLAlchemy on DATABASE_URL).
        notifier: Welcome email sender override (defaults from RESEND_* settings).
        limiter: Rate limiter override (defaults to the in-memory limiter).

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    cfg = config or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    dispatcher = NotificationDispatcher(
        notifier or create_notifier(cfg),
        max_workers=cfg.email.max_workers,
    )
    service = WaitlistService(
        store=store or _build_store(cfg),
        limiter=limiter or build_rate_limiter(cfg),
        dispatcher=dispatcher,
        rate_limit_enabled=cfg.app.rate_limit_enabled,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("app.startup", extra={"app_env": cfg.app_env})
        yield
        # Let queued welcome emails finish before the process exits
        dispatcher.shutdown(wait=True)
        logger.info("app.shutdown")

    app = FastAPI(
        title="Vendra Waitlist API",
        description=(
            "Waitlist signup for the Vendra landing page: validates and "
            "deduplicates emails, returns the subscriber's position and sends "
            "a welcome email in the background. Signups are rate limited per client."
        ),
        version="0.1.0",
        debug=cfg.app.debug,
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.dispatcher = dispatcher
    app.state.waitlist_service = service

    # Middleware
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in cfg.app.cors_allow_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(waitlist_router, prefix="/api")
    app.include_router(health_router)

    return app
