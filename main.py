import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from minicrm.application.scheduler import EmailScheduler
from minicrm.config import get_settings
from minicrm.infrastructure import database
from minicrm.infrastructure.repositories import RoleRepository
from minicrm.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


def create_app(
    *,
    engine: Engine | None = None,
    session_factory: Callable[[], Session] | None = None,
    transport=None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``engine``, ``session_factory`` and ``transport`` default to the configured
    database and SendGrid; tests pass their own.
    """

    settings = get_settings()
    bind = engine if engine is not None else database.engine
    sessions = session_factory or database.SessionLocal
    scheduler = EmailScheduler.from_settings(settings, sessions, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Prepare the database, run the email scheduler and release resources on exit."""

        database.initialize_database(bind)
        with sessions() as session:
            RoleRepository(session).ensure_default_roles()
        if settings.scheduler_enabled:
            scheduler.start()
        else:
            logger.info("Email scheduler disabled by configuration")
        try:
            yield
        finally:
            await scheduler.stop()
            if engine is None:
                bind.dispose()

    app = FastAPI(title="Mini CRM API", lifespan=lifespan)
    app.state.email_scheduler = scheduler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
