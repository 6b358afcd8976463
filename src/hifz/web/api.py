"""FastAPI application factory.

Main entry point for the Hifz tracker Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hifz import __version__
from hifz.config.app_config import AppConfig, load_app_config
from hifz.config.logging import setup_logging
from hifz.core.seed import seed_sample_data
from hifz.core.stats import StatsEngine
from hifz.core.store import HifzStore
from hifz.web.errors import setup_error_handlers
from hifz.web.routes import (
    health_router,
    lessons_router,
    mistakes_router,
    sessions_router,
    stats_router,
    student_router,
    students_router,
    teacher_router,
    users_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    store: HifzStore = app.state.store
    logger.info(
        "api_startup",
        users=len(store.list_users()),
        students=len(store.list_students()),
        sessions=len(store.list_sessions()),
        lessons=len(store.list_lessons()),
    )
    yield
    logger.info("api_shutdown")


def create_app(
    config: AppConfig | None = None,
    store: HifzStore | None = None,
    seed: bool | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Application config. Loaded from file when omitted.
        store: Store to serve. A fresh in-memory store when omitted.
        seed: Load sample data into a fresh store. Defaults to
            ``config.seed_sample_data``. Ignored when ``store`` is given.

    Returns:
        Configured FastAPI app instance
    """
    config = config or load_app_config()
    setup_logging(config.logging)

    if store is None:
        store = HifzStore()
        if config.seed_sample_data if seed is None else seed:
            seed_sample_data(store)

    app = FastAPI(
        title="Hifz Tracker API",
        description="Track Quran memorization sessions, mistakes and lessons",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.store = store
    app.state.stats = StatsEngine(store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_error_handlers(app)

    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(students_router)
    app.include_router(sessions_router)
    app.include_router(mistakes_router)
    app.include_router(stats_router)
    app.include_router(teacher_router)
    app.include_router(student_router)
    app.include_router(lessons_router)

    return app
