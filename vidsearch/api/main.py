"""
FastAPI Application Factory

Creates and configures FastAPI application
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vidsearch.api.error_handlers import register_exception_handlers
from vidsearch.api.response_middleware import SuccessEnvelopeMiddleware
from vidsearch.core.config import Settings, settings
from vidsearch.core.db import async_session_maker, close_db, init_db
from vidsearch.core.logging import configure_logging, get_logger
from vidsearch.embeddings import build_embedding_client
from vidsearch.llm import build_llm_client
from vidsearch.routers import history, recommendations, search

logger = get_logger(__name__)


async def _warmup_embedding_client(client) -> None:
    """Background preload so the first search does not pay the model load."""

    t0 = time.perf_counter()
    try:
        logger.info("embedding_background_warmup_start", model=client.model)
        await client.warmup()
        logger.info(
            "embedding_background_warmup_complete",
            model=client.model,
            elapsed_seconds=f"{time.perf_counter() - t0:.2f}",
        )
    except Exception as e:
        # Server keeps running; the first request retries the load
        logger.error(
            "embedding_background_warmup_failed",
            error=str(e),
            elapsed_seconds=f"{time.perf_counter() - t0:.2f}",
        )


def build_lifespan(config: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Startup:
            - Configure logging
            - Create tables (development only; Alembic elsewhere)
            - Build provider clients onto app.state
            - Schedule embedding warmup as a background task

        Shutdown:
            - Close provider clients and database connections
        """
        configure_logging()
        logger.info("application_startup", environment=config.environment)

        if config.environment == "development":
            logger.info("initializing_database_tables")
            await init_db()

        # Tests may pre-populate app.state with their own handles
        if getattr(app.state, "embedding_client", None) is None:
            app.state.embedding_client = build_embedding_client(config)
        if getattr(app.state, "llm_client", None) is None:
            app.state.llm_client = build_llm_client(config)
        if getattr(app.state, "session_factory", None) is None:
            app.state.session_factory = async_session_maker

        warmup_task = None
        if hasattr(app.state.embedding_client, "warmup"):
            warmup_task = asyncio.create_task(
                _warmup_embedding_client(app.state.embedding_client)
            )

        yield

        logger.info("application_shutdown")
        if warmup_task is not None and not warmup_task.done():
            warmup_task.cancel()
        await app.state.embedding_client.aclose()
        if app.state.llm_client is not None:
            await app.state.llm_client.aclose()
        await close_db()

    return lifespan


def create_app(config: Settings = settings) -> FastAPI:
    """
    Create FastAPI application

    Returns:
        Configured FastAPI app instance

    Usage:
        app = create_app()
        uvicorn.run(app, host="0.0.0.0", port=8000)
    """
    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        description="Semantic search over video lectures with explained results",
        lifespan=build_lifespan(config),
        docs_url="/docs" if config.debug else None,
        redoc_url="/redoc" if config.debug else None,
    )
    app.state.settings = config

    # Success envelope middleware
    app.add_middleware(SuccessEnvelopeMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_hosts,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for module in (search, history, recommendations):
        app.include_router(module.router, prefix=config.api_v1_prefix)

    register_exception_handlers(app)

    @app.get(f"{config.api_v1_prefix}/health", tags=["health"])
    async def health_check() -> dict:
        return {
            "status": "ok",
            "app": config.app_name,
            "version": config.app_version,
            "environment": config.environment,
        }

    logger.info("fastapi_app_created", routes=len(app.routes))

    return app


# Application instance
app = create_app()
