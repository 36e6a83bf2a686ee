"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import Config
from shortlinks.auth import AuthService
from shortlinks.database import (
    Database,
    MemoryWindowCounter,
    RedisWindowCounter,
    create_database,
)
from shortlinks.service import LinkService
from shortlinks.shortcode import SlugGenerator
from shortlinks.tokens import TokenService
from .api import api_router
from .web import web_router
from .errors import register_exception_handlers
from .middleware.headers import SecurityHeadersMiddleware
from .middleware.logging import LoggingMiddleware
from .middleware.rate_limit import RateLimitMiddleware


def create_app(
    config: Config,
    database: Optional[Database] = None,
    logger: Optional[logging.Logger] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Everything the routes need is built here from `config` and kept on
    `app.state`; connections are opened in the lifespan handler.

    Args:
        config: Configuration instance
        database: Database to use instead of one built from config.database_url
        logger: Optional logger

    Returns:
        Configured FastAPI app
    """
    logger = logger or logging.getLogger("shortlinks")

    if database is None:
        database = create_database(
            config.database_url,
            pool_max_size=config.database_pool_max_size,
            create_tables=config.database_create_tables,
            logger=logger,
        )

    link_service = LinkService(
        db=database,
        slug_generator=SlugGenerator(default_length=config.slug_length),
        logger=logger,
        max_collision_retries=config.max_collision_retries,
    )
    tokens = TokenService(
        secret=config.jwt_secret,
        ttl_seconds=config.token_ttl_seconds,
        algorithm=config.jwt_algorithm,
        logger=logger,
    )
    auth_service = AuthService(db=database, tokens=tokens, logger=logger)

    if config.redis_url:
        counter = RedisWindowCounter(
            redis_url=config.redis_url,
            window_seconds=config.rate_limit_window_seconds,
            logger=logger,
        )
    else:
        counter = MemoryWindowCounter(window_seconds=config.rate_limit_window_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting link shortener service...")
        await database.connect()
        await counter.connect()
        logger.info("Service started successfully")

        yield

        logger.info("Shutting down link shortener service...")
        await counter.close()
        await link_service.close()
        logger.info("Service stopped")

    app = FastAPI(
        title="Link Shortener",
        description="Short links with accounts and visit analytics",
        version="1.0.0",
        docs_url=f"{config.api_prefix}/docs",
        redoc_url=f"{config.api_prefix}/redoc",
        openapi_url=f"{config.api_prefix}/openapi.json",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.logger = logger
    app.state.db = database
    app.state.link_service = link_service
    app.state.auth_service = auth_service
    app.state.rate_limit_counter = counter

    register_exception_handlers(app)

    # Added innermost first: the last one added sees the request first
    if config.rate_limit_enabled:
        app.add_middleware(
            RateLimitMiddleware,
            counter=counter,
            limit=config.rate_limit_max,
            trust_forwarded=config.trust_forwarded_headers,
            logger=logging.getLogger("shortlinks.web"),
        )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    app.include_router(api_router, prefix=config.api_prefix)
    app.include_router(web_router, tags=["Redirect"])

    return app
