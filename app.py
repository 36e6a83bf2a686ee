#!/usr/bin/env python3
"""
Main entry point for the link shortener service.

Usage:
    python app.py

Environment variables:
    DATABASE_URL - PostgreSQL connection URL (or memory:// for a throwaway store)
    DATABASE_CREATE_TABLES - Set to 'true' to create tables on startup
    REDIS_URL - Redis connection URL for shared rate-limit counters (optional)
    JWT_SECRET - Secret used to sign bearer tokens
    BASE_URL - Base URL for short links
    CORS_ORIGIN - Allowed CORS origins, comma-separated
    PORT - Port to listen on
    LOG_LEVEL - Logging level
"""

import signal
import sys

import uvicorn

from config import load_config
from shortlinks.common.logging_config import setup_logging
from shortlinks.database import create_database
from web_app import create_app


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("Link Shortener Service")
    logger.info(f"Configuration: {config.model_dump(exclude={'jwt_secret'})}")

    try:
        database = create_database(
            config.database_url,
            pool_max_size=config.database_pool_max_size,
            create_tables=config.database_create_tables,
            logger=logger,
        )
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    app = create_app(config, database=database, logger=logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    # Setup signal handlers for graceful shutdown
    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
