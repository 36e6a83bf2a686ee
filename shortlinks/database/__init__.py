"""Database layer for the link shortener."""

import logging
from typing import Optional

from .base import Database, UserRepository, LinkRepository, VisitRepository
from .memory import MemoryDatabase
from .postgres import PostgresDatabase
from .models import User, Link, VisitEvent
from .counters import WindowCounter, MemoryWindowCounter, RedisWindowCounter


def create_database(
    url: str,
    pool_max_size: int = 10,
    create_tables: bool = False,
    logger: Optional[logging.Logger] = None,
) -> Database:
    """Pick a backend from the connection URL scheme.

    Args:
        url: postgresql://... / postgres://... or memory://
        pool_max_size: Maximum connection pool size (PostgreSQL only)
        create_tables: Create tables on connect (PostgreSQL only)
        logger: Optional logger

    Returns:
        Database instance (not yet connected)
    """
    scheme = url.split("://", 1)[0].lower()
    if scheme == "memory":
        return MemoryDatabase(logger=logger)
    if scheme in ("postgresql", "postgres"):
        return PostgresDatabase(
            db_config=url,
            pool_max_size=pool_max_size,
            create_tables=create_tables,
            logger=logger,
        )
    raise ValueError(f"Unsupported database URL scheme: {scheme}")


__all__ = [
    "Database",
    "UserRepository",
    "LinkRepository",
    "VisitRepository",
    "MemoryDatabase",
    "PostgresDatabase",
    "User",
    "Link",
    "VisitEvent",
    "WindowCounter",
    "MemoryWindowCounter",
    "RedisWindowCounter",
    "create_database",
]
