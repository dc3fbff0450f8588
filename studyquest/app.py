"""Application wiring: logging, store selection, database lifecycle"""
import logging
from typing import Optional

from studyquest import config
from studyquest.db.memory_store import InMemoryStore
from studyquest.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure root logging from LOG_LEVEL"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, config.LOG_LEVEL, logging.INFO)
    )


def create_store(backend: Optional[str] = None):
    """
    Build the progress store for a backend

    Args:
        backend: 'memory' or 'postgres', defaults to STORE_BACKEND

    Returns:
        InMemoryStore or PostgresStore
    """
    backend = (backend or config.STORE_BACKEND).lower()

    if backend == "memory":
        logger.info("Using in-memory progress store")
        return InMemoryStore(emulate_session_trigger=config.EMULATE_SESSION_TRIGGER)

    if backend == "postgres":
        from studyquest.db.postgres_store import PostgresStore
        logger.info("Using PostgreSQL progress store")
        return PostgresStore()

    raise ConfigurationError(
        message=f"Unknown store backend {backend!r}",
        config_key="STORE_BACKEND",
        context={"valid": list(config.VALID_BACKENDS)},
    )


async def init_app(backend: Optional[str] = None, apply_schema: bool = False):
    """
    Validate configuration, open the database pool if needed and return the store

    Args:
        backend: Overrides STORE_BACKEND
        apply_schema: Create tables and the study session trigger on startup
    """
    setup_logging()

    logger.info("Validating configuration...")
    try:
        config.validate_config()
    except ValueError as e:
        raise ConfigurationError(message=str(e)) from e

    store = create_store(backend)

    if (backend or config.STORE_BACKEND).lower() == "postgres":
        from studyquest.db.connection import db

        logger.info("Initializing database connection pool...")
        await db.init_pool()
        if apply_schema:
            await db.apply_schema()

    return store


async def shutdown_app() -> None:
    """Close the database pool if one was opened"""
    from studyquest.db.connection import db

    logger.info("Closing database connection...")
    await db.close_pool()
    logger.info("Shutdown complete")
