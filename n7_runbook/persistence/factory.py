import logging

from ..config import Settings
from .base import KeyValueStore
from .file_store import FileKeyValueStore
from .memory_store import InMemoryKeyValueStore
from .sql_store import SqlKeyValueStore

logger = logging.getLogger("n7-runbook.persistence")


def build_store(settings: Settings) -> KeyValueStore:
    """Instantiate the persistence backend selected by settings.STORAGE_BACKEND."""
    backend = settings.STORAGE_BACKEND
    if backend == "file":
        logger.info(f"Persisting runbook progress under {settings.STATE_DIR}/")
        return FileKeyValueStore(settings.STATE_DIR)
    if backend == "sql":
        logger.info("Persisting runbook progress to SQL database")
        return SqlKeyValueStore(settings.DATABASE_URL)
    if backend == "memory":
        logger.warning("Using in-memory storage: progress will be lost on exit")
        return InMemoryKeyValueStore()
    raise ValueError(f"Unknown storage backend '{backend}'")
