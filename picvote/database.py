# picvote/database.py
import logging
from typing import Optional

from . import config
from .storage import Store, JsonStore

logger = logging.getLogger(__name__)

_store: Optional[Store] = None


def create_store(backend: str = None) -> Store:
    backend = (backend or config.STORE_BACKEND).lower()
    if backend == "mongo":
        # imported lazily so the JSON backend works without a reachable server
        from .storage_mongo import MongoStore
        return MongoStore(config.MONGO_URI, config.MONGO_DB)
    if backend == "json":
        logger.info(f"Using JSON store at {config.DATA_DB_PATH or '<memory>'}")
        return JsonStore(config.DATA_DB_PATH)
    raise ValueError(f"Unknown STORE_BACKEND '{backend}' (expected 'json' or 'mongo')")


def get_store() -> Store:
    global _store
    if _store is None:
        _store = create_store()
    return _store


def set_store(store: Optional[Store]):
    """Swap the process-wide store (tests, scripts)."""
    global _store
    _store = store
