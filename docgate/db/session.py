from __future__ import annotations

import logging
from functools import lru_cache

from pymongo import MongoClient
from pymongo.server_api import ServerApi

from docgate.core.config import settings
from docgate.db.mongo import MongoStore
from docgate.db.store import DocumentStore

_LOG = logging.getLogger("docgate.store")


@lru_cache(maxsize=1)
def get_client() -> MongoClient:
    # MongoClient is thread-safe and pools its own connections; one per process.
    _LOG.info("creating MongoDB client (server api v%s)", settings.MONGO_SERVER_API_VERSION)
    return MongoClient(
        settings.MONGO_URI,
        server_api=ServerApi(settings.MONGO_SERVER_API_VERSION),
        timeoutMS=settings.MONGO_TIMEOUT_MS,
        tz_aware=True,
    )


def close_client() -> None:
    if get_client.cache_info().currsize:
        get_client().close()
        get_client.cache_clear()
        _LOG.info("MongoDB client closed")


def get_store() -> DocumentStore:
    return MongoStore(get_client(), max_time_ms=settings.MONGO_MAX_TIME_MS)
