"""Document store factory used by the API at startup."""

import logging
from typing import Optional, Sequence

from .document_store import DocumentStore

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("sqlite", "mongo")


def get_document_store(
    backend: str = "sqlite",
    sqlite_db_path: str = "products.db",
    mongodb_uri: Optional[str] = None,
    mongodb_database: Optional[str] = None,
    collections: Sequence[str] = (),
) -> DocumentStore:
    """Build and initialize the document store for the configured backend."""
    if backend == "mongo":
        from .mongo_adapter import MongoDocumentStore
        store: DocumentStore = MongoDocumentStore(mongodb_uri, database_name=mongodb_database)
    elif backend == "sqlite":
        from .nosql_adapter import SQLiteDocumentStore
        store = SQLiteDocumentStore(sqlite_db_path)
    else:
        raise ValueError(f"Unknown document store backend: {backend}. Must be one of {SUPPORTED_BACKENDS}")

    store.init_collections(collections)
    logger.info(f"Document store ready: {backend}")
    return store
