"""
Document database layer.

Backends share the DocumentStore interface: MongoDB for managed deployments
and SQLite JSON documents for local development and tests.
"""

from .document_store import DocumentNotFoundError, DocumentStore
from .local import get_document_store

__all__ = ["DocumentNotFoundError", "DocumentStore", "get_document_store"]
