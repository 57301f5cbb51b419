"""
Common interface for document-based storage backends.

Both the MongoDB adapter and the SQLite JSON adapter implement this class so
the API layer never needs to know which backend it is talking to.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Operators accepted in query conditions
SUPPORTED_OPERATORS = (
    "==",
    "=",
    "!=",
    "<",
    "<=",
    ">",
    ">=",
    "in",
    "not-in",
    "array-contains",
    "array-contains-any",
)

# Operators whose value is a list of candidates
LIST_OPERATORS = ("in", "not-in", "array-contains-any")


class DocumentNotFoundError(LookupError):
    """Raised when a document does not exist in a collection."""

    def __init__(self, collection: str, document_id: str):
        self.collection = collection
        self.document_id = document_id
        super().__init__(f"Document with ID {document_id} not found in {collection}")


def normalize_conditions(conditions: Iterable[Any]) -> List[Tuple[str, str, Any]]:
    """
    Keep only well-formed ``(field, operator, value)`` triples.

    Anything that is not a three element sequence is dropped. Unknown
    operators, and list operators given anything but a list, raise
    ``ValueError``.
    """
    triples = []
    for condition in conditions:
        if not isinstance(condition, (list, tuple)) or len(condition) != 3:
            logger.debug(f"Ignoring malformed query condition: {condition!r}")
            continue
        field, operator, value = condition
        if operator not in SUPPORTED_OPERATORS:
            raise ValueError(f"Unsupported query operator: {operator}")
        if operator in LIST_OPERATORS and not isinstance(value, (list, tuple)):
            raise ValueError(f"Operator {operator} requires a list value, got {type(value).__name__}")
        if operator == "=":
            operator = "=="
        triples.append((field, operator, value))
    return triples


def apply_field_paths(document: Dict[str, Any], fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply a mapping of dotted field paths to a document in place.

    ``{"dimensions.width": 3}`` replaces only ``document["dimensions"]["width"]``,
    creating intermediate maps when they are missing or not maps.
    """
    for path, value in fields.items():
        segments = path.split(".")
        target = document
        for segment in segments[:-1]:
            child = target.get(segment)
            if not isinstance(child, dict):
                child = {}
                target[segment] = child
            target = child
        target[segments[-1]] = value
    return document


class DocumentStore(ABC):
    """Abstract document store addressed by collection name and document id."""

    @abstractmethod
    def new_document_id(self) -> str:
        """Allocate a fresh unique document id without writing anything."""

    @abstractmethod
    def create(self, collection: str, data: Dict[str, Any], document_id: Optional[str] = None) -> Dict[str, Any]:
        """Write a new document, storing its id under ``id``, and return it."""

    @abstractmethod
    def read_all(self, collection: str) -> List[Dict[str, Any]]:
        """Return every document in the collection with its id merged in."""

    @abstractmethod
    def read_by_id(self, collection: str, document_id: str) -> Dict[str, Any]:
        """Return a single document or raise ``DocumentNotFoundError``."""

    @abstractmethod
    def update(self, collection: str, document_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a field-path partial update and return the updated document."""

    @abstractmethod
    def delete(self, collection: str, document_id: str) -> None:
        """Remove a document. Deleting a missing document is not an error."""

    @abstractmethod
    def query(self, collection: str, conditions: Sequence[Any]) -> Dict[str, Dict[str, Any]]:
        """Return matching documents keyed by document id."""

    def init_collections(self, collections: Sequence[str]) -> None:
        """Prepare collections (tables, indexes). No-op by default."""

    @abstractmethod
    def ping(self) -> bool:
        """Check connectivity to the backend."""

    def close(self) -> None:
        """Release any held connections."""
