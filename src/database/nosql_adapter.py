"""
SQLite-backed document store.
Documents are stored as JSON text, one table shared by all collections, and
queried through SQLite's JSON1 functions. Used for local development and tests.
"""

import json
import logging
import sqlite3
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .document_store import (
    DocumentNotFoundError,
    DocumentStore,
    LIST_OPERATORS,
    apply_field_paths,
    normalize_conditions,
)

logger = logging.getLogger(__name__)

_COMPARISON_OPERATORS = {
    "==": "=",
    "<": "<",
    "<=": "<=",
    ">": ">",
    ">=": ">=",
}


def _json_path(field: str) -> str:
    """Convert a dotted field path into a quoted SQLite JSON path."""
    return "$." + ".".join(f'"{segment}"' for segment in field.split("."))


class SQLiteDocumentStore(DocumentStore):
    """Document store keeping JSON documents in a single SQLite table"""

    def __init__(self, db_path: str = "products.db"):
        self.db_path = db_path

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row access by column name"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _serialize_document(self, document: Dict[str, Any]) -> str:
        """Serialize document to JSON string"""
        def json_serializer(obj):
            if isinstance(obj, datetime):
                return obj.isoformat()
            raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

        return json.dumps(document, default=json_serializer)

    def _deserialize_document(self, json_str: str) -> Dict[str, Any]:
        """Deserialize JSON string to document"""
        return json.loads(json_str)

    def _with_id(self, document_id: str, json_str: str) -> Dict[str, Any]:
        document = self._deserialize_document(json_str)
        document["id"] = document_id
        return document

    def init_collections(self, collections: Sequence[str] = ()) -> None:
        """Create the documents table and its lookup index"""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS documents (
                    collection TEXT NOT NULL,
                    document_id TEXT NOT NULL,
                    document TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (collection, document_id)
                )
            ''')
            cursor.execute('''
                CREATE INDEX IF NOT EXISTS idx_documents_collection
                ON documents(collection)
            ''')
            conn.commit()
            logger.info(f"SQLite document store initialized at {self.db_path} for {list(collections)}")
        except Exception as e:
            logger.error(f"Error initializing collections: {e}")
            raise
        finally:
            conn.close()

    def new_document_id(self) -> str:
        return uuid.uuid4().hex

    def create(self, collection: str, data: Dict[str, Any], document_id: Optional[str] = None) -> Dict[str, Any]:
        """Create a new document in the collection"""
        document_id = document_id or self.new_document_id()
        document = dict(data)
        document["id"] = document_id

        conn = self._get_connection()
        try:
            conn.execute(
                "INSERT INTO documents (collection, document_id, document) VALUES (?, ?, ?)",
                (collection, document_id, self._serialize_document(document)),
            )
            conn.commit()
            logger.info(f"Created document in {collection} with ID: {document_id}")
            return document
        except Exception as e:
            logger.error(f"Error creating document in {collection}: {e}")
            raise
        finally:
            conn.close()

    def read_all(self, collection: str) -> List[Dict[str, Any]]:
        """Get every document in a collection"""
        conn = self._get_connection()
        try:
            rows = conn.execute(
                "SELECT document_id, document FROM documents WHERE collection = ? ORDER BY rowid",
                (collection,),
            ).fetchall()
            return [self._with_id(row["document_id"], row["document"]) for row in rows]
        except Exception as e:
            logger.error(f"Error reading documents from {collection}: {e}")
            raise
        finally:
            conn.close()

    def read_by_id(self, collection: str, document_id: str) -> Dict[str, Any]:
        """Get a document by ID"""
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT document_id, document FROM documents WHERE collection = ? AND document_id = ?",
                (collection, document_id),
            ).fetchone()
        except Exception as e:
            logger.error(f"Error getting document from {collection}: {e}")
            raise
        finally:
            conn.close()

        if row is None:
            raise DocumentNotFoundError(collection, document_id)
        return self._with_id(row["document_id"], row["document"])

    def update(self, collection: str, document_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Apply dotted field paths to an existing document"""
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT document FROM documents WHERE collection = ? AND document_id = ?",
                (collection, document_id),
            ).fetchone()
            if row is None:
                raise DocumentNotFoundError(collection, document_id)

            document = apply_field_paths(self._deserialize_document(row["document"]), fields)
            conn.execute(
                '''
                UPDATE documents
                SET document = ?, updated_at = CURRENT_TIMESTAMP
                WHERE collection = ? AND document_id = ?
                ''',
                (self._serialize_document(document), collection, document_id),
            )
            conn.commit()
            logger.info(f"Updated document in {collection} with ID: {document_id}")
            document["id"] = document_id
            return document
        except DocumentNotFoundError:
            raise
        except Exception as e:
            logger.error(f"Error updating document in {collection}: {e}")
            raise
        finally:
            conn.close()

    def delete(self, collection: str, document_id: str) -> None:
        """Delete a document by ID"""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "DELETE FROM documents WHERE collection = ? AND document_id = ?",
                (collection, document_id),
            )
            conn.commit()
            if cursor.rowcount > 0:
                logger.info(f"Deleted document from {collection} with ID: {document_id}")
            else:
                logger.warning(f"No document found to delete in {collection} with ID: {document_id}")
        except Exception as e:
            logger.error(f"Error deleting document from {collection}: {e}")
            raise
        finally:
            conn.close()

    def _bind(self, value: Any) -> Tuple[str, Any]:
        """Placeholder and parameter for one value; lists and maps compare as JSON"""
        if isinstance(value, (list, tuple, dict)):
            return "json(?)", json.dumps(value)
        return "?", value

    def _bind_all(self, values: Sequence[Any]) -> Tuple[str, List[Any]]:
        bound = [self._bind(value) for value in values]
        return ", ".join(placeholder for placeholder, _ in bound), [param for _, param in bound]

    def _build_clause(self, field: str, operator: str, value: Any) -> Tuple[str, List[Any]]:
        """Translate one condition into a SQL fragment and its parameters"""
        path = _json_path(field)
        extract = "json_extract(document, ?)"

        if operator in _COMPARISON_OPERATORS:
            placeholder, param = self._bind(value)
            return f"{extract} {_COMPARISON_OPERATORS[operator]} {placeholder}", [path, param]
        if operator == "!=":
            placeholder, param = self._bind(value)
            return f"({extract} IS NOT NULL AND {extract} != {placeholder})", [path, path, param]
        if operator in LIST_OPERATORS:
            if not value:
                # Nothing can match an empty membership list
                return ("1" if operator == "not-in" else "0"), []
            placeholders, params = self._bind_all(value)
            if operator == "in":
                return f"{extract} IN ({placeholders})", [path, *params]
            if operator == "not-in":
                return f"({extract} IS NOT NULL AND {extract} NOT IN ({placeholders}))", [path, path, *params]
            return (
                f"EXISTS (SELECT 1 FROM json_each(document, ?) WHERE json_each.value IN ({placeholders}))",
                [path, *params],
            )
        # array-contains
        placeholder, param = self._bind(value)
        return f"EXISTS (SELECT 1 FROM json_each(document, ?) WHERE json_each.value = {placeholder})", [path, param]

    def query(self, collection: str, conditions: Sequence[Any]) -> Dict[str, Dict[str, Any]]:
        """Query documents with (field, operator, value) conditions"""
        where_clauses = ["collection = ?"]
        params: List[Any] = [collection]
        for field, operator, value in normalize_conditions(conditions):
            clause, clause_params = self._build_clause(field, operator, value)
            where_clauses.append(clause)
            params.extend(clause_params)

        sql = "SELECT document_id, document FROM documents WHERE " + " AND ".join(where_clauses) + " ORDER BY rowid"

        conn = self._get_connection()
        try:
            rows = conn.execute(sql, params).fetchall()
            return {row["document_id"]: self._with_id(row["document_id"], row["document"]) for row in rows}
        except Exception as e:
            logger.error(f"Error querying documents from {collection}: {e}")
            raise
        finally:
            conn.close()

    def ping(self) -> bool:
        conn = self._get_connection()
        try:
            conn.execute("SELECT 1").fetchone()
            return True
        finally:
            conn.close()
