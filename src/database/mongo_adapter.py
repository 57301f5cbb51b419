"""
MongoDB adapter for document-based operations.
Provides the same interface as SQLiteDocumentStore but uses native MongoDB collections.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from bson import ObjectId
from pymongo import MongoClient, ReturnDocument
from pymongo.errors import ConnectionFailure

from .document_store import DocumentNotFoundError, DocumentStore, normalize_conditions

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "products_api"

_MONGO_OPERATORS = {
    "==": "$eq",
    "!=": "$ne",
    "<": "$lt",
    "<=": "$lte",
    ">": "$gt",
    ">=": "$gte",
    "in": "$in",
    "not-in": "$nin",
    "array-contains-any": "$in",
}


def build_mongo_filter(conditions: Sequence[Any]) -> Dict[str, Any]:
    """Convert (field, operator, value) conditions into a MongoDB filter document"""
    mongo_filter: Dict[str, Any] = {}
    for field, operator, value in normalize_conditions(conditions):
        if operator == "array-contains":
            # equality against an array field matches any element
            clause = {"$eq": value}
        else:
            clause = {_MONGO_OPERATORS[operator]: value}
        if operator in ("!=", "not-in"):
            clause["$exists"] = True
        mongo_filter.setdefault(field, {}).update(clause)
    return mongo_filter


class MongoDocumentStore(DocumentStore):
    """MongoDB adapter keyed by string document ids stored as ``_id``"""

    def __init__(
        self,
        connection_string: Optional[str] = None,
        database_name: Optional[str] = None,
        client: Optional[MongoClient] = None,
    ):
        if client is None and not connection_string:
            raise ValueError("MongoDB connection string required. Set MONGODB_URI or pass connection_string")

        self.connection_string = connection_string
        self.client = client
        self.db = None
        self._connect(database_name)

    def _connect(self, database_name: Optional[str]) -> None:
        """Establish MongoDB connection"""
        try:
            if self.client is None:
                self.client = MongoClient(self.connection_string)
            if database_name:
                self.db = self.client[database_name]
            else:
                self.db = self.client.get_default_database(default=DEFAULT_DATABASE_NAME)
            logger.info(f"Connected to MongoDB database: {self.db.name}")
        except ConnectionFailure as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    @staticmethod
    def _to_record(document: Dict[str, Any]) -> Dict[str, Any]:
        """Replace MongoDB's _id with the public id field"""
        document = dict(document)
        document["id"] = str(document.pop("_id"))
        return document

    def init_collections(self, collections: Sequence[str] = ()) -> None:
        """Create indexes for the given collections"""
        try:
            for collection_name in collections:
                self.db[collection_name].create_index([("name", 1)])
            logger.info(f"MongoDB indexes initialized for {list(collections)}")
        except Exception as e:
            logger.error(f"Error initializing MongoDB collections: {e}")
            raise

    def new_document_id(self) -> str:
        return str(ObjectId())

    def create(self, collection: str, data: Dict[str, Any], document_id: Optional[str] = None) -> Dict[str, Any]:
        """Create a new document in the collection"""
        document_id = document_id or self.new_document_id()
        document = dict(data)
        document["id"] = document_id
        try:
            self.db[collection].insert_one({**document, "_id": document_id})
            logger.info(f"Created document in {collection} with ID: {document_id}")
            return document
        except Exception as e:
            logger.error(f"Error creating document in {collection}: {e}")
            raise

    def read_all(self, collection: str) -> List[Dict[str, Any]]:
        try:
            return [self._to_record(document) for document in self.db[collection].find({})]
        except Exception as e:
            logger.error(f"Error reading documents from {collection}: {e}")
            raise

    def read_by_id(self, collection: str, document_id: str) -> Dict[str, Any]:
        """Get a document by ID"""
        try:
            document = self.db[collection].find_one({"_id": document_id})
        except Exception as e:
            logger.error(f"Error getting document from {collection}: {e}")
            raise

        if document is None:
            raise DocumentNotFoundError(collection, document_id)
        return self._to_record(document)

    def update(self, collection: str, document_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a $set of dotted field paths and return the document after the update"""
        if not fields:
            return self.read_by_id(collection, document_id)

        try:
            document = self.db[collection].find_one_and_update(
                {"_id": document_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except Exception as e:
            logger.error(f"Error updating document in {collection}: {e}")
            raise

        if document is None:
            raise DocumentNotFoundError(collection, document_id)
        logger.info(f"Updated document in {collection} with ID: {document_id}")
        return self._to_record(document)

    def delete(self, collection: str, document_id: str) -> None:
        """Delete a document by ID"""
        try:
            result = self.db[collection].delete_one({"_id": document_id})
        except Exception as e:
            logger.error(f"Error deleting document from {collection}: {e}")
            raise

        if result.deleted_count > 0:
            logger.info(f"Deleted document from {collection} with ID: {document_id}")
        else:
            logger.warning(f"No document found to delete in {collection} with ID: {document_id}")

    def query(self, collection: str, conditions: Sequence[Any]) -> Dict[str, Dict[str, Any]]:
        """Query documents with (field, operator, value) conditions"""
        mongo_filter = build_mongo_filter(conditions)
        try:
            records = [self._to_record(document) for document in self.db[collection].find(mongo_filter)]
        except Exception as e:
            logger.error(f"Error querying documents from {collection}: {e}")
            raise
        return {record["id"]: record for record in records}

    def ping(self) -> bool:
        self.client.admin.command("ping")
        return True

    def close(self) -> None:
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
