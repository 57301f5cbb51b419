"""
Unit Tests for the SQLite document store.
Covers CRUD, partial updates and query conditions against a temporary database.
"""

import pytest

from database.document_store import DocumentNotFoundError
from database.nosql_adapter import SQLiteDocumentStore

COLLECTION = "products"


class TestSQLiteDocumentStore:
    """Test SQLite document store CRUD operations"""

    @pytest.fixture(autouse=True)
    def setup_store(self, tmp_path):
        self.store = SQLiteDocumentStore(str(tmp_path / "documents.db"))
        self.store.init_collections([COLLECTION])

    def test_create_assigns_id_and_reads_back(self):
        record = self.store.create(COLLECTION, {"name": "Mug", "price": 12.5, "images": []})

        assert record["id"]
        fetched = self.store.read_by_id(COLLECTION, record["id"])
        assert fetched == {"id": record["id"], "name": "Mug", "price": 12.5, "images": []}

    def test_create_with_preallocated_id(self):
        document_id = self.store.new_document_id()
        record = self.store.create(COLLECTION, {"name": "Plate"}, document_id=document_id)

        assert record["id"] == document_id
        assert self.store.read_by_id(COLLECTION, document_id)["name"] == "Plate"

    def test_new_document_ids_are_unique(self):
        assert len({self.store.new_document_id() for _ in range(50)}) == 50

    def test_read_by_id_missing_raises(self):
        with pytest.raises(DocumentNotFoundError) as exc_info:
            self.store.read_by_id(COLLECTION, "does-not-exist")

        assert exc_info.value.document_id == "does-not-exist"
        assert exc_info.value.collection == COLLECTION

    def test_read_all_merges_ids_and_scopes_by_collection(self):
        first = self.store.create(COLLECTION, {"name": "Mug"})
        second = self.store.create(COLLECTION, {"name": "Bowl"})
        self.store.create("orders", {"name": "Not a product"})

        documents = self.store.read_all(COLLECTION)

        assert {doc["id"] for doc in documents} == {first["id"], second["id"]}
        assert all("id" in doc for doc in documents)

    def test_read_all_empty_collection(self):
        assert self.store.read_all(COLLECTION) == []

    def test_update_merges_without_clobbering(self):
        record = self.store.create(COLLECTION, {"name": "Mug", "price": 10, "description": "Blue"})

        updated = self.store.update(COLLECTION, record["id"], {"price": 11})

        assert updated == {"id": record["id"], "name": "Mug", "price": 11, "description": "Blue"}
        assert self.store.read_by_id(COLLECTION, record["id"]) == updated

    def test_update_with_dotted_paths(self):
        record = self.store.create(COLLECTION, {"name": "Mug", "dimensions": {"height": 9, "width": 8}})

        updated = self.store.update(COLLECTION, record["id"], {"dimensions.width": 7, "stock.warehouse": 3})

        assert updated["dimensions"] == {"height": 9, "width": 7}
        assert updated["stock"] == {"warehouse": 3}

    def test_update_missing_raises(self):
        with pytest.raises(DocumentNotFoundError):
            self.store.update(COLLECTION, "does-not-exist", {"name": "Ghost"})

    def test_delete_removes_document(self):
        record = self.store.create(COLLECTION, {"name": "Mug"})

        self.store.delete(COLLECTION, record["id"])

        with pytest.raises(DocumentNotFoundError):
            self.store.read_by_id(COLLECTION, record["id"])

    def test_delete_missing_is_not_an_error(self):
        self.store.delete(COLLECTION, "does-not-exist")

    def test_ping(self):
        assert self.store.ping() is True


class TestSQLiteDocumentQueries:
    """Test query conditions translated to JSON1 expressions"""

    @pytest.fixture(autouse=True)
    def setup_store(self, tmp_path):
        self.store = SQLiteDocumentStore(str(tmp_path / "documents.db"))
        self.store.init_collections([COLLECTION])
        self.mug = self.store.create(COLLECTION, {"name": "Mug", "price": 10, "tags": ["kitchen", "ceramic"]})
        self.lamp = self.store.create(COLLECTION, {"name": "Lamp", "price": 40, "tags": ["living"]})
        self.rug = self.store.create(COLLECTION, {"name": "Rug", "price": 90, "details": {"color": "red"}})

    def _names(self, results):
        return sorted(doc["name"] for doc in results.values())

    def test_equality(self):
        results = self.store.query(COLLECTION, [("name", "==", "Lamp")])
        assert list(results) == [self.lamp["id"]]

    def test_single_equals_sign_is_equality(self):
        assert self._names(self.store.query(COLLECTION, [("name", "=", "Mug")])) == ["Mug"]

    def test_comparisons_are_combined(self):
        results = self.store.query(COLLECTION, [("price", ">=", 10), ("price", "<", 90)])
        assert self._names(results) == ["Lamp", "Mug"]

    def test_not_equal_excludes_missing_fields(self):
        results = self.store.query(COLLECTION, [("details.color", "!=", "blue")])
        assert self._names(results) == ["Rug"]

    def test_in_and_not_in(self):
        assert self._names(self.store.query(COLLECTION, [("name", "in", ["Mug", "Rug"])])) == ["Mug", "Rug"]
        assert self._names(self.store.query(COLLECTION, [("name", "not-in", ["Mug", "Rug"])])) == ["Lamp"]

    def test_empty_in_matches_nothing(self):
        assert self.store.query(COLLECTION, [("name", "in", [])]) == {}

    def test_array_contains(self):
        assert self._names(self.store.query(COLLECTION, [("tags", "array-contains", "ceramic")])) == ["Mug"]
        results = self.store.query(COLLECTION, [("tags", "array-contains-any", ["living", "ceramic"])])
        assert self._names(results) == ["Lamp", "Mug"]

    def test_nested_field(self):
        assert self._names(self.store.query(COLLECTION, [("details.color", "==", "red")])) == ["Rug"]

    def test_malformed_conditions_are_ignored(self):
        results = self.store.query(COLLECTION, [("name", "Mug"), ["price", ">", 5, "extra"], "name"])
        assert len(results) == 3

    def test_results_are_keyed_by_id(self):
        results = self.store.query(COLLECTION, [])
        assert all(results[document_id]["id"] == document_id for document_id in results)

    def test_unknown_operator_raises(self):
        with pytest.raises(ValueError):
            self.store.query(COLLECTION, [("name", "like", "M%")])

    def test_equality_with_list_value(self):
        assert self._names(self.store.query(COLLECTION, [("tags", "==", ["living"])])) == ["Lamp"]
        assert self._names(self.store.query(COLLECTION, [("tags", "==", ["living", "extra"])])) == []

    def test_equality_with_map_value(self):
        results = self.store.query(COLLECTION, [("details", "==", {"color": "red"})])
        assert self._names(results) == ["Rug"]

    def test_not_equal_with_list_value(self):
        assert self._names(self.store.query(COLLECTION, [("tags", "!=", ["living"])])) == ["Mug"]

    @pytest.mark.parametrize("operator", ["in", "not-in", "array-contains-any"])
    def test_list_operators_reject_scalar_values(self, operator):
        with pytest.raises(ValueError):
            self.store.query(COLLECTION, [("name", operator, "Mug")])
