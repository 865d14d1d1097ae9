"""
Tests for document store backends
"""
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
from firebase_admin import firestore

from swachhsathi.core.config import settings
from swachhsathi.core.exceptions import ExternalServiceError, NotFoundError
from swachhsathi.database.store import (
    ARRAY_CONTAINS,
    EQUALS,
    IN,
    SERVER_TIMESTAMP,
    Filter,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    get_document_store,
)


def snapshot(doc_id, data):
    snap = MagicMock()
    snap.id = doc_id
    snap.exists = True
    snap.to_dict.return_value = data
    return snap


class FakeQuery:
    """Records the filters of every streamed query."""

    def __init__(self, log, results=None, filters=()):
        self.log = log
        self.results = results or []
        self.filters = filters

    def where(self, filter):
        return FakeQuery(self.log, self.results, self.filters + (filter,))

    def stream(self):
        self.log.append(self.filters)
        return iter(self.results)


class TestFirestoreDocumentStore:
    """Test suite for FirestoreDocumentStore."""

    def setup_method(self):
        self.db = MagicMock()
        self.store = FirestoreDocumentStore(client=self.db)

    def test_get(self):
        self.db.collection.return_value.document.return_value.get.return_value = snapshot(
            "u1", {"fcmToken": "t"}
        )

        document = self.store.get("users", "u1")

        self.db.collection.assert_called_with("users")
        self.db.collection.return_value.document.assert_called_with("u1")
        assert document.id == "u1"
        assert document.data == {"fcmToken": "t"}

    def test_get_missing(self):
        snap = snapshot("u1", None)
        snap.exists = False
        self.db.collection.return_value.document.return_value.get.return_value = snap

        assert self.store.get("users", "u1") is None

    def test_query_applies_filters(self):
        log = []
        self.db.collection.return_value = FakeQuery(log, [snapshot("ngo-a", {"name": "A"})])

        documents = self.store.query("ngos", [Filter("categories", ARRAY_CONTAINS, "Plastic Waste")])

        assert [d.id for d in documents] == ["ngo-a"]
        (applied,) = log
        assert len(applied) == 1
        assert applied[0].field_path == "categories"
        assert applied[0].op_string == "array-contains"
        assert applied[0].value == "Plastic Waste"

    def test_large_in_filter_is_chunked(self):
        log = []
        self.db.collection.return_value = FakeQuery(log, [snapshot("w", {})])
        ngo_ids = [f"ngo-{i}" for i in range(65)]

        documents = self.store.query("users", [
            Filter("role", EQUALS, "worker"),
            Filter("ngoId", IN, ngo_ids),
        ])

        assert len(log) == 3
        chunks = [applied[-1].value for applied in log]
        assert [len(chunk) for chunk in chunks] == [30, 30, 5]
        assert sum(chunks, []) == ngo_ids
        assert all(applied[0].op_string == "==" for applied in log)
        assert len(documents) == 3

    def test_two_in_filters_rejected(self):
        with pytest.raises(ValueError):
            self.store.query("users", [Filter("a", IN, [1]), Filter("b", IN, [2])])

    def test_query_error_wrapped(self):
        self.db.collection.return_value.stream.side_effect = RuntimeError("deadline exceeded")

        with pytest.raises(ExternalServiceError):
            self.store.query("ngos", [])

    def test_update_resolves_server_timestamp(self):
        self.store.update("reports", "r1", {"status": "assigned", "updatedAt": SERVER_TIMESTAMP})

        update = self.db.collection.return_value.document.return_value.update
        update.assert_called_once_with(
            {"status": "assigned", "updatedAt": firestore.SERVER_TIMESTAMP}
        )

    def test_update_error_wrapped(self):
        self.db.collection.return_value.document.return_value.update.side_effect = RuntimeError("x")

        with pytest.raises(ExternalServiceError):
            self.store.update("reports", "r1", {"status": "assigned"})

    def test_add(self):
        self.db.collection.return_value.add.return_value = (None, MagicMock(id="scan-1"))

        assert self.store.add("wasteScans", {"userId": "u1"}) == "scan-1"

    def test_add_to_subcollection(self):
        reports = self.db.collection.return_value
        history = reports.document.return_value.collection.return_value
        history.add.return_value = (None, MagicMock(id="entry-1"))

        entry_id = self.store.add_to_subcollection(
            "reports", "r1", "reportStatus", {"status": "assigned", "timestamp": SERVER_TIMESTAMP}
        )

        assert entry_id == "entry-1"
        reports.document.assert_called_with("r1")
        reports.document.return_value.collection.assert_called_with("reportStatus")
        history.add.assert_called_once_with(
            {"status": "assigned", "timestamp": firestore.SERVER_TIMESTAMP}
        )


class TestInMemoryDocumentStore:
    """Test suite for InMemoryDocumentStore."""

    def setup_method(self):
        self.store = InMemoryDocumentStore()
        self.store.set("users", "w1", {"role": "worker", "ngoId": "a", "tags": ["x"]})
        self.store.set("users", "w2", {"role": "worker", "ngoId": "b"})
        self.store.set("users", "c1", {"role": "citizen"})

    def test_filters(self):
        workers = self.store.query("users", [Filter("role", EQUALS, "worker")])
        assert {d.id for d in workers} == {"w1", "w2"}

        in_a = self.store.query("users", [Filter("ngoId", IN, ["a", "z"])])
        assert [d.id for d in in_a] == ["w1"]

        tagged = self.store.query("users", [Filter("tags", ARRAY_CONTAINS, "x")])
        assert [d.id for d in tagged] == ["w1"]

    def test_missing_field_never_matches(self):
        assert self.store.query("users", [Filter("ngoId", IN, [None])]) == []

    def test_returned_data_is_a_copy(self):
        document = self.store.get("users", "w1")
        document.data["tags"].append("y")

        assert self.store.get("users", "w1").data["tags"] == ["x"]

    def test_update(self):
        self.store.update("users", "w1", {"isActive": True, "updatedAt": SERVER_TIMESTAMP})

        data = self.store.get("users", "w1").data
        assert data["isActive"] is True
        assert isinstance(data["updatedAt"], datetime)
        assert data["role"] == "worker"

    def test_update_missing_document(self):
        with pytest.raises(NotFoundError):
            self.store.update("users", "ghost", {"isActive": True})

    def test_subcollection(self):
        self.store.add_to_subcollection("reports", "r1", "reportStatus", {"status": "assigned"})
        self.store.add_to_subcollection("reports", "r1", "reportStatus", {"status": "resolved"})

        history = self.store.list_subcollection("reports", "r1", "reportStatus")

        assert [d.data["status"] for d in history] == ["assigned", "resolved"]
        assert self.store.list_subcollection("reports", "r2", "reportStatus") == []

    def test_unknown_collection(self):
        assert self.store.get("nothing", "x") is None
        assert self.store.query("nothing", []) == []


class TestGetDocumentStore:
    """Test suite for store selection."""

    def test_in_memory_without_firebase(self):
        with patch.object(settings, "firebase_credentials_path", None), \
                patch.object(settings, "firebase_project_id", None):
            assert isinstance(get_document_store(), InMemoryDocumentStore)

    def test_firestore_with_project(self):
        with patch.object(settings, "firebase_project_id", "swachhsathi-dev"), \
                patch("swachhsathi.database.store.get_firebase_app") as get_app, \
                patch("swachhsathi.database.store.firestore.client") as client:
            store = get_document_store()

        assert isinstance(store, FirestoreDocumentStore)
        get_app.assert_called_once()
        client.assert_called_once_with(get_app.return_value)
