"""
Document store access for SwachhSathi.

Two backends share the same small surface: Cloud Firestore through the
Firebase Admin SDK, and an in-memory store used for tests and local runs.
"""

import copy
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from firebase_admin import firestore

from swachhsathi.core.config import settings
from swachhsathi.core.exceptions import ExternalServiceError, NotFoundError
from swachhsathi.core.firebase import get_firebase_app

logger = logging.getLogger(__name__)

# Filter operators
EQUALS = "=="
ARRAY_CONTAINS = "array-contains"
IN = "in"

# Firestore caps the number of values in a single `in` filter
FIRESTORE_IN_LIMIT = 30


class _ServerTimestamp:
    """Sentinel replaced by the backend's own write time."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class Filter:
    """Single field filter."""
    field: str
    op: str
    value: Any


@dataclass
class Document:
    """Snapshot of a stored document."""
    id: str
    data: Dict[str, Any]


class FirestoreDocumentStore:
    """
    Document store backed by Cloud Firestore.

    Supports point reads, equality / array-contains / in filters, field
    updates and document adds.
    """

    def __init__(self, client: Optional[Any] = None):
        """
        Initialize the Firestore store.

        Args:
            client: Existing Firestore client; one is created from the shared
                Firebase app when omitted
        """
        if client is None:
            app = get_firebase_app(
                settings.firebase_credentials_path,
                settings.firebase_project_id,
            )
            client = firestore.client(app)
        self._db = client

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            snap = self._db.collection(collection).document(doc_id).get()
        except Exception as e:
            raise ExternalServiceError(f"Firestore read {collection}/{doc_id} failed: {e}") from e
        if not snap.exists:
            return None
        return Document(id=snap.id, data=snap.to_dict() or {})

    def query(self, collection: str, filters: Sequence[Filter]) -> List[Document]:
        in_filters = [f for f in filters if f.op == IN]
        if len(in_filters) > 1:
            raise ValueError("Only one 'in' filter is supported per query")

        if not in_filters:
            return self._run_query(collection, filters)

        # Split large `in` filters into several queries
        in_filter = in_filters[0]
        others = [f for f in filters if f.op != IN]
        values = list(in_filter.value)
        documents: List[Document] = []
        for start in range(0, len(values), FIRESTORE_IN_LIMIT):
            chunk = Filter(in_filter.field, IN, values[start:start + FIRESTORE_IN_LIMIT])
            documents.extend(self._run_query(collection, [*others, chunk]))
        return documents

    def _run_query(self, collection: str, filters: Sequence[Filter]) -> List[Document]:
        query = self._db.collection(collection)
        for f in filters:
            query = query.where(filter=firestore.FieldFilter(f.field, f.op, f.value))
        try:
            return [Document(id=snap.id, data=snap.to_dict() or {}) for snap in query.stream()]
        except Exception as e:
            raise ExternalServiceError(f"Firestore query on {collection} failed: {e}") from e

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        try:
            self._db.collection(collection).document(doc_id).update(self._resolve(fields))
        except Exception as e:
            raise ExternalServiceError(f"Firestore update {collection}/{doc_id} failed: {e}") from e

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        try:
            _, ref = self._db.collection(collection).add(self._resolve(data))
        except Exception as e:
            raise ExternalServiceError(f"Firestore add to {collection} failed: {e}") from e
        return ref.id

    def add_to_subcollection(
        self,
        collection: str,
        doc_id: str,
        subcollection: str,
        data: Dict[str, Any]
    ) -> str:
        try:
            _, ref = (
                self._db.collection(collection)
                .document(doc_id)
                .collection(subcollection)
                .add(self._resolve(data))
            )
        except Exception as e:
            raise ExternalServiceError(
                f"Firestore add to {collection}/{doc_id}/{subcollection} failed: {e}"
            ) from e
        return ref.id

    @staticmethod
    def _resolve(data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            k: firestore.SERVER_TIMESTAMP if v is SERVER_TIMESTAMP else v
            for k, v in data.items()
        }


class InMemoryDocumentStore:
    """In-memory document store for testing and local development."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._subcollections: Dict[tuple, Dict[str, Dict[str, Any]]] = {}

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or overwrite a document."""
        self._collections.setdefault(collection, {})[doc_id] = self._resolve(data)

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        data = self._collections.get(collection, {}).get(doc_id)
        if data is None:
            return None
        return Document(id=doc_id, data=copy.deepcopy(data))

    def query(self, collection: str, filters: Sequence[Filter]) -> List[Document]:
        return [
            Document(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._collections.get(collection, {}).items()
            if all(self._matches(data, f) for f in filters)
        ]

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        docs = self._collections.get(collection, {})
        if doc_id not in docs:
            raise NotFoundError(f"{collection}/{doc_id} does not exist")
        docs[doc_id].update(self._resolve(fields))

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self.set(collection, doc_id, data)
        return doc_id

    def add_to_subcollection(
        self,
        collection: str,
        doc_id: str,
        subcollection: str,
        data: Dict[str, Any]
    ) -> str:
        entry_id = uuid.uuid4().hex[:20]
        key = (collection, doc_id, subcollection)
        self._subcollections.setdefault(key, {})[entry_id] = self._resolve(data)
        return entry_id

    def list_subcollection(
        self,
        collection: str,
        doc_id: str,
        subcollection: str
    ) -> List[Document]:
        """List documents of a sub-collection in insertion order."""
        docs = self._subcollections.get((collection, doc_id, subcollection), {})
        return [Document(id=k, data=copy.deepcopy(v)) for k, v in docs.items()]

    @staticmethod
    def _matches(data: Dict[str, Any], f: Filter) -> bool:
        if f.field not in data:
            return False
        value = data[f.field]
        if f.op == EQUALS:
            return value == f.value
        if f.op == ARRAY_CONTAINS:
            return isinstance(value, list) and f.value in value
        if f.op == IN:
            return value in f.value
        raise ValueError(f"Unsupported filter operator: {f.op}")

    @staticmethod
    def _resolve(data: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        return {
            k: now if v is SERVER_TIMESTAMP else copy.deepcopy(v)
            for k, v in data.items()
        }


def get_document_store():
    """Get document store instance."""
    if settings.firebase_credentials_path or settings.firebase_project_id:
        return FirestoreDocumentStore()

    logger.warning("Firebase not configured, using in-memory document store")
    return InMemoryDocumentStore()
