"""
Database module for SwachhSathi
Document store access and typed document models.
"""

from .models import (
    Location,
    Report,
    Worker,
    Ngo,
    StatusHistoryEntry,
)
from .store import (
    Document,
    Filter,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    SERVER_TIMESTAMP,
    get_document_store,
)

__all__ = [
    "Location",
    "Report",
    "Worker",
    "Ngo",
    "StatusHistoryEntry",
    "Document",
    "Filter",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
    "SERVER_TIMESTAMP",
    "get_document_store",
]
