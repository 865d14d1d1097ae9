"""
Pytest configuration and fixtures
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from swachhsathi.alerts.push_notification import MockPushService
from swachhsathi.core.exceptions import ExternalServiceError
from swachhsathi.database.store import InMemoryDocumentStore
from swachhsathi.vision.vision_client import LabelAnnotation, LabelingResult, LocalizedObject


def make_labels(pairs):
    """Build label annotations from (description, score) pairs."""
    return [LabelAnnotation(description=d, score=s) for d, s in pairs]


def make_objects(count):
    """Build `count` localized objects."""
    return [LocalizedObject(name=f"Object {i}", score=0.9) for i in range(count)]


class FakeLabelingService:
    """Stand-in for the Vision client."""

    def __init__(self, labels=None, objects=None, error=None, labels_by_ref=None):
        self.labels = labels or []
        self.objects = objects or []
        self.error = error
        self.labels_by_ref = labels_by_ref
        self.calls = []

    def label_and_localize(self, image_ref):
        self.calls.append(image_ref)
        if self.error:
            raise self.error
        return LabelingResult(labels=list(self.labels), objects=list(self.objects))

    def detect_labels(self, image_ref):
        self.calls.append(image_ref)
        if self.error:
            raise self.error
        if self.labels_by_ref is not None:
            return list(self.labels_by_ref[image_ref])
        return list(self.labels)


class FakeGenerativeClassifier:
    """Stand-in for the Gemini client."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def classify(self, image_base64, prompt):
        self.calls.append((image_base64, prompt))
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def store():
    """Empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def push_service():
    """Recording push service."""
    return MockPushService()


@pytest.fixture
def vision_outage():
    """Error raised by an unavailable Vision API."""
    return ExternalServiceError("Vision request failed: 503 Service Unavailable")


@pytest.fixture
def report_location():
    """Report location used by assignment tests (Bengaluru)."""
    return {"latitude": 12.9, "longitude": 77.5, "address": "MG Road"}


@pytest.fixture
def seeded_store(store):
    """
    Store with two NGOs and their workers.

    Only NGO A handles Plastic Waste. NGO A has active workers about 2 km and
    10 km north of (12.9, 77.5), an inactive worker and one without location.
    NGO B has a very close worker who must never be picked for plastic.
    """
    store.set("ngos", "ngo-a", {"name": "Clean City Trust", "categories": ["Plastic Waste", "Garbage Collection"]})
    store.set("ngos", "ngo-b", {"name": "Green Earth", "categories": ["Organic Waste"]})

    store.set("users", "worker-near", {
        "uid": "worker-near", "name": "Asha", "role": "worker", "ngoId": "ngo-a",
        "isActive": True, "currentLocation": {"latitude": 12.918, "longitude": 77.5},
        "fcmToken": "token-near",
    })
    store.set("users", "worker-far", {
        "uid": "worker-far", "name": "Ravi", "role": "worker", "ngoId": "ngo-a",
        "isActive": True, "currentLocation": {"latitude": 12.99, "longitude": 77.5},
        "fcmToken": "token-far",
    })
    store.set("users", "worker-inactive", {
        "uid": "worker-inactive", "name": "Meena", "role": "worker", "ngoId": "ngo-a",
        "isActive": False, "currentLocation": {"latitude": 12.9001, "longitude": 77.5},
    })
    store.set("users", "worker-unlocated", {
        "uid": "worker-unlocated", "name": "Karan", "role": "worker", "ngoId": "ngo-a",
        "isActive": True,
    })
    store.set("users", "worker-other-ngo", {
        "uid": "worker-other-ngo", "name": "Divya", "role": "worker", "ngoId": "ngo-b",
        "isActive": True, "currentLocation": {"latitude": 12.9, "longitude": 77.5001},
    })
    store.set("users", "citizen-1", {
        "uid": "citizen-1", "name": "Priya", "role": "citizen", "fcmToken": "token-citizen",
    })
    return store
