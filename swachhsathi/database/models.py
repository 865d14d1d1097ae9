"""
Document models for SwachhSathi.

Documents are stored with camelCase field names; these dataclasses are the
typed view the triage components work with.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from swachhsathi.core.constants import Category, Severity, WORKER_ROLE
from swachhsathi.core.geo_utils import Point

logger = logging.getLogger(__name__)


def _parse_category(value: Any) -> Optional[Category]:
    if value is None:
        return None
    try:
        return Category(value)
    except ValueError:
        logger.warning(f"Ignoring unknown category: {value!r}")
        return None


def _parse_severity(value: Any) -> Optional[Severity]:
    if value is None:
        return None
    try:
        return Severity(value)
    except ValueError:
        return None


@dataclass
class Location:
    """Report location."""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Location":
        data = data or {}
        return cls(
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            address=data.get("address"),
        )

    @property
    def point(self) -> Optional[Point]:
        """Coordinates as a Point, or None when either is missing or unreadable."""
        return Point.from_mapping({"latitude": self.latitude, "longitude": self.longitude})


@dataclass
class Report:
    """
    Citizen-submitted waste report.

    `assigned_to` and `ngo_id` are written together by the assignment engine.
    """
    id: str
    location: Location = field(default_factory=Location)
    category: Optional[Category] = None
    severity: Optional[Severity] = None
    status: Optional[str] = None
    assigned_to: Optional[str] = None
    ngo_id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, report_id: str, data: Dict[str, Any]) -> "Report":
        return cls(
            id=report_id,
            location=Location.from_dict(data.get("location")),
            category=_parse_category(data.get("category")),
            severity=_parse_severity(data.get("severity")),
            status=data.get("status"),
            assigned_to=data.get("assignedTo"),
            ngo_id=data.get("ngoId"),
            user_id=data.get("userId"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class Worker:
    """Field worker belonging to an NGO."""
    uid: str
    ngo_id: Optional[str] = None
    role: str = WORKER_ROLE
    is_active: bool = False
    current_location: Optional[Point] = None
    fcm_token: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_dict(cls, uid: str, data: Dict[str, Any]) -> "Worker":
        return cls(
            uid=data.get("uid") or uid,
            ngo_id=data.get("ngoId"),
            role=data.get("role", ""),
            is_active=bool(data.get("isActive", False)),
            current_location=Point.from_mapping(data.get("currentLocation")),
            fcm_token=data.get("fcmToken"),
            name=data.get("name"),
            email=data.get("email"),
        )


@dataclass
class Ngo:
    """Organization handling a subset of categories."""
    id: str
    name: Optional[str] = None
    categories: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, ngo_id: str, data: Dict[str, Any]) -> "Ngo":
        return cls(
            id=ngo_id,
            name=data.get("name"),
            categories=list(data.get("categories") or []),
        )


@dataclass
class StatusHistoryEntry:
    """Append-only entry in a report's status history."""
    status: str
    worker_id: Optional[str] = None
    worker_name: Optional[str] = None
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "workerId": self.worker_id,
            "workerName": self.worker_name,
            "message": self.message,
        }
