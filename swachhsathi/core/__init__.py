"""
SwachhSathi - Core Utilities
Central configuration, logging, constants, and error types.
"""

from swachhsathi.core.config import settings
from swachhsathi.core.constants import (
    Category,
    Severity,
    ReportStatus,
    CATEGORY_KEYWORDS,
    DEFAULT_CATEGORY,
)
from swachhsathi.core.exceptions import (
    SwachhSathiError,
    ValidationError,
    ExternalServiceError,
    NotFoundError,
    ClassificationError,
)
from swachhsathi.core.geo_utils import (
    Point,
    haversine_distance,
    distance_between,
)

__all__ = [
    "settings",
    "Category",
    "Severity",
    "ReportStatus",
    "CATEGORY_KEYWORDS",
    "DEFAULT_CATEGORY",
    "SwachhSathiError",
    "ValidationError",
    "ExternalServiceError",
    "NotFoundError",
    "ClassificationError",
    "Point",
    "haversine_distance",
    "distance_between",
]
