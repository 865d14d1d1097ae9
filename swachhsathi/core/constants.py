"""
SwachhSathi - Constants and Reference Data
Static values used throughout the application.
"""

from enum import Enum
from typing import Dict, List, Tuple


# =============================================================================
# REPORT CLASSIFICATION
# =============================================================================

class Category(str, Enum):
    """Closed set of report categories."""
    DEAD_ANIMALS = "Dead Animals"
    GARBAGE_COLLECTION = "Garbage Collection"
    CLEAN_PUBLIC_SPACE = "Clean Public Space"
    OVERFLOWING_DUSTBINS = "Overflowing Dustbins"
    CONSTRUCTION_WASTE = "Construction Waste"
    PLASTIC_WASTE = "Plastic Waste"
    ORGANIC_WASTE = "Organic Waste"
    DRAIN_CLEANING = "Drain Cleaning"


class Severity(str, Enum):
    """Report severity levels."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


DEFAULT_CATEGORY = Category.GARBAGE_COLLECTION

# Keyword fragments per category. Order is the tie-break order when several
# categories match the same label.
CATEGORY_KEYWORDS: List[Tuple[Category, Tuple[str, ...]]] = [
    (Category.DEAD_ANIMALS, (
        "animal", "dead", "carcass", "corpse", "pet", "wildlife", "bird", "dog", "cat",
    )),
    (Category.GARBAGE_COLLECTION, (
        "garbage", "trash", "waste", "litter", "rubbish", "debris", "dump", "refuse",
    )),
    (Category.CLEAN_PUBLIC_SPACE, (
        "public", "space", "area", "park", "street", "road", "sidewalk", "pathway",
    )),
    (Category.OVERFLOWING_DUSTBINS, (
        "dustbin", "bin", "overflow", "overflowing", "full", "container", "dumpster",
        "trash can",
    )),
    (Category.CONSTRUCTION_WASTE, (
        "construction", "debris", "concrete", "brick", "cement", "rubble",
        "building material", "demolition",
    )),
    (Category.PLASTIC_WASTE, (
        "plastic", "bottle", "bag", "container", "packaging", "wrapper", "polythene",
        "styrofoam",
    )),
    (Category.ORGANIC_WASTE, (
        "food", "organic", "vegetable", "fruit", "leftover", "rotten", "compost",
        "biodegradable",
    )),
    (Category.DRAIN_CLEANING, (
        "drain", "sewer", "gutter", "manhole", "drainage", "blocked", "clogged", "water",
    )),
]

NO_GARBAGE_DESCRIPTION = (
    "No garbage detected in the image. "
    "Please capture an image with visible waste or garbage."
)

# Severity thresholds for the primary classifier
HIGH_SEVERITY_MIN_OBJECTS = 5          # strictly more than
HIGH_SEVERITY_MIN_CONFIDENCE = 0.8     # strictly more than
LOW_SEVERITY_MAX_OBJECTS = 2           # at most
LOW_SEVERITY_MAX_CONFIDENCE = 0.5      # strictly less than

FALLBACK_DEFAULT_CONFIDENCE = 0.85
MAX_DETECTED_LABELS = 5


# =============================================================================
# BEFORE / AFTER COMPARISON
# =============================================================================

COMPARISON_GARBAGE_KEYWORDS: Tuple[str, ...] = (
    "waste", "garbage", "trash", "litter", "rubbish", "debris", "plastic",
    "bottle", "bag", "wrapper", "container", "pollution",
)

COMPARISON_CLEAN_KEYWORDS: Tuple[str, ...] = (
    "clean", "tidy", "neat", "organized", "clear", "empty",
)

CLEAN_SCORE_THRESHOLD = 70
PARTIAL_CLEAN_SCORE_THRESHOLD = 50
MAX_COMPARISON_LABELS = 10

COMPARISON_MESSAGES: Dict[str, str] = {
    "clean": "Great job! The area has been successfully cleaned.",
    "partial": "Good progress, but the area needs more cleaning.",
    "dirty": (
        "The area still appears to have significant garbage. "
        "Please clean more thoroughly."
    ),
}


# =============================================================================
# REPORT LIFECYCLE
# =============================================================================

class ReportStatus(str, Enum):
    """Status of a waste report."""
    CREATED = "created"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


WORKER_ROLE = "worker"

# Document store collections
REPORTS_COLLECTION = "reports"
USERS_COLLECTION = "users"
NGOS_COLLECTION = "ngos"
WASTE_SCANS_COLLECTION = "wasteScans"
REPORT_STATUS_SUBCOLLECTION = "reportStatus"
