"""
Waste scanner: identifies the kind of waste in a photo and gives recycling
and disposal guidance. Scans made by a known user are kept for statistics.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from swachhsathi.core.constants import WASTE_SCANS_COLLECTION
from swachhsathi.core.exceptions import ValidationError
from swachhsathi.database.store import EQUALS, SERVER_TIMESTAMP, Filter

logger = logging.getLogger(__name__)

RECYCLABLE = "recyclable"
BIODEGRADABLE = "biodegradable"
HAZARDOUS = "hazardous"
GENERAL = "general"

SCAN_CATEGORIES = (RECYCLABLE, BIODEGRADABLE, HAZARDOUS, GENERAL)
RECENT_SCANS_LIMIT = 5


@dataclass(frozen=True)
class WasteRule:
    """Exact-label rule mapping detected labels to a waste type."""
    waste_type: str
    category: str
    labels: Tuple[str, ...]
    recycling_info: str
    disposal_method: str


# Checked in order; the first rule with an exactly matching label wins
WASTE_RULES: List[WasteRule] = [
    WasteRule(
        "Plastic Waste", RECYCLABLE,
        ("plastic", "bottle", "container", "packaging"),
        "Most plastic bottles and containers (labeled #1-7) are recyclable. "
        "Check your local recycling guidelines for specific types accepted.",
        "Rinse the plastic item, remove caps/lids, and place in your recycling bin. "
        "Look for the recycling symbol and number on the bottom.",
    ),
    WasteRule(
        "Paper/Cardboard", RECYCLABLE,
        ("paper", "cardboard", "box", "newspaper", "magazine"),
        "Paper and cardboard are highly recyclable materials. "
        "Keep them dry and clean for optimal recycling.",
        "Flatten cardboard boxes, remove any plastic tape or labels, and place in your "
        "recycling bin. Avoid soiled or greasy paper.",
    ),
    WasteRule(
        "Glass", RECYCLABLE,
        ("glass", "jar", "bottle", "wine"),
        "Glass is 100% recyclable and can be recycled endlessly without loss of "
        "quality or purity.",
        "Rinse glass containers, remove caps/lids, and place in your recycling bin. "
        "Some areas require color separation.",
    ),
    WasteRule(
        "Metal", RECYCLABLE,
        ("metal", "aluminum", "can", "tin", "steel"),
        "Metal cans (aluminum and steel) are highly valuable recyclable materials.",
        "Rinse cans, crush to save space, and place in recycling bin. "
        "Metal foil and trays are also recyclable.",
    ),
    WasteRule(
        "Organic Waste", BIODEGRADABLE,
        ("food", "fruit", "vegetable", "organic", "plant", "leaf"),
        "Organic waste can be composted to create nutrient-rich soil and reduce "
        "methane emissions from landfills.",
        "Compost at home or use green waste bins. Avoid meat, dairy, and oily foods "
        "in home composting.",
    ),
    WasteRule(
        "Electronic Waste", HAZARDOUS,
        ("electronic", "phone", "computer", "battery", "gadget", "device"),
        "E-waste contains valuable materials and hazardous substances. "
        "Never throw electronics in regular trash.",
        "Take to designated e-waste collection centers or retailer take-back programs. "
        "Delete personal data first.",
    ),
    WasteRule(
        "Batteries", HAZARDOUS,
        ("battery", "batteries", "cell"),
        "Batteries contain toxic materials and must be recycled properly to prevent "
        "environmental contamination.",
        "Take to battery collection points at retail stores or hazardous waste "
        "facilities. Never throw in regular trash.",
    ),
    WasteRule(
        "Textiles", RECYCLABLE,
        ("textile", "fabric", "clothing", "cloth", "shirt", "pants"),
        "Textiles can be donated, recycled, or repurposed to reduce landfill waste.",
        "Donate wearable clothing to charity, use textile recycling bins for damaged "
        "items, or repurpose as cleaning rags.",
    ),
]

GENERAL_WASTE_RULE = WasteRule(
    "General Waste", GENERAL, (),
    "This item appears to be general waste. "
    "Check if any parts can be separated and recycled.",
    "Place in general waste bin. Consider if any components can be separated "
    "for recycling.",
)


@dataclass
class WasteAnalysis:
    """Waste type and guidance for one scanned photo."""
    waste_type: str
    category: str
    confidence: int
    recycling_info: str
    disposal_method: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.waste_type,
            "category": self.category,
            "confidence": self.confidence,
            "recyclingInfo": self.recycling_info,
            "disposalMethod": self.disposal_method,
        }


def classify_waste(labels) -> WasteAnalysis:
    """
    Pick the waste type for a set of Vision labels.

    Args:
        labels: Label annotations with ``description`` and ``score``

    Returns:
        WasteAnalysis for the first matching rule, or general waste
    """
    label_texts = {label.description.lower() for label in labels}
    max_score = max((label.score or 0.0 for label in labels), default=0.0)
    confidence = int(round(max_score * 100))

    rule = next(
        (r for r in WASTE_RULES if label_texts.intersection(r.labels)),
        GENERAL_WASTE_RULE,
    )

    return WasteAnalysis(
        waste_type=rule.waste_type,
        category=rule.category,
        confidence=confidence,
        recycling_info=rule.recycling_info,
        disposal_method=rule.disposal_method,
    )


class WasteScanner:
    """Scans waste photos and keeps per-user scan history."""

    def __init__(self, labeling_service, store):
        self.labeling_service = labeling_service
        self.store = store

    def analyze(self, image_ref: Optional[str], user_id: Optional[str] = None) -> WasteAnalysis:
        """
        Identify the waste type in a photo.

        A scan record is written to ``wasteScans`` when the user is known.

        Raises:
            ValidationError: If image_ref is empty
        """
        if not image_ref:
            raise ValidationError("Image URI is required")

        analysis = classify_waste(self.labeling_service.detect_labels(image_ref))

        if user_id:
            self.store.add(WASTE_SCANS_COLLECTION, {
                "userId": user_id,
                "imageUri": image_ref,
                "detectedType": analysis.waste_type,
                "category": analysis.category,
                "confidence": analysis.confidence,
                "timestamp": SERVER_TIMESTAMP,
            })
            logger.info(f"Waste scan recorded for user {user_id}: {analysis.waste_type}")

        return analysis

    def stats(self, user_id: Optional[str]) -> Dict[str, Any]:
        """
        Summarize a user's scans.

        Returns:
            Dictionary with totalScans, byCategory and recentScans (newest first)

        Raises:
            ValidationError: If no user is given
        """
        if not user_id:
            raise ValidationError("User must be authenticated")

        documents = self.store.query(
            WASTE_SCANS_COLLECTION, [Filter("userId", EQUALS, user_id)]
        )
        oldest = datetime.min.replace(tzinfo=timezone.utc)
        scans = sorted(
            (doc.data for doc in documents),
            key=lambda scan: scan.get("timestamp") or oldest,
        )

        return {
            "totalScans": len(scans),
            "byCategory": {
                category: sum(1 for scan in scans if scan.get("category") == category)
                for category in SCAN_CATEGORIES
            },
            "recentScans": list(reversed(scans[-RECENT_SCANS_LIMIT:])),
        }
