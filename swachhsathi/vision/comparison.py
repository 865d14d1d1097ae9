"""
Before/after cleanliness comparison.

Scores how much garbage disappeared between a photo taken when a report was
filed and the photo a worker submits after cleaning.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from swachhsathi.core.constants import (
    CLEAN_SCORE_THRESHOLD,
    COMPARISON_CLEAN_KEYWORDS,
    COMPARISON_GARBAGE_KEYWORDS,
    COMPARISON_MESSAGES,
    MAX_COMPARISON_LABELS,
    PARTIAL_CLEAN_SCORE_THRESHOLD,
)
from swachhsathi.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class ComparisonResult:
    """Outcome of a before/after comparison."""
    is_clean: bool
    cleanliness_score: int
    message: str
    garbage_reduction: int
    before_garbage_count: int
    after_garbage_count: int
    before_labels: List[str] = field(default_factory=list)
    after_labels: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire format."""
        return {
            "isClean": self.is_clean,
            "message": self.message,
            "cleanlinessScore": self.cleanliness_score,
            "beforeLabels": self.before_labels,
            "afterLabels": self.after_labels,
            "garbageReduction": self.garbage_reduction,
            "beforeGarbageCount": self.before_garbage_count,
            "afterGarbageCount": self.after_garbage_count,
        }


def count_matching(labels: Iterable[str], keywords: Iterable[str]) -> int:
    """Count labels containing at least one keyword."""
    keywords = tuple(keywords)
    return sum(1 for label in labels if any(keyword in label for keyword in keywords))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_cleanliness(
    before_garbage: int,
    after_garbage: int,
    after_clean: int
) -> Tuple[int, int]:
    """
    Compute garbage reduction and a 0-100 cleanliness score.

    Reduction counts for up to 60 points, each clean indicator in the after
    photo for 10, and an after photo with no garbage indicators for 20.

    Returns:
        Tuple of (garbage_reduction, cleanliness_score)
    """
    reduction = max(0, before_garbage - after_garbage)
    raw = (
        reduction / max(before_garbage, 1) * 60
        + after_clean * 10
        + (20 if after_garbage == 0 else 0)
    )
    return reduction, min(100, max(0, _round_half_up(raw)))


def comparison_message(is_clean: bool, score: int) -> str:
    if is_clean:
        return COMPARISON_MESSAGES["clean"]
    if score >= PARTIAL_CLEAN_SCORE_THRESHOLD:
        return COMPARISON_MESSAGES["partial"]
    return COMPARISON_MESSAGES["dirty"]


class ComparisonEngine:
    """Compares before/after photos using label detection on both."""

    def __init__(self, labeling_service):
        """
        Args:
            labeling_service: Object with ``detect_labels(image_ref)``
        """
        self.labeling_service = labeling_service

    def compare(
        self,
        before_ref: Optional[str],
        after_ref: Optional[str]
    ) -> ComparisonResult:
        """
        Score the cleanup between two photos.

        Both label detections must succeed; collaborator errors propagate.

        Raises:
            ValidationError: If either reference is missing
        """
        if not before_ref or not after_ref:
            raise ValidationError("Both before and after image URLs are required")

        before_labels = [
            label.description.lower()
            for label in self.labeling_service.detect_labels(before_ref)
        ]
        after_labels = [
            label.description.lower()
            for label in self.labeling_service.detect_labels(after_ref)
        ]

        before_garbage = count_matching(before_labels, COMPARISON_GARBAGE_KEYWORDS)
        after_garbage = count_matching(after_labels, COMPARISON_GARBAGE_KEYWORDS)
        after_clean = count_matching(after_labels, COMPARISON_CLEAN_KEYWORDS)

        reduction, score = score_cleanliness(before_garbage, after_garbage, after_clean)
        is_clean = (
            score >= CLEAN_SCORE_THRESHOLD
            or (after_garbage == 0 and before_garbage > 0)
        )

        logger.info(
            f"Comparison: before={before_garbage} after={after_garbage} "
            f"clean={after_clean} score={score}"
        )

        return ComparisonResult(
            is_clean=is_clean,
            cleanliness_score=score,
            message=comparison_message(is_clean, score),
            garbage_reduction=reduction,
            before_garbage_count=before_garbage,
            after_garbage_count=after_garbage,
            before_labels=before_labels[:MAX_COMPARISON_LABELS],
            after_labels=after_labels[:MAX_COMPARISON_LABELS],
        )
