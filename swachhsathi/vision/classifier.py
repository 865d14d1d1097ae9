"""
Garbage classifier for citizen-submitted photos.

Cloud Vision labels and object localization are the primary signal. When the
Vision call itself fails, a single Gemini request is made instead and its
JSON answer is normalized to the same result shape.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from statistics import mean
from typing import Any, Dict, List, Optional

import httpx

from swachhsathi.core.constants import (
    CATEGORY_KEYWORDS,
    DEFAULT_CATEGORY,
    FALLBACK_DEFAULT_CONFIDENCE,
    HIGH_SEVERITY_MIN_CONFIDENCE,
    HIGH_SEVERITY_MIN_OBJECTS,
    LOW_SEVERITY_MAX_CONFIDENCE,
    LOW_SEVERITY_MAX_OBJECTS,
    MAX_DETECTED_LABELS,
    NO_GARBAGE_DESCRIPTION,
    Category,
    Severity,
)
from swachhsathi.core.exceptions import ClassificationError, ValidationError
from swachhsathi.vision.gemini_client import fetch_image_base64
from swachhsathi.vision.vision_client import LabelingResult

logger = logging.getLogger(__name__)


class Analyzer(str, Enum):
    """Which classifier produced a result."""
    PRIMARY = "primary"
    FALLBACK = "fallback"


@dataclass
class ClassificationResult:
    """
    Typed outcome of classifying one image.

    When `is_garbage` is False, `category` and `severity` are None and
    `confidence` is 0.
    """
    is_garbage: bool
    category: Optional[Category]
    severity: Optional[Severity]
    confidence: float
    description: str
    detected_labels: List[str] = field(default_factory=list)
    object_count: int = 0
    analyzed_by: Analyzer = Analyzer.PRIMARY

    @classmethod
    def not_garbage(
        cls,
        description: str,
        labels: List[str],
        object_count: int,
        analyzed_by: Analyzer
    ) -> "ClassificationResult":
        return cls(
            is_garbage=False,
            category=None,
            severity=None,
            confidence=0.0,
            description=description,
            detected_labels=labels[:MAX_DETECTED_LABELS],
            object_count=object_count,
            analyzed_by=analyzed_by,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire format."""
        return {
            "isGarbage": self.is_garbage,
            "category": self.category.value if self.category else None,
            "severity": self.severity.value if self.severity else None,
            "confidence": self.confidence,
            "description": self.description,
            "detectedLabels": self.detected_labels,
            "objectCount": self.object_count,
            "analyzedBy": self.analyzed_by.value,
        }


@dataclass
class Attempt:
    """Tagged outcome of one classifier stage."""
    result: Optional[ClassificationResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None


# =============================================================================
# PRIMARY: LABELS + OBJECTS
# =============================================================================

def match_category(labels) -> Optional[Category]:
    """
    Pick the category of the highest-scoring label that matches any keyword.

    A label matches a category when one of its keywords is a substring of the
    lowercased label. Only a strictly higher score replaces the current winner,
    so label order and then category-table order break ties.

    Returns:
        Winning category, or None when no label matched at all
    """
    matched = False
    category = DEFAULT_CATEGORY
    max_score = 0.0

    for label in labels:
        text = label.description.lower()
        for candidate, keywords in CATEGORY_KEYWORDS:
            if any(keyword in text for keyword in keywords):
                matched = True
                if label.score > max_score:
                    max_score = label.score
                    category = candidate

    return category if matched else None


def derive_severity(object_count: int, avg_confidence: float) -> Severity:
    """Severity from the number of localized objects and mean label score."""
    if object_count > HIGH_SEVERITY_MIN_OBJECTS and avg_confidence > HIGH_SEVERITY_MIN_CONFIDENCE:
        return Severity.HIGH
    if object_count <= LOW_SEVERITY_MAX_OBJECTS or avg_confidence < LOW_SEVERITY_MAX_CONFIDENCE:
        return Severity.LOW
    return Severity.MEDIUM


def interpret_labeling(labeling: LabelingResult) -> ClassificationResult:
    """Turn Vision labels and objects into a classification result."""
    label_texts = [label.description for label in labeling.labels]
    category = match_category(labeling.labels)

    if category is None:
        return ClassificationResult.not_garbage(
            description=NO_GARBAGE_DESCRIPTION,
            labels=label_texts,
            object_count=0,
            analyzed_by=Analyzer.PRIMARY,
        )

    object_count = len(labeling.objects)
    avg_confidence = mean(label.score for label in labeling.labels)
    description = (
        f"Detected: {', '.join(label_texts[:3])}. {object_count} items identified."
    )

    return ClassificationResult(
        is_garbage=True,
        category=category,
        severity=derive_severity(object_count, avg_confidence),
        confidence=round(avg_confidence, 2),
        description=description,
        detected_labels=label_texts[:MAX_DETECTED_LABELS],
        object_count=object_count,
        analyzed_by=Analyzer.PRIMARY,
    )


# =============================================================================
# FALLBACK: GENERATIVE MODEL
# =============================================================================

def build_fallback_prompt() -> str:
    """Prompt naming the closed category set, severity rules and JSON shape."""
    category_list = ", ".join(category.value for category, _ in CATEGORY_KEYWORDS)
    return f"""Analyze this image and determine if it contains garbage or waste. You MUST classify it into EXACTLY ONE of these categories (use the exact name): {category_list}.

Also determine the severity (Low, Medium, High) based on the amount and type of waste:
- High: Large amount of waste, overflowing, multiple types
- Medium: Moderate amount of waste
- Low: Small amount or minimal waste

Provide a brief description of what you see and list the detected items.

Respond ONLY with valid JSON in this exact format:
{{
  "isGarbage": true or false,
  "category": "exact category name from the list above",
  "severity": "Low" or "Medium" or "High",
  "description": "brief description of what you see",
  "detectedItems": ["item1", "item2", "item3"],
  "confidence": 0.0 to 1.0
}}"""


def strip_code_fences(text: str) -> str:
    """Remove a Markdown code fence wrapped around a model response."""
    if "```json" in text:
        return text.split("```json", 1)[1].split("```", 1)[0].strip()
    if "```" in text:
        return text.split("```")[1].strip()
    return text


def extract_json_object(text: str) -> str:
    """
    Return the first top-level ``{...}`` object in text by brace matching.

    Braces inside JSON strings are ignored.

    Raises:
        ValueError: If no complete object is present
    """
    start = text.find("{")
    if start == -1:
        raise ValueError("No JSON object found in model response")

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:index + 1]

    raise ValueError("Unterminated JSON object in model response")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _as_confidence(value: Any) -> float:
    if value is None:
        return FALLBACK_DEFAULT_CONFIDENCE
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return FALLBACK_DEFAULT_CONFIDENCE
    return min(1.0, max(0.0, confidence))


def parse_fallback_response(text: str) -> ClassificationResult:
    """
    Normalize a generative model answer into a classification result.

    Unknown or missing categories become the default category; a missing
    confidence becomes 0.85.

    Raises:
        ValueError: If the text holds no usable JSON object
    """
    if not text:
        raise ValueError("Empty model response")

    data = json.loads(extract_json_object(strip_code_fences(text)))
    if not isinstance(data, dict):
        raise ValueError("Model response is not a JSON object")

    items = data.get("detectedItems") or []
    if not isinstance(items, list):
        items = []
    items = [str(item) for item in items]
    description = str(data.get("description") or "")

    if not _as_bool(data.get("isGarbage")):
        return ClassificationResult.not_garbage(
            description=description or NO_GARBAGE_DESCRIPTION,
            labels=items,
            object_count=len(items),
            analyzed_by=Analyzer.FALLBACK,
        )

    try:
        category = Category(data.get("category"))
    except ValueError:
        logger.info(f"Coercing fallback category {data.get('category')!r} to {DEFAULT_CATEGORY.value}")
        category = DEFAULT_CATEGORY

    try:
        severity = Severity(data.get("severity"))
    except ValueError:
        severity = Severity.MEDIUM

    return ClassificationResult(
        is_garbage=True,
        category=category,
        severity=severity,
        confidence=_as_confidence(data.get("confidence")),
        description=description,
        detected_labels=items[:MAX_DETECTED_LABELS],
        object_count=len(items),
        analyzed_by=Analyzer.FALLBACK,
    )


# =============================================================================
# ENGINE
# =============================================================================

class ClassificationEngine:
    """
    Classifies a photo as garbage or not.

    The primary Vision stage runs first; the generative stage runs only when
    the primary stage failed, never for a "no garbage" outcome.
    """

    def __init__(
        self,
        labeling_service,
        generative_classifier,
        http_client: Optional[httpx.Client] = None
    ):
        """
        Initialize the engine.

        Args:
            labeling_service: Object with ``label_and_localize(image_ref)``
            generative_classifier: Object with ``classify(image_base64, prompt)``
            http_client: Client used to download images for the fallback
        """
        self.labeling_service = labeling_service
        self.generative_classifier = generative_classifier
        self._http = http_client or httpx.Client(timeout=30.0)

    def classify(self, image_ref: Optional[str]) -> ClassificationResult:
        """
        Classify one image.

        Args:
            image_ref: Image URL, data URI or base64 payload

        Returns:
            ClassificationResult

        Raises:
            ValidationError: If image_ref is empty
            ClassificationError: If both classifiers failed
        """
        if not image_ref:
            raise ValidationError("imageUri is required")

        primary = self._attempt_primary(image_ref)
        if primary.ok:
            return primary.result

        logger.warning(f"Vision classifier failed, falling back to Gemini: {primary.error}")

        fallback = self._attempt_fallback(image_ref)
        if fallback.ok:
            logger.info("Gemini analysis successful")
            return fallback.result

        logger.error(f"Gemini classifier also failed: {fallback.error}")
        raise ClassificationError("both classifiers failed") from fallback.error

    def _attempt_primary(self, image_ref: str) -> Attempt:
        try:
            labeling = self.labeling_service.label_and_localize(image_ref)
        except Exception as e:
            return Attempt(error=e)
        return Attempt(result=interpret_labeling(labeling))

    def _attempt_fallback(self, image_ref: str) -> Attempt:
        try:
            payload = fetch_image_base64(image_ref, self._http)
            text = self.generative_classifier.classify(payload, build_fallback_prompt())
            return Attempt(result=parse_fallback_response(text))
        except Exception as e:
            return Attempt(error=e)
