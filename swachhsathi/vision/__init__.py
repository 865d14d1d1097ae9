"""
SwachhSathi - Vision Module
Garbage classification, before/after comparison and waste scanning.
"""

from swachhsathi.vision.vision_client import (
    VisionClient,
    LabelAnnotation,
    LocalizedObject,
    LabelingResult,
)
from swachhsathi.vision.gemini_client import (
    GeminiClient,
    fetch_image_base64,
)
from swachhsathi.vision.classifier import (
    ClassificationEngine,
    ClassificationResult,
    Analyzer,
)
from swachhsathi.vision.comparison import (
    ComparisonEngine,
    ComparisonResult,
    score_cleanliness,
)
from swachhsathi.vision.waste_scanner import (
    WasteScanner,
    WasteAnalysis,
    classify_waste,
)

__all__ = [
    # Collaborators
    "VisionClient",
    "LabelAnnotation",
    "LocalizedObject",
    "LabelingResult",
    "GeminiClient",
    "fetch_image_base64",
    # Classification
    "ClassificationEngine",
    "ClassificationResult",
    "Analyzer",
    # Comparison
    "ComparisonEngine",
    "ComparisonResult",
    "score_cleanliness",
    # Waste scanning
    "WasteScanner",
    "WasteAnalysis",
    "classify_waste",
]
