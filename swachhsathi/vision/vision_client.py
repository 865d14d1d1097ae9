"""
Google Cloud Vision client for SwachhSathi

Label detection and object localization through the Vision REST API
(`images:annotate`). Used as the primary garbage classifier and for
before/after comparison.

API Documentation: https://cloud.google.com/vision/docs/reference/rest
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from swachhsathi.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

LABEL_DETECTION = "LABEL_DETECTION"
OBJECT_LOCALIZATION = "OBJECT_LOCALIZATION"

BASE64_MARKER = "base64,"


@dataclass
class LabelAnnotation:
    """Single label returned by label detection."""
    description: str
    score: float


@dataclass
class LocalizedObject:
    """Single object returned by object localization."""
    name: str
    score: float


@dataclass
class LabelingResult:
    """Labels and localized objects for one image."""
    labels: List[LabelAnnotation] = field(default_factory=list)
    objects: List[LocalizedObject] = field(default_factory=list)


def is_remote_uri(image_ref: str) -> bool:
    """Check whether an image reference points at a remote resource."""
    return image_ref.startswith(("http://", "https://", "gs://"))


class VisionClient:
    """
    Client for the Google Cloud Vision REST API.

    Usage:
        client = VisionClient(api_key="your_key")
        result = client.label_and_localize("https://example.com/photo.jpg")
    """

    BASE_URL = "https://vision.googleapis.com/v1/images:annotate"

    def __init__(
        self,
        api_key: Optional[str],
        api_url: Optional[str] = None,
        max_labels: int = 20,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None
    ):
        """
        Initialize Vision client.

        Args:
            api_key: Google Cloud API key
            api_url: Override for the annotate endpoint
            max_labels: Maximum labels requested per image
            timeout: HTTP request timeout in seconds
            client: Pre-built httpx client (tests inject a mock transport)
        """
        self.api_key = api_key
        self.api_url = api_url or self.BASE_URL
        self.max_labels = max_labels
        self._client = client or httpx.Client(timeout=timeout)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self._client.close()

    def label_and_localize(self, image_ref: str) -> LabelingResult:
        """
        Request label and localized-object annotations for an image.

        Args:
            image_ref: Image URL, data URI or raw base64 payload

        Returns:
            LabelingResult with labels and objects

        Raises:
            ExternalServiceError: If the Vision call fails
        """
        response = self._annotate(image_ref, [LABEL_DETECTION, OBJECT_LOCALIZATION])
        return LabelingResult(
            labels=self._parse_labels(response),
            objects=self._parse_objects(response),
        )

    def detect_labels(self, image_ref: str) -> List[LabelAnnotation]:
        """Request label annotations only."""
        response = self._annotate(image_ref, [LABEL_DETECTION])
        return self._parse_labels(response)

    def _image_payload(self, image_ref: str) -> Dict[str, Any]:
        if is_remote_uri(image_ref):
            return {"source": {"imageUri": image_ref}}
        if BASE64_MARKER in image_ref:
            return {"content": image_ref.split(BASE64_MARKER, 1)[1]}
        return {"content": image_ref}

    def _annotate(self, image_ref: str, features: List[str]) -> Dict[str, Any]:
        if not self.api_key:
            raise ExternalServiceError("Vision API key not configured")

        body = {
            "requests": [
                {
                    "image": self._image_payload(image_ref),
                    "features": [
                        {"type": feature, "maxResults": self.max_labels}
                        for feature in features
                    ],
                }
            ]
        }

        logger.info(f"Requesting Vision annotations: {', '.join(features)}")
        try:
            response = self._client.post(self.api_url, params={"key": self.api_key}, json=body)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ExternalServiceError(f"Vision request failed: {e}") from e

        responses = payload.get("responses") or [{}]
        result = responses[0]
        if "error" in result:
            message = result["error"].get("message", "unknown error")
            raise ExternalServiceError(f"Vision annotation failed: {message}")

        return result

    def _parse_labels(self, response: Dict[str, Any]) -> List[LabelAnnotation]:
        return [
            LabelAnnotation(
                description=item.get("description", ""),
                score=float(item.get("score", 0.0)),
            )
            for item in response.get("labelAnnotations") or []
        ]

    def _parse_objects(self, response: Dict[str, Any]) -> List[LocalizedObject]:
        return [
            LocalizedObject(
                name=item.get("name", ""),
                score=float(item.get("score", 0.0)),
            )
            for item in response.get("localizedObjectAnnotations") or []
        ]
