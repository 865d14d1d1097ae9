"""
Gemini generative vision client for SwachhSathi.

Used as the fallback garbage classifier when Cloud Vision is unavailable.
"""

import base64
import logging
from typing import Optional

import httpx

from swachhsathi.core.exceptions import ExternalServiceError
from swachhsathi.vision.vision_client import BASE64_MARKER

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Client for the Gemini `generateContent` REST endpoint.

    Sends a text prompt together with one inline image and returns the text
    of the first candidate.
    """

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash",
        api_url: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None
    ):
        self.api_key = api_key
        self.model = model
        self.api_url = api_url or self.BASE_URL
        self._client = client or httpx.Client(timeout=timeout)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self._client.close()

    def classify(
        self,
        image_base64: str,
        prompt: str,
        mime_type: str = "image/jpeg"
    ) -> str:
        """
        Run one generative classification request.

        Args:
            image_base64: Base64-encoded image bytes
            prompt: Instruction text
            mime_type: MIME type of the image

        Returns:
            Text content of the first candidate

        Raises:
            ExternalServiceError: On transport errors or an unusable response
        """
        if not self.api_key:
            raise ExternalServiceError("Gemini API key not configured")

        url = f"{self.api_url}/{self.model}:generateContent"
        body = {
            "contents": [
                {
                    "parts": [
                        {"text": prompt},
                        {"inlineData": {"mimeType": mime_type, "data": image_base64}},
                    ]
                }
            ]
        }

        logger.info(f"Requesting Gemini classification with {self.model}")
        try:
            response = self._client.post(url, params={"key": self.api_key}, json=body)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ExternalServiceError(f"Gemini request failed: {e}") from e

        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ExternalServiceError("Gemini response format invalid") from e

        if not isinstance(text, str) or not text.strip():
            raise ExternalServiceError("Gemini returned an empty response")

        return text


def fetch_image_base64(image_ref: str, client: httpx.Client) -> str:
    """
    Resolve an image reference to a base64 payload.

    URLs are downloaded and encoded, data URIs are stripped to their payload,
    anything else is assumed to be base64 already.
    """
    if image_ref.startswith(("http://", "https://")):
        try:
            response = client.get(image_ref)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Image download failed: {e}") from e
        return base64.b64encode(response.content).decode("ascii")

    if BASE64_MARKER in image_ref:
        return image_ref.split(BASE64_MARKER, 1)[1]

    return image_ref
