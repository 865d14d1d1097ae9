"""
Tests for the Vision and Gemini REST clients
"""
import json

import httpx
import pytest

from swachhsathi.core.exceptions import ExternalServiceError
from swachhsathi.vision.gemini_client import GeminiClient
from swachhsathi.vision.vision_client import VisionClient, is_remote_uri


VISION_RESPONSE = {
    "responses": [
        {
            "labelAnnotations": [
                {"description": "Waste", "score": 0.93},
                {"description": "Plastic bag", "score": 0.88},
            ],
            "localizedObjectAnnotations": [
                {"name": "Bottle", "score": 0.81},
                {"name": "Bag", "score": 0.77},
            ],
        }
    ]
}


def mock_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestVisionClient:
    """Test suite for VisionClient."""

    def setup_method(self):
        self.requests = []

    def _handler(self, payload, status_code=200):
        def handler(request):
            self.requests.append(request)
            return httpx.Response(status_code, json=payload)
        return handler

    def test_label_and_localize(self):
        client = VisionClient(api_key="test-key", client=mock_client(self._handler(VISION_RESPONSE)))

        result = client.label_and_localize("https://example.com/photo.jpg")

        assert [label.description for label in result.labels] == ["Waste", "Plastic bag"]
        assert result.labels[0].score == 0.93
        assert [obj.name for obj in result.objects] == ["Bottle", "Bag"]

    def test_request_shape(self):
        client = VisionClient(
            api_key="test-key", max_labels=7, client=mock_client(self._handler(VISION_RESPONSE))
        )

        client.label_and_localize("https://example.com/photo.jpg")

        request = self.requests[0]
        assert request.url.params["key"] == "test-key"
        body = json.loads(request.content)
        entry = body["requests"][0]
        assert entry["image"] == {"source": {"imageUri": "https://example.com/photo.jpg"}}
        assert [f["type"] for f in entry["features"]] == ["LABEL_DETECTION", "OBJECT_LOCALIZATION"]
        assert all(f["maxResults"] == 7 for f in entry["features"])

    def test_data_uri_sent_as_content(self):
        client = VisionClient(api_key="k", client=mock_client(self._handler(VISION_RESPONSE)))

        client.detect_labels("data:image/png;base64,QUJD")

        entry = json.loads(self.requests[0].content)["requests"][0]
        assert entry["image"] == {"content": "QUJD"}
        assert [f["type"] for f in entry["features"]] == ["LABEL_DETECTION"]

    def test_empty_annotations(self):
        client = VisionClient(api_key="k", client=mock_client(self._handler({"responses": [{}]})))

        result = client.label_and_localize("QUJD")

        assert result.labels == []
        assert result.objects == []

    def test_error_payload_raises(self):
        payload = {"responses": [{"error": {"code": 7, "message": "Billing disabled"}}]}
        client = VisionClient(api_key="k", client=mock_client(self._handler(payload)))

        with pytest.raises(ExternalServiceError, match="Billing disabled"):
            client.label_and_localize("QUJD")

    def test_http_error_raises(self):
        client = VisionClient(
            api_key="k", client=mock_client(self._handler({"error": "boom"}, status_code=500))
        )

        with pytest.raises(ExternalServiceError):
            client.detect_labels("QUJD")

    def test_missing_api_key(self):
        client = VisionClient(api_key=None, client=mock_client(self._handler(VISION_RESPONSE)))

        with pytest.raises(ExternalServiceError):
            client.label_and_localize("QUJD")
        assert self.requests == []

    def test_is_remote_uri(self):
        assert is_remote_uri("https://example.com/a.jpg")
        assert is_remote_uri("gs://bucket/a.jpg")
        assert not is_remote_uri("data:image/jpeg;base64,QUJD")


class TestGeminiClient:
    """Test suite for GeminiClient."""

    def setup_method(self):
        self.requests = []

    def _client(self, payload, status_code=200):
        def handler(request):
            self.requests.append(request)
            return httpx.Response(status_code, json=payload)
        return GeminiClient(api_key="gem-key", model="gemini-test", client=mock_client(handler))

    def test_returns_first_candidate_text(self):
        payload = {"candidates": [{"content": {"parts": [{"text": '{"isGarbage": true}'}]}}]}

        text = self._client(payload).classify("QUJD", "Is this garbage?")

        assert text == '{"isGarbage": true}'

    def test_request_body(self):
        payload = {"candidates": [{"content": {"parts": [{"text": "ok"}]}}]}

        self._client(payload).classify("QUJD", "Is this garbage?")

        request = self.requests[0]
        assert request.url.path.endswith("/gemini-test:generateContent")
        assert request.url.params["key"] == "gem-key"
        parts = json.loads(request.content)["contents"][0]["parts"]
        assert parts[0] == {"text": "Is this garbage?"}
        assert parts[1] == {"inlineData": {"mimeType": "image/jpeg", "data": "QUJD"}}

    @pytest.mark.parametrize("payload", [
        {},
        {"candidates": []},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"text": "   "}]}}]},
    ])
    def test_unusable_response(self, payload):
        with pytest.raises(ExternalServiceError):
            self._client(payload).classify("QUJD", "prompt")

    def test_http_error(self):
        with pytest.raises(ExternalServiceError):
            self._client({"error": {"message": "quota"}}, status_code=429).classify("QUJD", "prompt")

    def test_missing_api_key(self):
        client = GeminiClient(api_key="", client=mock_client(lambda request: httpx.Response(200)))

        with pytest.raises(ExternalServiceError):
            client.classify("QUJD", "prompt")
