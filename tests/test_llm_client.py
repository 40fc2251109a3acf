import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from ats_scorer.models.scoring_settings import LLMSettings
from ats_scorer.services.llm_client import OllamaClient
from ats_scorer.utils.exceptions import ExternalServiceError, RateLimitError


def _response(status_code=200, body=None, text=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text if text is not None else json.dumps(body or {})
    if body is not None:
        resp.json.return_value = body
    else:
        resp.json.side_effect = ValueError("not json")
    return resp


def _client(*responses, retry_attempts=1):
    session = MagicMock()
    session.post.side_effect = list(responses)
    return OllamaClient(LLMSettings(retry_attempts=retry_attempts, timeout=5), session=session), session


class TestOllamaClient:
    """HTTP error mapping of the text-understanding client"""

    def test_extracts_json_object(self):
        client, session = _client(_response(body={"response": '```json\n{"skills": ["Python"]}\n```'}))

        assert client.extract_json("prompt") == {"skills": ["Python"]}
        _, kwargs = session.post.call_args
        assert kwargs["timeout"] == 5
        assert kwargs["json"]["format"] == "json"
        assert kwargs["json"]["stream"] is False

    def test_http_429_is_rate_limit(self):
        client, _ = _client(_response(429, body={"error": "slow down"}))
        with pytest.raises(RateLimitError):
            client.generate("prompt")

    def test_quota_body_is_rate_limit(self):
        client, _ = _client(_response(503, text="model capacity exceeded"))
        with pytest.raises(RateLimitError) as exc_info:
            client.generate("prompt")
        assert exc_info.value.error_code == "RATE_LIMIT_ERROR"

    def test_server_error(self):
        client, _ = _client(_response(500, text="boom"))
        with pytest.raises(ExternalServiceError) as exc_info:
            client.generate("prompt")
        assert not isinstance(exc_info.value, RateLimitError)
        assert exc_info.value.details["status_code"] == 500

    def test_timeout(self):
        client, _ = _client(requests.Timeout("read timed out"))
        with pytest.raises(ExternalServiceError) as exc_info:
            client.generate("prompt")
        assert "timed out" in exc_info.value.message

    @patch("ats_scorer.utils.exceptions.time.sleep")
    def test_connection_errors_are_retried(self, mock_sleep):
        client, session = _client(
            requests.ConnectionError("refused"),
            _response(body={"response": '{"ok": true}'}),
            retry_attempts=2,
        )

        assert client.extract_json("prompt") == {"ok": True}
        assert session.post.call_count == 2
        mock_sleep.assert_called_once()

    @patch("ats_scorer.utils.exceptions.time.sleep")
    def test_unreachable_after_retries(self, mock_sleep):
        client, session = _client(requests.ConnectionError("refused"), requests.ConnectionError("refused"),
                                  retry_attempts=2)
        with pytest.raises(ExternalServiceError) as exc_info:
            client.generate("prompt")
        assert "unreachable" in exc_info.value.message
        assert session.post.call_count == 2

    def test_non_json_envelope(self):
        client, _ = _client(_response(200, text="<html>"))
        with pytest.raises(ExternalServiceError):
            client.generate("prompt")

    def test_response_without_object(self):
        client, _ = _client(_response(body={"response": "I cannot help with that"}))
        with pytest.raises(ExternalServiceError):
            client.extract_json("prompt")

    @pytest.mark.parametrize("body", [[], ["response"], {"response": 42}, {"response": None}, {"response": {"a": 1}}])
    def test_unexpected_envelope_shape(self, body):
        client, _ = _client(_response(body=body))
        with pytest.raises(ExternalServiceError) as exc_info:
            client.generate("prompt")
        assert "envelope shape" in exc_info.value.message

    def test_missing_response_field_is_empty(self):
        client, _ = _client(_response(body={"done": True}))
        assert client.generate("prompt") == ""
