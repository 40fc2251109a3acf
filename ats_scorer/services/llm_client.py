"""
Client for the external text-understanding service (Ollama HTTP API)
"""
from typing import Any, Dict

import requests

from ats_scorer.models.scoring_settings import LLMSettings
from ats_scorer.utils.exceptions import ExternalServiceError, RateLimitError, retry_with_logging
from ats_scorer.utils.logging_config import get_logger
from ats_scorer.utils.utils import safe_json

logger = get_logger(__name__)

SERVICE_NAME = "ollama"
QUOTA_MARKERS = ("quota", "rate limit", "too many requests", "capacity")


class OllamaClient:
    """Thin blocking client; every call is bounded by ``settings.timeout`` seconds"""

    def __init__(self, settings: LLMSettings, session: requests.Session = None):
        self.settings = settings
        self.session = session or requests.Session()
        self._post = retry_with_logging(
            max_attempts=settings.retry_attempts,
            backoff_factor=0.5,
            exceptions=(requests.ConnectionError,),
            logger=logger,
        )(self._post_once)

    @property
    def model_name(self) -> str:
        return self.settings.model_name

    def _post_once(self, url: str, payload: Dict[str, Any]) -> requests.Response:
        return self.session.post(url, json=payload, timeout=self.settings.timeout)

    def generate(self, prompt: str) -> str:
        url = f"{self.settings.base_url}/api/generate"
        payload = {
            "model": self.settings.model_name,
            "prompt": prompt,
            "format": "json",
            "options": {"temperature": self.settings.temperature},
            "stream": False,
        }
        try:
            resp = self._post(url, payload)
        except requests.Timeout as e:
            raise ExternalServiceError(
                f"Text-understanding service timed out after {self.settings.timeout}s",
                service_name=SERVICE_NAME, cause=e
            )
        except requests.RequestException as e:
            raise ExternalServiceError(
                "Text-understanding service is unreachable",
                service_name=SERVICE_NAME, cause=e
            )

        body = resp.text or ""
        if resp.status_code == 429 or (resp.status_code >= 400 and any(m in body.lower() for m in QUOTA_MARKERS)):
            logger.warning(f"Text-understanding service reported capacity exhaustion ({resp.status_code})")
            raise RateLimitError(service_name=SERVICE_NAME)
        if resp.status_code >= 400:
            raise ExternalServiceError(
                f"Text-understanding service returned HTTP {resp.status_code}",
                service_name=SERVICE_NAME, status_code=resp.status_code
            )

        try:
            envelope = resp.json()
        except ValueError as e:
            raise ExternalServiceError(
                "Text-understanding service returned a non-JSON envelope",
                service_name=SERVICE_NAME, cause=e
            )
        if not isinstance(envelope, dict) or not isinstance(envelope.get("response", ""), str):
            raise ExternalServiceError(
                "Text-understanding service returned an unexpected envelope shape",
                service_name=SERVICE_NAME
            )
        return envelope.get("response", "")

    def extract_json(self, prompt: str) -> Dict[str, Any]:
        """Generate and parse a JSON object; anything else is a service error"""
        data = safe_json(self.generate(prompt), fallback=None)
        if not isinstance(data, dict):
            raise ExternalServiceError(
                "Text-understanding service response did not contain a JSON object",
                service_name=SERVICE_NAME
            )
        return data
