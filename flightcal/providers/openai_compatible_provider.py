import logging

import httpx
from flightcal.providers.base import BaseProvider

logger = logging.getLogger(__name__)

COMPLETIONS_PATH = "/chat/completions"
ERROR_BODY_LIMIT = 200


def completions_url(endpoint: str) -> str:
    """Append /chat/completions to a base endpoint unless it is already there."""
    if endpoint.endswith(COMPLETIONS_PATH):
        return endpoint
    return endpoint.rstrip("/") + COMPLETIONS_PATH


class OpenAICompatibleProvider(BaseProvider):
    """Any endpoint speaking the OpenAI chat-completions protocol, via httpx."""

    def __init__(self, endpoint: str, api_key: str, default_model: str,
                 timeout: float | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.api_key = api_key
        self.endpoint = completions_url(endpoint)
        self.default_model = default_model
        self.timeout = timeout
        self.transport = transport

    @property
    def name(self) -> str:
        return "openai-compatible"

    def _result(self, model: str, text=None, status="failed", status_code=None, error=None) -> dict:
        return {
            "text": text,
            "provider": self.name,
            "model": model,
            "status": status,
            "status_code": status_code,
            "error": error,
        }

    async def chat(self, messages: list[dict], model: str | None = None, **options) -> dict:
        used_model = model or self.default_model
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        body = {
            "model": used_model,
            "messages": messages,
            **options,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.endpoint, headers=headers, json=body)
        except httpx.HTTPError as e:
            logger.error(f"AI request to {self.endpoint} failed: {e}")
            return self._result(used_model, error=str(e))

        if not response.is_success:
            logger.error(f"AI request failed: {response.status_code} {response.text[:ERROR_BODY_LIMIT]}")
            return self._result(
                used_model,
                status_code=response.status_code,
                error=f"AI service request failed ({response.status_code}): {response.text[:ERROR_BODY_LIMIT]}",
            )

        try:
            data = response.json()
        except ValueError as e:
            return self._result(used_model, status_code=response.status_code, error=f"Invalid JSON from AI service: {e}")

        choices = data.get("choices") if isinstance(data, dict) else None
        text = None
        if choices:
            text = (choices[0].get("message") or {}).get("content")
        return self._result(used_model, text=text, status="success", status_code=response.status_code)
