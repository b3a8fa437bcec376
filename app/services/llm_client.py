# app/services/llm_client.py
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)


class LLMClient:
    """Thin wrapper over a chat-completions endpoint with function calling."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.LLM_API_KEY if api_key is None else api_key
        self.base_url = (base_url or settings.LLM_BASE_URL).rstrip("/")
        self.model = model or settings.LLM_MODEL
        self.transport = transport

    async def complete(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Send one round trip and return the assistant message.

        Raises:
            ExternalServiceError: missing credentials, transport failure,
                non-200 answer or a body without a message.
        """
        if not self.api_key:
            raise ExternalServiceError("LLM API key not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": settings.LLM_TEMPERATURE,
            "max_tokens": settings.LLM_MAX_TOKENS,
        }
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"

        try:
            async with httpx.AsyncClient(timeout=settings.LLM_TIMEOUT_SECONDS, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=headers,
                    json=payload,
                )
        except httpx.HTTPError as e:
            logger.error(f"LLM request failed: {e}")
            raise ExternalServiceError("Failed to reach the AI service")

        if response.status_code != 200:
            logger.error(f"LLM error {response.status_code}: {response.text[:500]}")
            raise ExternalServiceError("Failed to get AI response", status_code=response.status_code)

        try:
            message = response.json()["choices"][0]["message"]
        except (ValueError, KeyError, IndexError, TypeError):
            logger.error(f"Unexpected LLM response body: {response.text[:500]}")
            raise ExternalServiceError("Unexpected AI response")
        if not isinstance(message, dict):
            raise ExternalServiceError("Unexpected AI response")
        return message
