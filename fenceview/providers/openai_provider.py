"""OpenAI-compatible chat-completions provider."""

import logging
from typing import Iterator, Optional, Sequence

import httpx

from ..models import Message
from .base import BaseProvider, ProviderConfig
from .registry import register_provider

_log = logging.getLogger(__name__)


@register_provider("openai")
class OpenAIProvider(BaseProvider):
    """OpenAI API provider - supports custom base_url for Azure/proxies."""

    default_base_url = "https://api.openai.com/v1"

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.base_url = config.base_url or self.default_base_url
        self.client = httpx.Client(timeout=config.timeout)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def _payload(self, messages: Sequence[Message], system: Optional[str]) -> dict:
        payload = {
            "model": self.config.model,
            "messages": self.build_messages(messages, system),
            "stream": True,
            "temperature": self.config.temperature,
        }
        if self.config.max_tokens:
            payload["max_tokens"] = self.config.max_tokens
        return payload

    def stream_chunks(
        self,
        messages: Sequence[Message],
        system: Optional[str] = None,
    ) -> Iterator[bytes]:
        """Stream raw SSE bytes from the chat-completions endpoint."""
        url = f"{self.base_url}/chat/completions"
        payload = self._payload(messages, system)
        _log.debug("POST %s model=%s messages=%d", url, self.config.model, len(payload["messages"]))

        with self.client.stream("POST", url, json=payload, headers=self._headers()) as response:
            response.raise_for_status()
            for chunk in response.iter_bytes():
                if chunk:
                    yield chunk

    def close(self) -> None:
        self.client.close()

    def __del__(self):
        """Cleanup HTTP client."""
        try:
            self.client.close()
        except Exception:
            pass
