"""Base provider interface for streaming chat completions."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from ..models import Message


@dataclass
class ProviderConfig:
    """Configuration for a provider."""
    api_key: str
    model: str
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    timeout: float = 60.0


class BaseProvider(ABC):
    """Abstract base class for streaming transports."""

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.name = self.__class__.__name__

    @abstractmethod
    def stream_chunks(
        self,
        messages: Sequence[Message],
        system: Optional[str] = None,
    ) -> Iterator[bytes]:
        """Stream raw response chunks for the conversation so far.

        Chunks carry line-delimited completion records and may split a
        record anywhere. Transport errors propagate to the caller.
        """
        pass

    def validate(self) -> bool:
        """Validate provider configuration."""
        return bool(self.config.api_key and self.config.model)

    @staticmethod
    def build_messages(
        messages: Sequence[Message],
        system: Optional[str] = None,
    ) -> list[dict]:
        """Convert chat messages to the chat-completions wire format."""
        payload = []
        if system:
            payload.append({"role": "system", "content": system})
        for message in messages:
            payload.append({"role": message.role, "content": message.content})
        return payload
