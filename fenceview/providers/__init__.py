"""Streaming transports for chat completions."""

from .base import BaseProvider, ProviderConfig
from .openai_provider import OpenAIProvider
from .together import TogetherProvider

__all__ = [
    "BaseProvider",
    "ProviderConfig",
    "OpenAIProvider",
    "TogetherProvider",
]
