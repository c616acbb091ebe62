"""Together AI provider (OpenAI-compatible wire format)."""

from .openai_provider import OpenAIProvider
from .registry import register_provider


@register_provider("together")
class TogetherProvider(OpenAIProvider):
    """Together inference API."""

    default_base_url = "https://api.together.xyz/v1"
