"""Platform adapters, in detection priority order."""

from __future__ import annotations

from .base import Adapter
from .chatgpt import ChatGPTAdapter
from .claude import ClaudeAdapter
from .gemini import GeminiAdapter
from .perplexity import PerplexityAdapter

ADAPTERS: tuple[Adapter, ...] = (
    ChatGPTAdapter(),
    ClaudeAdapter(),
    GeminiAdapter(),
    PerplexityAdapter(),
)


def get_adapter(platform: str) -> Adapter | None:
    for adapter in ADAPTERS:
        if adapter.platform == platform:
            return adapter
    return None


__all__ = [
    "ADAPTERS",
    "Adapter",
    "ChatGPTAdapter",
    "ClaudeAdapter",
    "GeminiAdapter",
    "PerplexityAdapter",
    "get_adapter",
]
