"""Collect concrete completion backend implementations."""

from .openai_api import OpenAICompletionBackend, OpenAIMessageAdapter

__all__ = [
    "OpenAICompletionBackend",
    "OpenAIMessageAdapter",
]
