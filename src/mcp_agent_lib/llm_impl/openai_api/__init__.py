"""Expose the OpenAI-compatible completion backend and its message adapter."""

from .core import OpenAICompletionBackend
from .adapter import OpenAIMessageAdapter

__all__ = ["OpenAICompletionBackend", "OpenAIMessageAdapter"]
