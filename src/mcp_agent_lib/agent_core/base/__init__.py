"""Re-export the completion backend interface and shared turn result models."""

from .base import AgentState, ChatResult, CompletionBackend, is_bad_request_error

__all__ = [
    "AgentState",
    "ChatResult",
    "CompletionBackend",
    "is_bad_request_error",
]
