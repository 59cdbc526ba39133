"""Expose provider-agnostic message model types shared by the agent loop and backends."""

from .models import BaseMessage, UserMessage, AssistantMessage, SystemMessage, ToolMessage

__all__ = [
    "BaseMessage",
    "UserMessage",
    "AssistantMessage",
    "SystemMessage",
    "ToolMessage",
]
