"""Provider-agnostic message models for the conversation history."""

from abc import ABC
from typing import List

from pydantic import BaseModel, Field

from ..tools.models import ToolInvocationRequest


class BaseMessage(ABC, BaseModel):
    """Base model for messages exchanged with an LLM.

    Attributes:
        author: Role associated with the message.
        content: Text payload of the message.
    """

    author: str
    content: str = ""


class SystemMessage(BaseMessage):
    """Message authored by the system to steer behavior."""

    author: str = "system"


class UserMessage(BaseMessage):
    """Message authored by an end user."""

    author: str = "user"


class AssistantMessage(BaseMessage):
    """Message authored by the assistant, optionally requesting tool invocations."""

    author: str = "assistant"
    tool_calls: List[ToolInvocationRequest] = Field(default_factory=list)

    @property
    def requests_tools(self) -> bool:
        return bool(self.tool_calls)


class ToolMessage(BaseMessage):
    """Message carrying the result of one tool invocation.

    Attributes:
        tool_call_id: Correlation id of the invocation request this result answers.
        name: The namespaced name of the invoked tool.
    """

    author: str = "tool"
    tool_call_id: str
    name: str
