"""Data models for discovered tools, invocation requests and tool results."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class NamespacedTool(BaseModel):
    """A tool discovered on a tool-server, addressable by a globally unique name.

    Attributes:
        name: The bare tool name as reported by the server.
        namespaced_name: ``server_name`` + separator + ``name``.
        server_name: The name of the server that owns the tool.
        description: Human-readable description sent to the model.
        input_schema: Object-shaped JSON schema for the tool arguments.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    namespaced_name: str
    server_name: str
    description: str = ""
    input_schema: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})


@dataclass(frozen=True)
class ToolInvocationRequest:
    """A tool invocation requested by the model.

    ``arguments`` is the raw payload text exactly as the model produced it; it is
    parsed only when the invocation is executed.
    """

    call_id: str
    name: str
    arguments: str = ""


class TextBlocksResult(BaseModel):
    """Tool result made of content blocks rendered to text."""

    kind: Literal["text_blocks"] = "text_blocks"
    texts: List[str] = Field(default_factory=list)
    is_error: bool = False

    def as_text(self) -> str:
        return "\n".join(self.texts)


class RawValueResult(BaseModel):
    """Tool result carried as an arbitrary structured value."""

    kind: Literal["raw_value"] = "raw_value"
    value: Any = None
    is_error: bool = False

    def as_text(self) -> str:
        if isinstance(self.value, str):
            return self.value
        return json.dumps(self.value, ensure_ascii=False, default=str)


ToolResultContent = Annotated[Union[TextBlocksResult, RawValueResult], Field(discriminator="kind")]


@dataclass(frozen=True)
class CollectedToolResult:
    """A tool result kept for the duration of one chat turn for degraded synthesis."""

    tool_name: str
    result: str
