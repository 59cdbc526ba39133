"""Protocol the agent loop uses to discover and invoke tools."""

from __future__ import annotations

from typing import Any, Dict, List, Protocol, runtime_checkable

from .models import NamespacedTool, ToolResultContent


@runtime_checkable
class ToolProvider(Protocol):
    """
    Protocol for the component that owns the tool catalog and routes calls.
    """

    async def get_tools(self) -> List[NamespacedTool]:
        """Returns the merged catalog of namespaced tools."""
        ...

    async def call_tool(self, namespaced_name: str, arguments: Dict[str, Any]) -> ToolResultContent:
        """Invokes a namespaced tool and returns its resolved result."""
        ...
