"""Namespaced tool catalog and call routing on top of the connection manager."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from mcp_agent_lib.agent_core.tools.models import NamespacedTool, ToolResultContent
from .manager import ToolConnectionManager

logger = logging.getLogger(__name__)

__all__ = ["ToolInvocationFacade"]


class ToolInvocationFacade:
    """Tool provider used by the agent loop.

    The catalog is discovered on first use and cached for the lifetime of the
    facade; reconnecting a server does not invalidate it.
    """

    def __init__(self, manager: ToolConnectionManager):
        self.manager = manager
        self._catalog: Optional[List[NamespacedTool]] = None
        self._catalog_lock = asyncio.Lock()

    async def get_tools(self) -> List[NamespacedTool]:
        """Return the cached catalog, discovering it on first use."""
        if self._catalog is not None:
            return self._catalog

        async with self._catalog_lock:
            if self._catalog is None:
                logger.debug("Fetching tools from MCP servers...")
                self._catalog = await self.manager.list_tools()
                logger.info("Cached %d namespaced tool(s).", len(self._catalog))
        return self._catalog

    async def refresh_tools(self) -> List[NamespacedTool]:
        """Discard the cached catalog and discover it again."""
        async with self._catalog_lock:
            self._catalog = await self.manager.list_tools()
            logger.info("Refreshed catalog: %d namespaced tool(s).", len(self._catalog))
        return self._catalog

    async def find_tool(self, namespaced_name: str) -> Optional[NamespacedTool]:
        """Look a tool up in the catalog by its namespaced name."""
        for tool in await self.get_tools():
            if tool.namespaced_name == namespaced_name:
                return tool
        return None

    async def call_tool(self, namespaced_name: str, arguments: Dict[str, Any]) -> ToolResultContent:
        """Route a namespaced tool call to the owning server's connection."""
        return await self.manager.call_tool(namespaced_name, arguments)
