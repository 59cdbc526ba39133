"""Connections to N independent tool-servers with discovery and one-shot reconnection."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar, Union

from mcp.types import Tool as MCPTool

from mcp_agent_lib.agent_core.exceptions import (
    NoServersConfigured,
    ServerConnectionError,
    ServerNotConnected,
)
from mcp_agent_lib.agent_core.tools.models import NamespacedTool, ToolResultContent
from mcp_agent_lib.agent_core.tools.schema import SchemaValidator
from .config import ServerConfig
from .connection import ServerConnection, resolve_call_result
from .namespacing import NAMESPACE_SEPARATOR, namespace_tool_name, split_namespaced_name

logger = logging.getLogger(__name__)

__all__ = ["ToolConnectionManager"]

T = TypeVar("T")
ConnectionFactory = Callable[[ServerConfig], Awaitable[ServerConnection]]
ServerConfigs = Union[Mapping[str, ServerConfig], Iterable[ServerConfig]]


class ToolConnectionManager:
    """Owns one connection per configured tool-server.

    Connections are shared by all in-flight chat turns. The only mutation is the
    wholesale replacement of a broken connection, serialized per server, so a
    connection visible in the manager is always fully live.
    """

    def __init__(
        self,
        configs: Optional[ServerConfigs] = None,
        connection_factory: Optional[ConnectionFactory] = None,
    ):
        """Initializes the manager.

        Args:
            configs: Server configs keyed by name, or an iterable of configs.
            connection_factory: Coroutine opening a connection for a config.
                Defaults to ``ServerConnection.open``.
        """
        self._configs: Dict[str, ServerConfig] = self._index_configs(configs) if configs is not None else {}
        self._connection_factory: ConnectionFactory = connection_factory or ServerConnection.open
        self._connections: Dict[str, ServerConnection] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    @property
    def configs(self) -> Dict[str, ServerConfig]:
        return dict(self._configs)

    @property
    def connected_servers(self) -> List[str]:
        return list(self._connections)

    def is_connected(self, server_name: str) -> bool:
        return server_name in self._connections

    async def connect_all(self, configs: Optional[ServerConfigs] = None) -> Dict[str, Exception]:
        """Connect concurrently to every configured server not already connected.

        One server failing does not affect the others; callers that need every
        server must inspect the returned failures.

        Args:
            configs: Optional configs replacing those given at construction.

        Returns:
            A mapping from server name to the error of each failed connection.

        Raises:
            NoServersConfigured: If there are no server configs.
        """
        if configs is not None:
            self._configs = self._index_configs(configs)
        if not self._configs:
            raise NoServersConfigured("No MCP servers are configured.")

        pending = [name for name in self._configs if name not in self._connections]
        if not pending:
            logger.debug("All %d MCP server(s) already connected.", len(self._configs))
            return {}

        logger.info("Connecting to %d MCP server(s): %s", len(pending), ", ".join(pending))
        results = await asyncio.gather(*(self._connect(name) for name in pending), return_exceptions=True)

        failures: Dict[str, Exception] = {}
        for name, outcome in zip(pending, results):
            if isinstance(outcome, Exception):
                logger.error("Failed to connect to MCP server '%s': %s", name, outcome)
                failures[name] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome

        logger.info("Connected to %d/%d MCP server(s).", len(self._connections), len(self._configs))
        return failures

    async def list_tools(self) -> List[NamespacedTool]:
        """Discover the tools of every connected server.

        A server that still fails after one reconnect, or answers the listing with
        an error, is logged and left out of the catalog.

        Returns:
            The merged catalog, namespaced by server, in server order.
        """
        servers = list(self._connections)
        catalogs = await asyncio.gather(
            *(self._with_reconnect(name, lambda conn: conn.list_tools()) for name in servers),
            return_exceptions=True,
        )

        tools: List[NamespacedTool] = []
        for server_name, server_tools in zip(servers, catalogs):
            if isinstance(server_tools, Exception):
                logger.error("Failed to list tools of MCP server '%s': %s", server_name, server_tools)
                continue
            if isinstance(server_tools, BaseException):
                raise server_tools
            logger.info("Found %d tools on MCP server '%s'.", len(server_tools), server_name)
            for tool in server_tools:
                namespaced = self._namespace_tool(server_name, tool)
                if namespaced is not None:
                    tools.append(namespaced)
        return tools

    async def call_tool(self, namespaced_name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResultContent:
        """Route a namespaced tool call to its owning server.

        Args:
            namespaced_name: ``<server><separator><tool>``.
            arguments: The argument object for the tool.

        Returns:
            The resolved tool result.

        Raises:
            UnknownNamespace: If the name has no namespace prefix.
            ServerNotConnected: If the named server has no live connection.
            ServerConnectionError: If the call still fails after one reconnect.
            ProtocolApplicationError: If the server answers with an error.
        """
        server_name, tool_name = split_namespaced_name(namespaced_name)
        if server_name not in self._connections:
            raise ServerNotConnected(f"MCP server '{server_name}' is not connected.")

        logger.info("Delegating tool '%s' to MCP server '%s'...", tool_name, server_name)
        result = await self._with_reconnect(server_name, lambda conn: conn.call_tool(tool_name, arguments or {}))
        return resolve_call_result(result)

    async def disconnect_all(self) -> None:
        """Close every live connection; failures are logged, never raised."""
        connections = list(self._connections.values())
        self._connections.clear()
        if not connections:
            return

        results = await asyncio.gather(*(conn.close() for conn in connections), return_exceptions=True)
        for conn, outcome in zip(connections, results):
            if isinstance(outcome, BaseException):
                logger.error("Error closing MCP server '%s': %s", conn.name, outcome)
        logger.info("Disconnected from %d MCP server(s).", len(connections))

    async def _connect(self, server_name: str) -> ServerConnection:
        connection = await self._connection_factory(self._configs[server_name])
        self._connections[server_name] = connection
        return connection

    async def _with_reconnect(self, server_name: str, operation: Callable[[ServerConnection], Awaitable[T]]) -> T:
        """Run an operation, reconnecting and retrying exactly once on transport failure.

        Server-reported errors propagate immediately.
        """
        connection = self._connections.get(server_name)
        if connection is None:
            raise ServerNotConnected(f"MCP server '{server_name}' is not connected.")

        try:
            return await operation(connection)
        except ServerConnectionError as exc:
            logger.warning("Operation on MCP server '%s' failed, attempting reconnect... (%s)", server_name, exc)

        fresh = await self._reconnect(server_name, connection)
        return await operation(fresh)

    async def _reconnect(self, server_name: str, stale: ServerConnection) -> ServerConnection:
        """Replace a broken connection with a brand-new one from the original config."""
        lock = self._locks.setdefault(server_name, asyncio.Lock())
        async with lock:
            current = self._connections.get(server_name)
            if current is not None and current is not stale:
                logger.debug("MCP server '%s' was already reconnected by a concurrent call.", server_name)
                return current

            self._connections.pop(server_name, None)
            try:
                await stale.close()
            except Exception as exc:
                logger.debug("Ignoring error while closing stale connection to '%s': %s", server_name, exc)

            fresh = await self._connect(server_name)
            logger.info("Reconnected to MCP server '%s'.", server_name)
            return fresh

    @staticmethod
    def _namespace_tool(server_name: str, tool: MCPTool) -> Optional[NamespacedTool]:
        if NAMESPACE_SEPARATOR in tool.name:
            logger.error(
                "Skipping tool '%s' of MCP server '%s': names must not contain '%s'.",
                tool.name,
                server_name,
                NAMESPACE_SEPARATOR,
            )
            return None

        return NamespacedTool(
            name=tool.name,
            namespaced_name=namespace_tool_name(server_name, tool.name),
            server_name=server_name,
            description=tool.description or f"Tool {tool.name} provided by MCP server '{server_name}'.",
            input_schema=SchemaValidator.normalize_input_schema(tool.inputSchema, tool.name),
        )

    @staticmethod
    def _index_configs(configs: ServerConfigs) -> Dict[str, ServerConfig]:
        if isinstance(configs, Mapping):
            return dict(configs)
        return {config.name: config for config in configs}
