"""A live connection to one stdio tool-server."""

import asyncio
import logging
from contextlib import AsyncExitStack
from typing import Any, Awaitable, Callable, Dict, List, Optional, cast

from mcp import ClientSession
from mcp.client.stdio import stdio_client
from mcp.shared.exceptions import McpError
from mcp.types import CONNECTION_CLOSED, CallToolResult, EmbeddedResource, ImageContent, TextContent, Tool as MCPTool

from mcp_agent_lib.agent_core.exceptions import ProtocolApplicationError, ServerConnectionError
from mcp_agent_lib.agent_core.tools.models import RawValueResult, TextBlocksResult, ToolResultContent
from .config import ServerConfig

logger = logging.getLogger(__name__)

__all__ = ["ServerConnection", "resolve_call_result"]


def resolve_call_result(result: CallToolResult) -> ToolResultContent:
    """Resolve the shape of a tool result once, at the protocol boundary.

    Content blocks become ``TextBlocksResult``; a result without content blocks
    becomes ``RawValueResult`` carrying its structured content (or the whole
    result when there is none).
    """
    if result.content:
        texts: List[str] = []
        for block in result.content:
            if block.type == "text":
                texts.append(cast(TextContent, block).text)
            elif block.type == "image":
                texts.append(f"[Image: {cast(ImageContent, block).mimeType}]")
            elif block.type == "resource":
                resource = cast(EmbeddedResource, block).resource
                text = getattr(resource, "text", None)
                texts.append(text if text is not None else f"[Resource: {resource.uri}]")
            else:
                texts.append(block.model_dump_json(exclude_none=True))
        return TextBlocksResult(texts=texts, is_error=bool(result.isError))

    if result.structuredContent is not None:
        return RawValueResult(value=result.structuredContent, is_error=bool(result.isError))
    return RawValueResult(value=result.model_dump(mode="json", exclude_none=True), is_error=bool(result.isError))


class ServerConnection:
    """A fully initialized client session to one tool-server.

    Instances are only obtained through ``open``, which returns a live connection
    or raises, so a half-initialized connection is never visible to callers. The
    stdio transport and session contexts are entered and exited by a dedicated
    owner task; ``close`` may therefore be called from any task.
    """

    def __init__(
        self,
        config: ServerConfig,
        session: ClientSession,
        owner_task: "asyncio.Task[None]",
        closing: asyncio.Event,
    ):
        self.config = config
        self._session = session
        self._owner_task = owner_task
        self._closing = closing

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def is_alive(self) -> bool:
        return not self._closing.is_set() and not self._owner_task.done()

    @classmethod
    async def open(cls, config: ServerConfig) -> "ServerConnection":
        """Launch the server process and complete the MCP handshake.

        Args:
            config: The server's launch configuration.

        Returns:
            The initialized connection.

        Raises:
            ServerConnectionError: If the process cannot be started or the handshake fails.
        """
        logger.debug("Initializing MCP client session for '%s'...", config.name)
        ready: "asyncio.Future[ClientSession]" = asyncio.get_running_loop().create_future()
        closing = asyncio.Event()
        owner_task = asyncio.create_task(cls._own_transport(config, ready, closing), name=f"mcp-server:{config.name}")

        try:
            session = await ready
        except asyncio.CancelledError:
            closing.set()
            owner_task.cancel()
            raise
        except Exception as exc:
            await asyncio.gather(owner_task, return_exceptions=True)
            raise ServerConnectionError(
                f"Failed to connect to MCP server '{config.name}': {exc}", server_name=config.name
            ) from exc

        logger.info("MCP client session for '%s' initialized successfully.", config.name)
        return cls(config, session, owner_task, closing)

    @staticmethod
    async def _own_transport(
        config: ServerConfig, ready: "asyncio.Future[ClientSession]", closing: asyncio.Event
    ) -> None:
        try:
            async with AsyncExitStack() as stack:
                read, write = await stack.enter_async_context(stdio_client(config.to_stdio_parameters()))
                session = await stack.enter_async_context(ClientSession(read, write))
                await session.initialize()
                if ready.done():
                    return
                ready.set_result(session)
                await closing.wait()
        except Exception as exc:
            if not ready.done():
                ready.set_exception(exc)
            else:
                logger.warning("Transport of MCP server '%s' terminated: %s", config.name, exc)

    async def close(self) -> None:
        """Close the session and terminate the server process."""
        logger.debug("Closing MCP client session for '%s'...", self.name)
        self._closing.set()
        await self._owner_task
        logger.info("MCP client session for '%s' closed.", self.name)

    async def list_tools(self) -> List[MCPTool]:
        """Fetch the server's tool catalog.

        Raises:
            ProtocolApplicationError: If the server answers with an error.
            ServerConnectionError: If the transport fails.
        """
        result = await self._request("tools/list", self._session.list_tools)
        return list(result.tools)

    async def call_tool(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> CallToolResult:
        """Invoke a bare-named tool on this server.

        Raises:
            ProtocolApplicationError: If the server answers with an error.
            ServerConnectionError: If the transport fails.
        """
        return await self._request(
            f"tools/call '{tool_name}'", lambda: self._session.call_tool(tool_name, arguments=arguments)
        )

    async def _request(self, operation: str, request: Callable[[], Awaitable[Any]]) -> Any:
        """Await a session request, separating server errors from transport failures."""
        if not self.is_alive:
            raise ServerConnectionError(f"Connection to MCP server '{self.name}' is closed.", server_name=self.name)
        try:
            return await request()
        except McpError as exc:
            if exc.error.code == CONNECTION_CLOSED:
                # The SDK fails pending requests this way when the server process exits.
                raise ServerConnectionError(
                    f"{operation} on MCP server '{self.name}' failed: connection closed ({exc.error.message})",
                    server_name=self.name,
                ) from exc
            raise ProtocolApplicationError(exc.error.code, exc.error.message, server_name=self.name) from exc
        except Exception as exc:
            raise ServerConnectionError(
                f"{operation} on MCP server '{self.name}' failed: {exc!r}", server_name=self.name
            ) from exc
