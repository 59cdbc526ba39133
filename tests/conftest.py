import asyncio
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
from unittest.mock import AsyncMock, MagicMock

import pytest
from mcp.types import CallToolResult, TextContent, Tool as MCPTool

from mcp_agent_lib.agent_core import (
    AssistantMessage,
    BaseMessage,
    CompletionBackend,
    NamespacedTool,
    ServerConnectionError,
    TextBlocksResult,
    ToolInvocationRequest,
    ToolProvider,
)
from mcp_agent_lib.mcp_wrapper import ServerConfig


class FakeServer:
    """Scripted tool-server shared by every connection opened to it."""

    def __init__(self, name: str, tool_names: Sequence[str] = ("search",)) -> None:
        self.config = ServerConfig(name=name, command="fake-server", args=[name])
        self.tools = [
            MCPTool(name=tool, description=f"{tool} on {name}", inputSchema={"type": "object", "properties": {}})
            for tool in tool_names
        ]
        # Outcomes consumed in order; exceptions are raised, anything else is returned.
        self.call_outcomes: List[Any] = []
        self.list_outcomes: List[Any] = []
        self.calls: List[tuple] = []
        self.connections: List["FakeConnection"] = []
        self.fail_connect = False
        self.close_error: Optional[Exception] = None


class FakeConnection:
    """Stands in for ServerConnection."""

    def __init__(self, server: FakeServer) -> None:
        self.server = server
        self.config = server.config
        self.closed = False

    @property
    def name(self) -> str:
        return self.config.name

    async def list_tools(self) -> List[MCPTool]:
        await asyncio.sleep(0)
        if self.server.list_outcomes:
            outcome = self.server.list_outcomes.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        return list(self.server.tools)

    async def call_tool(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> CallToolResult:
        self.server.calls.append((self, tool_name, arguments))
        await asyncio.sleep(0)
        if self.server.call_outcomes:
            outcome = self.server.call_outcomes.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        return CallToolResult(content=[TextContent(type="text", text=f"{tool_name} ok")])

    async def close(self) -> None:
        self.closed = True
        if self.server.close_error:
            raise self.server.close_error


class FakeCluster:
    """A set of fake servers plus the connection factory handed to the manager."""

    def __init__(self, *servers: FakeServer) -> None:
        self.servers: Dict[str, FakeServer] = {server.config.name: server for server in servers}
        self.open_count = 0

    @property
    def configs(self) -> Dict[str, ServerConfig]:
        return {name: server.config for name, server in self.servers.items()}

    async def open(self, config: ServerConfig) -> FakeConnection:
        self.open_count += 1
        server = self.servers[config.name]
        if server.fail_connect:
            raise ServerConnectionError(f"cannot launch {config.name}", server_name=config.name)
        connection = FakeConnection(server)
        server.connections.append(connection)
        return connection


class ScriptedBackend(CompletionBackend):
    """Completion backend replaying scripted responses; exceptions are raised."""

    def __init__(
        self,
        responses: Sequence[Union[AssistantMessage, Exception]] = (),
        default: Optional[Callable[[int], AssistantMessage]] = None,
    ) -> None:
        self.responses = list(responses)
        self.default = default
        self.calls: List[List[BaseMessage]] = []
        self.tools_seen: List[List[NamespacedTool]] = []

    async def complete(self, conversation: Sequence[BaseMessage], tools: Sequence[NamespacedTool]) -> AssistantMessage:
        self.calls.append(list(conversation))
        self.tools_seen.append(list(tools))
        if self.responses:
            response = self.responses.pop(0)
        elif self.default is not None:
            response = self.default(len(self.calls))
        else:
            raise AssertionError("ScriptedBackend ran out of responses")
        if isinstance(response, Exception):
            raise response
        return response


def tool_call_message(name: str, arguments: str, call_id: str = "call_1", content: str = "") -> AssistantMessage:
    return AssistantMessage(
        content=content, tool_calls=[ToolInvocationRequest(call_id=call_id, name=name, arguments=arguments)]
    )


@pytest.fixture
def make_cluster() -> Callable[..., FakeCluster]:
    def _make(servers: Optional[Dict[str, Sequence[str]]] = None) -> FakeCluster:
        servers = servers or {"notion": ("search", "fetch"), "github": ("search", "create_issue")}
        return FakeCluster(*(FakeServer(name, tools) for name, tools in servers.items()))

    return _make


@pytest.fixture
def notion_tool() -> NamespacedTool:
    return NamespacedTool(
        name="search",
        namespaced_name="notion__search",
        server_name="notion",
        description="Search Notion pages",
        input_schema={"type": "object", "properties": {"query": {"type": "string"}}},
    )


@pytest.fixture
def mock_provider(notion_tool: NamespacedTool) -> Any:
    provider = MagicMock(spec=ToolProvider)
    provider.get_tools = AsyncMock(return_value=[notion_tool])
    provider.call_tool = AsyncMock(return_value=TextBlocksResult(texts=["Page: Roadmap"]))
    return provider


@pytest.fixture
def scripted_backend() -> Callable[..., ScriptedBackend]:
    return ScriptedBackend


@pytest.fixture
def make_tool_call() -> Callable[..., AssistantMessage]:
    return tool_call_message
