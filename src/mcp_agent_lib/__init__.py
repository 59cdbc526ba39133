"""MCP Agent Library - let a language model answer requests by calling tools on MCP servers."""

from .agent_core import (
    AgentLoop,
    AgentState,
    ChatResult,
    CompletionBackend,
    NamespacedTool,
    BaseMessage,
    UserMessage,
    AssistantMessage,
    SystemMessage,
    ToolMessage,
    setup_logging,
)
from .llm_impl import OpenAICompletionBackend
from .mcp_wrapper import ServerConfig, ToolConnectionManager, ToolInvocationFacade, load_server_configs
from .settings import AgentSettings

__all__ = [
    "AgentLoop",
    "AgentState",
    "ChatResult",
    "CompletionBackend",
    "NamespacedTool",
    "BaseMessage",
    "UserMessage",
    "AssistantMessage",
    "SystemMessage",
    "ToolMessage",
    "setup_logging",
    "OpenAICompletionBackend",
    "ServerConfig",
    "ToolConnectionManager",
    "ToolInvocationFacade",
    "load_server_configs",
    "AgentSettings",
]
