"""Bridge MCP tool-servers into the agent core: configs, connections, discovery and routing."""

from .config import ServerConfig, load_server_configs, parse_server_configs
from .connection import ServerConnection, resolve_call_result
from .facade import ToolInvocationFacade
from .manager import ToolConnectionManager
from .namespacing import NAMESPACE_SEPARATOR, namespace_tool_name, split_namespaced_name

__all__ = [
    "ServerConfig",
    "load_server_configs",
    "parse_server_configs",
    "ServerConnection",
    "resolve_call_result",
    "ToolInvocationFacade",
    "ToolConnectionManager",
    "NAMESPACE_SEPARATOR",
    "namespace_tool_name",
    "split_namespaced_name",
]
