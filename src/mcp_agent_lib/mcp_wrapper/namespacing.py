"""Construction and parsing of namespaced tool names."""

from typing import Tuple

from mcp_agent_lib.agent_core.exceptions import UnknownNamespace

NAMESPACE_SEPARATOR = "__"


def namespace_tool_name(server_name: str, tool_name: str) -> str:
    """Prefix a bare tool name with its owning server's name."""
    return f"{server_name}{NAMESPACE_SEPARATOR}{tool_name}"


def split_namespaced_name(namespaced_name: str) -> Tuple[str, str]:
    """Split a namespaced tool name into ``(server_name, tool_name)``.

    Server names never contain the separator, so the first occurrence marks the
    namespace boundary.

    Raises:
        UnknownNamespace: If the name carries no namespace prefix.
    """
    server_name, separator, tool_name = namespaced_name.partition(NAMESPACE_SEPARATOR)
    if not separator or not server_name or not tool_name:
        raise UnknownNamespace(
            f"Tool name '{namespaced_name}' has no server namespace "
            f"(expected '<server>{NAMESPACE_SEPARATOR}<tool>')."
        )
    return server_name, tool_name
