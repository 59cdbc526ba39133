"""
Custom exception classes for the MCP agent library.

The hierarchy separates failures that are recovered locally (a broken transport
is reconnected once, malformed tool arguments are reported inline) from failures
that end a chat turn (missing configuration, fatal completion backend errors).
"""

from typing import Optional

from mcp.types import INVALID_PARAMS


class AgentLibError(Exception):
    """Base exception for all errors raised by the library."""

    pass


class ConfigError(AgentLibError):
    """Raised when server or backend configuration is missing or invalid."""

    pass


class NoServersConfigured(ConfigError):
    """Raised when a connection attempt is made with an empty server configuration."""

    pass


class ToolRoutingError(AgentLibError):
    """Raised when a namespaced tool name cannot be routed to a live server."""

    pass


class UnknownNamespace(ToolRoutingError):
    """Raised when a tool name carries no server namespace prefix."""

    pass


class ServerNotConnected(ToolRoutingError):
    """Raised when the server named by a namespace has no live connection."""

    pass


class ServerConnectionError(AgentLibError, ConnectionError):
    """Raised when the transport to a tool-server fails (the pipe broke).

    This is the only failure class that triggers the reconnect-and-retry policy.
    """

    def __init__(self, message: str, server_name: Optional[str] = None):
        super().__init__(message)
        self.server_name = server_name


class ProtocolApplicationError(AgentLibError):
    """Raised when a tool-server answers a request with a structured error.

    Attributes:
        code: The JSON-RPC error code returned by the server.
        message: The error message returned by the server.
    """

    def __init__(self, code: int, message: str, server_name: Optional[str] = None):
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.message = message
        self.server_name = server_name

    @property
    def is_invalid_arguments(self) -> bool:
        """Whether the server rejected the call's arguments."""
        return self.code == INVALID_PARAMS


class MalformedInvocationArguments(AgentLibError):
    """Raised when the argument payload of a tool invocation cannot be parsed."""

    def __init__(self, tool_name: str, raw_arguments: str, reason: str):
        super().__init__(f"Malformed arguments for tool '{tool_name}': {reason}")
        self.tool_name = tool_name
        self.raw_arguments = raw_arguments
        self.reason = reason


class BackendError(AgentLibError):
    """Raised when the completion backend fails.

    Attributes:
        bad_request: True when the backend rejected the request itself (invalid or
            oversized payload) rather than failing for an unrelated reason.
        status_code: HTTP status code reported by the backend, if any.
    """

    def __init__(self, message: str, bad_request: bool = False, status_code: Optional[int] = None):
        super().__init__(message)
        self.bad_request = bad_request
        self.status_code = status_code
