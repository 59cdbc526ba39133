"""Export the exception hierarchy used across connection, routing and agent paths."""

from .exceptions import (
    AgentLibError,
    ConfigError,
    NoServersConfigured,
    ToolRoutingError,
    UnknownNamespace,
    ServerNotConnected,
    ServerConnectionError,
    ProtocolApplicationError,
    MalformedInvocationArguments,
    BackendError,
)

__all__ = [
    "AgentLibError",
    "ConfigError",
    "NoServersConfigured",
    "ToolRoutingError",
    "UnknownNamespace",
    "ServerNotConnected",
    "ServerConnectionError",
    "ProtocolApplicationError",
    "MalformedInvocationArguments",
    "BackendError",
]
