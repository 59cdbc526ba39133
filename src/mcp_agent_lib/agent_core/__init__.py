"""Public exports for the provider-agnostic agent core."""

from .base import AgentState, ChatResult, CompletionBackend, is_bad_request_error
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
from .logger import get_logger, setup_logging
from .messages import (
    BaseMessage,
    UserMessage,
    AssistantMessage,
    SystemMessage,
    ToolMessage,
)
from .tools import (
    NamespacedTool,
    ToolInvocationRequest,
    TextBlocksResult,
    RawValueResult,
    ToolResultContent,
    CollectedToolResult,
    SchemaValidator,
    RetrySchedule,
    ToolProvider,
    ToolInvoker,
    truncate_result,
)
from .agent import AgentLoop, LIMIT_REACHED_MESSAGE, synthesize_response

__all__ = [
    "AgentState",
    "ChatResult",
    "CompletionBackend",
    "is_bad_request_error",
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
    "get_logger",
    "setup_logging",
    "BaseMessage",
    "UserMessage",
    "AssistantMessage",
    "SystemMessage",
    "ToolMessage",
    "NamespacedTool",
    "ToolInvocationRequest",
    "TextBlocksResult",
    "RawValueResult",
    "ToolResultContent",
    "CollectedToolResult",
    "SchemaValidator",
    "RetrySchedule",
    "ToolProvider",
    "ToolInvoker",
    "truncate_result",
    "AgentLoop",
    "LIMIT_REACHED_MESSAGE",
    "synthesize_response",
]
