"""Tool models, schema handling and invocation policy."""

from .models import (
    NamespacedTool,
    ToolInvocationRequest,
    TextBlocksResult,
    RawValueResult,
    ToolResultContent,
    CollectedToolResult,
)
from .schema import SchemaValidator
from .retry import RetryAttempt, RetrySchedule, DEFAULT_RETRY_SCHEDULE
from .provider import ToolProvider
from .invoker import ToolInvoker, truncate_result, DEFAULT_MAX_RESULT_CHARS

__all__ = [
    "NamespacedTool",
    "ToolInvocationRequest",
    "TextBlocksResult",
    "RawValueResult",
    "ToolResultContent",
    "CollectedToolResult",
    "SchemaValidator",
    "RetryAttempt",
    "RetrySchedule",
    "DEFAULT_RETRY_SCHEDULE",
    "ToolProvider",
    "ToolInvoker",
    "truncate_result",
    "DEFAULT_MAX_RESULT_CHARS",
]
