"""Core abstractions for completion backends and chat turn results."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Sequence

from pydantic import BaseModel

from ..exceptions import BackendError
from ..logger import get_logger
from ..messages import AssistantMessage, BaseMessage
from ..tools.models import NamespacedTool

logger = get_logger(__name__)

BAD_REQUEST_STATUS_CODES = frozenset({400, 413, 422})

# Used only when an error carries no structured classification.
_BAD_REQUEST_MARKERS = (
    "400",
    "bad request",
    "invalid_request",
    "invalid request",
    "request too large",
    "context length",
    "maximum context",
)


class AgentState(str, Enum):
    """States of the agent loop state machine."""

    AWAITING_DECISION = "awaiting_decision"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"
    STOPPED_BY_LIMIT = "stopped_by_limit"


class ChatResult(BaseModel):
    """Normalized output of one chat turn.

    Attributes:
        content: The final answer text (possibly synthesized or the limit sentinel).
        history: The full updated conversation, to be re-supplied for continuity.
        state: The terminal state the turn ended in.
        iterations: Number of model decisions requested during the turn.
    """

    content: str
    history: List[BaseMessage]
    state: AgentState
    iterations: int = 0


class CompletionBackend(ABC):
    """Abstract base class for the model-completion backend.

    Implementations turn the ordered conversation plus tool catalog into one
    assistant message and raise ``BackendError`` on failure, setting
    ``bad_request`` when the backend rejected the request payload itself.
    """

    @abstractmethod
    async def complete(self, conversation: Sequence[BaseMessage], tools: Sequence[NamespacedTool]) -> AssistantMessage:
        """
        Ask the model for its next decision.

        Args:
            conversation: The conversation so far, in order.
            tools: The tools the model may request.

        Returns:
            The assistant message, with zero or more tool invocation requests.

        Raises:
            BackendError: If the backend call fails.
        """
        pass


def is_bad_request_error(error: BaseException) -> bool:
    """Classify a completion backend failure as a client-side request-validity error.

    Structured information wins: ``BackendError.bad_request`` and any
    ``status_code`` attribute (as carried by OpenAI status errors) are checked
    first. Matching the error message against known markers is a fallback for
    errors that carry neither.

    Args:
        error: The exception raised by the backend.

    Returns:
        True if the request itself was rejected.
    """
    if isinstance(error, BackendError):
        if error.bad_request:
            return True
        if error.status_code is not None:
            return error.status_code in BAD_REQUEST_STATUS_CODES
        # An unclassified BackendError may still wrap an SDK error.
        cause = error.__cause__
        if cause is not None and cause is not error:
            return is_bad_request_error(cause)

    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        return status_code in BAD_REQUEST_STATUS_CODES

    message = str(error).lower()
    if any(marker in message for marker in _BAD_REQUEST_MARKERS):
        logger.debug("Classified backend error as bad request by message: %s", message[:200])
        return True
    return False
