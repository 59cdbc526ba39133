"""Retry and truncation policy applied to every individual tool invocation."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from ..exceptions import ProtocolApplicationError, UnknownNamespace
from ..logger import get_logger
from .provider import ToolProvider
from .retry import DEFAULT_RETRY_SCHEDULE, RetrySchedule

logger = get_logger(__name__)

DEFAULT_MAX_RESULT_CHARS = 8000


def truncate_result(text: str, max_chars: int = DEFAULT_MAX_RESULT_CHARS) -> str:
    """Bound the amount of tool output that re-enters the next model call.

    Args:
        text: The full tool result.
        max_chars: Maximum number of content characters to keep.

    Returns:
        ``text`` unchanged if it fits, otherwise its first ``max_chars`` characters
        followed by a marker stating the original length.
    """
    if len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}\n\n[Result truncated: original length {len(text)} characters]"


class ToolInvoker:
    """Invokes tools through a ToolProvider with a fixed backoff retry policy.

    Failures never raise out of ``invoke``: every outcome is rendered as the text
    of a tool-result message so the model can react to it.
    """

    def __init__(
        self,
        provider: ToolProvider,
        *,
        retry_schedule: Optional[RetrySchedule] = None,
        max_result_chars: int = DEFAULT_MAX_RESULT_CHARS,
    ) -> None:
        """Initialize the invoker.

        Args:
            provider: Component that routes namespaced tool calls.
            retry_schedule: Waits between attempts. Defaults to 0.5s then 1.0s.
            max_result_chars: Truncation limit for successful results.
        """
        self._provider = provider
        self._retry_schedule = retry_schedule or DEFAULT_RETRY_SCHEDULE
        self._max_result_chars = max_result_chars

    @property
    def retry_schedule(self) -> RetrySchedule:
        return self._retry_schedule

    async def invoke(self, tool_name: str, arguments: Dict[str, Any]) -> str:
        """Invoke a tool and render the outcome as text.

        Args:
            tool_name: Namespaced name of the tool.
            arguments: Parsed argument object.

        Returns:
            The (possibly truncated) result text, or a short error description.
        """
        last_error: Optional[Exception] = None

        for attempt in self._retry_schedule:
            if attempt.delay:
                logger.info(
                    "Retrying tool '%s' in %.1fs (attempt %d/%d).",
                    tool_name,
                    attempt.delay,
                    attempt.number,
                    self._retry_schedule.attempts,
                )
                await asyncio.sleep(attempt.delay)

            try:
                logger.info("Executing tool '%s'...", tool_name)
                logger.debug("Tool arguments: %s", arguments)
                result = await self._provider.call_tool(tool_name, arguments)
            except ProtocolApplicationError as exc:
                if exc.is_invalid_arguments:
                    # The server will reject the same arguments again.
                    logger.warning("Tool '%s' rejected its arguments: %s", tool_name, exc.message)
                    return f"Tool error: invalid arguments for '{tool_name}': {exc.message}"
                last_error = exc
            except UnknownNamespace as exc:
                logger.warning("Tool '%s' cannot be routed: %s", tool_name, exc)
                return f"Tool error: {exc}"
            except Exception as exc:
                last_error = exc
            else:
                text = result.as_text()
                if result.is_error:
                    logger.warning("Tool '%s' reported an error result.", tool_name)
                else:
                    logger.info("Tool '%s' executed successfully.", tool_name)
                logger.debug("Tool '%s' result: %s", tool_name, text[:200] + "..." if len(text) > 200 else text)
                return truncate_result(text, self._max_result_chars)

            logger.warning(
                "Tool '%s' failed (attempt %d/%d): %s",
                tool_name,
                attempt.number,
                self._retry_schedule.attempts,
                last_error,
            )

        attempts = self._retry_schedule.attempts
        logger.error("Tool '%s' failed after %d attempts: %s", tool_name, attempts, last_error)
        return f"Tool call failed after {attempts} attempts: {last_error}"
