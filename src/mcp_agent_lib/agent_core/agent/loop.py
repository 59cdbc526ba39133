"""The bounded agent loop: alternate model decisions and tool execution until an answer emerges."""

from __future__ import annotations

from typing import List, Optional, Sequence

from ..base import AgentState, ChatResult, CompletionBackend, is_bad_request_error
from ..exceptions import MalformedInvocationArguments
from ..logger import get_logger
from ..messages import AssistantMessage, BaseMessage, SystemMessage, ToolMessage, UserMessage
from ..tools.invoker import DEFAULT_MAX_RESULT_CHARS, ToolInvoker
from ..tools.models import CollectedToolResult, NamespacedTool, ToolInvocationRequest
from ..tools.provider import ToolProvider
from ..tools.retry import RetrySchedule
from .arguments import format_malformed_arguments, parse_invocation_arguments
from .synthesis import synthesize_response

logger = get_logger(__name__)

DEFAULT_MAX_ITERATIONS = 10

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a helpful assistant with access to external tools. "
    "Use the tools when they help answer the user's request, and answer directly otherwise."
)

LIMIT_REACHED_MESSAGE = (
    "I reached the maximum number of tool-calling steps for this request without finishing. "
    "Please try again with a narrower request."
)


class AgentLoop:
    """
    Drives one chat turn through the completion backend and the tool provider.

    The loop holds no state between turns: every call to ``chat`` works on its own
    copy of the conversation, so one instance can serve concurrent turns.
    """

    def __init__(
        self,
        backend: CompletionBackend,
        tools: ToolProvider,
        *,
        sys_instruction: str = DEFAULT_SYSTEM_INSTRUCTION,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        max_result_chars: int = DEFAULT_MAX_RESULT_CHARS,
        retry_schedule: Optional[RetrySchedule] = None,
    ):
        """
        Initializes the agent loop.

        Args:
            backend: The completion backend asked for each decision.
            tools: Provider of the tool catalog and tool routing.
            sys_instruction: System instruction used when no prior history is supplied.
            max_iterations: Maximum number of model decisions per turn.
            max_result_chars: Truncation limit for tool results fed back to the model.
            retry_schedule: Backoff schedule for failed tool calls.
        """
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1.")

        self.backend = backend
        self.tools = tools
        self.sys_instruction = sys_instruction
        self.max_iterations = max_iterations
        self._invoker = ToolInvoker(tools, retry_schedule=retry_schedule, max_result_chars=max_result_chars)

    async def chat(self, user_message: str, history: Optional[Sequence[BaseMessage]] = None) -> ChatResult:
        """
        Turns one user message into a final answer.

        Args:
            user_message: The new message from the user.
            history: Optional prior conversation, as returned by a previous turn.
                When omitted, the conversation starts with the system instruction.

        Returns:
            ChatResult with the answer text, the updated conversation and the
            terminal state (``DONE`` or ``STOPPED_BY_LIMIT``).

        Raises:
            BackendError: If the completion backend fails and the failure cannot be
                absorbed by degraded synthesis.
        """
        conversation = self._seed_conversation(user_message, history)
        catalog = await self.tools.get_tools()
        collected: List[CollectedToolResult] = []
        state = AgentState.AWAITING_DECISION

        for iteration in range(self.max_iterations):
            logger.debug("Iteration %d/%d: %s", iteration + 1, self.max_iterations, state.value)

            try:
                assistant = await self.backend.complete(conversation, catalog)
            except Exception as exc:
                if iteration > 0 and is_bad_request_error(exc):
                    logger.warning(
                        "Backend rejected the request after %d tool result(s); synthesizing a response: %s",
                        len(collected),
                        exc,
                    )
                    content = synthesize_response(user_message, collected)
                    conversation.append(AssistantMessage(content=content))
                    return self._finish(content, conversation, AgentState.DONE, iteration + 1)
                raise

            conversation.append(assistant)

            if not assistant.requests_tools:
                logger.debug("No tool calls found in response. Loop finished.")
                return self._finish(assistant.content, conversation, AgentState.DONE, iteration + 1)

            state = AgentState.EXECUTING_TOOLS
            logger.info(
                "Loop %d/%d: Processing %d tool call(s).", iteration + 1, self.max_iterations, len(assistant.tool_calls)
            )
            for request in assistant.tool_calls:
                conversation.append(await self._execute(request, collected))

            state = AgentState.AWAITING_DECISION

        logger.warning("Max iterations (%d) reached. Stopping execution.", self.max_iterations)
        conversation.append(AssistantMessage(content=LIMIT_REACHED_MESSAGE))
        return self._finish(LIMIT_REACHED_MESSAGE, conversation, AgentState.STOPPED_BY_LIMIT, self.max_iterations)

    async def list_tools(self) -> List[NamespacedTool]:
        """Returns the tool catalog offered to the model."""
        return await self.tools.get_tools()

    def _seed_conversation(self, user_message: str, history: Optional[Sequence[BaseMessage]]) -> List[BaseMessage]:
        conversation: List[BaseMessage] = list(history) if history else []
        if not conversation and self.sys_instruction:
            conversation.append(SystemMessage(content=self.sys_instruction))
        conversation.append(UserMessage(content=user_message))
        return conversation

    async def _execute(self, request: ToolInvocationRequest, collected: List[CollectedToolResult]) -> ToolMessage:
        """Execute one requested invocation and wrap the outcome as a tool message.

        Malformed arguments are answered inline without contacting any tool-server
        and are not collected for synthesis.
        """
        try:
            arguments = parse_invocation_arguments(request.name, request.arguments)
        except MalformedInvocationArguments as exc:
            logger.warning("Malformed arguments for tool '%s': %s", request.name, exc.reason)
            return ToolMessage(content=format_malformed_arguments(exc), tool_call_id=request.call_id, name=request.name)

        result = await self._invoker.invoke(request.name, arguments)
        collected.append(CollectedToolResult(tool_name=request.name, result=result))
        return ToolMessage(content=result, tool_call_id=request.call_id, name=request.name)

    @staticmethod
    def _finish(content: str, conversation: List[BaseMessage], state: AgentState, iterations: int) -> ChatResult:
        logger.debug("Turn finished in state %s after %d iteration(s).", state.value, iterations)
        return ChatResult(content=content, history=conversation, state=state, iterations=iterations)
