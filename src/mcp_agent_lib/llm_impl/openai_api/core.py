import logging
from typing import Any, Dict, Optional, Sequence

from openai import APIError, APIStatusError, AsyncOpenAI, BadRequestError, UnprocessableEntityError
from openai.types.chat import ChatCompletion

from mcp_agent_lib.agent_core import CompletionBackend
from mcp_agent_lib.agent_core.base.base import BAD_REQUEST_STATUS_CODES
from mcp_agent_lib.agent_core.exceptions import BackendError
from mcp_agent_lib.agent_core.messages.models import AssistantMessage, BaseMessage
from mcp_agent_lib.agent_core.tools.models import NamespacedTool
from .adapter import OpenAIMessageAdapter

logger = logging.getLogger(__name__)


class OpenAICompletionBackend(CompletionBackend):
    """
    Completion backend for OpenAI and OpenAI-compatible endpoints (e.g. Fireworks).
    Sends the whole conversation plus the tool catalog and returns the assistant's decision.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model_name: str,
        temp: float = 1.0,
        max_tokens: int = 3000,
    ):
        """
        Initializes the OpenAI completion backend.

        Args:
            client: The initialized AsyncOpenAI client.
            model_name: The identifier of the model to use.
            temp: The temperature for text generation, controlling randomness.
            max_tokens: The maximum number of tokens to generate in the response.
        """
        self.client: AsyncOpenAI = client
        self.model: str = model_name
        self.temperature = temp
        self.max_tokens = max_tokens

    async def complete(self, conversation: Sequence[BaseMessage], tools: Sequence[NamespacedTool]) -> AssistantMessage:
        """
        Requests the next assistant decision.

        Args:
            conversation: The ordered conversation so far.
            tools: The namespaced tool catalog offered to the model.

        Returns:
            AssistantMessage: The model's text and requested tool invocations.

        Raises:
            BackendError: If the API call fails or returns no choices. ``bad_request``
                is set when the endpoint rejected the request itself.
        """
        request: Dict[str, Any] = {
            "model": self.model,
            "messages": OpenAIMessageAdapter.to_openai_messages(conversation),
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if tools:
            request["tools"] = OpenAIMessageAdapter.to_openai_tools(tools)

        logger.debug("Sending %d message(s) and %d tool(s) to model '%s'.", len(conversation), len(tools), self.model)
        try:
            response: ChatCompletion = await self.client.chat.completions.create(**request)
        except APIError as exc:
            raise self._to_backend_error(exc) from exc

        if not response.choices:
            raise BackendError("No response from model")

        logger.debug("Response received. Finish reason: %s", response.choices[0].finish_reason)
        return OpenAIMessageAdapter.to_assistant_message(response)

    @staticmethod
    def _to_backend_error(error: APIError) -> BackendError:
        """Translate an OpenAI SDK error into a classified BackendError.

        Args:
            error: The exception raised by the SDK.

        Returns:
            The BackendError to raise.
        """
        status_code: Optional[int] = error.status_code if isinstance(error, APIStatusError) else None
        bad_request = isinstance(error, (BadRequestError, UnprocessableEntityError)) or (
            status_code in BAD_REQUEST_STATUS_CODES
        )
        logger.warning("Completion backend error (status=%s, bad_request=%s): %s", status_code, bad_request, error)
        return BackendError(f"Completion backend error: {error}", bad_request=bad_request, status_code=status_code)
