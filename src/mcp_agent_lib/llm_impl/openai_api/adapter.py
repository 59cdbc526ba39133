from typing import Any, Dict, List, Sequence

from openai.types.chat import ChatCompletion, ChatCompletionToolParam

from mcp_agent_lib.agent_core.messages.models import (
    AssistantMessage,
    BaseMessage,
    SystemMessage,
    ToolMessage,
    UserMessage,
)
from mcp_agent_lib.agent_core.tools.models import NamespacedTool, ToolInvocationRequest


class OpenAIMessageAdapter:
    """Converts between the generic conversation model and OpenAI chat payloads."""

    @staticmethod
    def to_openai_messages(conversation: Sequence[BaseMessage]) -> List[Dict[str, Any]]:
        """
        Converts generic BaseMessage history to OpenAI specific dictionary history.

        Args:
            conversation: List of BaseMessage objects, in order.

        Returns:
            List of OpenAI message dictionaries.
        """
        openai_messages: List[Dict[str, Any]] = []
        for msg in conversation:
            if isinstance(msg, SystemMessage):
                openai_messages.append({"role": "system", "content": msg.content})
            elif isinstance(msg, UserMessage):
                openai_messages.append({"role": "user", "content": msg.content})
            elif isinstance(msg, AssistantMessage):
                openai_msg: Dict[str, Any] = {"role": "assistant", "content": msg.content}
                if msg.tool_calls:
                    # Content may be null when the assistant only requests tools.
                    openai_msg["content"] = msg.content or None
                    openai_msg["tool_calls"] = [
                        {
                            "id": call.call_id,
                            "type": "function",
                            "function": {"name": call.name, "arguments": call.arguments},
                        }
                        for call in msg.tool_calls
                    ]
                openai_messages.append(openai_msg)
            elif isinstance(msg, ToolMessage):
                openai_messages.append(
                    {"role": "tool", "content": msg.content, "tool_call_id": msg.tool_call_id, "name": msg.name}
                )
        return openai_messages

    @staticmethod
    def to_openai_tools(tools: Sequence[NamespacedTool]) -> List[ChatCompletionToolParam]:
        """Build OpenAI function tool definitions from the namespaced catalog."""
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.namespaced_name,
                    "description": tool.description,
                    "parameters": tool.input_schema,
                },
            }
            for tool in tools
        ]

    @staticmethod
    def to_assistant_message(response: ChatCompletion) -> AssistantMessage:
        """
        Extracts the assistant message and its tool calls from a chat completion.

        Args:
            response: The chat completion response from OpenAI. Must have at least one choice.

        Returns:
            The generic assistant message.
        """
        message = response.choices[0].message
        requests: List[ToolInvocationRequest] = []
        for tool_call in message.tool_calls or []:
            # Only function tool calls can be routed to tool-servers
            if tool_call.type == "function":
                requests.append(
                    ToolInvocationRequest(
                        call_id=tool_call.id,
                        name=tool_call.function.name,
                        arguments=tool_call.function.arguments or "",
                    )
                )
        return AssistantMessage(content=message.content or "", tool_calls=requests)
