from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APIConnectionError, AsyncOpenAI, BadRequestError, InternalServerError
from openai.types.chat import ChatCompletion

from mcp_agent_lib.agent_core import (
    AssistantMessage,
    BackendError,
    NamespacedTool,
    SystemMessage,
    ToolInvocationRequest,
    ToolMessage,
    UserMessage,
    is_bad_request_error,
)
from mcp_agent_lib.llm_impl import OpenAICompletionBackend, OpenAIMessageAdapter

REQUEST = httpx.Request("POST", "https://api.fireworks.ai/inference/v1/chat/completions")


def completion(content: Optional[str] = None, tool_calls: Optional[List[Dict[str, Any]]] = None) -> ChatCompletion:
    message: Dict[str, Any] = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = tool_calls
    return ChatCompletion.model_validate(
        {
            "id": "chatcmpl-1",
            "object": "chat.completion",
            "created": 0,
            "model": "test-model",
            "choices": [
                {"index": 0, "finish_reason": "tool_calls" if tool_calls else "stop", "message": message}
            ],
        }
    )


def status_error(error_cls: Any, status: int, message: str) -> Any:
    return error_cls(message, response=httpx.Response(status, request=REQUEST), body=None)


@pytest.fixture
def mock_openai_client() -> Any:
    client = MagicMock(spec=AsyncOpenAI)
    client.chat = MagicMock()
    client.chat.completions = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client


@pytest.fixture
def backend(mock_openai_client: Any) -> OpenAICompletionBackend:
    return OpenAICompletionBackend(client=mock_openai_client, model_name="test-model", temp=0.2, max_tokens=500)


@pytest.mark.asyncio
async def test_complete_returns_text(
    backend: OpenAICompletionBackend, mock_openai_client: Any, notion_tool: NamespacedTool
) -> None:
    mock_openai_client.chat.completions.create.return_value = completion("Hello world")

    message = await backend.complete([SystemMessage(content="Be brief."), UserMessage(content="hi")], [notion_tool])

    assert message.content == "Hello world"
    assert not message.requests_tools

    call_args = mock_openai_client.chat.completions.create.call_args
    assert call_args.kwargs["model"] == "test-model"
    assert call_args.kwargs["temperature"] == 0.2
    assert call_args.kwargs["max_tokens"] == 500
    assert call_args.kwargs["messages"] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "hi"},
    ]
    assert call_args.kwargs["tools"][0]["function"]["name"] == "notion__search"


@pytest.mark.asyncio
async def test_complete_without_tools_omits_tool_parameter(
    backend: OpenAICompletionBackend, mock_openai_client: Any
) -> None:
    mock_openai_client.chat.completions.create.return_value = completion("ok")

    await backend.complete([UserMessage(content="hi")], [])

    assert "tools" not in mock_openai_client.chat.completions.create.call_args.kwargs


@pytest.mark.asyncio
async def test_complete_extracts_tool_calls(backend: OpenAICompletionBackend, mock_openai_client: Any) -> None:
    mock_openai_client.chat.completions.create.return_value = completion(
        tool_calls=[
            {"id": "call_1", "type": "function", "function": {"name": "notion__search", "arguments": '{"query": "x"}'}},
            {"id": "call_2", "type": "function", "function": {"name": "github__search", "arguments": "{bad"}},
        ]
    )

    message = await backend.complete([UserMessage(content="search")], [])

    assert message.content == ""
    assert message.tool_calls == [
        ToolInvocationRequest(call_id="call_1", name="notion__search", arguments='{"query": "x"}'),
        ToolInvocationRequest(call_id="call_2", name="github__search", arguments="{bad"),
    ]


@pytest.mark.asyncio
async def test_empty_choices_raise(backend: OpenAICompletionBackend, mock_openai_client: Any) -> None:
    response = completion("unused")
    response.choices = []
    mock_openai_client.chat.completions.create.return_value = response

    with pytest.raises(BackendError, match="No response"):
        await backend.complete([UserMessage(content="hi")], [])


@pytest.mark.asyncio
async def test_bad_request_is_classified(backend: OpenAICompletionBackend, mock_openai_client: Any) -> None:
    mock_openai_client.chat.completions.create.side_effect = status_error(
        BadRequestError, 400, "maximum context length exceeded"
    )

    with pytest.raises(BackendError) as exc_info:
        await backend.complete([UserMessage(content="hi")], [])

    assert exc_info.value.bad_request
    assert exc_info.value.status_code == 400
    assert is_bad_request_error(exc_info.value)


@pytest.mark.asyncio
async def test_server_error_is_not_bad_request(backend: OpenAICompletionBackend, mock_openai_client: Any) -> None:
    mock_openai_client.chat.completions.create.side_effect = status_error(InternalServerError, 500, "overloaded")

    with pytest.raises(BackendError) as exc_info:
        await backend.complete([UserMessage(content="hi")], [])

    assert not exc_info.value.bad_request
    assert exc_info.value.status_code == 500
    assert not is_bad_request_error(exc_info.value)


@pytest.mark.asyncio
async def test_connection_error_is_not_bad_request(backend: OpenAICompletionBackend, mock_openai_client: Any) -> None:
    mock_openai_client.chat.completions.create.side_effect = APIConnectionError(request=REQUEST)

    with pytest.raises(BackendError) as exc_info:
        await backend.complete([UserMessage(content="hi")], [])

    assert exc_info.value.status_code is None
    assert not is_bad_request_error(exc_info.value)


def test_assistant_tool_calls_round_trip_into_payload() -> None:
    conversation = [
        UserMessage(content="search"),
        AssistantMessage(tool_calls=[ToolInvocationRequest(call_id="c1", name="notion__search", arguments="{}")]),
        ToolMessage(content="Page: Roadmap", tool_call_id="c1", name="notion__search"),
        AssistantMessage(content="Found it."),
    ]

    payload = OpenAIMessageAdapter.to_openai_messages(conversation)

    assert payload[1] == {
        "role": "assistant",
        "content": None,
        "tool_calls": [{"id": "c1", "type": "function", "function": {"name": "notion__search", "arguments": "{}"}}],
    }
    assert payload[2] == {"role": "tool", "content": "Page: Roadmap", "tool_call_id": "c1", "name": "notion__search"}
    assert payload[3] == {"role": "assistant", "content": "Found it."}


def test_tools_are_offered_under_namespaced_names(notion_tool: NamespacedTool) -> None:
    (tool,) = OpenAIMessageAdapter.to_openai_tools([notion_tool])

    assert tool == {
        "type": "function",
        "function": {
            "name": "notion__search",
            "description": "Search Notion pages",
            "parameters": {"type": "object", "properties": {"query": {"type": "string"}}},
        },
    }


@pytest.mark.parametrize(
    "error, expected",
    [
        (BackendError("x", bad_request=True), True),
        (BackendError("x", status_code=413), True),
        (BackendError("x", status_code=429), False),
        (RuntimeError("Error code: 400 - invalid_request_error"), True),
        (RuntimeError("connection reset"), False),
    ],
)
def test_is_bad_request_error(error: BaseException, expected: bool) -> None:
    assert is_bad_request_error(error) is expected
