"""Parsing of the raw argument payload the model attaches to a tool invocation."""

import json
from typing import Any, Dict

from ..exceptions import MalformedInvocationArguments


def parse_invocation_arguments(tool_name: str, raw_arguments: Any) -> Dict[str, Any]:
    """Parse a tool invocation payload into an argument object.

    Args:
        tool_name: Name of the tool (for error reporting).
        raw_arguments: The payload produced by the model, usually a JSON string.

    Returns:
        The decoded argument object. An empty payload yields ``{}``.

    Raises:
        MalformedInvocationArguments: If the payload is not JSON or not a JSON object.
    """
    if raw_arguments is None or (isinstance(raw_arguments, str) and not raw_arguments.strip()):
        return {}

    if isinstance(raw_arguments, dict):
        return raw_arguments

    if not isinstance(raw_arguments, str):
        raise MalformedInvocationArguments(tool_name, repr(raw_arguments), "arguments must be a JSON string")

    try:
        parsed = json.loads(raw_arguments)
    except json.JSONDecodeError as exc:
        raise MalformedInvocationArguments(tool_name, raw_arguments, str(exc)) from exc

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise MalformedInvocationArguments(tool_name, raw_arguments, "arguments must decode to a JSON object")
    return parsed


def format_malformed_arguments(error: MalformedInvocationArguments) -> str:
    """Tool-result text reported to the model for unparseable arguments."""
    return (
        f"Error: the arguments for tool '{error.tool_name}' were malformed ({error.reason}). "
        f"Raw arguments: {error.raw_arguments}"
    )
