"""Best-effort answers built from collected tool results when the backend is unusable."""

from typing import Sequence

from ..tools.models import CollectedToolResult


def synthesize_response(user_message: str, collected: Sequence[CollectedToolResult]) -> str:
    """Build a human-readable answer without consulting the model.

    Args:
        user_message: The message that started the turn.
        collected: Tool results gathered so far this turn, in call order.

    Returns:
        An acknowledgement of the request followed by every result under a heading
        naming its tool, or a plain failure notice if nothing was collected.
    """
    if not collected:
        return (
            f'I could not complete your request "{user_message}": the model could not be consulted '
            "and no tool results were gathered."
        )

    sections = [
        f'I could not finish composing an answer to "{user_message}", '
        "but here is what the tools returned:"
    ]
    for item in collected:
        sections.append(f"## {item.tool_name}\n{item.result}")
    return "\n\n".join(sections)
