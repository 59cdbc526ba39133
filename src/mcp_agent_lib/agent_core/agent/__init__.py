"""Agent loop, argument parsing and degraded-response synthesis."""

from .loop import AgentLoop, DEFAULT_MAX_ITERATIONS, DEFAULT_SYSTEM_INSTRUCTION, LIMIT_REACHED_MESSAGE
from .arguments import parse_invocation_arguments, format_malformed_arguments
from .synthesis import synthesize_response

__all__ = [
    "AgentLoop",
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_SYSTEM_INSTRUCTION",
    "LIMIT_REACHED_MESSAGE",
    "parse_invocation_arguments",
    "format_malformed_arguments",
    "synthesize_response",
]
