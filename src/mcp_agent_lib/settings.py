"""Runtime settings read from the environment (and a ``.env`` file, if present)."""

import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .agent_core.agent.loop import DEFAULT_MAX_ITERATIONS
from .agent_core.exceptions import ConfigError
from .agent_core.tools.invoker import DEFAULT_MAX_RESULT_CHARS

DEFAULT_BASE_URL = "https://api.fireworks.ai/inference/v1"
DEFAULT_MODEL = "accounts/fireworks/models/deepseek-v3p1"
DEFAULT_SERVERS_CONFIG = "mcp_servers.json"

_API_KEY_VARS = ("LLM_API_KEY", "FIREWORKS_API_KEY", "OPENAI_API_KEY")


class AgentSettings(BaseModel):
    """
    Settings for the completion backend, the agent loop and server discovery.

    Attributes:
        api_key: Key for the completion endpoint.
        base_url: Base URL of the OpenAI-compatible endpoint.
        model: Model identifier.
        temperature: Sampling temperature.
        max_tokens: Maximum tokens per completion.
        max_iterations: Maximum model decisions per chat turn.
        max_result_chars: Truncation limit for tool results.
        servers_config: Path to the JSON file describing the tool-servers.
    """

    api_key: str = Field(min_length=1)
    base_url: Optional[str] = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    temperature: float = 1.0
    max_tokens: int = Field(default=3000, gt=0)
    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=1)
    max_result_chars: int = Field(default=DEFAULT_MAX_RESULT_CHARS, gt=0)
    servers_config: Path = Path(DEFAULT_SERVERS_CONFIG)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, load_env_file: bool = True) -> "AgentSettings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.
            load_env_file: Whether to load a ``.env`` file into ``os.environ`` first.

        Returns:
            The validated settings.

        Raises:
            ConfigError: If the API key is missing or a value is invalid.
        """
        if load_env_file:
            load_dotenv()
        env = os.environ if environ is None else environ

        api_key = next((env[var] for var in _API_KEY_VARS if env.get(var)), None)
        if not api_key:
            raise ConfigError(f"One of {', '.join(_API_KEY_VARS)} must be set.")

        values = {
            "api_key": api_key,
            "base_url": env.get("LLM_BASE_URL") or DEFAULT_BASE_URL,
            "model": env.get("LLM_MODEL") or DEFAULT_MODEL,
            "temperature": env.get("LLM_TEMPERATURE", 1.0),
            "max_tokens": env.get("LLM_MAX_TOKENS", 3000),
            "max_iterations": env.get("AGENT_MAX_ITERATIONS", DEFAULT_MAX_ITERATIONS),
            "max_result_chars": env.get("AGENT_MAX_RESULT_CHARS", DEFAULT_MAX_RESULT_CHARS),
            "servers_config": env.get("MCP_SERVERS_CONFIG") or DEFAULT_SERVERS_CONFIG,
        }
        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigError(f"Invalid settings: {exc}") from exc
