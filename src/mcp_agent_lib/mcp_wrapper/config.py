"""Tool-server configuration models and loading."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from mcp.client.stdio import StdioServerParameters, get_default_environment
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mcp_agent_lib.agent_core.exceptions import ConfigError, NoServersConfigured
from .namespacing import NAMESPACE_SEPARATOR

logger = logging.getLogger(__name__)

__all__ = ["ServerConfig", "load_server_configs", "parse_server_configs"]


class ServerConfig(BaseModel):
    """How to launch one stdio tool-server.

    Attributes:
        name: Unique server name, used as the tool namespace.
        command: Executable that starts the server.
        args: Arguments passed to the command.
        env: Environment overrides applied on top of the default safe environment.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    command: str
    args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value:
            raise ValueError("server name must not be empty")
        if NAMESPACE_SEPARATOR in value:
            raise ValueError(f"server name must not contain the reserved separator '{NAMESPACE_SEPARATOR}'")
        # A trailing '_' would merge into the separator and shift the split point.
        if value.endswith(NAMESPACE_SEPARATOR[0]):
            raise ValueError(f"server name must not end with '{NAMESPACE_SEPARATOR[0]}'")
        return value

    def to_stdio_parameters(self) -> StdioServerParameters:
        """Build the MCP SDK launch parameters for this server."""
        env: Optional[Dict[str, str]] = None
        if self.env:
            env = {**get_default_environment(), **self.env}
        return StdioServerParameters(command=self.command, args=list(self.args), env=env)


def parse_server_configs(data: Mapping[str, Any]) -> Dict[str, ServerConfig]:
    """Build server configs from a decoded configuration document.

    Accepts either ``{"mcpServers": {name: {...}}}`` or a bare ``{name: {...}}`` mapping.

    Args:
        data: The decoded document.

    Returns:
        A mapping from server name to its config, in document order.

    Raises:
        ConfigError: If an entry is malformed.
        NoServersConfigured: If the document defines no servers.
    """
    servers = data.get("mcpServers", data) if isinstance(data, Mapping) else None
    if not isinstance(servers, Mapping):
        raise ConfigError("Server configuration must be a mapping of server names to launch settings.")

    configs: Dict[str, ServerConfig] = {}
    for name, entry in servers.items():
        if not isinstance(entry, Mapping):
            raise ConfigError(f"Configuration for server '{name}' must be a mapping.")
        try:
            configs[name] = ServerConfig(name=name, **entry)
        except (ValidationError, TypeError) as exc:
            raise ConfigError(f"Invalid configuration for server '{name}': {exc}") from exc

    if not configs:
        raise NoServersConfigured("No MCP servers are configured.")
    logger.debug("Parsed %d server config(s): %s", len(configs), ", ".join(configs))
    return configs


def load_server_configs(path: str | Path) -> Dict[str, ServerConfig]:
    """Load server configs from a JSON file.

    Raises:
        ConfigError: If the file is missing, is not valid JSON or is malformed.
        NoServersConfigured: If the file defines no servers.
    """
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read server configuration '{config_path}': {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Server configuration '{config_path}' is not valid JSON: {exc}") from exc

    logger.info("Loading MCP server configuration from '%s'.", config_path)
    return parse_server_configs(data)
