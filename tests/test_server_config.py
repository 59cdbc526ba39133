import json
from pathlib import Path
from unittest.mock import patch

import pytest

from mcp_agent_lib.agent_core import ConfigError, NoServersConfigured
from mcp_agent_lib.mcp_wrapper import ServerConfig, load_server_configs, parse_server_configs


def test_parse_mcp_servers_document() -> None:
    configs = parse_server_configs(
        {
            "mcpServers": {
                "notion": {"command": "npx", "args": ["mcp-remote", "https://mcp.notion.com/mcp"]},
                "github": {"command": "gh-mcp", "env": {"GITHUB_TOKEN": "t"}},
            }
        }
    )

    assert list(configs) == ["notion", "github"]
    assert configs["notion"].args == ["mcp-remote", "https://mcp.notion.com/mcp"]
    assert configs["github"].env == {"GITHUB_TOKEN": "t"}
    assert configs["github"].args == []


def test_parse_bare_mapping() -> None:
    configs = parse_server_configs({"notion": {"command": "npx"}})
    assert configs["notion"].name == "notion"


def test_empty_configuration_raises() -> None:
    with pytest.raises(NoServersConfigured):
        parse_server_configs({"mcpServers": {}})


def test_no_servers_is_a_config_error() -> None:
    assert issubclass(NoServersConfigured, ConfigError)


def test_server_name_with_separator_is_rejected() -> None:
    with pytest.raises(ConfigError, match="notion__v2"):
        parse_server_configs({"notion__v2": {"command": "npx"}})


def test_server_name_ending_in_underscore_is_rejected() -> None:
    with pytest.raises(ConfigError, match="notion_"):
        parse_server_configs({"notion_": {"command": "npx"}})


def test_entry_must_be_mapping() -> None:
    with pytest.raises(ConfigError):
        parse_server_configs({"notion": "npx mcp-remote"})


def test_entry_missing_command() -> None:
    with pytest.raises(ConfigError):
        parse_server_configs({"notion": {"args": []}})


def test_config_is_immutable() -> None:
    config = ServerConfig(name="notion", command="npx")
    with pytest.raises(Exception):
        config.command = "other"  # type: ignore[misc]


def test_stdio_parameters_merge_env_overrides() -> None:
    config = ServerConfig(name="notion", command="npx", args=["a"], env={"TOKEN": "x", "PATH": "/custom"})

    with patch(
        "mcp_agent_lib.mcp_wrapper.config.get_default_environment", return_value={"PATH": "/usr/bin", "HOME": "/h"}
    ):
        params = config.to_stdio_parameters()

    assert params.command == "npx"
    assert params.args == ["a"]
    assert params.env == {"PATH": "/custom", "HOME": "/h", "TOKEN": "x"}


def test_stdio_parameters_without_overrides_use_sdk_default() -> None:
    params = ServerConfig(name="notion", command="npx").to_stdio_parameters()
    assert params.env is None


def test_load_server_configs_from_file(tmp_path: Path) -> None:
    path = tmp_path / "servers.json"
    path.write_text(json.dumps({"mcpServers": {"notion": {"command": "npx"}}}), encoding="utf-8")

    configs = load_server_configs(path)

    assert configs["notion"].command == "npx"


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Cannot read"):
        load_server_configs(tmp_path / "missing.json")


def test_load_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "servers.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError, match="not valid JSON"):
        load_server_configs(path)
