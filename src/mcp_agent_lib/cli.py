"""Command line entry point: list discovered tools or chat interactively."""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from openai import AsyncOpenAI

from .agent_core import AgentLibError, AgentLoop, BaseMessage, setup_logging
from .llm_impl import OpenAICompletionBackend
from .mcp_wrapper import ToolConnectionManager, ToolInvocationFacade, load_server_configs
from .settings import DEFAULT_SERVERS_CONFIG, AgentSettings

QUIT_COMMAND = "/quit"
CLEAR_COMMAND = "/clear"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mcp-agent", description="Chat with a model that can call MCP tools.")
    parser.add_argument("--config", type=Path, default=None, help="Path to the MCP servers JSON file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("command", nargs="?", choices=["chat", "tools"], default="chat")
    return parser


async def _connect(config_path: Path) -> ToolConnectionManager:
    manager = ToolConnectionManager(load_server_configs(config_path))
    failures = await manager.connect_all()
    for name, error in failures.items():
        print(f"[warning] could not connect to '{name}': {error}", file=sys.stderr)
    return manager


async def list_tools(config_path: Path) -> int:
    """Connect to every server and print its namespaced tools."""
    print("Connecting to MCP servers...")
    manager = await _connect(config_path)
    try:
        print("Connected. Listing tools...\n")
        tools = await manager.list_tools()
        for tool in tools:
            print(f"- {tool.namespaced_name} ({tool.server_name})")
        print(f"\n{len(tools)} tools available.")
    finally:
        await manager.disconnect_all()
    return 0


async def chat(settings: AgentSettings, config_path: Path) -> int:
    """Run the interactive chat loop until the user quits."""
    manager = await _connect(config_path)
    facade = ToolInvocationFacade(manager)
    backend = OpenAICompletionBackend(
        client=AsyncOpenAI(api_key=settings.api_key, base_url=settings.base_url),
        model_name=settings.model,
        temp=settings.temperature,
        max_tokens=settings.max_tokens,
    )
    agent = AgentLoop(
        backend,
        facade,
        max_iterations=settings.max_iterations,
        max_result_chars=settings.max_result_chars,
    )

    print(f"Connected to MCP servers. Type {QUIT_COMMAND} to exit, {CLEAR_COMMAND} to reset history.\n")
    history: Optional[List[BaseMessage]] = None
    try:
        while True:
            try:
                user_input = (await asyncio.to_thread(input, "you> ")).strip()
            except EOFError:
                break

            if not user_input:
                continue
            if user_input == QUIT_COMMAND:
                break
            if user_input == CLEAR_COMMAND:
                history = None
                print("History cleared.\n")
                continue

            try:
                result = await agent.chat(user_input, history)
                history = result.history
                print(f"\nassistant> {result.content}\n")
            except Exception as e:
                print(f"\n[error] {e}\n", file=sys.stderr)
    finally:
        print("Goodbye.")
        await manager.disconnect_all()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        if args.command == "tools":
            load_dotenv()
            config_path = args.config or Path(os.getenv("MCP_SERVERS_CONFIG") or DEFAULT_SERVERS_CONFIG)
            return asyncio.run(list_tools(config_path))

        settings = AgentSettings.from_env()
        return asyncio.run(chat(settings, args.config or settings.servers_config))
    except AgentLibError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
