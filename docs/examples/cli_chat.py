import asyncio
import os
from typing import List

from dotenv import load_dotenv
from openai import AsyncOpenAI

from mcp_agent_lib import (
    AgentLoop,
    BaseMessage,
    OpenAICompletionBackend,
    ToolConnectionManager,
    ToolInvocationFacade,
    load_server_configs,
)

# Load environment variables
load_dotenv()


async def main() -> None:
    """
    Main function to run a CLI chat whose model can call MCP tools.
    """
    print("Welcome to the CLI Chat (MCP tools)!")

    api_key = os.getenv("LLM_API_KEY")
    if not api_key:
        print("Error: LLM_API_KEY not found in environment variables.")
        return

    manager = ToolConnectionManager(load_server_configs(os.getenv("MCP_SERVERS_CONFIG", "mcp_servers.json")))
    failures = await manager.connect_all()
    for name, error in failures.items():
        print(f"Could not connect to {name}: {error}")

    client = AsyncOpenAI(api_key=api_key, base_url=os.getenv("LLM_BASE_URL", "https://api.fireworks.ai/inference/v1"))
    backend = OpenAICompletionBackend(
        client=client,
        model_name=os.getenv("LLM_MODEL", "accounts/fireworks/models/deepseek-v3p1"),
    )
    agent = AgentLoop(backend, ToolInvocationFacade(manager), sys_instruction="You are a helpful assistant.")
    print(f"Connected to: {', '.join(manager.connected_servers)}")

    history: List[BaseMessage] = []

    print("\nStart chatting! Type 'exit' or 'quit' to stop.")
    try:
        while True:
            user_input = input("\nYou: ").strip()
            if user_input.lower() in ["exit", "quit"]:
                print("Goodbye!")
                break

            if not user_input:
                continue

            try:
                result = await agent.chat(user_input, history=history)
                print(f"Assistant: {result.content}")
                history = result.history

            except Exception as e:
                print(f"An error occurred: {e}")
    finally:
        await manager.disconnect_all()


if __name__ == "__main__":
    asyncio.run(main())
