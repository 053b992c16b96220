#!/usr/bin/env python3
"""
SmartBot - Python API Examples

This shows how to drive a conversation programmatically instead of via the REPL.
Useful for embedding SmartBot in other tools or scripting conversations.
"""

import asyncio

from smartbot.config import ChatConfig
from smartbot.runtime.display import EventPrinter
from smartbot.runtime.runtime import ChatRuntime


async def example_basic_conversation():
    """Example 1: Send, edit and retry"""
    print("=== Example 1: Basic Conversation ===\n")

    config = ChatConfig.from_env(ephemeral=True)
    runtime = ChatRuntime(config, on_event=EventPrinter())
    controller = runtime.controller

    try:
        await controller.send("Give me three names for a hiking club")

        # Rewrite the first question; everything after it is regenerated
        first_user = controller.messages[1]
        await controller.edit(first_user.id, "Give me three names for a chess club")

        # Ask for another answer to the same question
        await controller.retry(controller.messages[-1].id)
    finally:
        await runtime.aclose()


async def example_sessions():
    """Example 2: Archive and reopen conversations"""
    print("\n=== Example 2: Sessions ===\n")

    config = ChatConfig.from_env(ephemeral=True)
    runtime = ChatRuntime(config)
    controller = runtime.controller

    try:
        await controller.send("What is the capital of Portugal?")
        session_id = controller.start_new_conversation()
        print(f"Archived as {session_id}")

        for session in runtime.archive.list():
            print(f"  {session.created_at}  {session.title}")

        controller.load_conversation(session_id)
        print(f"Reloaded {len(controller.messages)} messages")
    finally:
        await runtime.aclose()


if __name__ == "__main__":
    print("SmartBot Python API Examples\n")
    print("Set SMARTBOT_API_URL or a provider API key (e.g. OPENAI_API_KEY) first.\n")

    asyncio.run(example_basic_conversation())
    asyncio.run(example_sessions())
