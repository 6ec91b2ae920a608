"""Streams a reasoner answer, printing the chain of thought in grey first.

Usage:
    DEEPSEEK_API_KEY=sk-... python examples/streaming_reasoner.py "Why is the sky blue?"
"""

import argparse
import asyncio
import logging

from seekchat.config import ChatConfig
from seekchat.events import AssistantEvent
from seekchat.provider import DeepSeekProvider
from seekchat.request import Model
from seekchat.runner import Runner
from seekchat.session import Session

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s:%(name)s:%(levelname)s:%(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

GREY = "\033[90m"
RESET = "\033[0m"


async def main():
    parser = argparse.ArgumentParser(description="Stream a reasoner answer")
    parser.add_argument("message", nargs="?", default="Hello!")
    args = parser.parse_args()

    runner = Runner(
        DeepSeekProvider(), config=ChatConfig(model=Model.DEEPSEEK_REASONER),
    )

    thinking = True
    async for event in runner.iter(Session(), args.message):
        if not isinstance(event, AssistantEvent):
            continue
        if event.reasoning_content:
            print(f"{GREY}{event.reasoning_content}{RESET}", end="", flush=True)
        if event.content:
            if thinking:
                thinking = False
                print("\n")
            print(event.content, end="", flush=True)
    print()


if __name__ == "__main__":
    asyncio.run(main())
