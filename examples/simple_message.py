"""Minimal buffered chat: send one message, print the reply.

Usage:
    DEEPSEEK_API_KEY=sk-... python examples/simple_message.py
    python examples/simple_message.py --balance
"""

import argparse
import asyncio
import logging

from seekchat.config import ChatConfig
from seekchat.provider import DeepSeekProvider
from seekchat.request import Model
from seekchat.runner import Runner
from seekchat.session import Session

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s:%(name)s:%(levelname)s:%(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


async def main():
    parser = argparse.ArgumentParser(description="Send one message")
    parser.add_argument("message", nargs="?", default="Hello!")
    parser.add_argument("--balance", action="store_true")
    args = parser.parse_args()

    provider = DeepSeekProvider()

    if args.balance:
        balance = await provider.user_balance()
        for info in balance.balance_infos:
            print(f"{info.currency}: {info.total_balance}")
        return

    runner = Runner(provider, config=ChatConfig(model=Model.DEEPSEEK_CHAT))
    replies = await runner.run(Session(), args.message)

    # No tools are registered, so there is exactly one reply.
    assert len(replies) == 1
    print(replies[0].content)


if __name__ == "__main__":
    asyncio.run(main())
