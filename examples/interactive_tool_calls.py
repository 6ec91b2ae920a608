"""Interactive chat with an ``add`` tool, streamed.

Demonstrates:
- Defining a tool with @tool and a pydantic parameter model
- Streaming reasoning, tool call arguments and tool results
- Keeping one Session across turns

Try:
    > Use the provided functions to calculate 114 + 514 and 1919 + (-810).
    > Alright. Then how about 1 + 1?

Usage:
    DEEPSEEK_API_KEY=sk-... python examples/interactive_tool_calls.py --trace
"""

import argparse
import asyncio
import logging

from pydantic import BaseModel

from seekchat.config import ChatConfig
from seekchat.events import AssistantEvent, ToolCallInputEvent, ToolCallOutputEvent
from seekchat.provider import DeepSeekProvider
from seekchat.request import Model
from seekchat.runner import Runner
from seekchat.session import Session
from seekchat.tools import tool

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s:%(name)s:%(levelname)s:%(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.FileHandler("seekchat.log")],
)

GREY = "\033[90m"
BLUE = "\033[34m"
YELLOW = "\033[33m"
RESET = "\033[0m"


def setup_tracing(service_name: str):
    from opentelemetry import trace
    from opentelemetry.sdk.resources import SERVICE_NAME, Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import (
        SimpleSpanProcessor, ConsoleSpanExporter,
    )
    from seekchat.instrumentation import instrument

    provider = TracerProvider(
        resource=Resource({SERVICE_NAME: service_name})
    )
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
    instrument()


class AddParameters(BaseModel):
    a: int
    b: int


@tool(parameters=AddParameters)
def add(arguments: str):
    """Adds two integers."""
    args = AddParameters.model_validate_json(arguments)
    return args.a + args.b


async def main():
    parser = argparse.ArgumentParser(description="Interactive tool calls")
    parser.add_argument(
        "--model", choices=[m.value for m in Model], default=Model.DEEPSEEK_REASONER.value,
    )
    parser.add_argument("--trace", action="store_true")
    args = parser.parse_args()

    if args.trace:
        setup_tracing("interactive-tool-calls")

    runner = Runner(
        DeepSeekProvider(),
        config=ChatConfig(model=Model(args.model)),
        tools=[add],
    )
    session = Session()

    while True:
        try:
            user_input = input(f"{YELLOW}> {RESET}")
        except (KeyboardInterrupt, EOFError):
            print("\nGoodbye!")
            break

        in_call = False
        async for event in runner.iter(session, user_input):
            if isinstance(event, AssistantEvent):
                if in_call:
                    print(f"{YELLOW}){RESET}")
                    in_call = False
                if event.reasoning_content:
                    print(f"{GREY}{event.reasoning_content}{RESET}", end="")
                if event.content:
                    print(event.content, end="")
            elif isinstance(event, ToolCallInputEvent):
                if event.tool_call_id is not None:
                    if in_call:
                        print(f"{YELLOW}){RESET}")
                    in_call = True
                    print(
                        f"\n{BLUE}@{event.tool_call_id}{RESET} = "
                        f"{YELLOW}{event.function.name}({RESET}",
                        end="",
                    )
                print(event.function.arguments or "", end="")
            elif isinstance(event, ToolCallOutputEvent):
                if in_call:
                    print(f"{YELLOW}){RESET}")
                    in_call = False
                print(f"{BLUE}@{event.tool_call_id}{RESET} = {event.content}")
            print("", end="", flush=True)
        print("\n")


if __name__ == "__main__":
    asyncio.run(main())
