"""Streaming events emitted by ``Runner.iter()``."""

from __future__ import annotations

from dataclasses import dataclass

from seekchat.response import FunctionFragment


@dataclass
class StreamEvent:
    """Base for all streaming events."""


@dataclass
class AssistantEvent(StreamEvent):
    """Text fragment from the model.

    Carries only the fragment just received, never the running total.
    At least one of ``content`` / ``reasoning_content`` is non-empty.
    """

    content: str | None = None
    reasoning_content: str | None = None
    role: str | None = None


@dataclass
class ToolCallInputEvent(StreamEvent):
    """Fragment of a tool call being streamed.

    ``tool_call_id`` is set only on the fragment that starts a call, so
    consumers can tell a new call from a continuation of the previous one.
    """

    function: FunctionFragment
    tool_call_id: str | None = None


@dataclass
class ToolCallOutputEvent(StreamEvent):
    """Result of a tool the engine just executed."""

    tool_call_id: str
    content: str
