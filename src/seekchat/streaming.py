"""Reassembly of a streamed assistant turn.

The :class:`TurnAccumulator` folds wire deltas into the turn being
streamed (text, reasoning text, tool calls whose arguments arrive in
fragments) and returns the caller-facing events for each delta.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from seekchat.errors import ProtocolError
from seekchat.events import AssistantEvent, StreamEvent, ToolCallInputEvent
from seekchat.message import AssistantMessage, FunctionCall, ToolCall
from seekchat.response import ChunkDelta, ToolCallFragment


@dataclass
class TurnAccumulator:
    """In-flight assistant turn for a single round."""

    content: str = ""
    reasoning_content: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)

    def feed(self, delta: ChunkDelta) -> list[StreamEvent]:
        """Apply one delta and return the events it produces, in order."""
        events: list[StreamEvent] = []
        if delta.content:
            self.content += delta.content
        if delta.reasoning_content is not None:
            self.reasoning_content = (
                (self.reasoning_content or "") + delta.reasoning_content
            )
        # Role-only and empty keep-alive deltas are not user-visible.
        if delta.content or delta.reasoning_content:
            events.append(AssistantEvent(
                content=delta.content,
                reasoning_content=delta.reasoning_content,
                role=delta.role,
            ))

        for fragment in delta.tool_calls or []:
            events.append(self._feed_fragment(fragment))
        return events

    def _feed_fragment(self, fragment: ToolCallFragment) -> ToolCallInputEvent:
        arguments = fragment.function.arguments or ""
        count = len(self.tool_calls)

        if fragment.index == count:
            if fragment.id is None or fragment.type is None or fragment.function.name is None:
                raise ProtocolError(
                    f"Tool call {fragment.index} started without id, type "
                    f"and function name"
                )
            self.tool_calls.append(ToolCall(
                id=fragment.id,
                type=fragment.type,
                function=FunctionCall(name=fragment.function.name, arguments=arguments),
            ))
            return ToolCallInputEvent(function=fragment.function, tool_call_id=fragment.id)

        if fragment.index < 0:
            raise ProtocolError(f"Tool call fragment index {fragment.index} is negative")
        if fragment.index > count:
            raise ProtocolError(
                f"Tool call fragment index {fragment.index} skips ahead of "
                f"{count} started calls"
            )

        self.tool_calls[fragment.index].function.arguments += arguments
        return ToolCallInputEvent(function=fragment.function)

    def finalize(self) -> AssistantMessage:
        """Seal the turn into the message appended to the context."""
        return AssistantMessage(
            content=self.content,
            reasoning_content=self.reasoning_content,
            tool_calls=list(self.tool_calls) or None,
        )
