import logging
from collections.abc import AsyncIterator, Iterable, Iterator
from contextlib import aclosing

from pydantic import ValidationError

from seekchat.config import ChatConfig
from seekchat.errors import DecodeError, ProtocolError, SeekChatError
from seekchat.events import StreamEvent, ToolCallOutputEvent
from seekchat.instrumentation import (
    completion_span,
    record_error,
    record_finish_reason,
    record_usage,
    session_span,
    tool_span,
)
from seekchat.message import AssistantMessage, Message, ToolMessage, UserMessage
from seekchat.provider import ModelProvider
from seekchat.request import ChatCompletionRequest
from seekchat.response import ChatCompletion, FinishReason
from seekchat.session import Session
from seekchat.sse import decode_chunk, iter_sse_payloads
from seekchat.streaming import TurnAccumulator
from seekchat.tools import Tool, ToolRegistry

logger = logging.getLogger(__name__)


class Runner:
    """Drives the request/tool-execution loop for a session.

    Each call appends the user message to the session, then issues one
    request per round. A round whose finish reason is ``tool_calls`` has
    its tools executed and the conversation resubmitted; any other
    finish reason ends the call. The whole exchange (assistant turns and
    tool results) is appended to ``session.context``.

    ``iter()`` streams and yields events; ``run()`` is the buffered
    equivalent with the same round contract.

    Args:
        provider: Transport to the service.
        config: Model and sampling settings sent with every request.
        tools: Tools the model may call.
    """

    def __init__(
        self,
        provider: ModelProvider,
        config: ChatConfig | None = None,
        tools: ToolRegistry | Iterable[Tool] = (),
    ):
        self.provider = provider
        self.config = config or ChatConfig()
        self.tools = tools if isinstance(tools, ToolRegistry) else ToolRegistry(tools)

    def _build_request(self, session: Session, stream: bool) -> ChatCompletionRequest:
        return ChatCompletionRequest(
            messages=list(session.context),
            stream=stream,
            tools=self.tools.descriptors() or None,
            **self.config.model_dump(exclude_none=True),
        )

    async def run(
        self, session: Session, content: str, name: str | None = None,
    ) -> list[Message]:
        """Send *content* and return every message produced in reply."""
        session.append(UserMessage(name=name, content=content))
        start = len(session.context)
        model = self.config.model.value

        async with session_span(session.session_id, model, stream=False) as root:
            try:
                while True:
                    async with completion_span(model) as span:
                        body = await self.provider.complete(
                            self._build_request(session, stream=False)
                        )
                        completion = _decode_completion(body)
                        record_usage(span, completion.usage, completion.model)
                        if len(completion.choices) != 1:
                            raise ProtocolError(
                                f"Expected exactly one choice, got {len(completion.choices)}"
                            )
                        choice = completion.choices[0]
                        record_finish_reason(span, choice.finish_reason.value)

                    message = AssistantMessage(
                        content=choice.message.content or "",
                        reasoning_content=choice.message.reasoning_content,
                        tool_calls=choice.message.tool_calls or None,
                    )
                    session.append(message)
                    if not self._continues(choice.finish_reason, message):
                        break
                    for _ in self._execute_tools(session, message):
                        pass
            except SeekChatError as e:
                record_error(root, e)
                raise

        return session.context[start:]

    async def iter(
        self, session: Session, content: str, name: str | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Send *content* and stream the reply as events.

        Closing the iterator early aborts the in-flight request and
        skips any remaining tool calls.
        """
        session.append(UserMessage(name=name, content=content))
        model = self.config.model.value

        async with session_span(session.session_id, model, stream=True) as root:
            try:
                while True:
                    acc = TurnAccumulator()
                    finish_reason = None
                    received = 0
                    async with completion_span(model) as span:
                        request = self._build_request(session, stream=True)
                        byte_stream = self.provider.stream(request)
                        async with aclosing(byte_stream), aclosing(
                            iter_sse_payloads(byte_stream)
                        ) as payloads:
                            async for payload in payloads:
                                received += 1
                                chunk = decode_chunk(payload)
                                record_usage(span, chunk.usage, chunk.model)
                                for choice in chunk.choices:
                                    for event in acc.feed(choice.delta):
                                        yield event
                                    if choice.finish_reason is None:
                                        continue
                                    if finish_reason is None:
                                        finish_reason = choice.finish_reason
                                    elif choice.finish_reason is not finish_reason:
                                        logger.warning(
                                            f"Ignoring second finish reason "
                                            f"{choice.finish_reason.value}, "
                                            f"already got {finish_reason.value}"
                                        )
                        record_finish_reason(
                            span, finish_reason.value if finish_reason else None
                        )
                    logger.debug(f"Decoded {received} stream payloads")

                    message = acc.finalize()
                    session.append(message)
                    if finish_reason is None:
                        raise ProtocolError("Stream ended without a finish reason")
                    if not self._continues(finish_reason, message):
                        return
                    for event in self._execute_tools(session, message):
                        yield event
            except SeekChatError as e:
                record_error(root, e)
                raise

    @staticmethod
    def _continues(finish_reason: FinishReason, message: AssistantMessage) -> bool:
        logger.debug(f"Round finished: {finish_reason.value}")
        if finish_reason is FinishReason.TOOL_CALLS:
            if not message.tool_calls:
                raise ProtocolError("Finish reason tool_calls but no tool calls were sent")
            return True
        if message.tool_calls:
            logger.warning(
                f"Not executing {len(message.tool_calls)} tool calls: "
                f"round finished with {finish_reason.value}"
            )
        return False

    def _execute_tools(
        self, session: Session, message: AssistantMessage,
    ) -> Iterator[ToolCallOutputEvent]:
        for tc in message.tool_calls or []:
            if session.has_tool_result(tc.id):
                logger.warning(f"Skipping tool call {tc.id}: already answered")
                continue
            with tool_span(tc.function.name, tc.id) as span:
                try:
                    output = self.tools.invoke(tc.function.name, tc.function.arguments, tc.id)
                except SeekChatError as e:
                    record_error(span, e)
                    raise
            session.append(ToolMessage(tool_call_id=tc.id, content=output))
            yield ToolCallOutputEvent(tool_call_id=tc.id, content=output)


def _decode_completion(body: str) -> ChatCompletion:
    try:
        return ChatCompletion.model_validate_json(body)
    except ValidationError as e:
        raise DecodeError(f"Invalid completion response: {e}", payload=body) from e
