"""Optional OpenTelemetry tracing.

Call ``seekchat.instrument()`` once at startup, after configuring a
``TracerProvider``. Requires ``opentelemetry-api``
(``pip install seekchat[otel]``). Until then every helper here yields
``None`` and records nothing.

Span layout::

    chat_session <session_id>        one Runner.iter() / Runner.run()
      chat <model>                   one request round (SpanKind.CLIENT)
      execute_tool <tool name>       one tool callback
"""

import importlib.util
import logging
from contextlib import asynccontextmanager, contextmanager

from seekchat.response import Usage

logger = logging.getLogger(__name__)

_tracer = None

PROVIDER_NAME = "deepseek"


def instrument(*, tracer_name: str = "seekchat") -> None:
    """Enable tracing for all seekchat sessions.

    Raises:
        ImportError: If ``opentelemetry-api`` is not installed.
    """
    global _tracer
    if importlib.util.find_spec("opentelemetry.trace") is None:
        raise ImportError(
            "opentelemetry-api is required for instrumentation. "
            "Install it with: pip install seekchat[otel]"
        )
    from opentelemetry import trace
    _tracer = trace.get_tracer(tracer_name)
    if isinstance(_tracer, trace.NoOpTracer):
        logger.info(
            "No TracerProvider configured, spans will be discarded"
        )
    else:
        logger.info("seekchat instrumentation enabled")


def uninstrument() -> None:
    global _tracer
    _tracer = None


@asynccontextmanager
async def session_span(session_id: str, model: str, stream: bool):
    if _tracer is None:
        yield None
        return
    with _tracer.start_as_current_span(
        f"chat_session {session_id}",
        attributes={
            "gen_ai.conversation.id": session_id,
            "gen_ai.request.model": model,
            "seekchat.stream": stream,
        },
    ) as span:
        yield span


@asynccontextmanager
async def completion_span(model: str):
    if _tracer is None:
        yield None
        return
    from opentelemetry.trace import SpanKind

    with _tracer.start_as_current_span(
        f"chat {model}",
        kind=SpanKind.CLIENT,
        attributes={
            "gen_ai.operation.name": "chat",
            "gen_ai.provider.name": PROVIDER_NAME,
            "gen_ai.request.model": model,
        },
    ) as span:
        yield span


@contextmanager
def tool_span(tool_name: str, call_id: str):
    """Tool callbacks are synchronous, so this one is a plain context manager."""
    if _tracer is None:
        yield None
        return
    with _tracer.start_as_current_span(
        f"execute_tool {tool_name}",
        attributes={
            "gen_ai.operation.name": "execute_tool",
            "gen_ai.tool.name": tool_name,
            "gen_ai.tool.call.id": call_id,
        },
    ) as span:
        yield span


def record_usage(span, usage: Usage | None, response_model: str | None = None) -> None:
    if span is None or usage is None:
        return
    span.set_attribute("gen_ai.usage.input_tokens", usage.prompt_tokens)
    span.set_attribute("gen_ai.usage.output_tokens", usage.completion_tokens)
    if usage.prompt_cache_hit_tokens is not None:
        span.set_attribute(
            "gen_ai.usage.cache_read.input_tokens", usage.prompt_cache_hit_tokens
        )
    if usage.completion_tokens_details is not None:
        span.set_attribute(
            "gen_ai.usage.reasoning.output_tokens",
            usage.completion_tokens_details.reasoning_tokens,
        )
    if response_model:
        span.set_attribute("gen_ai.response.model", response_model)


def record_finish_reason(span, finish_reason: str | None) -> None:
    if span is None or finish_reason is None:
        return
    span.set_attribute("gen_ai.response.finish_reasons", [finish_reason])


def record_error(span, exception: BaseException) -> None:
    """Mark *span* failed; sets ``error.type`` to the exception class name."""
    if span is None:
        return
    from opentelemetry.trace import StatusCode

    span.set_status(StatusCode.ERROR, str(exception))
    span.record_exception(exception)
    span.set_attribute("error.type", type(exception).__qualname__)
