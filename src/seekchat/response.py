"""Incoming response shapes: buffered completions, stream chunks, balance."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from seekchat.message import ToolCall


class FinishReason(str, Enum):
    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"
    TOOL_CALLS = "tool_calls"
    INSUFFICIENT_SYSTEM_RESOURCE = "insufficient_system_resource"


class CompletionTokensDetails(BaseModel):
    reasoning_tokens: int = 0


class Usage(BaseModel):
    completion_tokens: int
    prompt_tokens: int
    prompt_cache_hit_tokens: int | None = None
    prompt_cache_miss_tokens: int | None = None
    total_tokens: int
    completion_tokens_details: CompletionTokensDetails | None = None


# ---------------------------------------------------------------------------
# Buffered (stream=false)
# ---------------------------------------------------------------------------

class ResponseMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str | None = None
    reasoning_content: str | None = None
    tool_calls: list[ToolCall] | None = None


class CompletionChoice(BaseModel):
    index: int
    finish_reason: FinishReason
    message: ResponseMessage
    logprobs: Any = None


class ChatCompletion(BaseModel):
    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    system_fingerprint: str | None = None
    choices: list[CompletionChoice]
    usage: Usage | None = None


# ---------------------------------------------------------------------------
# Streaming (stream=true)
# ---------------------------------------------------------------------------

class FunctionFragment(BaseModel):
    """Partial function payload. ``name`` only arrives on the first fragment."""

    name: str | None = None
    arguments: str | None = None


class ToolCallFragment(BaseModel):
    index: int
    id: str | None = None
    type: Literal["function"] | None = None
    function: FunctionFragment = Field(default_factory=FunctionFragment)


class ChunkDelta(BaseModel):
    """One wire delta.

    Text deltas carry ``content`` / ``reasoning_content`` / ``role``;
    tool-call deltas carry ``tool_calls``.
    """

    role: Literal["assistant"] | None = None
    content: str | None = None
    reasoning_content: str | None = None
    tool_calls: list[ToolCallFragment] | None = None


class ChunkChoice(BaseModel):
    index: int
    delta: ChunkDelta = Field(default_factory=ChunkDelta)
    finish_reason: FinishReason | None = None
    logprobs: Any = None


class ChatCompletionChunk(BaseModel):
    id: str
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    created: int
    model: str
    system_fingerprint: str | None = None
    choices: list[ChunkChoice]
    usage: Usage | None = None


# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------

class BalanceInfo(BaseModel):
    currency: Literal["CNY", "USD"]
    # Decimal strings, exactly as sent by the service.
    total_balance: str
    granted_balance: str
    topped_up_balance: str


class UserBalance(BaseModel):
    is_available: bool
    balance_infos: list[BalanceInfo]
