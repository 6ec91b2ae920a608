"""Streaming, tool-calling client for the DeepSeek chat API."""

from seekchat.config import ChatConfig
from seekchat.errors import (
    DecodeError,
    ProtocolError,
    SeekChatError,
    ToolExecutionError,
    TransportError,
    UnknownToolError,
)
from seekchat.events import (
    AssistantEvent,
    StreamEvent,
    ToolCallInputEvent,
    ToolCallOutputEvent,
)
from seekchat.instrumentation import instrument, uninstrument
from seekchat.message import (
    AssistantMessage,
    FunctionCall,
    Message,
    SystemMessage,
    ToolCall,
    ToolMessage,
    UserMessage,
)
from seekchat.provider import DeepSeekProvider, ModelProvider
from seekchat.request import Model, ResponseFormat, Thinking
from seekchat.response import FinishReason, UserBalance
from seekchat.runner import Runner
from seekchat.session import Session
from seekchat.tools import Tool, ToolRegistry, tool

__all__ = [
    "AssistantEvent",
    "AssistantMessage",
    "ChatConfig",
    "DecodeError",
    "DeepSeekProvider",
    "FinishReason",
    "FunctionCall",
    "Message",
    "Model",
    "ModelProvider",
    "ProtocolError",
    "ResponseFormat",
    "Runner",
    "SeekChatError",
    "Session",
    "StreamEvent",
    "SystemMessage",
    "Thinking",
    "Tool",
    "ToolCall",
    "ToolCallInputEvent",
    "ToolCallOutputEvent",
    "ToolExecutionError",
    "ToolMessage",
    "ToolRegistry",
    "TransportError",
    "UnknownToolError",
    "UserBalance",
    "UserMessage",
    "instrument",
    "tool",
    "uninstrument",
]
