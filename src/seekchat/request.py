"""Outgoing request shapes for ``POST /chat/completions``."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from seekchat.message import Message


class Model(str, Enum):
    DEEPSEEK_CHAT = "deepseek-chat"
    DEEPSEEK_REASONER = "deepseek-reasoner"


class Thinking(BaseModel):
    type: Literal["enabled", "disabled"]

    @classmethod
    def enabled(cls) -> "Thinking":
        return cls(type="enabled")

    @classmethod
    def disabled(cls) -> "Thinking":
        return cls(type="disabled")


class ResponseFormat(BaseModel):
    """Output format requested from the model.

    With ``json_object`` the prompt itself must also ask for JSON,
    otherwise the model may emit whitespace until ``max_tokens`` runs out.
    """

    type: Literal["text", "json_object"] = "text"


class FunctionDescriptor(BaseModel):
    name: str
    description: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)


class ToolDescriptor(BaseModel):
    type: Literal["function"] = "function"
    function: FunctionDescriptor


class ChatCompletionRequest(BaseModel):
    model: Model
    messages: list[Message]
    stream: bool = False
    thinking: Thinking | None = None
    response_format: ResponseFormat = Field(default_factory=ResponseFormat)
    temperature: float | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    max_tokens: int | None = None
    tools: list[ToolDescriptor] | None = None

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready body, omitting unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)
