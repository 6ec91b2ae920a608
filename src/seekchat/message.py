from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class FunctionCall(BaseModel):
    name: str
    arguments: str = ""


class ToolCall(BaseModel):
    """A settled tool call as it appears inside an assistant message.

    ``function.arguments`` is the raw JSON text concatenated from the
    stream. It is never parsed here; the tool callback owns validation.
    """

    id: str
    type: Literal["function"] = "function"
    function: FunctionCall


class SystemMessage(BaseModel):
    role: Literal["system"] = "system"
    name: str | None = None
    content: str


class UserMessage(BaseModel):
    role: Literal["user"] = "user"
    name: str | None = None
    content: str


class AssistantMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    name: str | None = None
    content: str = ""
    reasoning_content: str | None = None
    tool_calls: list[ToolCall] | None = None


class ToolMessage(BaseModel):
    role: Literal["tool"] = "tool"
    tool_call_id: str
    content: str


Message = Annotated[
    Union[SystemMessage, UserMessage, AssistantMessage, ToolMessage],
    Field(discriminator="role"),
]
