import uuid

from pydantic import BaseModel, Field

from seekchat.message import Message, ToolMessage


class Session(BaseModel):
    """A conversation: the ordered context sent with every request.

    The context is append-only while a ``Runner`` call is active; only
    the runner mutates it.
    """

    session_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    context: list[Message] = Field(default_factory=list)

    def append(self, message: Message) -> None:
        self.context.append(message)

    def has_tool_result(self, tool_call_id: str) -> bool:
        return any(
            isinstance(m, ToolMessage) and m.tool_call_id == tool_call_id
            for m in self.context
        )
