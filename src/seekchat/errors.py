"""Failure taxonomy for chat sessions.

Every error here is fatal for the session that raised it: nothing in
``seekchat`` retries or swallows them. Callers that want resilience wrap
the whole ``Runner.iter()`` / ``Runner.run()`` call.
"""


class SeekChatError(Exception):
    """Base class for all seekchat errors."""


class TransportError(SeekChatError):
    """The HTTP exchange with the service failed.

    Raised for connection failures, timeouts, interrupted bodies and
    non-2xx responses.

    Args:
        message: Human-readable description.
        status_code: HTTP status when the server answered, else ``None``.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class DecodeError(SeekChatError):
    """A frame or payload could not be decoded.

    Args:
        message: Human-readable description.
        payload: The offending text, when available.
    """

    def __init__(self, message: str, payload: str | None = None):
        self.payload = payload
        super().__init__(message)


class ProtocolError(SeekChatError):
    """The server's stream violated the expected contract."""


class UnknownToolError(SeekChatError):
    """The model asked for a tool that is not registered."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = available or []
        known = ", ".join(self.available) or "none"
        super().__init__(f"Unknown tool '{name}'. Registered tools: {known}")


class ToolExecutionError(SeekChatError):
    """A registered tool callback raised.

    The callback's exception is chained as ``__cause__``.
    """

    def __init__(self, tool_name: str, tool_call_id: str | None = None):
        self.tool_name = tool_name
        self.tool_call_id = tool_call_id
        suffix = f" (call {tool_call_id})" if tool_call_id else ""
        super().__init__(f"Tool '{tool_name}' failed{suffix}")
