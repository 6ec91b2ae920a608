import json

import pytest

from seekchat.provider import ModelProvider
from seekchat.tools import tool


# ---------------------------------------------------------------------------
# Mock provider
# ---------------------------------------------------------------------------

class MockProvider(ModelProvider):
    """Provider that replays pre-queued responses. No network calls.

    ``streams`` holds one list of byte chunks per streamed round; an
    exception instance in the list is raised at that point instead.
    ``completions`` holds one JSON body per buffered round.
    """

    def __init__(self):
        self.streams: list[list] = []
        self.completions: list[str] = []
        self.requests: list = []
        self.opened = 0
        self.closed = 0

    async def complete(self, request):
        self.requests.append(request)
        return self.completions.pop(0)

    async def stream(self, request):
        self.requests.append(request)
        chunks = self.streams.pop(0)
        self.opened += 1
        try:
            for chunk in chunks:
                if isinstance(chunk, Exception):
                    raise chunk
                yield chunk
        finally:
            self.closed += 1


# ---------------------------------------------------------------------------
# Wire builders
# ---------------------------------------------------------------------------

def chunk_payload(delta=None, finish_reason=None, usage=None) -> str:
    """One ``chat.completion.chunk`` JSON payload with a single choice."""
    body = {
        "id": "chunk-1",
        "object": "chat.completion.chunk",
        "created": 1700000000,
        "model": "deepseek-chat",
        "system_fingerprint": "fp_test",
        "choices": [{
            "index": 0,
            "delta": delta if delta is not None else {},
            "finish_reason": finish_reason,
            "logprobs": None,
        }],
    }
    if usage is not None:
        body["usage"] = usage
    return json.dumps(body)


def sse(*payloads: str) -> bytes:
    return "".join(f"data: {p}\n\n" for p in payloads).encode()


DONE = b"data: [DONE]\n\n"


def text_stream(*pieces: str, finish_reason: str = "stop") -> list[bytes]:
    """A streamed round delivering *pieces* as content, one frame each."""
    frames = [sse(chunk_payload({"content": p})) for p in pieces]
    frames.append(sse(chunk_payload({"content": ""}, finish_reason=finish_reason)))
    frames.append(DONE)
    return frames


def fragment(index: int, arguments: str, call_id=None, name=None) -> dict:
    frag = {"index": index, "function": {"arguments": arguments}}
    if call_id is not None:
        frag["id"] = call_id
        frag["type"] = "function"
        frag["function"]["name"] = name
    return frag


def tool_call_stream(
    name: str,
    argument_pieces: list[str],
    call_id: str = "call_1",
) -> list[bytes]:
    """A streamed round with one tool call whose arguments arrive in pieces."""
    frags = [fragment(0, argument_pieces[0], call_id=call_id, name=name)]
    frags += [fragment(0, piece) for piece in argument_pieces[1:]]
    frames = [sse(chunk_payload({"tool_calls": [f]})) for f in frags]
    frames.append(sse(chunk_payload({"content": ""}, finish_reason="tool_calls")))
    frames.append(DONE)
    return frames


def completion_body(
    content: str | None = "",
    tool_calls: list[dict] | None = None,
    finish_reason: str = "stop",
    reasoning_content: str | None = None,
) -> str:
    return json.dumps({
        "id": "cmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "deepseek-chat",
        "system_fingerprint": "fp_test",
        "choices": [{
            "index": 0,
            "finish_reason": finish_reason,
            "message": {
                "role": "assistant",
                "content": content,
                "reasoning_content": reasoning_content,
                "tool_calls": tool_calls,
            },
            "logprobs": None,
        }],
        "usage": {
            "completion_tokens": 5,
            "prompt_tokens": 10,
            "prompt_cache_hit_tokens": 0,
            "prompt_cache_miss_tokens": 10,
            "total_tokens": 15,
        },
    })


def settled_tool_call(name: str, args: dict, call_id: str = "call_1") -> dict:
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": json.dumps(args)},
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_provider():
    return MockProvider()


@pytest.fixture
def add_calls():
    return []


@pytest.fixture
def add_tool(add_calls):
    @tool
    def add(arguments: str):
        """Adds two integers."""
        args = json.loads(arguments)
        add_calls.append(args)
        return str(args["a"] + args["b"])
    return add
