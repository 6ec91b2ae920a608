"""Server-Sent Events decoding for streamed completions.

The service answers ``stream=true`` requests with blank-line separated
frames of the form::

    data: {"id": "...", "choices": [...]}

    : keep-alive

    data: [DONE]

where ``[DONE]`` terminates the stream. :class:`SSEDecoder` turns raw
byte chunks (which may split frames anywhere, including inside a
multi-byte character) into JSON payload strings, and
:func:`decode_chunk` validates a payload against the chunk schema.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from pydantic import ValidationError

from seekchat.errors import DecodeError
from seekchat.response import ChatCompletionChunk

logger = logging.getLogger(__name__)

DONE = "[DONE]"
_IGNORED_FIELDS = ("event", "id", "retry")


class SSEDecoder:
    """Incremental frame decoder.

    Bytes are buffered until a blank line closes the frame, so a frame
    split across any number of chunks is decoded once, whole. Only newly
    received bytes are normalised and searched, so feeding a large frame
    in small pieces stays linear.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        # Offset up to which the buffer holds no frame separator.
        self._scanned = 0
        # A trailing CR may be the first half of a CRLF split across chunks.
        self._pending_cr = False
        self.done = False

    def feed(self, chunk: bytes) -> list[str]:
        """Buffer *chunk* and return the payloads of every completed frame."""
        if self.done:
            return []
        if self._pending_cr:
            chunk = b"\r" + chunk
        self._pending_cr = chunk.endswith(b"\r")
        if self._pending_cr:
            chunk = chunk[:-1]
        self._buffer += chunk.replace(b"\r\n", b"\n")

        payloads: list[str] = []
        while not self.done:
            end = self._buffer.find(b"\n\n", max(self._scanned - 1, 0))
            if end < 0:
                self._scanned = len(self._buffer)
                break
            frame = bytes(self._buffer[:end])
            del self._buffer[:end + 2]
            self._scanned = 0
            payloads.extend(self._decode_frame(frame))
        return payloads

    def flush(self) -> list[str]:
        """Decode whatever is left once the source closes."""
        frame = bytes(self._buffer).strip()
        self._buffer.clear()
        self._scanned = 0
        self._pending_cr = False
        if self.done or not frame:
            return []
        return self._decode_frame(frame)

    def _decode_frame(self, frame: bytes) -> list[str]:
        try:
            text = frame.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(
                "SSE frame is not valid UTF-8",
                payload=frame.decode("utf-8", errors="replace"),
            ) from e

        data_lines = []
        for line in text.split("\n"):
            if not line or line.startswith(":"):
                continue
            field, _, value = line.partition(":")
            if field == "data":
                data_lines.append(value[1:] if value.startswith(" ") else value)
            elif field not in _IGNORED_FIELDS:
                raise DecodeError(f"Malformed SSE line: {line!r}", payload=text)

        if not data_lines:
            return []
        payload = "\n".join(data_lines)
        if payload == DONE:
            self.done = True
            return []
        return [payload]


async def iter_sse_payloads(
    byte_stream: AsyncIterator[bytes],
) -> AsyncIterator[str]:
    """Yield JSON payloads from *byte_stream* until ``[DONE]`` or EOF."""
    decoder = SSEDecoder()
    async for chunk in byte_stream:
        for payload in decoder.feed(chunk):
            yield payload
        if decoder.done:
            logger.debug("Received stream terminator")
            return
    for payload in decoder.flush():
        yield payload


def decode_chunk(payload: str) -> ChatCompletionChunk:
    """Parse one payload, raising :class:`DecodeError` on bad JSON or shape."""
    try:
        return ChatCompletionChunk.model_validate_json(payload)
    except ValidationError as e:
        raise DecodeError(f"Invalid stream chunk: {e}", payload=payload) from e
