from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APIConnectionError, APIStatusError

from seekchat.errors import DecodeError, TransportError
from seekchat.message import UserMessage
from seekchat.provider import BASE_URL, DeepSeekProvider
from seekchat.request import ChatCompletionRequest, Model, Thinking


# ---------------------------------------------------------------------------
# Fake streamed-response objects (mirror openai's AsyncAPIResponse)
# ---------------------------------------------------------------------------

class FakeStreamedResponse:
    def __init__(self, chunks: list[bytes]):
        self.chunks = chunks

    async def text(self) -> str:
        return b"".join(self.chunks).decode()

    async def iter_bytes(self):
        for c in self.chunks:
            yield c


def _fake_create(chunks: list[bytes], log: list):
    state = {"closed": False}

    @asynccontextmanager
    async def create(**kwargs):
        log.append(kwargs)
        try:
            yield FakeStreamedResponse(chunks)
        finally:
            state["closed"] = True

    return create, state


def _patch_create(monkeypatch, provider, create):
    streaming = MagicMock()
    streaming.create = create
    monkeypatch.setattr(
        provider.client.chat.completions, "with_streaming_response", streaming,
    )


def _request(**kwargs) -> ChatCompletionRequest:
    return ChatCompletionRequest(
        model=Model.DEEPSEEK_CHAT,
        messages=[UserMessage(content="hi")],
        **kwargs,
    )


def _http_request() -> httpx.Request:
    return httpx.Request("POST", f"{BASE_URL}/chat/completions")


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def test_reads_api_key_from_env(monkeypatch):
    monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-from-env")
    p = DeepSeekProvider()
    assert p.client.api_key == "sk-from-env"


def test_default_base_url(monkeypatch):
    monkeypatch.delenv("DEEPSEEK_BASE_URL", raising=False)
    p = DeepSeekProvider(api_key="test")
    assert str(p.client.base_url).rstrip("/") == BASE_URL


def test_base_url_from_env(monkeypatch):
    monkeypatch.setenv("DEEPSEEK_BASE_URL", "http://localhost:8000/v1")
    p = DeepSeekProvider(api_key="test")
    assert str(p.client.base_url).rstrip("/") == "http://localhost:8000/v1"


def test_retries_disabled():
    p = DeepSeekProvider(api_key="test")
    assert p.client.max_retries == 0


# ---------------------------------------------------------------------------
# Request forwarding
# ---------------------------------------------------------------------------

class TestCreateKwargs:
    def test_thinking_goes_to_extra_body(self):
        kwargs = DeepSeekProvider._create_kwargs(
            _request(thinking=Thinking.disabled())
        )
        assert "thinking" not in kwargs
        assert kwargs["extra_body"] == {"thinking": {"type": "disabled"}}

    def test_unset_fields_omitted(self):
        kwargs = DeepSeekProvider._create_kwargs(_request())
        assert kwargs == {
            "model": "deepseek-chat",
            "messages": [{"role": "user", "content": "hi"}],
            "stream": False,
            "response_format": {"type": "text"},
        }


class TestComplete:
    @pytest.mark.asyncio
    async def test_returns_raw_body(self, monkeypatch):
        provider = DeepSeekProvider(api_key="test")
        log = []
        create, _ = _fake_create([b'{"id":', b' "x"}'], log)
        _patch_create(monkeypatch, provider, create)

        body = await provider.complete(_request(temperature=0.2))

        assert body == '{"id": "x"}'
        assert log[0]["temperature"] == 0.2
        assert log[0]["stream"] is False

    @pytest.mark.asyncio
    async def test_status_error_becomes_transport_error(self, monkeypatch):
        provider = DeepSeekProvider(api_key="test")
        response = httpx.Response(402, request=_http_request())

        @asynccontextmanager
        async def create(**kwargs):
            raise APIStatusError("Insufficient Balance", response=response, body=None)
            yield  # pragma: no cover

        _patch_create(monkeypatch, provider, create)

        with pytest.raises(TransportError) as exc_info:
            await provider.complete(_request())
        assert exc_info.value.status_code == 402


class TestStream:
    @pytest.mark.asyncio
    async def test_yields_raw_chunks_and_closes(self, monkeypatch):
        provider = DeepSeekProvider(api_key="test")
        log = []
        create, state = _fake_create([b"data: 1\n", b"\n"], log)
        _patch_create(monkeypatch, provider, create)

        chunks = [c async for c in provider.stream(_request(stream=True))]

        assert chunks == [b"data: 1\n", b"\n"]
        assert log[0]["stream"] is True
        assert state["closed"]

    @pytest.mark.asyncio
    async def test_aclose_releases_response(self, monkeypatch):
        provider = DeepSeekProvider(api_key="test")
        create, state = _fake_create([b"a", b"b", b"c"], [])
        _patch_create(monkeypatch, provider, create)

        stream = provider.stream(_request(stream=True))
        assert await stream.__anext__() == b"a"
        await stream.aclose()

        assert state["closed"]

    @pytest.mark.asyncio
    async def test_connection_error_becomes_transport_error(self, monkeypatch):
        provider = DeepSeekProvider(api_key="test")

        @asynccontextmanager
        async def create(**kwargs):
            raise APIConnectionError(request=_http_request())
            yield  # pragma: no cover

        _patch_create(monkeypatch, provider, create)

        with pytest.raises(TransportError) as exc_info:
            async for _ in provider.stream(_request(stream=True)):
                pass
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_interrupted_body_becomes_transport_error(self, monkeypatch):
        provider = DeepSeekProvider(api_key="test")

        class Interrupted(FakeStreamedResponse):
            async def iter_bytes(self):
                yield b"data: 1\n\n"
                raise httpx.RemoteProtocolError("peer closed connection")

        @asynccontextmanager
        async def create(**kwargs):
            yield Interrupted([])

        _patch_create(monkeypatch, provider, create)

        received = []
        with pytest.raises(TransportError):
            async for chunk in provider.stream(_request(stream=True)):
                received.append(chunk)
        assert received == [b"data: 1\n\n"]


# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------

class TestUserBalance:
    @pytest.mark.asyncio
    async def test_parses_balance(self, monkeypatch):
        provider = DeepSeekProvider(api_key="test")
        mock_get = AsyncMock(return_value=httpx.Response(200, json={
            "is_available": True,
            "balance_infos": [{
                "currency": "CNY",
                "total_balance": "110.00",
                "granted_balance": "10.00",
                "topped_up_balance": "100.00",
            }],
        }))
        monkeypatch.setattr(provider.client, "get", mock_get)

        balance = await provider.user_balance()

        mock_get.assert_called_once_with("/user/balance", cast_to=httpx.Response)
        assert balance.is_available is True
        assert balance.balance_infos[0].currency == "CNY"
        assert balance.balance_infos[0].total_balance == "110.00"

    @pytest.mark.asyncio
    async def test_bad_body_raises_decode_error(self, monkeypatch):
        provider = DeepSeekProvider(api_key="test")
        monkeypatch.setattr(
            provider.client, "get",
            AsyncMock(return_value=httpx.Response(200, json={"is_available": "maybe"})),
        )
        with pytest.raises(DecodeError):
            await provider.user_balance()

    @pytest.mark.asyncio
    async def test_connection_error(self, monkeypatch):
        provider = DeepSeekProvider(api_key="test")
        monkeypatch.setattr(
            provider.client, "get",
            AsyncMock(side_effect=APIConnectionError(request=_http_request())),
        )
        with pytest.raises(TransportError):
            await provider.user_balance()
