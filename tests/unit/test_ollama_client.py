"""Unit tests for the OllamaClient wrapper."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from toolstream_server.ollama import OllamaClient


@pytest.fixture
def mock_ollama_async_client():
    """Create a mock ollama.AsyncClient."""
    with patch("toolstream_server.ollama.client.ollama.AsyncClient") as mock_class:
        mock_instance = AsyncMock()
        mock_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def ollama_client(mock_ollama_async_client):
    """Create an OllamaClient with mocked AsyncClient."""
    return OllamaClient(host="http://localhost:11434")


def _stream(*chunks):
    async def generator():
        for chunk in chunks:
            yield chunk

    return generator()


@pytest.mark.asyncio
async def test_client_initialization():
    """Test that OllamaClient initializes correctly."""
    with patch("toolstream_server.ollama.client.ollama.AsyncClient"):
        client = OllamaClient(host="http://test:11434")
        assert client.host == "http://test:11434"
        assert client._client is not None


@pytest.mark.asyncio
async def test_check_connection_success(ollama_client, mock_ollama_async_client):
    """Test successful connection check."""
    mock_ollama_async_client.list.return_value = {"models": []}

    result = await ollama_client.check_connection()

    assert result is True
    mock_ollama_async_client.list.assert_called_once()


@pytest.mark.asyncio
async def test_check_connection_failure(ollama_client, mock_ollama_async_client):
    """Test connection check when Ollama is unreachable."""
    mock_ollama_async_client.list.side_effect = Exception("Connection refused")

    result = await ollama_client.check_connection()

    assert result is False


@pytest.mark.asyncio
async def test_chat_stream_yields_dict_chunks(ollama_client, mock_ollama_async_client):
    """Test that chat_stream yields chunks as dicts."""
    mock_ollama_async_client.chat.return_value = _stream(
        {"message": {"role": "assistant", "content": "Hi"}, "done": False},
        {"message": {"role": "assistant", "content": "!"}, "done": True},
    )

    chunks = [
        chunk
        async for chunk in ollama_client.chat_stream(
            model="llama3.2:latest",
            messages=[{"role": "user", "content": "Hello"}],
        )
    ]

    assert [c["message"]["content"] for c in chunks] == ["Hi", "!"]
    assert chunks[-1]["done"] is True


@pytest.mark.asyncio
async def test_chat_stream_converts_pydantic_chunks(
    ollama_client, mock_ollama_async_client
):
    """Test that chunk objects with model_dump are converted to dicts."""
    chunk = MagicMock()
    chunk.model_dump.return_value = {
        "message": {"role": "assistant", "content": "done"},
        "done": True,
    }
    mock_ollama_async_client.chat.return_value = _stream(chunk)

    chunks = [
        c
        async for c in ollama_client.chat_stream(
            model="llama3.2:latest", messages=[{"role": "user", "content": "x"}]
        )
    ]

    assert chunks == [{"message": {"role": "assistant", "content": "done"}, "done": True}]


@pytest.mark.asyncio
async def test_chat_stream_passes_tools(ollama_client, mock_ollama_async_client):
    """Test that tools are forwarded to the Ollama chat call."""
    mock_ollama_async_client.chat.return_value = _stream({"done": True})
    tools = [{"type": "function", "function": {"name": "add_todo"}}]

    async for _ in ollama_client.chat_stream(
        model="llama3.2:latest",
        messages=[{"role": "user", "content": "Hello"}],
        tools=tools,
    ):
        pass

    kwargs = mock_ollama_async_client.chat.call_args.kwargs
    assert kwargs["tools"] == tools
    assert kwargs["stream"] is True
    assert kwargs["model"] == "llama3.2:latest"


@pytest.mark.asyncio
async def test_chat_stream_without_tools_sends_none(
    ollama_client, mock_ollama_async_client
):
    """Test that an empty tool list is sent as no tools at all."""
    mock_ollama_async_client.chat.return_value = _stream({"done": True})

    async for _ in ollama_client.chat_stream(
        model="llama3.2:latest",
        messages=[{"role": "user", "content": "Hello"}],
        tools=[],
    ):
        pass

    assert mock_ollama_async_client.chat.call_args.kwargs["tools"] is None


@pytest.mark.asyncio
async def test_chat_stream_error(ollama_client, mock_ollama_async_client):
    """Test that chat_stream propagates Ollama errors."""
    mock_ollama_async_client.chat.side_effect = Exception("model not found")

    with pytest.raises(Exception, match="model not found"):
        async for _ in ollama_client.chat_stream(
            model="missing", messages=[{"role": "user", "content": "x"}]
        ):
            pass


@pytest.mark.asyncio
async def test_close(ollama_client):
    """Test that close method can be called without errors."""
    await ollama_client.close()
