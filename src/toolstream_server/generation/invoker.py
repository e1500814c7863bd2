"""Streaming generation with tool calling.

The GenerationInvoker starts a streaming chat against Ollama with the tools
discovered on the tool provider. When the model asks for tools, they are
executed through the ToolSet's invocation handles and the results are fed
back to the model for another step, until the model answers without tool
calls or the step limit is reached.
"""

import asyncio
import json
import logging
import uuid
from contextlib import aclosing
from typing import Any, AsyncGenerator, AsyncIterator, Sequence

from pydantic import ValidationError

from toolstream_server.errors import GenerationError, ToolstreamError
from toolstream_server.generation.stream import CompletionCallback, GenerationStream
from toolstream_server.mcp.types import ToolResult, ToolSet
from toolstream_server.models.chat import (
    DoneEvent,
    ErrorEvent,
    FinishEvent,
    Message,
    StreamEvent,
    TextDeltaEvent,
    ToolCallEvent,
    ToolResultEvent,
)
from toolstream_server.ollama.client import OllamaClient

logger = logging.getLogger(__name__)


def _parse_arguments(raw: Any) -> dict[str, Any]:
    """Normalize tool-call arguments to a dict."""
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str) and raw.strip():
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            return {"input": raw}
        return parsed if isinstance(parsed, dict) else {"input": parsed}
    return {}


class GenerationInvoker:
    """Starts streaming generations against the Ollama engine.

    Attributes:
        model: Model identifier passed to Ollama
        max_tool_steps: Maximum number of generation steps per request
        stream_idle_timeout: Seconds to wait for the next chunk before failing
    """

    def __init__(
        self,
        ollama_client: OllamaClient,
        model: str,
        max_tool_steps: int = 5,
        stream_idle_timeout: float = 120.0,
        options: dict[str, Any] | None = None,
    ) -> None:
        self._ollama_client = ollama_client
        self.model = model
        self.max_tool_steps = max_tool_steps
        self.stream_idle_timeout = stream_idle_timeout
        self.options = options

    def invoke(
        self,
        messages: Sequence[Message | dict[str, Any]],
        tool_set: ToolSet,
        on_complete: CompletionCallback | None = None,
    ) -> GenerationStream:
        """Start a streaming generation.

        Returns immediately; generation proceeds as the stream is consumed.

        Args:
            messages: Conversation history in turn order
            tool_set: Tools the model may call during generation
            on_complete: Awaited exactly once when generation terminates

        Returns:
            GenerationStream: One-shot stream of events

        Raises:
            GenerationError: If the call is rejected before a stream exists
        """
        if not self.model:
            raise GenerationError("No model configured")
        if not messages:
            raise GenerationError("At least one message is required")

        history: list[dict[str, Any]] = []
        for index, message in enumerate(messages):
            if not isinstance(message, Message):
                try:
                    message = Message.model_validate(message)
                except ValidationError as e:
                    raise GenerationError(f"Malformed message at index {index}: {e}") from e
            history.append(message.to_ollama())

        logger.info(
            f"Starting generation with model {self.model}: "
            f"{len(history)} messages, {len(tool_set)} tools"
        )
        return GenerationStream(
            self._generate(history, tool_set),
            on_complete=on_complete,
        )

    async def _generate(
        self, history: list[dict[str, Any]], tool_set: ToolSet
    ) -> AsyncGenerator[StreamEvent, None]:
        tools = tool_set.to_ollama_tools()
        step = 0
        try:
            while True:
                step += 1
                content_parts: list[str] = []
                tool_calls: list[dict[str, Any]] = []
                final_chunk: dict[str, Any] | None = None

                chunks = self._with_idle_timeout(
                    self._ollama_client.chat_stream(
                        model=self.model,
                        messages=list(history),
                        tools=tools,
                        options=self.options,
                    )
                )
                async with aclosing(chunks):
                    async for chunk in chunks:
                        message = chunk.get("message") or {}
                        content = message.get("content") or ""
                        if content:
                            content_parts.append(content)
                            yield TextDeltaEvent(content=content, step=step)
                        if message.get("tool_calls"):
                            tool_calls.extend(message["tool_calls"])
                        if chunk.get("done"):
                            final_chunk = chunk
                            break

                if not tool_calls:
                    yield self._finish("stop", step, final_chunk)
                    break

                history.append(
                    {
                        "role": "assistant",
                        "content": "".join(content_parts),
                        "tool_calls": tool_calls,
                    }
                )
                for call in tool_calls:
                    function = call.get("function") or {}
                    name = function.get("name") or ""
                    arguments = _parse_arguments(function.get("arguments"))
                    call_id = uuid.uuid4().hex[:10]

                    yield ToolCallEvent(
                        call_id=call_id, tool_name=name, arguments=arguments, step=step
                    )
                    result = await self._run_tool(tool_set, name, arguments)
                    yield ToolResultEvent(
                        call_id=call_id,
                        tool_name=name,
                        content=result.content,
                        is_error=result.is_error,
                        step=step,
                    )
                    history.append(
                        {"role": "tool", "content": result.content, "tool_name": name}
                    )

                if step >= self.max_tool_steps:
                    logger.warning(
                        f"Reached max tool steps ({self.max_tool_steps}), stopping generation"
                    )
                    yield self._finish("max_steps", step, final_chunk)
                    break

            logger.info(f"Generation completed after {step} step(s)")
            yield DoneEvent()

        except Exception as e:
            logger.error(f"Generation failed at step {step}: {e}")
            yield ErrorEvent(
                code="generation_error",
                message=f"Failed to generate response: {e}",
                details={"step": step},
            )
            yield DoneEvent(status="failed")

    def _finish(
        self, reason: str, step: int, final_chunk: dict[str, Any] | None
    ) -> FinishEvent:
        return FinishEvent(
            reason=reason,
            steps=step,
            model=self.model,
            eval_count=final_chunk.get("eval_count") if final_chunk else None,
            prompt_eval_count=final_chunk.get("prompt_eval_count")
            if final_chunk
            else None,
        )

    async def _with_idle_timeout(
        self, chunks: AsyncIterator[dict[str, Any]]
    ) -> AsyncGenerator[dict[str, Any], None]:
        """Relay chunks, failing if the engine goes quiet for too long."""
        iterator = aiter(chunks)
        try:
            while True:
                try:
                    async with asyncio.timeout(self.stream_idle_timeout):
                        chunk = await anext(iterator)
                except StopAsyncIteration:
                    return
                except TimeoutError:
                    raise TimeoutError(
                        f"no output from model for {self.stream_idle_timeout:g}s"
                    ) from None
                yield chunk
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()

    async def _run_tool(
        self, tool_set: ToolSet, name: str, arguments: dict[str, Any]
    ) -> ToolResult:
        """Execute one tool call, reporting failures back to the model."""
        tool = tool_set.get(name)
        if tool is None:
            logger.warning(f"Model requested unknown tool: {name}")
            return ToolResult(content=f"Unknown tool: {name}", is_error=True)

        try:
            result = await tool.invoke(arguments)
        except ToolstreamError as e:
            logger.warning(f"Tool {name} failed: {e}")
            return ToolResult(content=f"Tool {name} failed: {e}", is_error=True)

        logger.debug(f"Tool {name} returned {len(result.content)} characters")
        return result
