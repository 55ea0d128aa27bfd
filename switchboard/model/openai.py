"""OpenAI Chat Completions backend."""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, List, Optional, Sequence

import httpx
from openai import AsyncOpenAI

from switchboard.exceptions import BackendFailure
from switchboard.model.message import Message, ToolResultContent
from switchboard.model.response import (
  ContentDelta,
  ModelResponse,
  ModelStreamEvent,
  ResponseUsage,
  StreamEnd,
  ToolCallDelta,
  ToolCallRequest,
)
from switchboard.model.settings import ModelSettings
from switchboard.utils.log import log_debug, log_warning

if TYPE_CHECKING:
  from switchboard.tool.function import Tool

DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=10.0)

_BUILTIN_TOOL_CHOICES = ("auto", "required", "none")


def format_message(message: Message) -> Dict[str, Any]:
  """Convert a Message into a Chat Completions message dict."""
  if isinstance(message.content, ToolResultContent):
    return {
      "role": "tool",
      "tool_call_id": message.content.tool_call_id,
      "content": message.content.result,
    }
  payload: Dict[str, Any] = {"role": message.role, "content": message.content}
  if message.role == "assistant" and message.tool_calls:
    payload["content"] = message.content or None
    payload["tool_calls"] = [
      {
        "id": call.id,
        "type": "function",
        "function": {"name": call.name, "arguments": json.dumps(call.parameters)},
      }
      for call in message.tool_calls
    ]
  return payload


def parse_arguments(raw: Optional[str]) -> Dict[str, Any]:
  if not raw:
    return {}
  try:
    parsed = json.loads(raw)
  except json.JSONDecodeError:
    log_warning(f"Could not parse tool call arguments: {raw!r}")
    return {}
  return parsed if isinstance(parsed, dict) else {}


class OpenAIChat:
  """
  ``ModelBackend`` over the OpenAI Chat Completions API.

  Args:
      id: Model identifier sent with every request.
      api_key: API key. Falls back to ``OPENAI_API_KEY``.
      base_url: API base URL. Falls back to ``OPENAI_BASE_URL``.
      timeout: httpx timeout applied to every request.
      client: Pre-built ``AsyncOpenAI`` client, mostly for tests.
  """

  provider = "openai"

  def __init__(
    self,
    id: str = "gpt-4.1",
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: Optional[httpx.Timeout] = None,
    client: Optional[AsyncOpenAI] = None,
  ):
    self.id = id
    self.api_key = api_key or os.getenv("OPENAI_API_KEY")
    self.base_url = base_url or os.getenv("OPENAI_BASE_URL")
    self.timeout = timeout or DEFAULT_TIMEOUT
    self._client = client

  @property
  def client(self) -> AsyncOpenAI:
    if self._client is None:
      self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)
    return self._client

  def _request_kwargs(self, messages: Sequence[Message], settings: ModelSettings, tools: Sequence["Tool"]) -> Dict[str, Any]:
    params = settings.to_request_params()
    request: Dict[str, Any] = {
      "model": settings.model or self.id,
      "messages": [format_message(m) for m in messages],
      **params,
    }
    if tools:
      request["tools"] = [{"type": "function", "function": t.to_dict()} for t in tools]
      choice = params.get("tool_choice")
      if choice is not None and choice not in _BUILTIN_TOOL_CHOICES:
        request["tool_choice"] = {"type": "function", "function": {"name": choice}}
    else:
      # The API rejects tool options without tools.
      request.pop("tool_choice", None)
      request.pop("parallel_tool_calls", None)
    return request

  async def ainvoke(
    self,
    messages: Sequence[Message],
    settings: ModelSettings,
    tools: Sequence["Tool"] = (),
  ) -> ModelResponse:
    request = self._request_kwargs(messages, settings, tools)
    log_debug(f"OpenAIChat request: model={request['model']} messages={len(request['messages'])} tools={len(tools)}")
    try:
      completion = await self.client.chat.completions.create(**request)
    except Exception as e:
      raise BackendFailure(e) from e

    if not completion.choices:
      raise BackendFailure(ValueError("No choices in completion response"))
    message = completion.choices[0].message
    tool_calls: List[ToolCallRequest] = []
    for call in message.tool_calls or []:
      function = getattr(call, "function", None)
      if function is None:
        continue
      tool_calls.append(ToolCallRequest(id=call.id, name=function.name, parameters=parse_arguments(function.arguments)))

    usage = None
    if completion.usage is not None:
      usage = ResponseUsage(
        input_tokens=completion.usage.prompt_tokens or 0,
        output_tokens=completion.usage.completion_tokens or 0,
      )
    return ModelResponse(content=message.content, tool_calls=tool_calls, usage=usage)

  async def ainvoke_stream(
    self,
    messages: Sequence[Message],
    settings: ModelSettings,
    tools: Sequence["Tool"] = (),
  ) -> AsyncIterator[ModelStreamEvent]:
    request = self._request_kwargs(messages, settings, tools)
    request["stream"] = True
    request["stream_options"] = {"include_usage": True}
    try:
      stream = await self.client.chat.completions.create(**request)
    except Exception as e:
      raise BackendFailure(e) from e

    usage: Optional[ResponseUsage] = None
    try:
      async for chunk in stream:
        if chunk.usage is not None:
          usage = ResponseUsage(
            input_tokens=chunk.usage.prompt_tokens or 0,
            output_tokens=chunk.usage.completion_tokens or 0,
          )
        if not chunk.choices:
          continue
        delta = chunk.choices[0].delta
        if delta.content:
          yield ContentDelta(text=delta.content)
        for call in delta.tool_calls or []:
          function = call.function
          yield ToolCallDelta(
            index=call.index,
            id=call.id,
            name=function.name if function else None,
            arguments=function.arguments if function else None,
          )
    except Exception as e:
      raise BackendFailure(e) from e
    yield StreamEnd(usage=usage)
