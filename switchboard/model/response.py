"""Backend response records and streaming events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class ToolCallRequest(BaseModel):
  """A tool call emitted by the model backend."""

  id: str
  name: str
  parameters: Dict[str, Any] = Field(default_factory=dict)


class ToolCallResult(BaseModel):
  """The normalized outcome of invoking the tool behind a ToolCallRequest."""

  id: str
  name: str
  output: str


@dataclass
class ResponseUsage:
  """Token counts reported by a single backend response."""

  input_tokens: int = 0
  output_tokens: int = 0


@dataclass
class ModelResponse:
  """Aggregate shape of one backend completion."""

  content: Optional[str] = None
  tool_calls: List[ToolCallRequest] = field(default_factory=list)
  usage: Optional[ResponseUsage] = None

  @property
  def has_tool_calls(self) -> bool:
    return len(self.tool_calls) > 0


# ------------------------------------------------------------------
# Streaming events
# ------------------------------------------------------------------


@dataclass
class ContentDelta:
  text: str


@dataclass
class ToolCallDelta:
  """A fragment of a tool call.

  ``arguments`` is a raw JSON text fragment; it is only meaningful once
  every fragment for the call has arrived.
  """

  index: int = 0
  id: Optional[str] = None
  name: Optional[str] = None
  arguments: Optional[str] = None


@dataclass
class StreamEnd:
  usage: Optional[ResponseUsage] = None


ModelStreamEvent = Union[ContentDelta, ToolCallDelta, StreamEnd]
