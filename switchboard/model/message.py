"""Conversation messages replayed to the model backend each turn."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from switchboard.model.response import ToolCallRequest

Role = Literal["system", "user", "assistant", "tool"]


class ToolResultContent(BaseModel):
  """Structured content of a tool message."""

  model_config = ConfigDict(frozen=True)

  tool_call_id: str
  result: str


class Message(BaseModel):
  """A single entry in a run's message history.

  Content is plain text, or a ``ToolResultContent`` for ``tool`` messages.
  Assistant messages that requested tools keep the requests in
  ``tool_calls`` so providers can pair them with the following results.
  """

  model_config = ConfigDict(frozen=True)

  role: Role
  content: Union[str, ToolResultContent]
  tool_calls: List[ToolCallRequest] = Field(default_factory=list)

  @classmethod
  def system(cls, text: str) -> Message:
    return cls(role="system", content=text)

  @classmethod
  def user(cls, text: str) -> Message:
    return cls(role="user", content=text)

  @classmethod
  def assistant(cls, text: Optional[str], tool_calls: Optional[List[ToolCallRequest]] = None) -> Message:
    return cls(role="assistant", content=text or "", tool_calls=list(tool_calls or []))

  @classmethod
  def tool(cls, tool_call_id: str, result: str) -> Message:
    return cls(role="tool", content=ToolResultContent(tool_call_id=tool_call_id, result=result))

  @property
  def text(self) -> str:
    """Plain text of the message regardless of content shape."""
    if isinstance(self.content, ToolResultContent):
      return self.content.result
    return self.content

  def to_dict(self) -> Dict[str, Any]:
    return self.model_dump(exclude_defaults=False)
