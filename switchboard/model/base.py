"""Model backend capability interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncIterator, Protocol, Sequence, runtime_checkable

from switchboard.model.message import Message
from switchboard.model.response import ModelResponse, ModelStreamEvent
from switchboard.model.settings import ModelSettings

if TYPE_CHECKING:
  from switchboard.tool.function import Tool


@runtime_checkable
class ModelBackend(Protocol):
  """Protocol for language-model backends.

  ``ainvoke`` returns the aggregate response for one turn. ``ainvoke_stream``
  yields ``ContentDelta`` / ``ToolCallDelta`` events in arrival order and
  finishes with a single ``StreamEnd``. Both receive the full message
  history and only the tools eligible for the current turn.
  """

  async def ainvoke(
    self,
    messages: Sequence[Message],
    settings: ModelSettings,
    tools: Sequence["Tool"] = (),
  ) -> ModelResponse: ...

  def ainvoke_stream(
    self,
    messages: Sequence[Message],
    settings: ModelSettings,
    tools: Sequence["Tool"] = (),
  ) -> AsyncIterator[ModelStreamEvent]: ...
