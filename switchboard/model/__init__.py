from switchboard.model.base import ModelBackend
from switchboard.model.message import Message, ToolResultContent
from switchboard.model.registry import ModelRegistry
from switchboard.model.response import (
  ContentDelta,
  ModelResponse,
  ModelStreamEvent,
  ResponseUsage,
  StreamEnd,
  ToolCallDelta,
  ToolCallRequest,
  ToolCallResult,
)
from switchboard.model.settings import ModelSettings
from switchboard.model.usage import Usage

__all__ = [
  "ContentDelta",
  "Message",
  "ModelBackend",
  "ModelRegistry",
  "ModelResponse",
  "ModelSettings",
  "ModelStreamEvent",
  "ResponseUsage",
  "StreamEnd",
  "ToolCallDelta",
  "ToolCallRequest",
  "ToolCallResult",
  "ToolResultContent",
  "Usage",
]
