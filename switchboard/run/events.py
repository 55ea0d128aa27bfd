"""
Run events, emitted on the EventBus and yielded by ``Runner.stream_events``.

Usage:
    from switchboard.run.events import RunContentEvent, ToolCallStartedEvent, RunCompletedEvent
"""

import json
import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from switchboard.utils.log import log_error
from switchboard.utils.serialize import json_serializer


class RunEvent(str, Enum):
  """Events that can be sent by a run."""

  run_started = "RunStarted"
  run_content = "RunContent"
  tool_call_started = "ToolCallStarted"
  tool_call_completed = "ToolCallCompleted"
  handoff = "Handoff"
  run_completed = "RunCompleted"
  run_error = "RunError"


@dataclass
class BaseRunEvent:
  event: str = ""
  run_id: Optional[str] = None
  agent_name: Optional[str] = None
  created_at: float = field(default_factory=time.time)

  def to_dict(self) -> Dict[str, Any]:
    return {k: v for k, v in asdict(self).items() if v is not None}

  def to_json(self, indent: Optional[int] = 2) -> str:
    try:
      _dict = self.to_dict()
    except Exception:
      log_error("Failed to convert run event to json", exc_info=True)
      raise
    return json.dumps(_dict, indent=indent, default=json_serializer, ensure_ascii=False)


@dataclass
class RunStartedEvent(BaseRunEvent):
  event: str = RunEvent.run_started.value
  input: str = ""


@dataclass
class RunContentEvent(BaseRunEvent):
  """A text delta from a streamed turn."""

  event: str = RunEvent.run_content.value
  content: str = ""
  turn: int = 0


@dataclass
class ToolCallStartedEvent(BaseRunEvent):
  event: str = RunEvent.tool_call_started.value
  tool_call_id: str = ""
  tool_name: str = ""
  tool_args: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolCallCompletedEvent(BaseRunEvent):
  event: str = RunEvent.tool_call_completed.value
  tool_call_id: str = ""
  tool_name: str = ""
  result: str = ""


@dataclass
class HandoffEvent(BaseRunEvent):
  """The run was delegated; everything after this belongs to ``to_agent``."""

  event: str = RunEvent.handoff.value
  from_agent: str = ""
  to_agent: str = ""


@dataclass
class RunCompletedEvent(BaseRunEvent):
  event: str = RunEvent.run_completed.value
  content: str = ""
  usage: Optional[Dict[str, int]] = None


@dataclass
class RunErrorEvent(BaseRunEvent):
  event: str = RunEvent.run_error.value
  error_type: str = ""
  content: str = ""


RunOutputEvent = Union[
  RunStartedEvent,
  RunContentEvent,
  ToolCallStartedEvent,
  ToolCallCompletedEvent,
  HandoffEvent,
  RunCompletedEvent,
  RunErrorEvent,
]
