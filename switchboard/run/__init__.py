from switchboard.run.config import RunConfig
from switchboard.run.context import RunContext
from switchboard.run.event_bus import EventBus
from switchboard.run.events import (
  BaseRunEvent,
  HandoffEvent,
  RunCompletedEvent,
  RunContentEvent,
  RunErrorEvent,
  RunEvent,
  RunOutputEvent,
  RunStartedEvent,
  ToolCallCompletedEvent,
  ToolCallStartedEvent,
)
from switchboard.run.result import RunResult
from switchboard.run.run import Run, RunState
from switchboard.run.runner import Runner, run_sync

__all__ = [
  "BaseRunEvent",
  "EventBus",
  "HandoffEvent",
  "Run",
  "RunCompletedEvent",
  "RunConfig",
  "RunContentEvent",
  "RunContext",
  "RunErrorEvent",
  "RunEvent",
  "RunOutputEvent",
  "RunResult",
  "RunStartedEvent",
  "RunState",
  "Runner",
  "ToolCallCompletedEvent",
  "ToolCallStartedEvent",
  "run_sync",
]
