"""
Switchboard: multi-turn agent runs with tools, guardrails, handoffs and voice.

Quick Start:
    from switchboard import Agent, Runner, tool, OpenAIChat

    @tool
    def get_weather(city: str) -> str:
        return f"Sunny in {city}"

    agent = Agent(name="assistant", instructions="You are helpful.", tools=[get_weather])
    result = Runner(backend=OpenAIChat(id="gpt-4.1")).run(agent, "Weather in Paris?")
    print(result.final_output)

Model registry:
    from switchboard.model import ModelRegistry

    registry = ModelRegistry()
    registry.register_openai_models()
    runner = Runner(registry=registry)

Agent-scoped:
    from switchboard.agent import handoff, max_length, input_guardrail, StopAtTools

Events:
    from switchboard.run import RunContentEvent, ToolCallStartedEvent, RunCompletedEvent

Voice:
    from switchboard.voice import VoicePipeline, SingleAgentVoiceWorkflow, AudioInput
"""

from typing import TYPE_CHECKING

# --- Eager exports ---

from switchboard.agent.agent import Agent
from switchboard.agent.handoff import handoff
from switchboard.exceptions import (
  BackendFailure,
  GuardrailRejected,
  InvalidStateError,
  MaxHandoffsExceeded,
  MaxTurnsExceeded,
  RunError,
  SwitchboardError,
  ToolExecutionFailed,
  ToolNotFound,
  UnknownRunError,
)
from switchboard.model.message import Message
from switchboard.model.registry import ModelRegistry
from switchboard.model.settings import ModelSettings
from switchboard.model.usage import Usage
from switchboard.run.config import RunConfig
from switchboard.run.context import RunContext
from switchboard.run.result import RunResult
from switchboard.run.runner import Runner
from switchboard.tool.decorator import tool
from switchboard.tool.function import Tool

if TYPE_CHECKING:
  from switchboard.model.openai import OpenAIChat
  from switchboard.voice import SingleAgentVoiceWorkflow, VoicePipeline


# --- Lazy exports (loaded on first access via __getattr__) ---

_LAZY_IMPORTS: dict = {
  "OpenAIChat": ("switchboard.model.openai", "OpenAIChat"),
  "VoicePipeline": ("switchboard.voice", "VoicePipeline"),
  "SingleAgentVoiceWorkflow": ("switchboard.voice", "SingleAgentVoiceWorkflow"),
}


def __getattr__(name: str):
  if name in _LAZY_IMPORTS:
    module_path, attr_name = _LAZY_IMPORTS[name]
    import importlib

    module = importlib.import_module(module_path)
    return getattr(module, attr_name)
  raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
  # Core
  "Agent",
  "Runner",
  "RunConfig",
  "RunContext",
  "RunResult",
  "ModelRegistry",
  "ModelSettings",
  "Usage",
  "Message",
  # Tools
  "tool",
  "Tool",
  "handoff",
  # Exceptions
  "SwitchboardError",
  "RunError",
  "InvalidStateError",
  "MaxTurnsExceeded",
  "MaxHandoffsExceeded",
  "GuardrailRejected",
  "ToolNotFound",
  "ToolExecutionFailed",
  "BackendFailure",
  "UnknownRunError",
  # Lazy
  "OpenAIChat",
  "VoicePipeline",
  "SingleAgentVoiceWorkflow",
]
