"""Agent: an immutable configuration bundle shared freely across runs."""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Awaitable, Callable, List, Optional, Sequence, Tuple, Union

from switchboard.agent.handoff import Handoff
from switchboard.agent.tool_use import RUN_LLM_AGAIN, ToolUseBehavior
from switchboard.model.settings import ModelSettings
from switchboard.tool.function import Tool

if TYPE_CHECKING:
  from switchboard.model.base import ModelBackend
  from switchboard.run.config import RunConfig
  from switchboard.run.context import RunContext
  from switchboard.run.result import RunResult

# (run context, agent) -> instructions
InstructionsResolver = Callable[["RunContext", "Agent"], Union[str, Awaitable[str]]]

_TUPLE_FIELDS = ("tools", "input_guardrails", "output_guardrails", "handoffs")


@dataclass(frozen=True, eq=False)
class Agent:
  """
  Named configuration of instructions, tools, guardrails, handoffs and model settings.

  Agents are frozen: every collection is stored as a tuple and ``clone``
  returns a modified copy. Any number of runs and handoffs may reference
  the same agent concurrently.

  Attributes:
      name: Agent name, used in logs, events and results.
      instructions: Fixed system prompt, or a function of (run context, agent)
        resolved once per run. Sync or async.
      handoff_description: Optional description used when another agent hands off here.
      tools: Tools in registration order.
      input_guardrails: Guardrails applied to the run input, in order.
      output_guardrails: Guardrails applied to the final output, in order.
      handoffs: Delegation rules, first match wins.
      model_settings: Model identifier plus generation parameters.
      tool_use_behavior: Whether tool results end the run.
      reset_tool_choice: Drop a forced ``tool_choice`` after the first turn
        that used tools, so the model can answer.

  Example:
      agent = Agent(
        name="assistant",
        instructions="You are helpful.",
        tools=[get_weather],
        input_guardrails=[max_length(500)],
      )
      result = await agent.arun("What's the weather in Paris?", backend=backend)
  """

  name: str
  instructions: Optional[Union[str, InstructionsResolver]] = None
  handoff_description: Optional[str] = None
  tools: Tuple[Tool, ...] = ()
  input_guardrails: Tuple[Any, ...] = ()
  output_guardrails: Tuple[Any, ...] = ()
  handoffs: Tuple[Handoff, ...] = ()
  model_settings: ModelSettings = field(default_factory=ModelSettings)
  tool_use_behavior: ToolUseBehavior = RUN_LLM_AGAIN
  reset_tool_choice: bool = True

  def __post_init__(self) -> None:
    for name in _TUPLE_FIELDS:
      value = getattr(self, name)
      if not isinstance(value, tuple):
        object.__setattr__(self, name, tuple(value or ()))
    names = [t.name for t in self.tools]
    duplicates = {n for n in names if names.count(n) > 1}
    if duplicates:
      raise ValueError(f"Agent {self.name!r} has duplicate tool names: {sorted(duplicates)}")

  @property
  def tool_names(self) -> List[str]:
    return [t.name for t in self.tools]

  def clone(self, **updates: Any) -> Agent:
    """Return a copy of this agent with *updates* applied."""
    return replace(self, **updates)

  async def resolve_instructions(self, context: "RunContext") -> Optional[str]:
    if self.instructions is None or isinstance(self.instructions, str):
      return self.instructions
    resolved = self.instructions(context, self)
    if inspect.isawaitable(resolved):
      resolved = await resolved
    return resolved

  async def enabled_tools(self, context: "RunContext", max_concurrency: Optional[int] = None) -> List[Tool]:
    """Tools whose availability resolves to True, in registration order.

    Every availability check runs as its own task (bounded by
    *max_concurrency* when given); results are re-sorted by registration
    index so completion timing never changes the order.
    """
    if not self.tools:
      return []
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def _check(index: int, tool: Tool) -> Tuple[int, Tool, bool]:
      if semaphore is None:
        return index, tool, await tool.is_enabled(context)
      async with semaphore:
        return index, tool, await tool.is_enabled(context)

    results = await asyncio.gather(*(_check(i, t) for i, t in enumerate(self.tools)))
    return [tool for _, tool, enabled in sorted(results, key=lambda r: r[0]) if enabled]

  # ------------------------------------------------------------------
  # Convenience entry points
  # ------------------------------------------------------------------

  async def arun(
    self,
    input: str,
    *,
    context: Any = None,
    backend: Optional["ModelBackend"] = None,
    config: Optional["RunConfig"] = None,
    history: Sequence[Any] = (),
  ) -> "RunResult":
    """Run this agent once. See ``Runner.arun``."""
    from switchboard.run.runner import Runner

    return await Runner(backend=backend, config=config).arun(self, input, context=context, history=history)

  def run(
    self,
    input: str,
    *,
    context: Any = None,
    backend: Optional["ModelBackend"] = None,
    config: Optional["RunConfig"] = None,
  ) -> "RunResult":
    """Synchronous wrapper around ``arun``."""
    from switchboard.run.runner import Runner

    return Runner(backend=backend, config=config).run(self, input, context=context)
