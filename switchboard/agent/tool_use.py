"""Tool-use behavior: decides whether a turn's tool results end the run."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, FrozenSet, Iterable, Optional, Sequence, Union

from switchboard.model.response import ToolCallResult

if TYPE_CHECKING:
  from switchboard.run.context import RunContext


@dataclass(frozen=True)
class ToolsToFinalOutputResult:
  """Decision returned by a custom tool-use function."""

  is_final_output: bool
  final_output: Optional[str] = None


ToolUseDecider = Callable[
  ["RunContext", Sequence[ToolCallResult]],
  Union[ToolsToFinalOutputResult, Awaitable[ToolsToFinalOutputResult]],
]


@dataclass(frozen=True)
class RunLLMAgain:
  """Always hand tool results back to the model."""


@dataclass(frozen=True)
class StopOnFirstTool:
  """The first tool result of a turn is the final output."""


@dataclass(frozen=True)
class StopAtTools:
  """The first result whose tool name is in ``names`` is the final output."""

  names: FrozenSet[str]

  def __init__(self, names: Iterable[str]):
    object.__setattr__(self, "names", frozenset(names))


@dataclass(frozen=True)
class CustomToolUse:
  """Delegate the decision to a side-effect-free function of (context, results)."""

  decide: ToolUseDecider


ToolUseBehavior = Union[RunLLMAgain, StopOnFirstTool, StopAtTools, CustomToolUse]

RUN_LLM_AGAIN = RunLLMAgain()
STOP_ON_FIRST_TOOL = StopOnFirstTool()


async def resolve_tool_use(
  behavior: ToolUseBehavior,
  results: Sequence[ToolCallResult],
  context: "RunContext",
) -> Optional[str]:
  """Return the final output chosen by *behavior*, or None to keep looping."""
  if not results:
    return None
  if isinstance(behavior, RunLLMAgain):
    return None
  if isinstance(behavior, StopOnFirstTool):
    return results[0].output
  if isinstance(behavior, StopAtTools):
    for result in results:
      if result.name in behavior.names:
        return result.output
    return None
  if isinstance(behavior, CustomToolUse):
    decision = behavior.decide(context, results)
    if inspect.isawaitable(decision):
      decision = await decision
    if not decision.is_final_output:
      return None
    return decision.final_output if decision.final_output is not None else results[-1].output
  raise TypeError(f"Unknown tool use behavior: {behavior!r}")
