"""Result of a completed run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from switchboard.model.message import Message
from switchboard.model.usage import Usage

if TYPE_CHECKING:
  from switchboard.agent.agent import Agent


@dataclass
class RunResult:
  """
  Outcome of a Completed run.

  Attributes:
      final_output: Validated final output text.
      messages: Full message history. After a handoff this is the sub-run's history.
      usage: Usage accumulated by the run, including merged sub-runs.
      last_agent: Agent that produced the final output.
      run_id: Identifier of the run that produced the result.
  """

  final_output: str
  messages: List[Message] = field(default_factory=list)
  usage: Usage = field(default_factory=Usage)
  last_agent: Optional["Agent"] = None
  run_id: Optional[str] = None

  def to_dict(self) -> Dict[str, Any]:
    return {
      "final_output": self.final_output,
      "messages": [m.to_dict() for m in self.messages],
      "usage": self.usage.to_dict(),
      "last_agent": self.last_agent.name if self.last_agent is not None else None,
      "run_id": self.run_id,
    }

  def __str__(self) -> str:
    return self.final_output
