"""Run configuration with immutable settings."""

from dataclasses import dataclass, replace
from typing import Optional

DEFAULT_MAX_TURNS = 10
DEFAULT_MAX_HANDOFFS = 8


@dataclass(frozen=True)
class RunConfig:
  """
  Limits applied to a single run.

  Attributes:
      max_turns: Backend calls allowed before MaxTurnsExceeded.
      max_handoffs: Depth of chained handoffs before MaxHandoffsExceeded.
      max_tool_check_concurrency: Bound on concurrently running tool
        availability checks. None runs one task per tool.
  """

  max_turns: int = DEFAULT_MAX_TURNS
  max_handoffs: int = DEFAULT_MAX_HANDOFFS
  max_tool_check_concurrency: Optional[int] = None

  def __post_init__(self) -> None:
    if self.max_turns < 1:
      raise ValueError("max_turns must be at least 1")
    if self.max_handoffs < 0:
      raise ValueError("max_handoffs must be non-negative")
    if self.max_tool_check_concurrency is not None and self.max_tool_check_concurrency < 1:
      raise ValueError("max_tool_check_concurrency must be at least 1")

  def with_updates(self, **kwargs) -> "RunConfig":
    """
    Create new config with updated values (immutable pattern).

    Example:
        strict = config.with_updates(max_turns=3)
    """
    return replace(self, **kwargs)
