"""Request and token accounting."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from switchboard.model.response import ResponseUsage


@dataclass
class Usage:
  """Aggregated request/token counters.

  All counters are non-negative integers. ``add`` records one backend
  response; ``merge`` is field-wise addition, so it is associative and
  commutative.
  """

  requests: int = 0
  input_tokens: int = 0
  output_tokens: int = 0
  total_tokens: int = 0

  def add(self, response_usage: Optional[ResponseUsage]) -> None:
    """Record one backend response.

    ``requests`` grows by exactly one and ``total_tokens`` by the
    response's input plus output tokens. A response without usage still
    counts as a request.
    """
    self.requests += 1
    if response_usage is None:
      return
    self.input_tokens += response_usage.input_tokens
    self.output_tokens += response_usage.output_tokens
    self.total_tokens += response_usage.input_tokens + response_usage.output_tokens

  def merge(self, other: Usage) -> Usage:
    return Usage(
      requests=self.requests + other.requests,
      input_tokens=self.input_tokens + other.input_tokens,
      output_tokens=self.output_tokens + other.output_tokens,
      total_tokens=self.total_tokens + other.total_tokens,
    )

  def absorb(self, other: Usage) -> None:
    """In-place merge used at handoff join points."""
    self.requests += other.requests
    self.input_tokens += other.input_tokens
    self.output_tokens += other.output_tokens
    self.total_tokens += other.total_tokens

  def copy(self) -> Usage:
    return Usage(**asdict(self))

  def __add__(self, other: Usage) -> Usage:
    if not isinstance(other, Usage):
      return NotImplemented
    return self.merge(other)

  def __radd__(self, other: Any) -> Usage:
    # sum() starts from 0
    if other == 0:
      return self.copy()
    if not isinstance(other, Usage):
      return NotImplemented
    return other.merge(self)

  def to_dict(self) -> Dict[str, int]:
    return asdict(self)
