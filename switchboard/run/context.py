"""Run context: the caller's value plus the usage accumulator."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generic, Iterator, Optional, TypeVar

from switchboard.exceptions import InvalidStateError
from switchboard.model.response import ResponseUsage
from switchboard.model.usage import Usage

TContext = TypeVar("TContext")


@dataclass
class RunContext(Generic[TContext]):
  """
  Context passed through a run, its tools, guardrails and handoffs.

  ``value`` is owned by the caller and only read by the engine. ``usage``
  has a single writer: the run currently holding the context (see
  ``owned_by``). Handoff sub-runs work on a ``fork`` whose usage is merged
  back with ``merge_usage`` once the sub-run completes.
  """

  value: Optional[TContext] = None
  usage: Usage = field(default_factory=Usage)

  _owner: Optional[str] = field(default=None, init=False, repr=False, compare=False)

  @property
  def owner(self) -> Optional[str]:
    return self._owner

  @contextmanager
  def owned_by(self, run_id: str) -> Iterator[RunContext[TContext]]:
    """Hold exclusive write access for *run_id* for the duration of the block.

    Raises:
        InvalidStateError: If another run already holds this context.
    """
    if self._owner is not None and self._owner != run_id:
      raise InvalidStateError(f"RunContext is already in use by run {self._owner}")
    previous = self._owner
    self._owner = run_id
    try:
      yield self
    finally:
      self._owner = previous

  def record_usage(self, response_usage: Optional[ResponseUsage]) -> None:
    self.usage.add(response_usage)

  def merge_usage(self, other: RunContext[Any]) -> None:
    """Fold *other*'s usage into this context. Called at handoff join points."""
    self.usage.absorb(other.usage)

  def fork(self) -> RunContext[TContext]:
    """A context sharing ``value`` with a fresh, unowned usage accumulator."""
    return RunContext(value=self.value)
