"""Built-in guardrails: max_length, regex_guardrail, block_topics.

Each works as either an input or an output guardrail.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, List, Literal, Optional

from switchboard.agent.guardrail.base import GuardrailResult

if TYPE_CHECKING:
  from switchboard.run.context import RunContext


# ------------------------------------------------------------------
# max_length
# ------------------------------------------------------------------


class _MaxLengthGuardrail:
  """Block text longer than a character limit."""

  def __init__(self, n: int):
    if n < 0:
      raise ValueError("max_length limit must be non-negative")
    self.name = "max_length"
    self._limit = n

  async def check(self, text: str, context: RunContext) -> GuardrailResult:
    if len(text) > self._limit:
      return GuardrailResult.block(f"Text is too long. Maximum length is {self._limit} characters.")
    return GuardrailResult.allow()


def max_length(n: int) -> _MaxLengthGuardrail:
  """Create a guardrail that blocks text longer than *n* characters."""
  return _MaxLengthGuardrail(n)


# ------------------------------------------------------------------
# regex_guardrail
# ------------------------------------------------------------------


class _RegexGuardrail:
  """Require a pattern to be absent (``block``) or present (``require``)."""

  def __init__(self, pattern: str, mode: Literal["block", "require"] = "block", flags: int = 0, name: Optional[str] = None):
    if mode not in ("block", "require"):
      raise ValueError(f"Unknown regex guardrail mode: {mode!r}")
    self.name = name or "regex"
    self._pattern = re.compile(pattern, flags)
    self._mode = mode

  async def check(self, text: str, context: RunContext) -> GuardrailResult:
    found = self._pattern.search(text) is not None
    if self._mode == "block" and found:
      return GuardrailResult.block(f"Text contains blocked content: {self._pattern.pattern}")
    if self._mode == "require" and not found:
      return GuardrailResult.block(f"Text does not contain required content: {self._pattern.pattern}")
    return GuardrailResult.allow()


def regex_guardrail(
  pattern: str,
  mode: Literal["block", "require"] = "block",
  flags: int = 0,
  name: Optional[str] = None,
) -> _RegexGuardrail:
  """Create a guardrail that blocks text matching *pattern*, or text missing it."""
  return _RegexGuardrail(pattern, mode=mode, flags=flags, name=name)


# ------------------------------------------------------------------
# block_topics
# ------------------------------------------------------------------


class _BlockTopicsGuardrail:
  """Block text containing any of the given topic keywords (case-insensitive)."""

  def __init__(self, topics: List[str]):
    self.name = "block_topics"
    self._topics = [t.lower() for t in topics]

  async def check(self, text: str, context: RunContext) -> GuardrailResult:
    lower = text.lower()
    for topic in self._topics:
      if topic in lower:
        return GuardrailResult.block(f"Blocked topic detected: {topic}")
    return GuardrailResult.allow()


def block_topics(topics: List[str]) -> _BlockTopicsGuardrail:
  """Create a guardrail that blocks text containing any of *topics*."""
  return _BlockTopicsGuardrail(topics)
