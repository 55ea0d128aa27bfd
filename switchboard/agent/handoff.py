"""Handoff rules: delegate a whole run to another agent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

if TYPE_CHECKING:
  from switchboard.agent.agent import Agent

# (validated input text, caller's context value) -> should delegate
HandoffMatcher = Callable[[str, Any], bool]


@dataclass(frozen=True)
class Handoff:
  """An ordered (matcher, target agent) delegation rule.

  Attributes:
    agent: Agent that takes over the run when ``matcher`` returns True.
    matcher: Receives the validated input text and the caller's context value.
    description: Optional human-readable note, used in logs and events.
  """

  agent: "Agent"
  matcher: HandoffMatcher
  description: Optional[str] = None

  def should_handoff(self, text: str, context_value: Any) -> bool:
    return bool(self.matcher(text, context_value))


def keyword_matcher(keywords: Iterable[str], case_sensitive: bool = False) -> HandoffMatcher:
  """Matcher that fires when the input contains any of *keywords*."""
  words = [k if case_sensitive else k.lower() for k in keywords]

  def _match(text: str, context_value: Any) -> bool:
    haystack = text if case_sensitive else text.lower()
    return any(word in haystack for word in words)

  return _match


def handoff(
  agent: "Agent",
  keywords: Optional[Iterable[str]] = None,
  matcher: Optional[HandoffMatcher] = None,
  case_sensitive: bool = False,
  description: Optional[str] = None,
) -> Handoff:
  """Build a Handoff from either a keyword list or a custom matcher."""
  if (keywords is None) == (matcher is None):
    raise ValueError("handoff() needs exactly one of keywords or matcher")
  if keywords is not None:
    return Handoff(agent=agent, matcher=keyword_matcher(keywords, case_sensitive=case_sensitive), description=description)
  return Handoff(agent=agent, matcher=matcher, description=description)
