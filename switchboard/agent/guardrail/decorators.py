"""Decorators for creating guardrails from plain functions.

Usage::

    @input_guardrail
    async def no_profanity(text: str, context: RunContext) -> GuardrailResult:
        if "badword" in text.lower():
            return GuardrailResult.block("Profanity detected")
        return GuardrailResult.allow()

    @output_guardrail(name="shout")
    def shout(text: str, context: RunContext) -> str:
        return text.upper()

A wrapped function may be sync or async. Besides a ``GuardrailResult`` it
may return a plain string, treated as the (possibly modified) text.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Callable, Optional

from switchboard.agent.guardrail.base import GuardrailResult

if TYPE_CHECKING:
  from switchboard.run.context import RunContext


async def _call(fn: Callable, text: str, context: RunContext) -> GuardrailResult:
  result: Any = fn(text, context)
  if inspect.isawaitable(result):
    result = await result
  if isinstance(result, GuardrailResult):
    return result
  if isinstance(result, str):
    return GuardrailResult.allow() if result == text else GuardrailResult.modify(result)
  raise TypeError(f"Guardrail function must return GuardrailResult or str, got {type(result).__name__}")


# ------------------------------------------------------------------
# Wrapper classes that satisfy the Protocol contracts
# ------------------------------------------------------------------


class _InputGuardrailWrapper:
  """Wraps a function into an InputGuardrail-compliant object."""

  def __init__(self, fn: Callable, name: str):
    self.name = name
    self._fn = fn

  async def check(self, text: str, context: RunContext) -> GuardrailResult:
    return await _call(self._fn, text, context)

  def __repr__(self) -> str:
    return f"InputGuardrail({self.name!r})"


class _OutputGuardrailWrapper:
  """Wraps a function into an OutputGuardrail-compliant object."""

  def __init__(self, fn: Callable, name: str):
    self.name = name
    self._fn = fn

  async def check(self, text: str, context: RunContext) -> GuardrailResult:
    return await _call(self._fn, text, context)

  def __repr__(self) -> str:
    return f"OutputGuardrail({self.name!r})"


# ------------------------------------------------------------------
# Public decorator factories
# ------------------------------------------------------------------


def input_guardrail(fn: Optional[Callable] = None, *, name: Optional[str] = None):
  """Decorator to create an :class:`InputGuardrail` from a function.

  Supports both ``@input_guardrail`` and ``@input_guardrail(name=...)``.
  """
  if fn is not None:
    return _InputGuardrailWrapper(fn, name=name or fn.__name__)

  def decorator(f: Callable) -> _InputGuardrailWrapper:
    return _InputGuardrailWrapper(f, name=name or f.__name__)

  return decorator


def output_guardrail(fn: Optional[Callable] = None, *, name: Optional[str] = None):
  """Decorator to create an :class:`OutputGuardrail` from a function.

  Supports both ``@output_guardrail`` and ``@output_guardrail(name=...)``.
  """
  if fn is not None:
    return _OutputGuardrailWrapper(fn, name=name or fn.__name__)

  def decorator(f: Callable) -> _OutputGuardrailWrapper:
    return _OutputGuardrailWrapper(f, name=name or f.__name__)

  return decorator
