"""Core guardrail types: result, protocols, and the ordered chain."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Literal, Optional, Protocol, Sequence, runtime_checkable

from switchboard.exceptions import GuardrailRejected
from switchboard.utils.log import log_debug, log_warning

if TYPE_CHECKING:
  from switchboard.run.context import RunContext


@dataclass
class GuardrailResult:
  """Result returned by a guardrail check.

  Attributes:
    action: One of "allow", "block", "modify", "warn".
    message: Human-readable explanation (required for block/modify/warn).
    modified_text: Replacement text when action is "modify".
    metadata: Optional extra data for tracing / debugging.
  """

  action: Literal["allow", "block", "modify", "warn"]
  message: Optional[str] = None
  modified_text: Optional[str] = None
  metadata: Optional[Dict[str, Any]] = None

  # ------------------------------------------------------------------
  # Factory helpers
  # ------------------------------------------------------------------

  @staticmethod
  def allow() -> GuardrailResult:
    return GuardrailResult(action="allow")

  @staticmethod
  def block(reason: str) -> GuardrailResult:
    return GuardrailResult(action="block", message=reason)

  @staticmethod
  def modify(new_text: str, reason: str = "") -> GuardrailResult:
    return GuardrailResult(action="modify", modified_text=new_text, message=reason or None)

  @staticmethod
  def warn(message: str) -> GuardrailResult:
    return GuardrailResult(action="warn", message=message)


# ------------------------------------------------------------------
# Protocols
# ------------------------------------------------------------------


@runtime_checkable
class InputGuardrail(Protocol):
  """Protocol for guardrails that check user input before the first turn."""

  name: str

  async def check(self, text: str, context: RunContext) -> GuardrailResult: ...


@runtime_checkable
class OutputGuardrail(Protocol):
  """Protocol for guardrails that check the final output of a run."""

  name: str

  async def check(self, text: str, context: RunContext) -> GuardrailResult: ...


# ------------------------------------------------------------------
# Chain
# ------------------------------------------------------------------


@dataclass(frozen=True)
class GuardrailChain:
  """Ordered guardrails applied as one all-or-nothing transform.

  Guardrails run strictly in registration order. Each sees the text as
  transformed by the ones before it; the first block aborts the chain and
  later guardrails never run. A guardrail that raises counts as a block.

  Attributes:
    guardrails: Guardrails in registration order.
    stage: ``"input"`` or ``"output"``; carried into ``GuardrailRejected``.
  """

  guardrails: Sequence[Any] = field(default_factory=tuple)
  stage: Literal["input", "output"] = "input"

  async def apply(self, text: str, context: RunContext) -> str:
    """Return the validated (possibly transformed) text.

    Raises:
      GuardrailRejected: On the first blocking verdict.
    """
    current = text
    for guardrail in self.guardrails:
      name = getattr(guardrail, "name", type(guardrail).__name__)
      start = time.perf_counter()
      try:
        result = await guardrail.check(current, context)
      except Exception as exc:
        log_warning(f"{self.stage.title()} guardrail '{name}' raised: {exc}")
        result = GuardrailResult.block(f"Guardrail error: {exc}")
      elapsed = (time.perf_counter() - start) * 1000
      result.metadata = {**(result.metadata or {}), "duration_ms": elapsed, "guardrail_name": name}
      log_debug(f"{self.stage.title()} guardrail '{name}' → {result.action} ({elapsed:.1f}ms)")

      if result.action == "block":
        raise GuardrailRejected(result.message or "blocked", stage=self.stage, guardrail_name=name)
      if result.action == "modify" and result.modified_text is not None:
        current = result.modified_text
      elif result.action == "warn":
        log_warning(f"{self.stage.title()} guardrail '{name}' warned: {result.message}")
    return current

  def __len__(self) -> int:
    return len(self.guardrails)
