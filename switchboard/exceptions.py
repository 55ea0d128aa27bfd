"""Exception hierarchy for switchboard.

Every error raised inside a run is fatal to that run: the engine never
retries and never feeds a failure back to the model. Handoff delegation
re-raises the sub-run's error unchanged.
"""

from typing import Optional


class SwitchboardError(Exception):
  """Base exception for all switchboard errors."""

  def __init__(self, message: str, status_code: int = 500):
    super().__init__(message)
    self.message = message
    self.status_code = status_code
    self.type = "switchboard_error"
    self.error_id = "switchboard_error"

  def __str__(self) -> str:
    return self.message


# ------------------------------------------------------------------
# Run errors
# ------------------------------------------------------------------


class RunError(SwitchboardError):
  """Base exception for errors that abort a run."""

  def __init__(self, message: str, status_code: int = 500):
    super().__init__(message, status_code)
    self.type = "run_error"
    self.error_id = "run_error"


class InvalidStateError(RunError):
  """Raised when a run is executed more than once, or its context is busy."""

  def __init__(self, message: str):
    super().__init__(message, status_code=409)
    self.type = "invalid_state"
    self.error_id = "invalid_state"


class MaxTurnsExceeded(RunError):
  """Raised when the turn budget runs out before a final output is produced."""

  def __init__(self, max_turns: int):
    super().__init__(f"Max turns ({max_turns}) exceeded", status_code=422)
    self.max_turns = max_turns
    self.type = "max_turns_exceeded"
    self.error_id = "max_turns_exceeded"


class MaxHandoffsExceeded(RunError):
  """Raised when a chain of handoffs is deeper than the configured limit."""

  def __init__(self, max_handoffs: int):
    super().__init__(f"Max handoffs ({max_handoffs}) exceeded", status_code=422)
    self.max_handoffs = max_handoffs
    self.type = "max_handoffs_exceeded"
    self.error_id = "max_handoffs_exceeded"


class GuardrailRejected(RunError):
  """Raised when an input or output guardrail blocks the text."""

  def __init__(self, reason: str, stage: str = "input", guardrail_name: Optional[str] = None):
    label = f"{stage.title()} guardrail"
    if guardrail_name:
      label += f" '{guardrail_name}'"
    super().__init__(f"{label} rejected: {reason}", status_code=400)
    self.reason = reason
    self.stage = stage
    self.guardrail_name = guardrail_name
    self.type = "guardrail_rejected"
    self.error_id = "guardrail_rejected"


class ToolNotFound(RunError):
  """Raised when the backend calls a tool that is not eligible this turn."""

  def __init__(self, tool_name: str):
    super().__init__(f"Tool {tool_name} not found", status_code=404)
    self.tool_name = tool_name
    self.type = "tool_not_found"
    self.error_id = "tool_not_found"


class ToolExecutionFailed(RunError):
  """Raised when a tool's invocation function raises."""

  def __init__(self, tool_name: str, cause: BaseException):
    super().__init__(f"Tool {tool_name} failed: {cause}", status_code=500)
    self.tool_name = tool_name
    self.cause = cause
    self.type = "tool_execution_failed"
    self.error_id = "tool_execution_failed"


class BackendFailure(RunError):
  """Wraps any failure raised by a model backend call."""

  def __init__(self, cause: BaseException, message: Optional[str] = None):
    super().__init__(message or f"Model backend failed: {cause}", status_code=502)
    self.cause = cause
    self.type = "backend_failure"
    self.error_id = "backend_failure"


class UnknownRunError(RunError):
  """Catch-all wrapper for unexpected exceptions raised during a run."""

  def __init__(self, cause: BaseException):
    super().__init__(f"Unexpected error during run: {cause!r}", status_code=500)
    self.cause = cause
    self.type = "unknown_error"
    self.error_id = "unknown_error"


# ------------------------------------------------------------------
# Model registry
# ------------------------------------------------------------------


class ModelNotFoundError(SwitchboardError):
  """Raised when a model name has no registered backend factory."""

  def __init__(self, model_name: str):
    super().__init__(f"No model backend registered for '{model_name}'", status_code=404)
    self.model_name = model_name
    self.type = "model_not_found"
    self.error_id = "model_not_found"


# ------------------------------------------------------------------
# Voice errors
# ------------------------------------------------------------------


class VoicePipelineError(SwitchboardError):
  """Base exception for the voice pipeline."""

  def __init__(self, message: str, status_code: int = 500):
    super().__init__(message, status_code)
    self.type = "voice_pipeline_error"
    self.error_id = "voice_pipeline_error"


class TranscriptionError(VoicePipelineError):
  """Raised when the transcription backend fails."""

  def __init__(self, cause: BaseException):
    super().__init__(f"Transcription failed: {cause}", status_code=502)
    self.cause = cause
    self.type = "transcription_error"
    self.error_id = "transcription_error"


class SynthesisError(VoicePipelineError):
  """Raised when the synthesis backend fails for a text segment."""

  def __init__(self, cause: BaseException, text: str = ""):
    super().__init__(f"Speech synthesis failed: {cause}", status_code=502)
    self.cause = cause
    self.text = text
    self.type = "synthesis_error"
    self.error_id = "synthesis_error"
