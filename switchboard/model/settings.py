"""Model identifier and generation parameters."""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional, Union

DEFAULT_MODEL = "gpt-4.1"

# Fields forwarded to the provider verbatim when set.
_REQUEST_FIELDS = (
  "temperature",
  "top_p",
  "frequency_penalty",
  "presence_penalty",
  "tool_choice",
  "parallel_tool_calls",
  "max_tokens",
  "seed",
  "response_format",
  "metadata",
  "extra_headers",
  "extra_query",
  "extra_body",
)

_DICT_FIELDS = ("extra_headers", "extra_query", "extra_body", "additional_params")


@dataclass(frozen=True)
class ModelSettings:
  """
  Model settings for an agent.

  Uses frozen dataclass so settings can be shared between agents and runs.

  Attributes:
      model: Model identifier, also the key used by ``ModelRegistry``.
      temperature: Sampling temperature.
      top_p: Nucleus sampling cutoff.
      frequency_penalty: Penalty for repeated tokens.
      presence_penalty: Penalty encouraging new topics.
      tool_choice: "auto", "required", "none" or a tool name.
      parallel_tool_calls: Allow several tool calls per turn.
      max_tokens: Maximum tokens to generate.
      seed: Seed for deterministic sampling.
      response_format: Provider response format payload.
      metadata: Metadata forwarded to the provider.
      extra_headers: Extra HTTP headers for the provider request.
      extra_query: Extra query parameters for the provider request.
      extra_body: Extra body fields for the provider request.
      additional_params: Model-specific parameters merged into the request.
  """

  model: str = DEFAULT_MODEL
  temperature: Optional[float] = None
  top_p: Optional[float] = None
  frequency_penalty: Optional[float] = None
  presence_penalty: Optional[float] = None
  tool_choice: Optional[str] = None
  parallel_tool_calls: Optional[bool] = None
  max_tokens: Optional[int] = None
  seed: Optional[int] = None
  response_format: Optional[Union[str, Dict[str, Any]]] = None
  metadata: Optional[Dict[str, str]] = field(default=None, hash=False)
  extra_headers: Optional[Dict[str, str]] = field(default=None, hash=False)
  extra_query: Optional[Dict[str, Any]] = field(default=None, hash=False)
  extra_body: Optional[Dict[str, Any]] = field(default=None, hash=False)
  additional_params: Dict[str, Any] = field(default_factory=dict, hash=False)

  def with_updates(self, **kwargs) -> "ModelSettings":
    """
    Create new settings with updated values (immutable pattern).

    Example:
        creative = settings.with_updates(temperature=0.9)
    """
    return replace(self, **kwargs)

  def merged(self, override: Optional["ModelSettings"]) -> "ModelSettings":
    """Overlay every non-None field of *override* on top of these settings.

    Dict-valued fields are merged key by key, with *override* winning.
    """
    if override is None:
      return self
    updates: Dict[str, Any] = {}
    for f in fields(self):
      value = getattr(override, f.name)
      if f.name == "model":
        if value != self.model:
          updates["model"] = value
        continue
      if f.name in _DICT_FIELDS:
        if value:
          updates[f.name] = {**(getattr(self, f.name) or {}), **value}
        continue
      if value is not None:
        updates[f.name] = value
    return replace(self, **updates)

  def to_request_params(self) -> Dict[str, Any]:
    """Keyword arguments for a provider SDK call, omitting unset fields."""
    params: Dict[str, Any] = {}
    for name in _REQUEST_FIELDS:
      value = getattr(self, name)
      if value is None:
        continue
      if name == "response_format" and isinstance(value, str):
        value = {"type": value}
      params[name] = value
    params.update(self.additional_params)
    return params
