"""Tool model: schema, availability policy and invocation."""

from __future__ import annotations

import inspect
import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Literal, Optional, Type, Union, get_type_hints

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, create_model

from switchboard.utils.serialize import json_serializer

if TYPE_CHECKING:
  from switchboard.run.context import RunContext

# Parameter name that receives the RunContext instead of a model-supplied value.
RUN_CONTEXT_PARAM = "run_context"

# Receives the RunContext.
AvailabilityPredicate = Callable[[Any], Union[bool, Awaitable[bool]]]


@dataclass(frozen=True)
class ToolAvailability:
  """Availability policy of a tool: always, never, or decided per run context.

  Predicates must be pure reads of the context; they run concurrently
  with the predicates of the agent's other tools.
  """

  kind: Literal["always", "never", "when"] = "always"
  predicate: Optional[AvailabilityPredicate] = None

  @classmethod
  def always(cls) -> ToolAvailability:
    return cls(kind="always")

  @classmethod
  def never(cls) -> ToolAvailability:
    return cls(kind="never")

  @classmethod
  def when(cls, predicate: AvailabilityPredicate) -> ToolAvailability:
    return cls(kind="when", predicate=predicate)

  async def resolve(self, context: "RunContext") -> bool:
    if self.kind == "always":
      return True
    if self.kind == "never" or self.predicate is None:
      return False
    result = self.predicate(context)
    if inspect.isawaitable(result):
      result = await result
    return bool(result)


def _empty_schema() -> Dict[str, Any]:
  return {"type": "object", "properties": {}, "required": []}


def _first_paragraph(doc: Optional[str]) -> Optional[str]:
  if not doc:
    return None
  return doc.strip().split("\n\n", 1)[0].strip() or None


def stringify_tool_result(result: Any) -> str:
  """Normalize a tool's return value to text.

  Strings pass through, JSON-encodable values are pretty-printed as JSON,
  anything else falls back to ``str()``.
  """
  if isinstance(result, str):
    return result
  try:
    return json.dumps(result, indent=2, default=json_serializer)
  except (TypeError, ValueError):
    return str(result)


class Tool(BaseModel):
  """
  A named, schema-described callable the model may invoke.

  A ``Tool`` built directly takes an ``entrypoint(parameters, run_context)``
  receiving the raw parameter dict. ``Tool.from_callable`` (and the ``@tool``
  decorator) instead derive the JSON schema from the function signature,
  validate the model's arguments with pydantic and call the function with
  keyword arguments.

  Attributes:
      name: Tool name exposed to the model.
      description: Description exposed to the model.
      parameters: JSON schema of the arguments.
      entrypoint: Function executed on invocation, sync or async.
      availability: When the tool is offered to the model.
      strict: Mark the declaration as strict for providers supporting it.
  """

  model_config = ConfigDict(arbitrary_types_allowed=True)

  name: str
  description: Optional[str] = None
  parameters: Dict[str, Any] = Field(default_factory=_empty_schema)
  entrypoint: Optional[Callable[..., Any]] = None
  availability: ToolAvailability = Field(default_factory=ToolAvailability.always)
  strict: bool = False

  _arguments_model: Optional[Type[BaseModel]] = PrivateAttr(default=None)
  _wants_context: bool = PrivateAttr(default=False)

  @classmethod
  def from_callable(
    cls,
    fn: Callable[..., Any],
    name: Optional[str] = None,
    description: Optional[str] = None,
    availability: Optional[ToolAvailability] = None,
    strict: bool = False,
  ) -> Tool:
    """Create a Tool from a typed Python function."""
    signature = inspect.signature(fn)
    try:
      hints = get_type_hints(fn)
    except Exception:
      hints = {}

    field_definitions: Dict[str, Any] = {}
    wants_context = False
    for param_name, param in signature.parameters.items():
      if param_name == RUN_CONTEXT_PARAM:
        wants_context = True
        continue
      if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
        continue
      annotation = hints.get(param_name, Any)
      default = ... if param.default is inspect.Parameter.empty or strict else param.default
      field_definitions[param_name] = (annotation, default)

    tool_name = name or fn.__name__
    arguments_model = create_model(f"{tool_name}_arguments", **field_definitions)
    schema = arguments_model.model_json_schema()
    schema.pop("title", None)
    for prop in schema.get("properties", {}).values():
      prop.pop("title", None)
    parameters = {
      "type": "object",
      "properties": schema.get("properties", {}),
      "required": schema.get("required", []),
    }
    if "$defs" in schema:
      parameters["$defs"] = schema["$defs"]

    tool = cls(
      name=tool_name,
      description=description or _first_paragraph(inspect.getdoc(fn)),
      parameters=parameters,
      entrypoint=fn,
      availability=availability or ToolAvailability.always(),
      strict=strict,
    )
    tool._arguments_model = arguments_model
    tool._wants_context = wants_context
    return tool

  async def is_enabled(self, context: "RunContext") -> bool:
    return await self.availability.resolve(context)

  async def ainvoke(self, parameters: Dict[str, Any], run_context: "RunContext") -> Any:
    """Run the entrypoint with *parameters*. Exceptions propagate unchanged."""
    if self.entrypoint is None:
      raise ValueError(f"Tool {self.name} has no entrypoint")

    if self._arguments_model is None:
      result = self.entrypoint(parameters, run_context)
    else:
      validated = self._arguments_model.model_validate(parameters)
      kwargs = {key: getattr(validated, key) for key in type(validated).model_fields}
      if self._wants_context:
        kwargs[RUN_CONTEXT_PARAM] = run_context
      result = self.entrypoint(**kwargs)

    if inspect.isawaitable(result):
      result = await result
    return result

  def to_dict(self) -> Dict[str, Any]:
    """Provider-facing function declaration, without runtime fields."""
    declaration: Dict[str, Any] = {"name": self.name}
    if self.description is not None:
      declaration["description"] = self.description
    declaration["parameters"] = self.parameters
    if self.strict:
      declaration["strict"] = True
    return declaration
