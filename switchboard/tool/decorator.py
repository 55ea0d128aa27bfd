"""The ``@tool`` decorator."""

from typing import Any, Callable, Optional, Union, overload

from switchboard.tool.function import Tool, ToolAvailability

_VALID_KWARGS = frozenset({"name", "description", "availability", "strict", "enabled_when"})


@overload
def tool(fn: Callable[..., Any]) -> Tool: ...


@overload
def tool(fn: None = None, **kwargs: Any) -> Callable[[Callable[..., Any]], Tool]: ...


def tool(fn: Optional[Callable[..., Any]] = None, **kwargs: Any) -> Union[Tool, Callable[[Callable[..., Any]], Tool]]:
  """Turn a typed function (sync or async) into a ``Tool``.

  Usable bare (``@tool``) or with options (``@tool(name="lookup")``).

  Keyword Args:
      name: Tool name, defaults to the function name.
      description: Defaults to the first paragraph of the docstring.
      availability: A ``ToolAvailability`` policy.
      enabled_when: Shortcut for ``availability=ToolAvailability.when(fn)``.
      strict: Require every argument, including ones with defaults.

  A parameter named ``run_context`` is not exposed to the model; it
  receives the run's ``RunContext`` on invocation.

  Example:
      @tool
      def get_weather(city: str) -> str:
          \"\"\"Current weather for a city.\"\"\"
          return f"Sunny in {city}"
  """
  invalid = set(kwargs) - _VALID_KWARGS
  if invalid:
    raise ValueError(f"Invalid tool configuration arguments: {sorted(invalid)}. Valid arguments are: {sorted(_VALID_KWARGS)}")
  if "availability" in kwargs and "enabled_when" in kwargs:
    raise ValueError("Pass either availability or enabled_when, not both")

  availability = kwargs.get("availability")
  if kwargs.get("enabled_when") is not None:
    availability = ToolAvailability.when(kwargs["enabled_when"])

  def decorator(func: Callable[..., Any]) -> Tool:
    return Tool.from_callable(
      func,
      name=kwargs.get("name"),
      description=kwargs.get("description"),
      availability=availability,
      strict=kwargs.get("strict", False),
    )

  if fn is not None and callable(fn):
    return decorator(fn)
  return decorator
