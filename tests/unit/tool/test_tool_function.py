"""
Unit tests for Tool and ToolAvailability.

Covers:
  - Tool defaults: empty object schema, always available, not strict
  - Tool.from_callable derives schema, required list and description
  - run_context parameter is hidden from the schema and injected on invoke
  - ainvoke validates and coerces arguments; sync and async entrypoints
  - raw entrypoints receive (parameters, run_context)
  - ToolAvailability always / never / when (sync and async predicates)
  - stringify_tool_result: str passthrough, JSON for structures, str() fallback
  - to_dict omits runtime fields
"""

import pytest
from pydantic import BaseModel, ValidationError

from switchboard.run.context import RunContext
from switchboard.tool.function import Tool, ToolAvailability, stringify_tool_result


def get_weather(city: str, unit: str = "c") -> str:
  """Current weather for a city.

  Longer explanation that is not part of the description.
  """
  return f"{city}:{unit}"


async def count_chars(text: str, run_context: RunContext) -> int:
  run_context.value["seen"] = text
  return len(text)


@pytest.mark.unit
class TestToolConstruction:
  def test_defaults(self):
    t = Tool(name="bare")
    assert t.parameters == {"type": "object", "properties": {}, "required": []}
    assert t.availability == ToolAvailability.always()
    assert t.strict is False

  def test_from_callable_schema(self):
    t = Tool.from_callable(get_weather)
    assert t.name == "get_weather"
    assert t.description == "Current weather for a city."
    assert t.parameters["properties"]["city"] == {"type": "string"}
    assert t.parameters["required"] == ["city"]
    assert "title" not in t.parameters

  def test_strict_requires_every_argument(self):
    t = Tool.from_callable(get_weather, strict=True)
    assert sorted(t.parameters["required"]) == ["city", "unit"]

  def test_run_context_hidden(self):
    t = Tool.from_callable(count_chars)
    assert list(t.parameters["properties"]) == ["text"]

  def test_to_dict(self):
    t = Tool.from_callable(get_weather, name="weather")
    d = t.to_dict()
    assert d["name"] == "weather"
    assert "entrypoint" not in d
    assert "availability" not in d
    assert "strict" not in d


@pytest.mark.unit
class TestToolInvoke:
  @pytest.mark.asyncio
  async def test_sync_entrypoint(self):
    t = Tool.from_callable(get_weather)
    assert await t.ainvoke({"city": "Paris"}, RunContext()) == "Paris:c"

  @pytest.mark.asyncio
  async def test_async_entrypoint_with_context(self):
    t = Tool.from_callable(count_chars)
    ctx = RunContext(value={})
    assert await t.ainvoke({"text": "abcd"}, ctx) == 4
    assert ctx.value["seen"] == "abcd"

  @pytest.mark.asyncio
  async def test_arguments_are_coerced(self):
    def double(n: int) -> int:
      return n * 2

    t = Tool.from_callable(double)
    assert await t.ainvoke({"n": "21"}, RunContext()) == 42

  @pytest.mark.asyncio
  async def test_invalid_arguments_raise(self):
    t = Tool.from_callable(get_weather)
    with pytest.raises(ValidationError):
      await t.ainvoke({}, RunContext())

  @pytest.mark.asyncio
  async def test_raw_entrypoint(self):
    seen = {}

    def raw(parameters, run_context):
      seen.update(parameters)
      return "ok"

    t = Tool(name="raw", entrypoint=raw)
    assert await t.ainvoke({"x": 1}, RunContext()) == "ok"
    assert seen == {"x": 1}

  @pytest.mark.asyncio
  async def test_missing_entrypoint(self):
    with pytest.raises(ValueError):
      await Tool(name="empty").ainvoke({}, RunContext())


@pytest.mark.unit
class TestToolAvailability:
  @pytest.mark.asyncio
  async def test_always_and_never(self):
    assert await ToolAvailability.always().resolve(RunContext()) is True
    assert await ToolAvailability.never().resolve(RunContext()) is False

  @pytest.mark.asyncio
  async def test_when_sync_predicate(self):
    availability = ToolAvailability.when(lambda ctx: ctx.value == "admin")
    assert await availability.resolve(RunContext(value="admin")) is True
    assert await availability.resolve(RunContext(value="guest")) is False

  @pytest.mark.asyncio
  async def test_when_async_predicate(self):
    async def is_admin(ctx):
      return ctx.value == "admin"

    assert await ToolAvailability.when(is_admin).resolve(RunContext(value="admin")) is True


class _Point(BaseModel):
  x: int
  y: int


@pytest.mark.unit
class TestStringifyToolResult:
  def test_string_passthrough(self):
    assert stringify_tool_result("plain") == "plain"

  def test_dict_as_json(self):
    assert stringify_tool_result({"a": 1}) == '{\n  "a": 1\n}'

  def test_pydantic_model_as_json(self):
    assert '"x": 1' in stringify_tool_result(_Point(x=1, y=2))

  def test_fallback_to_str(self):
    class Opaque:
      def __str__(self):
        return "opaque"

    assert stringify_tool_result(Opaque()) == "opaque"
