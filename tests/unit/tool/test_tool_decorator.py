"""
Unit tests for the @tool decorator.

Covers:
  - bare @tool and @tool(...) both return a Tool
  - name and description overrides
  - enabled_when builds a "when" availability
  - invalid keyword arguments are rejected
  - availability and enabled_when are mutually exclusive
"""

import pytest

from switchboard.tool.decorator import tool
from switchboard.tool.function import Tool, ToolAvailability


@pytest.mark.unit
class TestToolDecorator:
  def test_bare(self):
    @tool
    def greet(name: str) -> str:
      """Say hello."""
      return f"Hello {name}"

    assert isinstance(greet, Tool)
    assert greet.name == "greet"
    assert greet.description == "Say hello."

  def test_with_options(self):
    @tool(name="hello", description="Greets people")
    def greet(name: str) -> str:
      return f"Hello {name}"

    assert greet.name == "hello"
    assert greet.description == "Greets people"

  def test_enabled_when(self):
    @tool(enabled_when=lambda ctx: True)
    def secret() -> str:
      return "s"

    assert secret.availability.kind == "when"

  def test_availability(self):
    @tool(availability=ToolAvailability.never())
    def hidden() -> str:
      return "h"

    assert hidden.availability.kind == "never"

  def test_invalid_kwargs(self):
    with pytest.raises(ValueError, match="Invalid tool configuration"):
      tool(colour="red")

  def test_availability_and_enabled_when_conflict(self):
    with pytest.raises(ValueError):
      tool(availability=ToolAvailability.always(), enabled_when=lambda ctx: True)
