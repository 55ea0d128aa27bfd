"""
Unit tests for built-in guardrails and the guardrail decorators.

Covers:
  - max_length allows text up to N characters and blocks N+1
  - regex_guardrail in block and require modes
  - block_topics is case-insensitive
  - input_guardrail / output_guardrail wrap sync and async functions
  - returning an unchanged str allows, a changed str modifies
  - returning anything else is an error
"""

import re

import pytest

from switchboard.agent.guardrail import (
  GuardrailResult,
  InputGuardrail,
  OutputGuardrail,
  block_topics,
  input_guardrail,
  max_length,
  output_guardrail,
  regex_guardrail,
)
from switchboard.run.context import RunContext


@pytest.mark.unit
class TestMaxLength:
  @pytest.mark.asyncio
  async def test_at_limit_allowed(self):
    assert (await max_length(5).check("12345", RunContext())).action == "allow"

  @pytest.mark.asyncio
  async def test_over_limit_blocked(self):
    result = await max_length(5).check("123456", RunContext())
    assert result.action == "block"
    assert result.message == "Text is too long. Maximum length is 5 characters."

  def test_negative_limit_rejected(self):
    with pytest.raises(ValueError):
      max_length(-1)

  def test_satisfies_protocol(self):
    assert isinstance(max_length(1), InputGuardrail)


@pytest.mark.unit
class TestRegexGuardrail:
  @pytest.mark.asyncio
  async def test_block_mode(self):
    g = regex_guardrail(r"\d{3}-\d{2}-\d{4}")
    assert (await g.check("ssn 123-45-6789", RunContext())).action == "block"
    assert (await g.check("nothing here", RunContext())).action == "allow"

  @pytest.mark.asyncio
  async def test_require_mode(self):
    g = regex_guardrail(r"^answer:", mode="require", flags=re.IGNORECASE, name="prefix")
    assert g.name == "prefix"
    assert (await g.check("ANSWER: 42", RunContext())).action == "allow"
    assert (await g.check("42", RunContext())).action == "block"

  def test_unknown_mode(self):
    with pytest.raises(ValueError):
      regex_guardrail("x", mode="maybe")  # type: ignore[arg-type]


@pytest.mark.unit
class TestBlockTopics:
  @pytest.mark.asyncio
  async def test_case_insensitive(self):
    g = block_topics(["Politics"])
    result = await g.check("Let's talk POLITICS", RunContext())
    assert result.action == "block"
    assert "politics" in result.message


@pytest.mark.unit
class TestGuardrailDecorators:
  @pytest.mark.asyncio
  async def test_bare_input_guardrail(self):
    @input_guardrail
    def no_secrets(text, context):
      return GuardrailResult.block("secret") if "secret" in text else GuardrailResult.allow()

    assert isinstance(no_secrets, InputGuardrail)
    assert no_secrets.name == "no_secrets"
    assert (await no_secrets.check("a secret", RunContext())).action == "block"

  @pytest.mark.asyncio
  async def test_named_async_output_guardrail(self):
    @output_guardrail(name="shout")
    async def shout(text, context):
      return text.upper()

    assert isinstance(shout, OutputGuardrail)
    assert shout.name == "shout"
    result = await shout.check("hi", RunContext())
    assert result.action == "modify"
    assert result.modified_text == "HI"

  @pytest.mark.asyncio
  async def test_unchanged_string_allows(self):
    @output_guardrail
    def identity(text, context):
      return text

    assert (await identity.check("same", RunContext())).action == "allow"

  @pytest.mark.asyncio
  async def test_bad_return_type(self):
    @input_guardrail
    def broken(text, context):
      return 42

    with pytest.raises(TypeError):
      await broken.check("x", RunContext())
