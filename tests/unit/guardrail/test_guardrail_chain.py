"""
Unit tests for GuardrailResult and GuardrailChain.

Covers:
  - GuardrailResult factory helpers
  - chain runs guardrails in order, each seeing the previous transform
  - first block aborts the chain; later guardrails never run
  - a raising guardrail counts as a block
  - warn verdicts pass the text through unchanged
  - GuardrailRejected carries reason, stage and guardrail name
  - timing metadata is recorded on each result
"""

import pytest

from switchboard.agent.guardrail.base import GuardrailChain, GuardrailResult
from switchboard.exceptions import GuardrailRejected
from switchboard.run.context import RunContext


class _Recorder:
  def __init__(self, name, result_factory):
    self.name = name
    self.seen = []
    self.results = []
    self._factory = result_factory

  async def check(self, text, context):
    self.seen.append(text)
    result = self._factory(text)
    self.results.append(result)
    return result


class _Exploding:
  name = "exploding"

  async def check(self, text, context):
    raise RuntimeError("kaboom")


@pytest.mark.unit
class TestGuardrailResult:
  def test_allow(self):
    assert GuardrailResult.allow().action == "allow"

  def test_block(self):
    r = GuardrailResult.block("no")
    assert r.action == "block"
    assert r.message == "no"

  def test_modify(self):
    r = GuardrailResult.modify("clean", reason="PII")
    assert r.modified_text == "clean"
    assert r.message == "PII"

  def test_warn(self):
    assert GuardrailResult.warn("careful").action == "warn"


@pytest.mark.unit
class TestGuardrailChain:
  @pytest.mark.asyncio
  async def test_empty_chain_returns_text(self):
    assert await GuardrailChain(()).apply("hello", RunContext()) == "hello"

  @pytest.mark.asyncio
  async def test_transforms_compose_in_order(self):
    upper = _Recorder("upper", lambda t: GuardrailResult.modify(t.upper()))
    bang = _Recorder("bang", lambda t: GuardrailResult.modify(t + "!"))
    chain = GuardrailChain((upper, bang))
    assert await chain.apply("hi", RunContext()) == "HI!"
    assert bang.seen == ["HI"]

  @pytest.mark.asyncio
  async def test_first_block_stops_chain(self):
    blocker = _Recorder("blocker", lambda t: GuardrailResult.block("nope"))
    after = _Recorder("after", lambda t: GuardrailResult.allow())
    with pytest.raises(GuardrailRejected) as exc_info:
      await GuardrailChain((blocker, after), stage="output").apply("x", RunContext())
    assert after.seen == []
    assert exc_info.value.reason == "nope"
    assert exc_info.value.stage == "output"
    assert exc_info.value.guardrail_name == "blocker"

  @pytest.mark.asyncio
  async def test_exception_counts_as_block(self):
    with pytest.raises(GuardrailRejected) as exc_info:
      await GuardrailChain((_Exploding(),)).apply("x", RunContext())
    assert "kaboom" in exc_info.value.reason
    assert exc_info.value.guardrail_name == "exploding"

  @pytest.mark.asyncio
  async def test_warn_passes_through(self):
    warner = _Recorder("warner", lambda t: GuardrailResult.warn("hmm"))
    assert await GuardrailChain((warner,)).apply("text", RunContext()) == "text"

  @pytest.mark.asyncio
  async def test_metadata_records_timing(self):
    rec = _Recorder("timed", lambda t: GuardrailResult.allow())
    await GuardrailChain((rec,)).apply("x", RunContext())
    assert rec.results[0].metadata["guardrail_name"] == "timed"
    assert rec.results[0].metadata["duration_ms"] >= 0

  def test_len(self):
    assert len(GuardrailChain((_Exploding(), _Exploding()))) == 2
