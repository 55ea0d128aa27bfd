"""
Unit tests for ToolCallAccumulator.

Covers:
  - fragments keyed by id; id-less fragments follow their stream index
  - argument text split across fragments parses once complete
  - id-less name pieces are concatenated, even when they repeat
  - a name sent again with the id replaces the partial name
  - several calls keep first-seen order
  - fragments with no known id are dropped
  - malformed arguments finalize to whatever parsed so far
"""

import pytest

from switchboard.model.response import ToolCallDelta, ToolCallRequest
from switchboard.run.streaming import ToolCallAccumulator


@pytest.mark.unit
class TestToolCallAccumulator:
  def test_split_arguments(self):
    acc = ToolCallAccumulator()
    acc.add(ToolCallDelta(index=0, id="c1", name="lookup"))
    acc.add(ToolCallDelta(index=0, arguments='{"query": '))
    acc.add(ToolCallDelta(index=0, arguments='"paris"}'))
    assert acc.finalize() == [ToolCallRequest(id="c1", name="lookup", parameters={"query": "paris"})]

  def test_name_in_pieces(self):
    acc = ToolCallAccumulator()
    acc.add(ToolCallDelta(index=0, id="c1", name="look"))
    acc.add(ToolCallDelta(index=0, name="up"))
    assert acc.finalize()[0].name == "lookup"

  def test_repeated_name_pieces(self):
    acc = ToolCallAccumulator()
    acc.add(ToolCallDelta(index=0, id="c1", name="a"))
    acc.add(ToolCallDelta(index=0, name="a"))
    assert acc.finalize()[0].name == "aa"

  def test_name_repeated_whole(self):
    acc = ToolCallAccumulator()
    acc.add(ToolCallDelta(index=0, id="c1", name="lookup"))
    acc.add(ToolCallDelta(index=0, id="c1", name="lookup"))
    assert acc.finalize()[0].name == "lookup"

  def test_multiple_calls_keep_order(self):
    acc = ToolCallAccumulator()
    acc.add(ToolCallDelta(index=0, id="b", name="second_seen_first"))
    acc.add(ToolCallDelta(index=1, id="a", name="first_seen_second"))
    acc.add(ToolCallDelta(index=1, arguments="{}"))
    acc.add(ToolCallDelta(index=0, arguments='{"x": 1}'))
    calls = acc.finalize()
    assert [c.id for c in calls] == ["b", "a"]
    assert calls[0].parameters == {"x": 1}
    assert len(acc) == 2

  def test_orphan_fragment_dropped(self):
    acc = ToolCallAccumulator()
    acc.add(ToolCallDelta(index=3, arguments='{"x": 1}'))
    assert acc.finalize() == []

  def test_self_contained_fragments_merge(self):
    acc = ToolCallAccumulator()
    acc.add(ToolCallDelta(index=0, id="c1", name="t", arguments='{"a": 1}'))
    acc.add(ToolCallDelta(index=0, arguments='{"b": 2}'))
    assert acc.finalize()[0].parameters == {"a": 1, "b": 2}

  def test_malformed_arguments(self):
    acc = ToolCallAccumulator()
    acc.add(ToolCallDelta(index=0, id="c1", name="t", arguments='{"a": '))
    assert acc.finalize()[0].parameters == {}
