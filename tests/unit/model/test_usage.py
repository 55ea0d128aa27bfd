"""
Unit tests for Usage accounting.

Covers:
  - Usage.add counts one request per response and sums tokens
  - Usage.add with no usage still counts the request
  - merge is commutative and associative
  - absorb merges in place; copy is independent
  - sum() over Usage values
"""

import pytest

from switchboard.model.response import ResponseUsage
from switchboard.model.usage import Usage


def _usage(requests: int, inp: int, out: int) -> Usage:
  return Usage(requests=requests, input_tokens=inp, output_tokens=out, total_tokens=inp + out)


@pytest.mark.unit
class TestUsageAdd:
  def test_add_counts_request_and_tokens(self):
    u = Usage()
    u.add(ResponseUsage(input_tokens=10, output_tokens=5))
    assert u.requests == 1
    assert u.input_tokens == 10
    assert u.output_tokens == 5
    assert u.total_tokens == 15

  def test_add_without_usage_counts_request_only(self):
    u = Usage()
    u.add(None)
    assert u.requests == 1
    assert u.total_tokens == 0

  def test_add_accumulates(self):
    u = Usage()
    u.add(ResponseUsage(input_tokens=1, output_tokens=2))
    u.add(ResponseUsage(input_tokens=3, output_tokens=4))
    assert u.to_dict() == {"requests": 2, "input_tokens": 4, "output_tokens": 6, "total_tokens": 10}


@pytest.mark.unit
class TestUsageMerge:
  @pytest.mark.parametrize(
    "a,b",
    [
      (_usage(1, 10, 5), _usage(2, 3, 4)),
      (Usage(), _usage(7, 100, 1)),
      (_usage(0, 0, 0), Usage()),
    ],
  )
  def test_merge_is_commutative(self, a, b):
    assert a.merge(b) == b.merge(a)

  def test_merge_is_associative(self):
    a, b, c = _usage(1, 10, 5), _usage(2, 3, 4), _usage(5, 0, 9)
    assert a.merge(b).merge(c) == a.merge(b.merge(c))

  def test_merge_does_not_mutate_operands(self):
    a, b = _usage(1, 10, 5), _usage(2, 3, 4)
    a.merge(b)
    assert a == _usage(1, 10, 5)
    assert b == _usage(2, 3, 4)

  def test_absorb_in_place(self):
    a = _usage(1, 10, 5)
    a.absorb(_usage(2, 3, 4))
    assert a == _usage(3, 13, 9)

  def test_copy_is_independent(self):
    a = _usage(1, 10, 5)
    b = a.copy()
    b.add(None)
    assert a.requests == 1
    assert b.requests == 2

  def test_add_operator_and_sum(self):
    parts = [_usage(1, 1, 1), _usage(1, 2, 2), _usage(1, 3, 3)]
    assert sum(parts) == _usage(3, 6, 6)
    assert parts[0] + parts[1] == _usage(2, 3, 3)
