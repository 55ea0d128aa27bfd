"""Accumulation of streamed tool-call fragments into ToolCallRequests."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from switchboard.model.response import ToolCallDelta, ToolCallRequest
from switchboard.utils.log import log_debug, log_warning


def _try_parse_object(text: str) -> Optional[Dict[str, Any]]:
  if not text:
    return None
  try:
    parsed = json.loads(text)
  except json.JSONDecodeError:
    return None
  return parsed if isinstance(parsed, dict) else None


@dataclass
class _PartialToolCall:
  id: str
  name: str = ""
  arguments: str = ""
  parameters: Dict[str, Any] = field(default_factory=dict)


class ToolCallAccumulator:
  """Merges ``ToolCallDelta`` fragments of one streamed turn.

  Records are keyed by call id. The first delta carrying an id establishes
  the record; providers that only send the id on the first fragment are
  handled by remembering which id owns each stream index. Argument text is
  buffered and parsed opportunistically after every fragment: a parse of
  the whole buffer replaces the parameters, a fragment that parses on its
  own is merged in, and malformed partial text is ignored until the
  buffer completes.
  """

  def __init__(self) -> None:
    self._calls: Dict[str, _PartialToolCall] = {}
    self._order: List[str] = []
    self._index_to_id: Dict[int, str] = {}

  def add(self, delta: ToolCallDelta) -> None:
    call_id = delta.id or self._index_to_id.get(delta.index)
    if call_id is None:
      log_debug(f"Dropping tool call fragment without id at index {delta.index}")
      return

    call = self._calls.get(call_id)
    if call is None:
      call = _PartialToolCall(id=call_id)
      self._calls[call_id] = call
      self._order.append(call_id)
    self._index_to_id[delta.index] = call_id

    if delta.name:
      # A delta carrying the id states the name; id-less continuations extend it.
      call.name = delta.name if delta.id else call.name + delta.name
    if delta.arguments:
      call.arguments += delta.arguments
      whole = _try_parse_object(call.arguments)
      if whole is not None:
        call.parameters = whole
      else:
        fragment = _try_parse_object(delta.arguments)
        if fragment is not None:
          call.parameters.update(fragment)

  def __len__(self) -> int:
    return len(self._order)

  def finalize(self) -> List[ToolCallRequest]:
    """ToolCallRequests in the order their ids first appeared."""
    requests: List[ToolCallRequest] = []
    for call_id in self._order:
      call = self._calls[call_id]
      if call.arguments and _try_parse_object(call.arguments) is None:
        log_warning(f"Tool call {call.name} ({call_id}) has malformed arguments: {call.arguments!r}")
      requests.append(ToolCallRequest(id=call.id, name=call.name, parameters=dict(call.parameters)))
    return requests
