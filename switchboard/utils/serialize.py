"""JSON helpers for values that ``json.dumps`` cannot encode on its own."""

import dataclasses
from datetime import date, datetime, time
from enum import Enum
from typing import Any

from pydantic import BaseModel


def json_serializer(obj: Any) -> Any:
  """``default=`` hook for ``json.dumps``.

  Raises TypeError for anything it does not know, like ``json`` itself.
  """
  if isinstance(obj, BaseModel):
    return obj.model_dump(mode="json")
  if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
    return dataclasses.asdict(obj)
  if isinstance(obj, Enum):
    return obj.value
  if isinstance(obj, (datetime, date, time)):
    return obj.isoformat()
  if isinstance(obj, (set, frozenset, tuple)):
    return list(obj)
  if isinstance(obj, bytes):
    return obj.decode("utf-8", errors="replace")
  raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
