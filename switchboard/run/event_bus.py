"""Subscriptions to run events.

Handlers subscribe either to an event class, which also matches its
subclasses (``BaseRunEvent`` receives everything), or to a ``RunEvent``
kind. A bus may have a parent; every event is passed on to it after the
bus's own handlers ran, so a per-run bus can feed a runner-wide one.
"""

import inspect
from typing import Callable, Dict, List, Optional, Union

from switchboard.run.events import BaseRunEvent, RunEvent
from switchboard.utils.log import log_warning

EventKey = Union[type, RunEvent, str]
EventHandler = Callable[[BaseRunEvent], object]


def _normalize(key: EventKey) -> Union[type, str]:
  if isinstance(key, type):
    if not issubclass(key, BaseRunEvent):
      raise TypeError(f"{key.__name__} is not a run event")
    return key
  if isinstance(key, RunEvent):
    return key.value
  return RunEvent(key).value


class EventBus:
  """
  Routes run events to subscribed handlers.

  A handler runs at most once per event, even when it is subscribed under
  several matching keys. Class subscriptions fire most specific first,
  then kind subscriptions. Handler errors are logged and never reach the
  run.

  Example::

      bus = EventBus()

      @bus.on(ToolCallStartedEvent)
      def log_tool(event):
          print(f"Tool started: {event.tool_name}")

      bus.on(RunEvent.run_completed, lambda e: print(e.usage))
      runner = Runner(backend=backend, event_bus=bus)
  """

  def __init__(self, parent: Optional["EventBus"] = None) -> None:
    self.parent = parent
    self._handlers: Dict[Union[type, str], List[EventHandler]] = {}

  def child(self) -> "EventBus":
    """A new bus whose events are passed on to this one."""
    return EventBus(parent=self)

  def on(self, key: EventKey, handler: Optional[EventHandler] = None) -> Callable:
    """Subscribe *handler* to *key*; usable as a decorator when *handler* is omitted."""
    normalized = _normalize(key)
    if handler is not None:
      self._handlers.setdefault(normalized, []).append(handler)
      return handler

    def decorator(fn: EventHandler) -> EventHandler:
      self._handlers.setdefault(normalized, []).append(fn)
      return fn

    return decorator

  def off(self, key: EventKey, handler: EventHandler) -> None:
    handlers = self._handlers.get(_normalize(key), [])
    if handler in handlers:
      handlers.remove(handler)

  def handlers_for(self, event: BaseRunEvent) -> List[EventHandler]:
    """Handlers of this bus matching *event*, in dispatch order."""
    keys: List[Union[type, str]] = [cls for cls in type(event).__mro__ if isinstance(cls, type) and issubclass(cls, BaseRunEvent)]
    if event.event:
      keys.append(event.event)
    matched: List[EventHandler] = []
    for key in keys:
      for handler in self._handlers.get(key, ()):
        if handler not in matched:
          matched.append(handler)
    return matched

  async def emit(self, event: BaseRunEvent) -> None:
    for handler in self.handlers_for(event):
      try:
        result = handler(event)
        if inspect.isawaitable(result):
          await result
      except Exception as exc:
        log_warning(f"Handler {getattr(handler, '__name__', handler)!r} failed on {event.event} (run {event.run_id}): {exc}")
    if self.parent is not None:
      await self.parent.emit(event)
