"""Runner: resolves backends and drives Runs in blocking, streamed and event forms."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, AsyncIterator, Awaitable, Callable, Optional, Sequence, TypeVar, Union

from switchboard.exceptions import ModelNotFoundError
from switchboard.model.message import Message
from switchboard.run.config import RunConfig
from switchboard.run.event_bus import EventBus
from switchboard.run.events import BaseRunEvent, RunOutputEvent
from switchboard.run.result import RunResult
from switchboard.run.run import Run, TextSink

if TYPE_CHECKING:
  from switchboard.agent.agent import Agent
  from switchboard.model.base import ModelBackend
  from switchboard.model.registry import ModelRegistry

T = TypeVar("T")

_STREAM_DONE = object()


def run_sync(factory: Callable[[], Awaitable[T]]) -> T:
  """Run a coroutine to completion from synchronous code.

  Inside a running event loop the coroutine runs on a fresh loop in a
  worker thread; otherwise on a fresh loop in this thread.
  """
  try:
    loop = asyncio.get_running_loop()
  except RuntimeError:
    loop = None

  if loop and loop.is_running():
    import concurrent.futures

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
      return executor.submit(lambda: asyncio.run(factory())).result()  # type: ignore[arg-type]

  loop = asyncio.new_event_loop()
  asyncio.set_event_loop(loop)
  try:
    return loop.run_until_complete(factory())
  finally:
    pending = asyncio.all_tasks(loop)
    for task in pending:
      task.cancel()
    if pending:
      loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
    # Async generators hold httpx streams open until shut down.
    loop.run_until_complete(loop.shutdown_asyncgens())
    loop.close()
    asyncio.set_event_loop(None)


class Runner:
  """
  Facade over ``Run``.

  The backend for an agent is the explicit *backend* when given, otherwise
  ``registry.get(agent.model_settings.model)``. Handoff targets are resolved
  the same way, so agents on different models can hand off to each other.

  Args:
      backend: Backend used for every agent.
      registry: Model registry consulted when no backend is given.
      config: Limits applied to each run.
      event_bus: Receives the events of every run started by this runner.

  Example:
      registry = ModelRegistry()
      registry.register_openai_models()
      runner = Runner(registry=registry)
      result = await runner.arun(agent, "Hi there")
  """

  def __init__(
    self,
    backend: Optional["ModelBackend"] = None,
    registry: Optional["ModelRegistry"] = None,
    config: Optional[RunConfig] = None,
    event_bus: Optional[EventBus] = None,
  ):
    self.backend = backend
    self.registry = registry
    self.config = config or RunConfig()
    self.event_bus = event_bus

  def resolve_backend(self, agent: "Agent") -> "ModelBackend":
    if self.backend is not None:
      return self.backend
    if self.registry is None:
      raise ModelNotFoundError(agent.model_settings.model)
    return self.registry.get(agent.model_settings.model)

  def create_run(
    self,
    agent: "Agent",
    input: str,
    *,
    context: Any = None,
    history: Sequence[Message] = (),
    event_bus: Optional[EventBus] = None,
  ) -> Run:
    return Run(
      agent,
      input,
      context=context,
      backend=self.resolve_backend(agent),
      config=self.config,
      history=history,
      event_bus=event_bus or self.event_bus,
      backend_resolver=self.resolve_backend,
    )

  async def arun(self, agent: "Agent", input: str, *, context: Any = None, history: Sequence[Message] = ()) -> RunResult:
    """Execute *agent* once with blocking backend calls."""
    return await self.create_run(agent, input, context=context, history=history).execute()

  def run(self, agent: "Agent", input: str, *, context: Any = None, history: Sequence[Message] = ()) -> RunResult:
    """Synchronous ``arun``."""
    return run_sync(lambda: self.arun(agent, input, context=context, history=history))

  async def arun_streamed(
    self,
    agent: "Agent",
    input: str,
    sink: TextSink,
    *,
    context: Any = None,
    history: Sequence[Message] = (),
  ) -> RunResult:
    """Execute *agent* with streaming backend calls, forwarding text to *sink*."""
    return await self.create_run(agent, input, context=context, history=history).execute_streamed(sink)

  async def stream_events(
    self,
    agent: "Agent",
    input: str,
    *,
    context: Any = None,
    history: Sequence[Message] = (),
  ) -> AsyncIterator[RunOutputEvent]:
    """Yield the run's events as they happen.

    The run executes in a background task that is the only producer on a
    queue; this generator is the only consumer. A run failure is re-raised
    after its ``RunErrorEvent`` has been yielded. Closing the generator
    early cancels the run.
    """
    queue: "asyncio.Queue[Union[BaseRunEvent, object]]" = asyncio.Queue()
    relay = self.event_bus.child() if self.event_bus is not None else EventBus()
    relay.on(BaseRunEvent, queue.put_nowait)

    run = self.create_run(agent, input, context=context, history=history, event_bus=relay)

    async def _produce() -> RunResult:
      try:
        return await run.execute_streamed()
      finally:
        queue.put_nowait(_STREAM_DONE)

    task = asyncio.create_task(_produce())
    try:
      while True:
        item = await queue.get()
        if item is _STREAM_DONE:
          break
        yield item  # type: ignore[misc]
      await task
    finally:
      if not task.done():
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
