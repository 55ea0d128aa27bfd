"""Workflows turn one transcribed utterance into streamed reply text."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, AsyncIterator, List, Optional, Protocol, runtime_checkable

from switchboard.model.message import Message
from switchboard.run.runner import Runner

if TYPE_CHECKING:
  from switchboard.agent.agent import Agent
  from switchboard.run.result import RunResult

_RUN_DONE = object()


@runtime_checkable
class VoiceWorkflow(Protocol):
  def run(self, transcription: str) -> AsyncIterator[str]:
    """Yield reply text deltas for *transcription*."""
    ...


class SingleAgentVoiceWorkflow:
  """
  Runs one agent per utterance and remembers the conversation.

  Each call to ``run`` executes a streamed run with the previous turns
  replayed as history, yields the run's text deltas, and appends the user
  utterance and the final output to the history once the run completes.

  Args:
      agent: The agent answering every turn.
      runner: Runner that resolves the agent's backend. Defaults to a
          ``Runner`` with no backend, so one of ``runner`` or ``backend`` is
          normally given.
      backend: Shortcut for ``Runner(backend=backend)``.
      context: Value or ``RunContext`` passed to every run.
  """

  def __init__(
    self,
    agent: "Agent",
    runner: Optional[Runner] = None,
    backend: Any = None,
    context: Any = None,
  ):
    self.agent = agent
    self.runner = runner or Runner(backend=backend)
    self.context = context
    self.last_result: Optional["RunResult"] = None
    self._history: List[Message] = []

  @property
  def history(self) -> List[Message]:
    return list(self._history)

  def reset(self) -> None:
    self._history.clear()
    self.last_result = None

  async def run(self, transcription: str) -> AsyncIterator[str]:
    queue: "asyncio.Queue[Any]" = asyncio.Queue()

    def _sink(text: str) -> None:
      queue.put_nowait(text)

    task = asyncio.create_task(
      self.runner.arun_streamed(
        self.agent,
        transcription,
        _sink,
        context=self.context,
        history=tuple(self._history),
      )
    )
    task.add_done_callback(lambda _: queue.put_nowait(_RUN_DONE))
    try:
      while True:
        item = await queue.get()
        if item is _RUN_DONE:
          break
        yield item
      result = await task
    finally:
      if not task.done():
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    self.last_result = result
    self._history.append(Message.user(transcription))
    self._history.append(Message.assistant(result.final_output))
