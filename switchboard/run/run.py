"""The run engine: one turn-bounded execution of an agent."""

from __future__ import annotations

import asyncio
import inspect
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, List, Optional, Sequence, Union
from uuid import uuid4

from switchboard.agent.guardrail.base import GuardrailChain
from switchboard.agent.tool_use import resolve_tool_use
from switchboard.exceptions import (
  BackendFailure,
  InvalidStateError,
  MaxHandoffsExceeded,
  MaxTurnsExceeded,
  RunError,
  ToolExecutionFailed,
  ToolNotFound,
  UnknownRunError,
)
from switchboard.model.message import Message
from switchboard.model.response import ContentDelta, ModelResponse, StreamEnd, ToolCallDelta, ToolCallRequest, ToolCallResult
from switchboard.model.settings import ModelSettings
from switchboard.run.config import RunConfig
from switchboard.run.context import RunContext
from switchboard.run.event_bus import EventBus
from switchboard.run.events import (
  BaseRunEvent,
  HandoffEvent,
  RunCompletedEvent,
  RunContentEvent,
  RunErrorEvent,
  RunStartedEvent,
  ToolCallCompletedEvent,
  ToolCallStartedEvent,
)
from switchboard.run.result import RunResult
from switchboard.run.streaming import ToolCallAccumulator
from switchboard.tool.function import Tool, stringify_tool_result
from switchboard.utils.log import log_debug, log_info, log_warning

if TYPE_CHECKING:
  from switchboard.agent.agent import Agent
  from switchboard.agent.handoff import Handoff
  from switchboard.model.base import ModelBackend

TextSink = Callable[[str], Union[None, Awaitable[None]]]
BackendResolver = Callable[["Agent"], "ModelBackend"]

# tool_choice values that never force a tool call
_UNFORCED_TOOL_CHOICES = (None, "auto", "none")


class RunState(str, Enum):
  """Lifecycle of a Run. Transitions are monotonic and a Run is single-use."""

  NOT_STARTED = "not_started"
  RUNNING = "running"
  COMPLETED = "completed"
  FAILED = "failed"


async def _deliver(sink: TextSink, text: str) -> None:
  result = sink(text)
  if inspect.isawaitable(result):
    await result


class Run:
  """
  One execution of an agent against an input.

  A Run owns its message history and turn counter and references (never
  owns) its agent and RunContext. While executing it holds exclusive write
  access to the context's usage accumulator.

  Args:
      agent: Agent to execute.
      input: User input text.
      context: A RunContext, or a plain value wrapped in a new RunContext.
      backend: Model backend used for every turn.
      config: Turn and handoff limits.
      history: Prior messages replayed after the system message.
      event_bus: Receives run events. Handler errors never affect the run.
      backend_resolver: Picks the backend for handoff targets. Defaults to
        reusing *backend*.
      run_id: Identifier for logs and events. Generated when omitted.

  Example:
      run = Run(agent, "Hello", backend=OpenAIChat(id="gpt-4o-mini"))
      result = await run.execute()
      print(result.final_output)
  """

  def __init__(
    self,
    agent: "Agent",
    input: str,
    context: Any = None,
    backend: Optional["ModelBackend"] = None,
    config: Optional[RunConfig] = None,
    history: Sequence[Message] = (),
    event_bus: Optional[EventBus] = None,
    backend_resolver: Optional[BackendResolver] = None,
    run_id: Optional[str] = None,
    _handoff_depth: int = 0,
  ):
    if backend is None and backend_resolver is None:
      raise ValueError("Run needs a backend or a backend_resolver")
    self.agent = agent
    self.input = input
    self.context: RunContext = context if isinstance(context, RunContext) else RunContext(value=context)
    self.config = config or RunConfig()
    self.history: List[Message] = list(history)
    self.event_bus = event_bus
    self.run_id = run_id or str(uuid4())
    self._backend_resolver: BackendResolver = backend_resolver or (lambda _agent: backend)  # type: ignore[assignment,return-value]
    self.backend: "ModelBackend" = backend if backend is not None else self._backend_resolver(agent)
    self._handoff_depth = _handoff_depth

    self._messages: List[Message] = []
    self._state = RunState.NOT_STARTED
    self._turn = 0

  # ------------------------------------------------------------------
  # Public surface
  # ------------------------------------------------------------------

  @property
  def state(self) -> RunState:
    return self._state

  @property
  def messages(self) -> List[Message]:
    return list(self._messages)

  @property
  def turn(self) -> int:
    """Number of backend calls made so far."""
    return self._turn

  async def execute(self) -> RunResult:
    """Run to completion with blocking backend calls.

    Raises:
        InvalidStateError: If the run was already executed, or its context is in use.
        RunError: Any other fatal run error (see ``switchboard.exceptions``).
    """
    return await self._execute(sink=None, streamed=False)

  async def execute_streamed(self, sink: Optional[TextSink] = None) -> RunResult:
    """Run to completion with streaming backend calls.

    Content deltas are forwarded to *sink* (sync or async) as they arrive.
    A final output chosen from tool results was never streamed, so it is
    pushed to *sink* before returning.
    """
    return await self._execute(sink=sink, streamed=True)

  # ------------------------------------------------------------------
  # Lifecycle
  # ------------------------------------------------------------------

  async def _execute(self, sink: Optional[TextSink], streamed: bool) -> RunResult:
    if self._state is not RunState.NOT_STARTED:
      raise InvalidStateError(f"Run {self.run_id} has already been started")
    self._state = RunState.RUNNING
    log_debug(f"Run {self.run_id} started: agent={self.agent.name} streamed={streamed}")

    try:
      with self.context.owned_by(self.run_id):
        await self._emit(RunStartedEvent(input=self.input))
        result = await self._run(sink, streamed)
    except RunError as e:
      await self._fail(e)
      raise
    except asyncio.CancelledError:
      self._state = RunState.FAILED
      raise
    except Exception as e:
      wrapped = UnknownRunError(e)
      await self._fail(wrapped)
      raise wrapped from e

    self._state = RunState.COMPLETED
    log_debug(f"Run {self.run_id} completed in {self._turn} turn(s): usage={self.context.usage.to_dict()}")
    await self._emit(RunCompletedEvent(content=result.final_output, usage=result.usage.to_dict()))
    return result

  async def _fail(self, error: RunError) -> None:
    self._state = RunState.FAILED
    log_warning(f"Run {self.run_id} failed ({type(error).__name__}): {error}")
    await self._emit(RunErrorEvent(error_type=type(error).__name__, content=str(error)))

  async def _emit(self, event: BaseRunEvent) -> None:
    if self.event_bus is None:
      return
    event.run_id = self.run_id
    if event.agent_name is None:
      event.agent_name = self.agent.name
    await self.event_bus.emit(event)

  def _result(self, final_output: str) -> RunResult:
    return RunResult(
      final_output=final_output,
      messages=list(self._messages),
      usage=self.context.usage.copy(),
      last_agent=self.agent,
      run_id=self.run_id,
    )

  # ------------------------------------------------------------------
  # Turn loop
  # ------------------------------------------------------------------

  async def _run(self, sink: Optional[TextSink], streamed: bool) -> RunResult:
    agent = self.agent
    instructions = await agent.resolve_instructions(self.context)
    if instructions:
      self._messages.append(Message.system(instructions))
    self._messages.extend(self.history)

    validated_input = await GuardrailChain(agent.input_guardrails, stage="input").apply(self.input, self.context)

    for handoff in agent.handoffs:
      if handoff.should_handoff(validated_input, self.context.value):
        return await self._delegate(handoff, validated_input, sink, streamed)

    self._messages.append(Message.user(validated_input))
    output_chain = GuardrailChain(agent.output_guardrails, stage="output")
    settings = agent.model_settings

    while self._turn < self.config.max_turns:
      self._turn += 1
      tools = await agent.enabled_tools(self.context, self.config.max_tool_check_concurrency)
      log_debug(f"Run {self.run_id} turn {self._turn}/{self.config.max_turns}: tools={[t.name for t in tools]}")

      if streamed:
        response = await self._stream_turn(settings, tools, sink)
      else:
        response = await self._invoke_turn(settings, tools)
      self.context.record_usage(response.usage)
      self._messages.append(Message.assistant(response.content, response.tool_calls))

      if not response.has_tool_calls:
        final_output = await output_chain.apply(response.content or "", self.context)
        return self._result(final_output)

      results = await self._invoke_tools(response.tool_calls, tools)
      self._messages.extend(Message.tool(r.id, r.output) for r in results)

      final_from_tools = await resolve_tool_use(agent.tool_use_behavior, results, self.context)
      if final_from_tools is not None:
        final_output = await output_chain.apply(final_from_tools, self.context)
        self._messages.append(Message.assistant(final_output))
        if sink is not None:
          await _deliver(sink, final_output)
        return self._result(final_output)

      if agent.reset_tool_choice and settings.tool_choice not in _UNFORCED_TOOL_CHOICES:
        settings = settings.with_updates(tool_choice=None)

    raise MaxTurnsExceeded(self.config.max_turns)

  async def _invoke_turn(self, settings: ModelSettings, tools: List[Tool]) -> ModelResponse:
    try:
      return await self.backend.ainvoke(self.messages, settings, tools)
    except RunError:
      raise
    except Exception as e:
      raise BackendFailure(e) from e

  async def _stream_turn(self, settings: ModelSettings, tools: List[Tool], sink: Optional[TextSink]) -> ModelResponse:
    content_parts: List[str] = []
    accumulator = ToolCallAccumulator()
    usage = None

    try:
      stream = self.backend.ainvoke_stream(self.messages, settings, tools)
    except RunError:
      raise
    except Exception as e:
      raise BackendFailure(e) from e

    try:
      while True:
        try:
          event = await stream.__anext__()
        except StopAsyncIteration:
          break
        except RunError:
          raise
        except Exception as e:
          raise BackendFailure(e) from e

        if isinstance(event, ContentDelta):
          if not event.text:
            continue
          content_parts.append(event.text)
          if sink is not None:
            await _deliver(sink, event.text)
          await self._emit(RunContentEvent(content=event.text, turn=self._turn))
        elif isinstance(event, ToolCallDelta):
          accumulator.add(event)
        elif isinstance(event, StreamEnd):
          usage = event.usage
          break
    finally:
      aclose = getattr(stream, "aclose", None)
      if aclose is not None:
        await aclose()

    content = "".join(content_parts)
    return ModelResponse(content=content or None, tool_calls=accumulator.finalize(), usage=usage)

  async def _invoke_tools(self, calls: Sequence[ToolCallRequest], tools: List[Tool]) -> List[ToolCallResult]:
    """Invoke *calls* one at a time, in the order the backend returned them."""
    tool_map = {t.name: t for t in tools}
    results: List[ToolCallResult] = []
    for call in calls:
      tool = tool_map.get(call.name)
      if tool is None:
        raise ToolNotFound(call.name)

      log_debug(f"Run {self.run_id} invoking tool {call.name} ({call.id}) with {call.parameters}")
      await self._emit(ToolCallStartedEvent(tool_call_id=call.id, tool_name=call.name, tool_args=dict(call.parameters)))
      try:
        raw = await tool.ainvoke(call.parameters, self.context)
      except Exception as e:
        raise ToolExecutionFailed(call.name, e) from e
      output = stringify_tool_result(raw)
      await self._emit(ToolCallCompletedEvent(tool_call_id=call.id, tool_name=call.name, result=output))
      results.append(ToolCallResult(id=call.id, name=call.name, output=output))
    return results

  # ------------------------------------------------------------------
  # Handoff
  # ------------------------------------------------------------------

  async def _delegate(self, handoff: "Handoff", validated_input: str, sink: Optional[TextSink], streamed: bool) -> RunResult:
    if self._handoff_depth >= self.config.max_handoffs:
      raise MaxHandoffsExceeded(self.config.max_handoffs)

    target = handoff.agent
    log_info(f"Run {self.run_id}: handing off from {self.agent.name} to {target.name}")
    await self._emit(HandoffEvent(from_agent=self.agent.name, to_agent=target.name))

    sub_context = self.context.fork()
    sub_run = Run(
      target,
      validated_input,
      context=sub_context,
      backend=self._backend_resolver(target),
      config=self.config,
      history=self.history,
      event_bus=self.event_bus,
      backend_resolver=self._backend_resolver,
      _handoff_depth=self._handoff_depth + 1,
    )
    try:
      if streamed:
        sub_result = await sub_run.execute_streamed(sink)
      else:
        sub_result = await sub_run.execute()
    finally:
      self.context.merge_usage(sub_context)

    self._messages = sub_run.messages
    return RunResult(
      final_output=sub_result.final_output,
      messages=list(self._messages),
      usage=self.context.usage.copy(),
      last_agent=sub_result.last_agent,
      run_id=self.run_id,
    )
