"""
Integration tests for streamed runs and the Runner surface.

Covers:
  - execute_streamed forwards content deltas to a sync or async sink
  - streamed tool-call fragments are reassembled and executed
  - a final output chosen from tool results is pushed to the sink
  - Runner.stream_events yields run events in order
  - Runner.stream_events yields RunErrorEvent, then re-raises
  - Runner.stream_events also delivers events to the runner's EventBus
  - Runner.run works from synchronous code
  - Agent.arun convenience entry point
  - Runner without backend or registry raises ModelNotFoundError
"""

import pytest

from switchboard.agent.agent import Agent
from switchboard.agent.tool_use import STOP_ON_FIRST_TOOL
from switchboard.exceptions import BackendFailure, ModelNotFoundError
from switchboard.model.response import ToolCallRequest
from switchboard.run.event_bus import EventBus
from switchboard.run.events import RunCompletedEvent, RunContentEvent, RunErrorEvent, RunEvent, RunStartedEvent, ToolCallStartedEvent
from switchboard.run.run import Run
from switchboard.run.runner import Runner
from switchboard.testing import MockBackend, tool_call_response
from switchboard.tool.function import Tool


@pytest.mark.integration
class TestExecuteStreamed:
  @pytest.mark.asyncio
  async def test_sync_sink(self, simple_agent):
    chunks = []
    result = await Run(simple_agent, "Hi", backend=MockBackend(responses=["Hello!"])).execute_streamed(chunks.append)
    assert "".join(chunks) == "Hello!"
    assert len(chunks) == len("Hello!")
    assert result.final_output == "Hello!"
    assert result.usage.requests == 1

  @pytest.mark.asyncio
  async def test_async_sink(self, simple_agent):
    chunks = []

    async def sink(text):
      chunks.append(text)

    await Run(simple_agent, "Hi", backend=MockBackend(responses=["abc"])).execute_streamed(sink)
    assert chunks == ["a", "b", "c"]

  @pytest.mark.asyncio
  async def test_streamed_tool_calls(self, tool_agent):
    call = ToolCallRequest(id="c1", name="add", parameters={"a": 2, "b": 3})
    backend = MockBackend(responses=[tool_call_response(call), "Five"])
    chunks = []
    result = await Run(tool_agent, "2+3?", backend=backend).execute_streamed(chunks.append)
    assert result.final_output == "Five"
    assert result.messages[2].tool_calls == [call]
    assert result.messages[3].text == "5"
    assert "".join(chunks) == "Five"

  @pytest.mark.asyncio
  async def test_tool_final_output_pushed_to_sink(self, echo_call):
    agent = Agent(name="a", tools=[Tool.from_callable(lambda text: f"said {text}", name="echo")], tool_use_behavior=STOP_ON_FIRST_TOOL)
    chunks = []
    result = await Run(agent, "go", backend=MockBackend(responses=[tool_call_response(echo_call(text="yo"))])).execute_streamed(chunks.append)
    assert result.final_output == "said yo"
    assert chunks == ["said yo"]

  @pytest.mark.asyncio
  async def test_stream_failure(self, simple_agent):
    with pytest.raises(BackendFailure):
      await Run(simple_agent, "Hi", backend=MockBackend(responses=[TimeoutError("slow")])).execute_streamed()


@pytest.mark.integration
class TestRunnerStreamEvents:
  @pytest.mark.asyncio
  async def test_events_in_order(self, tool_agent, echo_call):
    backend = MockBackend(responses=[tool_call_response(echo_call()), "ok"])
    events = [e async for e in Runner(backend=backend).stream_events(tool_agent, "go")]
    assert isinstance(events[0], RunStartedEvent)
    assert isinstance(events[1], ToolCallStartedEvent)
    assert "".join(e.content for e in events if isinstance(e, RunContentEvent)) == "ok"
    assert isinstance(events[-1], RunCompletedEvent)
    assert events[-1].content == "ok"
    assert len({e.run_id for e in events}) == 1

  @pytest.mark.asyncio
  async def test_error_event_then_raise(self, simple_agent):
    backend = MockBackend(responses=[RuntimeError("down")])
    seen = []
    with pytest.raises(BackendFailure):
      async for event in Runner(backend=backend).stream_events(simple_agent, "Hi"):
        seen.append(event)
    assert isinstance(seen[-1], RunErrorEvent)

  @pytest.mark.asyncio
  async def test_runner_bus_sees_streamed_events(self, simple_agent):
    bus = EventBus()
    kinds = []
    bus.on(RunEvent.run_content, lambda e: kinds.append(e.event))
    bus.on(RunCompletedEvent, lambda e: kinds.append(e.event))
    runner = Runner(backend=MockBackend(responses=["Hey"]), event_bus=bus)
    streamed = [e async for e in runner.stream_events(simple_agent, "Hi")]
    assert kinds == ["RunContent"] * 3 + ["RunCompleted"]
    assert len(streamed) == 5

  @pytest.mark.asyncio
  async def test_arun_streamed(self, simple_agent):
    chunks = []
    result = await Runner(backend=MockBackend(responses=["yo"])).arun_streamed(simple_agent, "Hi", chunks.append)
    assert chunks == ["y", "o"]
    assert result.final_output == "yo"


@pytest.mark.integration
class TestRunnerEntryPoints:
  def test_sync_run(self, simple_agent):
    result = Runner(backend=MockBackend(responses=["sync"])).run(simple_agent, "Hi")
    assert result.final_output == "sync"

  @pytest.mark.asyncio
  async def test_agent_arun(self, simple_agent):
    result = await simple_agent.arun("Hi", backend=MockBackend(responses=["direct"]))
    assert str(result) == "direct"

  @pytest.mark.asyncio
  async def test_no_backend(self, simple_agent):
    with pytest.raises(ModelNotFoundError):
      await Runner().arun(simple_agent, "Hi")
