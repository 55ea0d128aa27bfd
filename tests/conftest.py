"""
Root conftest - shared fixtures for the entire test suite.

Every backend here is scripted (``switchboard.testing``); no test reaches
the network.
"""

import pytest

from switchboard.agent.agent import Agent
from switchboard.model.response import ResponseUsage, ToolCallRequest
from switchboard.run.config import RunConfig
from switchboard.run.runner import Runner
from switchboard.testing import MockBackend, MockSTTModel, MockTTSModel
from switchboard.tool.decorator import tool


@tool
def echo(text: str) -> str:
  """Echo the text back."""
  return f"echo: {text}"


@tool
def add(a: int, b: int) -> int:
  """Add two integers."""
  return a + b


@pytest.fixture
def echo_tool():
  return echo


@pytest.fixture
def add_tool():
  return add


@pytest.fixture
def mock_backend():
  return MockBackend(responses=["Hello!"])


@pytest.fixture
def simple_agent():
  return Agent(name="assistant", instructions="You are a helpful assistant.")


@pytest.fixture
def tool_agent(echo_tool, add_tool):
  return Agent(name="tooling", instructions="Use tools.", tools=[echo_tool, add_tool])


@pytest.fixture
def runner_factory():
  def _make(backend, **config):
    return Runner(backend=backend, config=RunConfig(**config))

  return _make


@pytest.fixture
def echo_call():
  def _make(call_id: str = "call_1", text: str = "hi") -> ToolCallRequest:
    return ToolCallRequest(id=call_id, name="echo", parameters={"text": text})

  return _make


@pytest.fixture
def usage_10_5():
  return ResponseUsage(input_tokens=10, output_tokens=5)


@pytest.fixture
def mock_tts():
  return MockTTSModel(chunk_size=4)


@pytest.fixture
def mock_stt():
  return MockSTTModel(transcriptions=["What is the weather?"])
