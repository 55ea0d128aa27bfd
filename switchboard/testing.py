"""Testing utilities - scripted backends that never reach the network."""

import json
from typing import Any, AsyncIterator, Callable, Container, Dict, List, Optional, Sequence, Union

from switchboard.model.message import Message
from switchboard.model.response import (
  ContentDelta,
  ModelResponse,
  ModelStreamEvent,
  ResponseUsage,
  StreamEnd,
  ToolCallDelta,
  ToolCallRequest,
)
from switchboard.model.settings import ModelSettings

ScriptedResponse = Union[str, ModelResponse, BaseException]


def tool_call_response(*calls: ToolCallRequest, content: Optional[str] = None, usage: Optional[ResponseUsage] = None) -> ModelResponse:
  """A ModelResponse requesting *calls*."""
  return ModelResponse(content=content, tool_calls=list(calls), usage=usage or ResponseUsage(input_tokens=10, output_tokens=5))


class MockBackend:
  """
  ``ModelBackend`` returning scripted responses for unit tests.

  Each call consumes the next scripted item; the last one repeats once the
  script is exhausted. A string becomes a plain text response, a
  ``ModelResponse`` is returned as is, an exception is raised.

  Example:
      backend = MockBackend(responses=[
          tool_call_response(ToolCallRequest(id="c1", name="lookup", parameters={"q": "x"})),
          "Done.",
      ])
      result = await Runner(backend=backend).arun(agent, "Find x")
      assert backend.call_count == 2
  """

  def __init__(
    self,
    responses: Optional[Sequence[ScriptedResponse]] = None,
    side_effect: Optional[Callable[[List[Message], ModelSettings, List[Any]], ScriptedResponse]] = None,
    usage: Optional[ResponseUsage] = None,
  ):
    self.responses: List[ScriptedResponse] = list(responses or ["Mock response"])
    self.side_effect = side_effect
    self.usage = usage or ResponseUsage(input_tokens=10, output_tokens=5)

    self._call_count = 0
    self._call_history: List[Dict[str, Any]] = []

    self.id = "mock-model"
    self.provider = "mock"

  def _next(self, messages: Sequence[Message], settings: ModelSettings, tools: Sequence[Any]) -> ModelResponse:
    self._call_history.append({
      "messages": list(messages),
      "settings": settings,
      "tools": [t.name for t in tools],
    })
    if self.side_effect is not None:
      item = self.side_effect(list(messages), settings, list(tools))
    else:
      item = self.responses[min(self._call_count, len(self.responses) - 1)]
    self._call_count += 1

    if isinstance(item, BaseException):
      raise item
    if isinstance(item, str):
      return ModelResponse(content=item, tool_calls=[], usage=self.usage)
    return item

  async def ainvoke(self, messages: Sequence[Message], settings: ModelSettings, tools: Sequence[Any] = ()) -> ModelResponse:
    return self._next(messages, settings, tools)

  async def ainvoke_stream(
    self,
    messages: Sequence[Message],
    settings: ModelSettings,
    tools: Sequence[Any] = (),
  ) -> AsyncIterator[ModelStreamEvent]:
    """Yield the scripted response character by character, then its tool calls."""
    response = self._next(messages, settings, tools)
    for char in response.content or "":
      yield ContentDelta(text=char)
    for index, call in enumerate(response.tool_calls):
      arguments = json.dumps(call.parameters)
      middle = len(arguments) // 2
      # Id and name first, then the arguments in two id-less fragments.
      yield ToolCallDelta(index=index, id=call.id, name=call.name)
      yield ToolCallDelta(index=index, arguments=arguments[:middle])
      yield ToolCallDelta(index=index, arguments=arguments[middle:])
    yield StreamEnd(usage=response.usage)

  @property
  def call_count(self) -> int:
    return self._call_count

  @property
  def call_history(self) -> List[Dict[str, Any]]:
    return self._call_history

  def reset(self) -> None:
    self._call_count = 0
    self._call_history.clear()


class MockTTSModel:
  """
  ``SynthesisBackend`` whose audio is the UTF-8 text itself, in *chunk_size* pieces.

  Texts listed in *fail_on* raise ``RuntimeError`` instead.
  """

  def __init__(self, chunk_size: int = 4, fail_on: Container[str] = ()):
    self.model_name = "mock-tts"
    self.chunk_size = chunk_size
    self.fail_on = fail_on
    self.calls: List[str] = []

  async def synthesize(self, text: str, settings: Any) -> AsyncIterator[bytes]:
    self.calls.append(text)
    if text in self.fail_on:
      raise RuntimeError(f"cannot synthesize {text!r}")
    audio = text.encode("utf-8")
    for start in range(0, len(audio), self.chunk_size):
      yield audio[start : start + self.chunk_size]


class MockTranscriptionSession:
  def __init__(self, turns: Sequence[str], error: Optional[BaseException] = None):
    self.turns = list(turns)
    self.error = error
    self.closed = False

  async def transcribe_turns(self) -> AsyncIterator[str]:
    for turn in self.turns:
      yield turn
    if self.error is not None:
      raise self.error

  async def close(self) -> None:
    self.closed = True


class MockSTTModel:
  """
  ``TranscriptionBackend`` returning scripted text.

  ``transcribe`` returns the next item of *transcriptions* (the last one
  repeats); ``create_session`` opens a session yielding *turns*, then
  raising *session_error* if one is given.
  """

  def __init__(
    self,
    transcriptions: Optional[Sequence[Union[str, BaseException]]] = None,
    turns: Sequence[str] = (),
    session_error: Optional[BaseException] = None,
  ):
    self.model_name = "mock-stt"
    self.transcriptions = list(transcriptions or ["Mock transcription"])
    self.turns = list(turns)
    self.session_error = session_error
    self.sessions: List[MockTranscriptionSession] = []
    self._call_count = 0

  async def transcribe(self, input: Any, settings: Any) -> str:
    item = self.transcriptions[min(self._call_count, len(self.transcriptions) - 1)]
    self._call_count += 1
    if isinstance(item, BaseException):
      raise item
    return item

  async def create_session(self, input: Any, settings: Any) -> MockTranscriptionSession:
    session = MockTranscriptionSession(self.turns, self.session_error)
    self.sessions.append(session)
    return session

  @property
  def call_count(self) -> int:
    return self._call_count


class MockVoiceModelProvider:
  def __init__(self, stt_model: Optional[MockSTTModel] = None, tts_model: Optional[MockTTSModel] = None):
    self.stt_model = stt_model or MockSTTModel()
    self.tts_model = tts_model or MockTTSModel()

  def get_stt_model(self, model_name: Optional[str] = None) -> MockSTTModel:
    return self.stt_model

  def get_tts_model(self, model_name: Optional[str] = None) -> MockTTSModel:
    return self.tts_model
