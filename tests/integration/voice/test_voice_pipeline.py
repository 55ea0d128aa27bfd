"""
Integration tests for VoicePipeline over scripted speech and model backends.

Covers:
  - single turn: transcription drives a streamed run whose sentences are spoken
  - multi turn: each utterance drives one run; the session is closed at the end
  - a session that fails after some turns aborts without session_ended
  - SingleAgentVoiceWorkflow replays earlier turns as history
  - backends resolved through the configured model provider
  - transcription failure aborts the session with an error event
  - run failure aborts the session with the run error
  - process() returns transcription, reply, audio and stage durations
"""

import pytest

from switchboard.agent.agent import Agent
from switchboard.exceptions import BackendFailure, TranscriptionError
from switchboard.testing import MockBackend, MockSTTModel, MockTTSModel, MockVoiceModelProvider
from switchboard.voice.config import VoicePipelineConfig
from switchboard.voice.events import VoiceLifecycle, VoiceStreamEventAudio, VoiceStreamEventError, VoiceStreamEventLifecycle
from switchboard.voice.input import AudioInput, StreamedAudioInput
from switchboard.voice.model import TTSSettings
from switchboard.voice.pipeline import VoicePipeline
from switchboard.voice.workflow import SingleAgentVoiceWorkflow

AGENT = Agent(name="voice", instructions="Answer briefly.")


async def _collect(result):
  return [event async for event in result.stream()]


def _lifecycle(events):
  return [e.event for e in events if isinstance(e, VoiceStreamEventLifecycle)]


@pytest.mark.integration
class TestSingleTurn:
  @pytest.mark.asyncio
  async def test_speaks_sentences(self, mock_stt, mock_tts):
    backend = MockBackend(responses=["Hello world. Next"])
    pipeline = VoicePipeline(SingleAgentVoiceWorkflow(AGENT, backend=backend), stt_model=mock_stt, tts_model=mock_tts)

    result = await pipeline.run(AudioInput(buffer=b"\x00\x00" * 100))
    events = await _collect(result)

    assert mock_tts.calls == ["Hello world.", "Next"]
    assert backend.call_history[0]["messages"][-1].text == "What is the weather?"
    assert _lifecycle(events) == [VoiceLifecycle.turn_started, VoiceLifecycle.turn_ended, VoiceLifecycle.session_ended]
    audio = b"".join(e.data for e in events if isinstance(e, VoiceStreamEventAudio))
    assert audio == b"Hello world.Next"
    assert result.total_output_text == "Hello world. Next"
    assert result.error is None

  @pytest.mark.asyncio
  async def test_models_from_provider(self):
    stt = MockSTTModel(transcriptions=["hi"])
    tts = MockTTSModel()
    config = VoicePipelineConfig(
      model_provider=MockVoiceModelProvider(stt_model=stt, tts_model=tts),
      tts_settings=TTSSettings(buffer_size=2),
    )
    workflow = SingleAgentVoiceWorkflow(AGENT, backend=MockBackend(responses=["Yes."]))
    result = await VoicePipeline(workflow, config=config).run(AudioInput(buffer=b""))
    events = await _collect(result)
    assert stt.call_count == 1
    assert [e.data for e in events if isinstance(e, VoiceStreamEventAudio)] == [b"Ye", b"s."]

  @pytest.mark.asyncio
  async def test_transcription_failure(self, mock_tts):
    stt = MockSTTModel(transcriptions=[RuntimeError("mic")])
    backend = MockBackend()
    pipeline = VoicePipeline(SingleAgentVoiceWorkflow(AGENT, backend=backend), stt_model=stt, tts_model=mock_tts)
    result = await pipeline.run(AudioInput(buffer=b""))
    events = await _collect(result)
    assert isinstance(events[-1], VoiceStreamEventError)
    assert isinstance(result.error, TranscriptionError)
    assert backend.call_count == 0

  @pytest.mark.asyncio
  async def test_run_failure(self, mock_stt, mock_tts):
    backend = MockBackend(responses=[RuntimeError("model down")])
    pipeline = VoicePipeline(SingleAgentVoiceWorkflow(AGENT, backend=backend), stt_model=mock_stt, tts_model=mock_tts)
    result = await pipeline.run(AudioInput(buffer=b""))
    events = await _collect(result)
    assert isinstance(result.error, BackendFailure)
    assert VoiceLifecycle.session_ended not in _lifecycle(events)

  @pytest.mark.asyncio
  async def test_unsupported_input(self, mock_stt, mock_tts):
    pipeline = VoicePipeline(SingleAgentVoiceWorkflow(AGENT, backend=MockBackend()), stt_model=mock_stt, tts_model=mock_tts)
    with pytest.raises(TypeError):
      await pipeline.run(b"raw bytes")  # type: ignore[arg-type]


@pytest.mark.integration
class TestMultiTurn:
  @pytest.mark.asyncio
  async def test_one_run_per_utterance(self, mock_tts):
    stt = MockSTTModel(turns=["Hi", "Again"])
    backend = MockBackend(responses=["First.", "Second."])
    workflow = SingleAgentVoiceWorkflow(AGENT, backend=backend)
    pipeline = VoicePipeline(workflow, stt_model=stt, tts_model=mock_tts)

    audio = StreamedAudioInput()
    result = await pipeline.run(audio)
    events = await _collect(result)

    assert mock_tts.calls == ["First.", "Second."]
    assert _lifecycle(events) == [
      VoiceLifecycle.turn_started,
      VoiceLifecycle.turn_ended,
      VoiceLifecycle.turn_started,
      VoiceLifecycle.turn_ended,
      VoiceLifecycle.session_ended,
    ]
    assert stt.sessions[0].closed
    assert [m.text for m in workflow.history] == ["Hi", "First.", "Again", "Second."]
    second_call = [m.text for m in backend.call_history[1]["messages"]]
    assert second_call == ["Answer briefly.", "Hi", "First.", "Again"]

  @pytest.mark.asyncio
  async def test_session_failure_aborts(self, mock_tts):
    failure = TranscriptionError(RuntimeError("upload broke"))
    stt = MockSTTModel(turns=["Hi"], session_error=failure)
    pipeline = VoicePipeline(SingleAgentVoiceWorkflow(AGENT, backend=MockBackend(responses=["First."])), stt_model=stt, tts_model=mock_tts)

    result = await pipeline.run(StreamedAudioInput())
    events = await _collect(result)

    assert _lifecycle(events) == [VoiceLifecycle.turn_started, VoiceLifecycle.turn_ended]
    assert isinstance(events[-1], VoiceStreamEventError)
    assert result.error is failure
    assert stt.sessions[0].closed


@pytest.mark.integration
class TestProcess:
  @pytest.mark.asyncio
  async def test_process(self, mock_stt, mock_tts):
    workflow = SingleAgentVoiceWorkflow(AGENT, backend=MockBackend(responses=["Sunny. Warm."]))
    pipeline = VoicePipeline(workflow, stt_model=mock_stt, tts_model=mock_tts)
    result = await pipeline.process(AudioInput(buffer=b"\x00\x00"))

    assert result.transcription == "What is the weather?"
    assert result.response_text == "Sunny. Warm."
    assert result.audio == b"Sunny. Warm."
    assert mock_tts.calls == ["Sunny. Warm."]
    metrics = result.metrics
    parts = metrics.transcription_duration + metrics.agent_duration + metrics.tts_duration
    assert metrics.total_duration == pytest.approx(parts)
    assert workflow.last_result.final_output == "Sunny. Warm."

  @pytest.mark.asyncio
  async def test_process_transcription_failure(self, mock_tts):
    stt = MockSTTModel(transcriptions=[ValueError("bad audio")])
    pipeline = VoicePipeline(SingleAgentVoiceWorkflow(AGENT, backend=MockBackend()), stt_model=stt, tts_model=mock_tts)
    with pytest.raises(TranscriptionError):
      await pipeline.process(AudioInput(buffer=b""))
