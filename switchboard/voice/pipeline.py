"""Voice pipeline: speech in, agent run, speech out."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional, Union

from switchboard.exceptions import SynthesisError, TranscriptionError, VoicePipelineError
from switchboard.utils.log import log_debug, log_error, log_info
from switchboard.voice.config import VoicePipelineConfig
from switchboard.voice.input import AudioInput, StreamedAudioInput
from switchboard.voice.model import SynthesisBackend, TranscriptionBackend, VoiceModelProvider
from switchboard.voice.result import StreamedAudioResult
from switchboard.voice.workflow import VoiceWorkflow


@dataclass
class VoicePipelineMetrics:
  """Durations in seconds of each stage of ``VoicePipeline.process``."""

  total_duration: float = 0.0
  transcription_duration: float = 0.0
  agent_duration: float = 0.0
  tts_duration: float = 0.0


@dataclass
class VoicePipelineResult:
  transcription: str
  response_text: str
  audio: bytes
  metrics: VoicePipelineMetrics = field(default_factory=VoicePipelineMetrics)


class VoicePipeline:
  """
  Runs a ``VoiceWorkflow`` between a transcription and a synthesis backend.

  ``run`` accepts an ``AudioInput`` for a single turn or a
  ``StreamedAudioInput`` for a multi-turn session, and returns a
  ``StreamedAudioResult`` at once; the session executes in a background
  task and its events are read from ``result.stream()``.

  Args:
      workflow: Produces reply text for each transcribed utterance.
      stt_model: Transcription backend, or a model name resolved through
          ``config.model_provider``.
      tts_model: Synthesis backend, or a model name.
      config: Pipeline configuration.

  Example:
      pipeline = VoicePipeline(SingleAgentVoiceWorkflow(agent, backend=OpenAIChat()))
      result = await pipeline.run(AudioInput(buffer=pcm))
      async for event in result.stream():
          if isinstance(event, VoiceStreamEventAudio):
              player.write(event.data)
  """

  def __init__(
    self,
    workflow: VoiceWorkflow,
    stt_model: Union[TranscriptionBackend, str, None] = None,
    tts_model: Union[SynthesisBackend, str, None] = None,
    config: Optional[VoicePipelineConfig] = None,
  ):
    self.workflow = workflow
    self.config = config or VoicePipelineConfig()
    self._stt_model = stt_model
    self._tts_model = tts_model
    self._provider: Optional[VoiceModelProvider] = self.config.model_provider

  @property
  def model_provider(self) -> VoiceModelProvider:
    if self._provider is None:
      from switchboard.voice.openai import OpenAIVoiceModelProvider

      self._provider = OpenAIVoiceModelProvider()
    return self._provider

  @property
  def stt_model(self) -> TranscriptionBackend:
    if self._stt_model is None or isinstance(self._stt_model, str):
      self._stt_model = self.model_provider.get_stt_model(self._stt_model)
    return self._stt_model

  @property
  def tts_model(self) -> SynthesisBackend:
    if self._tts_model is None or isinstance(self._tts_model, str):
      self._tts_model = self.model_provider.get_tts_model(self._tts_model)
    return self._tts_model

  async def run(self, audio_input: Union[AudioInput, StreamedAudioInput]) -> StreamedAudioResult:
    """Start a session over *audio_input* and return its streamed result."""
    result = StreamedAudioResult(self.tts_model, self.config.tts_settings)
    if isinstance(audio_input, AudioInput):
      session = self._run_single_turn(audio_input, result)
    elif isinstance(audio_input, StreamedAudioInput):
      session = self._run_multi_turn(audio_input, result)
    else:
      raise TypeError(f"Unsupported audio input: {type(audio_input).__name__}")
    result._set_task(asyncio.create_task(session))
    return result

  async def process(self, audio_input: AudioInput) -> VoicePipelineResult:
    """Transcribe, run and synthesize one turn without streaming.

    Raises:
        TranscriptionError: If transcription fails.
        SynthesisError: If synthesis fails.
        RunError: If the workflow's run fails.
    """
    started = time.perf_counter()
    transcription = await self._transcribe(audio_input)
    transcribed = time.perf_counter()

    response_text = "".join([delta async for delta in self.workflow.run(transcription)])
    answered = time.perf_counter()

    audio = bytearray()
    if response_text.strip():
      try:
        async for chunk in self.tts_model.synthesize(response_text, self.config.tts_settings):
          audio.extend(chunk)
      except Exception as exc:
        raise SynthesisError(exc, text=response_text) from exc
    finished = time.perf_counter()

    return VoicePipelineResult(
      transcription=transcription,
      response_text=response_text,
      audio=bytes(audio),
      metrics=VoicePipelineMetrics(
        total_duration=finished - started,
        transcription_duration=transcribed - started,
        agent_duration=answered - transcribed,
        tts_duration=finished - answered,
      ),
    )

  async def _transcribe(self, audio_input: AudioInput) -> str:
    try:
      return await self.stt_model.transcribe(audio_input, self.config.stt_settings)
    except VoicePipelineError:
      raise
    except Exception as exc:
      raise TranscriptionError(exc) from exc

  async def _run_turn(self, transcription: str, result: StreamedAudioResult) -> None:
    log_debug(f"{self.config.workflow_name}: turn input {transcription!r}")
    async for delta in self.workflow.run(transcription):
      await result.add_text(delta)
    await result.turn_done()

  async def _run_single_turn(self, audio_input: AudioInput, result: StreamedAudioResult) -> None:
    try:
      transcription = await self._transcribe(audio_input)
      await self._run_turn(transcription, result)
      await result.done()
    except Exception as exc:
      log_error(f"{self.config.workflow_name}: session {self.config.group_id} aborted: {exc}")
      await result.abort(exc)

  async def _run_multi_turn(self, audio_input: StreamedAudioInput, result: StreamedAudioResult) -> None:
    try:
      try:
        session = await self.stt_model.create_session(audio_input, self.config.stt_settings)
      except VoicePipelineError:
        raise
      except Exception as exc:
        raise TranscriptionError(exc) from exc

      log_info(f"{self.config.workflow_name}: session {self.config.group_id} opened")
      try:
        async for transcription in session.transcribe_turns():
          await self._run_turn(transcription, result)
      finally:
        await session.close()
      await result.done()
    except Exception as exc:
      log_error(f"{self.config.workflow_name}: session {self.config.group_id} aborted: {exc}")
      await result.abort(exc)
