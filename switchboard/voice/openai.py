"""OpenAI speech backends: file and realtime transcription, streamed speech."""

from __future__ import annotations

import asyncio
import base64
import json
import os
from typing import Any, AsyncIterator, Dict, Optional

import httpx
from openai import AsyncOpenAI

from switchboard.exceptions import TranscriptionError
from switchboard.model.openai import DEFAULT_TIMEOUT
from switchboard.utils.log import log_debug, log_warning
from switchboard.voice.input import AudioInput, StreamedAudioInput
from switchboard.voice.model import STTSettings, TTSSettings

DEFAULT_STT_MODEL = "gpt-4o-transcribe"
DEFAULT_TTS_MODEL = "gpt-4o-mini-tts"
DEFAULT_VOICE = "ash"

REALTIME_TRANSCRIPTION_URL = "wss://api.openai.com/v1/realtime?intent=transcription"

_EMPTY_COMMIT = "input_audio_buffer_commit_empty"


def _build_client(
  api_key: Optional[str],
  base_url: Optional[str],
  timeout: Optional[httpx.Timeout],
) -> AsyncOpenAI:
  return AsyncOpenAI(
    api_key=api_key or os.getenv("OPENAI_API_KEY"),
    base_url=base_url or os.getenv("OPENAI_BASE_URL"),
    timeout=timeout or DEFAULT_TIMEOUT,
  )


class OpenAITranscriptionSession:
  """
  Realtime transcription over the OpenAI websocket API.

  Audio from the input is forwarded as it arrives; the server detects turn
  boundaries (``STTSettings.turn_detection``) and every completed turn is
  yielded by ``transcribe_turns``. When the input finishes, the remaining
  audio is committed and iteration ends once its transcript has arrived.
  """

  def __init__(
    self,
    input: StreamedAudioInput,
    model: str,
    settings: STTSettings,
    api_key: Optional[str] = None,
    url: str = REALTIME_TRANSCRIPTION_URL,
  ):
    self.input = input
    self.model = model
    self.settings = settings
    self.api_key = api_key or os.getenv("OPENAI_API_KEY")
    self.url = url
    self._ws: Any = None
    self._sender: Optional[asyncio.Task] = None
    self._pending = 0
    self._final_commit_sent = False
    self._final_commit_acked = False
    self._upload_error: Optional[BaseException] = None

  def session_update(self) -> Dict[str, Any]:
    transcription: Dict[str, Any] = {"model": self.model}
    if self.settings.prompt:
      transcription["prompt"] = self.settings.prompt
    if self.settings.language:
      transcription["language"] = self.settings.language
    return {
      "type": "transcription_session.update",
      "session": {
        "input_audio_format": "pcm16",
        "input_audio_transcription": transcription,
        "turn_detection": self.settings.turn_detection,
      },
    }

  async def connect(self) -> None:
    try:
      import websockets  # type: ignore[import-not-found]
    except ImportError as exc:
      raise ImportError("OpenAITranscriptionSession requires 'websockets'. Install with: pip install 'switchboard[voice]'") from exc

    headers = {"Authorization": f"Bearer {self.api_key}", "OpenAI-Beta": "realtime=v1"}
    try:
      self._ws = await websockets.connect(self.url, additional_headers=headers)
      await self._ws.send(json.dumps(self.session_update()))
    except Exception as exc:
      raise TranscriptionError(exc) from exc
    self._sender = asyncio.create_task(self._send_audio())
    log_debug(f"Realtime transcription session opened: model={self.model}")

  async def _send_audio(self) -> None:
    try:
      async for chunk in self.input:
        await self._ws.send(json.dumps({"type": "input_audio_buffer.append", "audio": base64.b64encode(chunk).decode("ascii")}))
      await self._ws.send(json.dumps({"type": "input_audio_buffer.commit"}))
      # Commits acknowledged before this point came from server-side turn detection.
      self._final_commit_sent = True
    except Exception as exc:
      log_warning(f"Realtime transcription audio upload failed: {exc}")
      self._upload_error = exc
      await self._ws.close()
      raise

  async def transcribe_turns(self) -> AsyncIterator[str]:
    """Yield each completed utterance.

    Raises:
        TranscriptionError: If the server reports an error, the connection
            fails, or uploading the input audio failed.
    """
    if self._ws is None:
      await self.connect()
    try:
      async for raw in self._ws:
        event = json.loads(raw)
        kind = event.get("type")
        if kind == "input_audio_buffer.committed":
          self._pending += 1
          if self._final_commit_sent:
            self._final_commit_acked = True
        elif kind == "conversation.item.input_audio_transcription.completed":
          self._pending = max(self._pending - 1, 0)
          transcript = (event.get("transcript") or "").strip()
          if transcript:
            yield transcript
        elif kind == "conversation.item.input_audio_transcription.failed":
          self._pending = max(self._pending - 1, 0)
          log_warning(f"Realtime transcription failed for one turn: {event.get('error')}")
        elif kind == "error":
          error = event.get("error") or {}
          if error.get("code") != _EMPTY_COMMIT:
            raise TranscriptionError(RuntimeError(error.get("message", "unknown realtime error")))
          # Only the final commit can find the buffer empty.
          self._final_commit_acked = True
        if self._final_commit_acked and self._pending == 0:
          return
    except TranscriptionError:
      raise
    except Exception as exc:
      cause = self._upload_error or exc
      raise TranscriptionError(cause) from cause

    if self._upload_error is not None:
      raise TranscriptionError(self._upload_error) from self._upload_error

  async def close(self) -> None:
    if self._sender is not None and not self._sender.done():
      self._sender.cancel()
    if self._sender is not None:
      await asyncio.gather(self._sender, return_exceptions=True)
    if self._ws is not None:
      await self._ws.close()
      self._ws = None


class OpenAISTTModel:
  """
  ``TranscriptionBackend`` over the OpenAI audio API.

  Args:
      model: Transcription model name.
      api_key: API key. Falls back to ``OPENAI_API_KEY``.
      base_url: API base URL. Falls back to ``OPENAI_BASE_URL``.
      client: Pre-built ``AsyncOpenAI`` client.
  """

  def __init__(
    self,
    model: str = DEFAULT_STT_MODEL,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    client: Optional[AsyncOpenAI] = None,
  ):
    self.model_name = model
    self.api_key = api_key
    self.base_url = base_url
    self._client = client

  @property
  def client(self) -> AsyncOpenAI:
    if self._client is None:
      self._client = _build_client(self.api_key, self.base_url, None)
    return self._client

  async def transcribe(self, input: AudioInput, settings: STTSettings) -> str:
    _, audio_file = input.to_audio_file()
    kwargs: Dict[str, Any] = {"model": self.model_name, "file": audio_file}
    if settings.prompt:
      kwargs["prompt"] = settings.prompt
    if settings.language:
      kwargs["language"] = settings.language
    if settings.temperature is not None:
      kwargs["temperature"] = settings.temperature
    log_debug(f"Transcribing {input.duration:.2f}s of audio with {self.model_name}")
    try:
      response = await self.client.audio.transcriptions.create(**kwargs)
    except Exception as exc:
      raise TranscriptionError(exc) from exc
    return response.text

  async def create_session(self, input: StreamedAudioInput, settings: STTSettings) -> OpenAITranscriptionSession:
    session = OpenAITranscriptionSession(input, self.model_name, settings, api_key=self.api_key or self.client.api_key)
    await session.connect()
    return session


class OpenAITTSModel:
  """``SynthesisBackend`` streaming 24 kHz 16-bit mono PCM from the OpenAI speech API."""

  def __init__(
    self,
    model: str = DEFAULT_TTS_MODEL,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    client: Optional[AsyncOpenAI] = None,
  ):
    self.model_name = model
    self.api_key = api_key
    self.base_url = base_url
    self._client = client

  @property
  def client(self) -> AsyncOpenAI:
    if self._client is None:
      self._client = _build_client(self.api_key, self.base_url, None)
    return self._client

  async def synthesize(self, text: str, settings: TTSSettings) -> AsyncIterator[bytes]:
    kwargs: Dict[str, Any] = {
      "model": self.model_name,
      "voice": settings.voice or DEFAULT_VOICE,
      "input": text,
      "response_format": "pcm",
    }
    # Only the gpt-4o speech models accept delivery instructions.
    if settings.instructions and self.model_name.startswith("gpt-4o"):
      kwargs["instructions"] = settings.instructions
    if settings.speed is not None:
      kwargs["speed"] = settings.speed
    async with self.client.audio.speech.with_streaming_response.create(**kwargs) as response:
      async for chunk in response.iter_bytes():
        yield chunk


class OpenAIVoiceModelProvider:
  """
  ``VoiceModelProvider`` building OpenAI speech backends on one shared client.

  Example:
      provider = OpenAIVoiceModelProvider(api_key="sk-...")
      config = VoicePipelineConfig(model_provider=provider)
  """

  def __init__(
    self,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: Optional[httpx.Timeout] = None,
    client: Optional[AsyncOpenAI] = None,
  ):
    self.api_key = api_key
    self.base_url = base_url
    self.timeout = timeout
    self._client = client

  @property
  def client(self) -> AsyncOpenAI:
    if self._client is None:
      self._client = _build_client(self.api_key, self.base_url, self.timeout)
    return self._client

  def get_stt_model(self, model_name: Optional[str] = None) -> OpenAISTTModel:
    return OpenAISTTModel(model_name or DEFAULT_STT_MODEL, api_key=self.api_key, client=self.client)

  def get_tts_model(self, model_name: Optional[str] = None) -> OpenAITTSModel:
    return OpenAITTSModel(model_name or DEFAULT_TTS_MODEL, api_key=self.api_key, client=self.client)
