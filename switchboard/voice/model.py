"""Settings and capability interfaces for speech backends."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
  from switchboard.voice.input import AudioInput, StreamedAudioInput

DEFAULT_TTS_INSTRUCTIONS = "You will receive partial sentences. Do not complete the sentence, just read out the text."


def _default_turn_detection() -> Dict[str, Any]:
  return {"type": "semantic_vad"}


@dataclass(frozen=True)
class TTSSettings:
  """
  Text-to-speech settings.

  Attributes:
      voice: Provider voice name. ``None`` selects the backend default.
      buffer_size: Size in bytes of every emitted audio chunk except the
          last one of a segment.
      instructions: Delivery instructions for instruction-following voices.
      speed: Playback speed multiplier, 0.25 to 4.0.
  """

  voice: Optional[str] = None
  buffer_size: int = 120
  instructions: str = DEFAULT_TTS_INSTRUCTIONS
  speed: Optional[float] = None

  def __post_init__(self) -> None:
    if self.buffer_size < 1:
      raise ValueError(f"buffer_size must be >= 1, got {self.buffer_size}")
    if self.speed is not None and not 0.25 <= self.speed <= 4.0:
      raise ValueError(f"speed must be between 0.25 and 4.0, got {self.speed}")

  def with_updates(self, **kwargs: Any) -> "TTSSettings":
    return replace(self, **kwargs)


@dataclass(frozen=True)
class STTSettings:
  """
  Speech-to-text settings.

  Attributes:
      prompt: Hint text that biases the transcription.
      language: ISO-639-1 code of the spoken language.
      temperature: Sampling temperature.
      turn_detection: Turn detection configuration for streamed sessions.
  """

  prompt: Optional[str] = None
  language: Optional[str] = None
  temperature: Optional[float] = None
  turn_detection: Optional[Dict[str, Any]] = field(default_factory=_default_turn_detection)

  def with_updates(self, **kwargs: Any) -> "STTSettings":
    return replace(self, **kwargs)


@runtime_checkable
class SynthesisBackend(Protocol):
  """Turns text into a stream of raw PCM audio chunks."""

  model_name: str

  def synthesize(self, text: str, settings: TTSSettings) -> AsyncIterator[bytes]: ...


@runtime_checkable
class TranscriptionSession(Protocol):
  """An open streamed transcription over a ``StreamedAudioInput``."""

  def transcribe_turns(self) -> AsyncIterator[str]:
    """Yield one completed utterance per user turn until the input ends."""
    ...

  async def close(self) -> None: ...


@runtime_checkable
class TranscriptionBackend(Protocol):
  """Turns audio into text, either whole or as a per-turn session."""

  model_name: str

  async def transcribe(self, input: "AudioInput", settings: STTSettings) -> str: ...

  async def create_session(self, input: "StreamedAudioInput", settings: STTSettings) -> TranscriptionSession: ...


@runtime_checkable
class VoiceModelProvider(Protocol):
  """Looks up speech backends by model name; ``None`` selects the default."""

  def get_stt_model(self, model_name: Optional[str] = None) -> TranscriptionBackend: ...

  def get_tts_model(self, model_name: Optional[str] = None) -> SynthesisBackend: ...
