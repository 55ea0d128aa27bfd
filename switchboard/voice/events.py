"""Events yielded by ``StreamedAudioResult.stream``."""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class VoiceLifecycle(str, Enum):
  turn_started = "turn_started"
  turn_ended = "turn_ended"
  session_ended = "session_ended"


@dataclass(frozen=True)
class VoiceStreamEventAudio:
  """A chunk of synthesized PCM audio."""

  data: bytes
  type: str = "voice_stream_event_audio"


@dataclass(frozen=True)
class VoiceStreamEventLifecycle:
  event: VoiceLifecycle
  type: str = "voice_stream_event_lifecycle"


@dataclass(frozen=True)
class VoiceStreamEventError:
  """A pipeline failure. Non-final synthesis failures are followed by more events."""

  error: BaseException
  type: str = "voice_stream_event_error"


VoiceStreamEvent = Union[VoiceStreamEventAudio, VoiceStreamEventLifecycle, VoiceStreamEventError]
