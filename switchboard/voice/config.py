from dataclasses import dataclass, field, replace
from typing import Any, Optional
from uuid import uuid4

from switchboard.voice.model import STTSettings, TTSSettings, VoiceModelProvider


@dataclass(frozen=True)
class VoicePipelineConfig:
  """
  Configuration of a ``VoicePipeline``.

  Attributes:
      model_provider: Resolves speech backends given by name. ``None`` uses
          ``OpenAIVoiceModelProvider``.
      workflow_name: Label used in logs.
      group_id: Identifier shared by every turn of one session.
      stt_settings: Transcription settings.
      tts_settings: Synthesis settings.
  """

  model_provider: Optional[VoiceModelProvider] = None
  workflow_name: str = "Voice Agent"
  group_id: str = field(default_factory=lambda: str(uuid4()))
  stt_settings: STTSettings = field(default_factory=STTSettings)
  tts_settings: TTSSettings = field(default_factory=TTSSettings)

  def with_updates(self, **kwargs: Any) -> "VoicePipelineConfig":
    return replace(self, **kwargs)
