from typing import TYPE_CHECKING, Any

from switchboard.voice.config import VoicePipelineConfig
from switchboard.voice.events import (
  VoiceLifecycle,
  VoiceStreamEvent,
  VoiceStreamEventAudio,
  VoiceStreamEventError,
  VoiceStreamEventLifecycle,
)
from switchboard.voice.input import AudioInput, StreamedAudioInput
from switchboard.voice.model import (
  STTSettings,
  SynthesisBackend,
  TranscriptionBackend,
  TranscriptionSession,
  TTSSettings,
  VoiceModelProvider,
)
from switchboard.voice.pipeline import VoicePipeline, VoicePipelineMetrics, VoicePipelineResult
from switchboard.voice.result import StreamedAudioResult, split_sentences
from switchboard.voice.workflow import SingleAgentVoiceWorkflow, VoiceWorkflow

if TYPE_CHECKING:
  from switchboard.voice.openai import OpenAISTTModel, OpenAITTSModel, OpenAIVoiceModelProvider

_LAZY_IMPORTS = {
  "OpenAISTTModel": ("switchboard.voice.openai", "OpenAISTTModel"),
  "OpenAITTSModel": ("switchboard.voice.openai", "OpenAITTSModel"),
  "OpenAIVoiceModelProvider": ("switchboard.voice.openai", "OpenAIVoiceModelProvider"),
}


def __getattr__(name: str) -> Any:
  if name in _LAZY_IMPORTS:
    module_path, attr_name = _LAZY_IMPORTS[name]
    import importlib

    module = importlib.import_module(module_path)
    return getattr(module, attr_name)
  raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
  "AudioInput",
  "OpenAISTTModel",
  "OpenAITTSModel",
  "OpenAIVoiceModelProvider",
  "STTSettings",
  "SingleAgentVoiceWorkflow",
  "StreamedAudioInput",
  "StreamedAudioResult",
  "SynthesisBackend",
  "TTSSettings",
  "TranscriptionBackend",
  "TranscriptionSession",
  "VoiceLifecycle",
  "VoiceModelProvider",
  "VoicePipeline",
  "VoicePipelineConfig",
  "VoicePipelineMetrics",
  "VoicePipelineResult",
  "VoiceStreamEvent",
  "VoiceStreamEventAudio",
  "VoiceStreamEventError",
  "VoiceStreamEventLifecycle",
  "VoiceWorkflow",
  "split_sentences",
]
