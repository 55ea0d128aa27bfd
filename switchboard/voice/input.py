"""Audio inputs accepted by the voice pipeline."""

import asyncio
import base64
import io
import wave
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Tuple

DEFAULT_SAMPLE_RATE = 24000
DEFAULT_SAMPLE_WIDTH = 2
DEFAULT_CHANNELS = 1


@dataclass
class AudioInput:
  """
  A complete buffer of raw PCM audio.

  Attributes:
      buffer: Little-endian PCM samples.
      frame_rate: Sample rate in Hz.
      sample_width: Bytes per sample.
      channels: Number of interleaved channels.
  """

  buffer: bytes
  frame_rate: int = DEFAULT_SAMPLE_RATE
  sample_width: int = DEFAULT_SAMPLE_WIDTH
  channels: int = DEFAULT_CHANNELS

  def to_audio_file(self) -> Tuple[str, io.BytesIO]:
    """Wrap the samples in a WAV container.

    Returns:
        ``(filename, file)`` ready to be passed as an upload.
    """
    out = io.BytesIO()
    with wave.open(out, "wb") as wav:
      wav.setnchannels(self.channels)
      wav.setsampwidth(self.sample_width)
      wav.setframerate(self.frame_rate)
      wav.writeframes(self.buffer)
    out.seek(0)
    out.name = "audio.wav"
    return out.name, out

  def to_base64(self) -> str:
    return base64.b64encode(self.buffer).decode("ascii")

  @property
  def duration(self) -> float:
    """Length of the buffer in seconds."""
    frame_size = self.sample_width * self.channels
    if not frame_size or not self.frame_rate:
      return 0.0
    return len(self.buffer) / frame_size / self.frame_rate


class StreamedAudioInput:
  """
  Audio pushed incrementally by a producer, for multi-turn sessions.

  The producer calls ``add_audio`` for every captured chunk and ``finish``
  when the microphone closes. A single consumer iterates the chunks with
  ``async for``; iteration ends after ``finish``.

  Example:
      audio = StreamedAudioInput()
      result = pipeline.run(audio)
      await audio.add_audio(chunk)
      ...
      await audio.finish()
  """

  def __init__(self, frame_rate: int = DEFAULT_SAMPLE_RATE) -> None:
    self.frame_rate = frame_rate
    self.queue: "asyncio.Queue[Optional[bytes]]" = asyncio.Queue()
    self._finished = False

  @property
  def finished(self) -> bool:
    return self._finished

  async def add_audio(self, audio: bytes) -> None:
    if self._finished:
      raise RuntimeError("Cannot add audio to a finished input")
    await self.queue.put(audio)

  async def finish(self) -> None:
    if self._finished:
      return
    self._finished = True
    await self.queue.put(None)

  def __aiter__(self) -> AsyncIterator[bytes]:
    return self._iterate()

  async def _iterate(self) -> AsyncIterator[bytes]:
    while True:
      chunk = await self.queue.get()
      if chunk is None:
        return
      yield chunk
