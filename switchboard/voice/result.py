"""Sentence buffering of streamed text into chunked speech."""

from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING, AsyncIterator, List, Optional, Tuple, Union

from switchboard.exceptions import SynthesisError
from switchboard.utils.log import log_debug, log_warning
from switchboard.voice.events import (
  VoiceLifecycle,
  VoiceStreamEvent,
  VoiceStreamEventAudio,
  VoiceStreamEventError,
  VoiceStreamEventLifecycle,
)

if TYPE_CHECKING:
  from switchboard.voice.model import SynthesisBackend, TTSSettings

_SENTENCE = re.compile(r"[^.?!\n]*[.?!\n]+")

_STREAM_DONE = object()


def split_sentences(text: str) -> Tuple[List[str], str]:
  """Split *text* into completed sentences and a trailing remainder.

  A sentence ends at a run of ``.``, ``?``, ``!`` or newline characters.
  Sentences are stripped and empty ones dropped; the remainder is returned
  untouched.

  Example:
      >>> split_sentences("Hello world. Next")
      (['Hello world.'], ' Next')
  """
  sentences: List[str] = []
  end = 0
  for match in _SENTENCE.finditer(text):
    end = match.end()
    sentence = match.group().strip()
    if sentence:
      sentences.append(sentence)
  return sentences, text[end:]


class StreamedAudioResult:
  """
  Speech output of a ``VoicePipeline`` session, consumed with ``stream()``.

  Text deltas are added with ``add_text``. Every completed sentence is sent
  to the synthesis backend as soon as its delimiter arrives; the rest waits
  in the buffer until more text completes it or ``turn_done`` flushes it.
  Synthesized audio is re-chunked to ``tts_settings.buffer_size`` bytes,
  only the last chunk of each sentence may be shorter.

  A synthesis failure on a buffered sentence is reported as an error event
  and the session continues. A failure while flushing the end of a turn
  raises ``SynthesisError``, which aborts the session.

  Attributes:
      total_output_text: Every text delta received, concatenated.
      segments: Text of every synthesis request, in order.
      error: The exception that aborted the session, if any.
  """

  def __init__(self, tts_model: "SynthesisBackend", tts_settings: "TTSSettings") -> None:
    self.tts_model = tts_model
    self.tts_settings = tts_settings
    self.total_output_text = ""
    self.segments: List[str] = []
    self.error: Optional[BaseException] = None

    self._queue: "asyncio.Queue[Union[VoiceStreamEvent, object]]" = asyncio.Queue()
    self._text_buffer = ""
    self._turn_started = False
    self._closed = False
    self._task: Optional[asyncio.Task] = None

  @property
  def buffered_text(self) -> str:
    return self._text_buffer

  def _set_task(self, task: asyncio.Task) -> None:
    self._task = task

  async def add_text(self, text: str) -> None:
    if not text:
      return
    if not self._turn_started:
      self._turn_started = True
      await self._emit(VoiceStreamEventLifecycle(VoiceLifecycle.turn_started))

    self._text_buffer += text
    self.total_output_text += text

    sentences, remainder = split_sentences(self._text_buffer)
    if len(remainder) == len(self._text_buffer):
      return
    self._text_buffer = remainder
    for sentence in sentences:
      await self._synthesize(sentence, final=False)

  async def turn_done(self) -> None:
    """Flush the buffer regardless of delimiters and end the turn."""
    pending = self._text_buffer.strip()
    self._text_buffer = ""
    if pending:
      await self._synthesize(pending, final=True)
    await self._emit(VoiceStreamEventLifecycle(VoiceLifecycle.turn_ended))
    self._turn_started = False

  async def done(self) -> None:
    """Emit ``session_ended`` and close the stream."""
    if self._closed:
      return
    await self._emit(VoiceStreamEventLifecycle(VoiceLifecycle.session_ended))
    self._close()

  async def abort(self, error: BaseException) -> None:
    """Report *error* and close the stream without ``session_ended``."""
    if self._closed:
      return
    self.error = error
    await self._emit(VoiceStreamEventError(error))
    self._close()

  async def stream(self) -> AsyncIterator[VoiceStreamEvent]:
    """Yield events until the session ends or aborts.

    Leaving the iteration early cancels the session.
    """
    try:
      while True:
        event = await self._queue.get()
        if event is _STREAM_DONE:
          break
        yield event  # type: ignore[misc]
      if self._task is not None:
        await self._task
    finally:
      if self._task is not None and not self._task.done():
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)

  async def _synthesize(self, text: str, final: bool) -> None:
    self.segments.append(text)
    size = self.tts_settings.buffer_size
    buffer = bytearray()
    log_debug(f"Synthesizing {len(text)} characters (final={final})")
    try:
      async for chunk in self.tts_model.synthesize(text, self.tts_settings):
        buffer.extend(chunk)
        while len(buffer) >= size:
          await self._emit(VoiceStreamEventAudio(bytes(buffer[:size])))
          del buffer[:size]
      if buffer:
        await self._emit(VoiceStreamEventAudio(bytes(buffer)))
    except Exception as exc:
      if final:
        if isinstance(exc, SynthesisError):
          raise
        raise SynthesisError(exc, text=text) from exc
      error = exc if isinstance(exc, SynthesisError) else SynthesisError(exc, text=text)
      log_warning(f"Synthesis failed for {text!r}: {exc}")
      await self._emit(VoiceStreamEventError(error))

  async def _emit(self, event: VoiceStreamEvent) -> None:
    if self._closed:
      return
    await self._queue.put(event)

  def _close(self) -> None:
    self._closed = True
    self._queue.put_nowait(_STREAM_DONE)
