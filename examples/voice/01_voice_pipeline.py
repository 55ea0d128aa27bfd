"""
Voice pipeline: speech in, agent run, speech out.

This example shows how to:
- Transcribe a WAV file and answer it with an agent
- Play back synthesized speech as it streams in
- Run several turns over a live audio stream

Requirements:
    pip install 'switchboard[voice]'
    export OPENAI_API_KEY=sk-...
"""

import asyncio
import sys
import wave

from switchboard import Agent
from switchboard.model.openai import OpenAIChat
from switchboard.voice import (
  AudioInput,
  SingleAgentVoiceWorkflow,
  StreamedAudioInput,
  VoiceLifecycle,
  VoicePipeline,
  VoiceStreamEventAudio,
  VoiceStreamEventError,
  VoiceStreamEventLifecycle,
)

agent = Agent(name="voice", instructions="You are a friendly voice assistant. Keep answers short.")


def load_wav(path: str) -> AudioInput:
  with wave.open(path, "rb") as wav:
    return AudioInput(
      buffer=wav.readframes(wav.getnframes()),
      frame_rate=wav.getframerate(),
      sample_width=wav.getsampwidth(),
      channels=wav.getnchannels(),
    )


async def single_turn(path: str):
  pipeline = VoicePipeline(SingleAgentVoiceWorkflow(agent, backend=OpenAIChat(id="gpt-4.1-mini")))
  result = await pipeline.run(load_wav(path))

  audio = bytearray()
  async for event in result.stream():
    if isinstance(event, VoiceStreamEventAudio):
      audio.extend(event.data)
    elif isinstance(event, VoiceStreamEventLifecycle):
      print(f"[{event.event.value}]")
    elif isinstance(event, VoiceStreamEventError):
      print(f"[error] {event.error}")

  print(f"Reply: {result.total_output_text}")
  with wave.open("reply.wav", "wb") as out:
    out.setnchannels(1)
    out.setsampwidth(2)
    out.setframerate(24000)
    out.writeframes(bytes(audio))


async def multi_turn(paths):
  workflow = SingleAgentVoiceWorkflow(agent, backend=OpenAIChat(id="gpt-4.1-mini"))
  pipeline = VoicePipeline(workflow)
  audio_input = StreamedAudioInput()
  result = await pipeline.run(audio_input)

  async def feed():
    for path in paths:
      pcm = load_wav(path).buffer
      for start in range(0, len(pcm), 4800):
        await audio_input.add_audio(pcm[start : start + 4800])
        await asyncio.sleep(0.1)
    await audio_input.finish()

  feeder = asyncio.create_task(feed())
  async for event in result.stream():
    if isinstance(event, VoiceStreamEventLifecycle) and event.event == VoiceLifecycle.turn_ended:
      print(f"Turn done. History has {len(workflow.history)} messages.")
  await feeder


if __name__ == "__main__":
  if len(sys.argv) < 2:
    print("Usage: python examples/voice/01_voice_pipeline.py question.wav [more.wav ...]")
    sys.exit(1)
  if len(sys.argv) == 2:
    asyncio.run(single_turn(sys.argv[1]))
  else:
    asyncio.run(multi_turn(sys.argv[1:]))
