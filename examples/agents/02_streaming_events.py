"""
Streaming run events.

This example shows how to:
- Stream text deltas as the model produces them
- Observe tool calls through run events
- Subscribe to every run of a runner through an EventBus

Requirements:
    export OPENAI_API_KEY=sk-...
"""

import asyncio

from switchboard import Agent, Runner, tool
from switchboard.model.openai import OpenAIChat
from switchboard.run import EventBus, RunCompletedEvent, RunContentEvent, ToolCallCompletedEvent, ToolCallStartedEvent


@tool
def lookup_order(order_id: str) -> str:
  """Look up the status of an order."""
  return f"Order {order_id} shipped yesterday."


async def main():
  bus = EventBus()

  @bus.on(RunCompletedEvent)
  def on_completed(event: RunCompletedEvent):
    print(f"\n[bus] run {event.run_id} completed, usage={event.usage}")

  agent = Agent(name="support", instructions="You answer order questions.", tools=[lookup_order])
  runner = Runner(backend=OpenAIChat(id="gpt-4.1-mini"), event_bus=bus)

  async for event in runner.stream_events(agent, "Where is order A-1001?"):
    if isinstance(event, RunContentEvent):
      print(event.content, end="", flush=True)
    elif isinstance(event, ToolCallStartedEvent):
      print(f"\n[tool] {event.tool_name}({event.tool_args})")
    elif isinstance(event, ToolCallCompletedEvent):
      print(f"[tool] -> {event.result}")

  # Text only, through a sink.
  print("\n\nSink:")
  result = await runner.arun_streamed(agent, "And order B-7?", lambda text: print(text, end="", flush=True))
  print(f"\n\nFinal output: {result.final_output}")


if __name__ == "__main__":
  asyncio.run(main())
