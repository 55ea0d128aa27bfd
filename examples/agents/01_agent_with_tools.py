"""
Agent with tools using the @tool decorator.

This example shows how to:
- Define tools using the @tool decorator
- Run an agent until it answers in plain text
- Inspect the message history and token usage

Requirements:
    export OPENAI_API_KEY=sk-...
"""

from switchboard import Agent, Runner, tool
from switchboard.model.openai import OpenAIChat


@tool
def add(a: int, b: int) -> int:
  """Add two numbers together."""
  return a + b


@tool
def get_weather(city: str) -> str:
  """Get the current weather for a city (mock implementation)."""
  weather_data = {
    "london": "Cloudy, 14C",
    "tokyo": "Rainy, 18C",
  }
  return weather_data.get(city.lower(), f"Weather data not available for {city}")


def main():
  agent = Agent(
    name="assistant",
    instructions="You are a helpful assistant with access to math and weather tools.",
    tools=[add, get_weather],
  )
  runner = Runner(backend=OpenAIChat(id="gpt-4.1-mini"))

  result = runner.run(agent, "What is 15 plus 27, and how is the weather in Tokyo?")

  print("Response:")
  print(result.final_output)
  print()

  print("Tool calls:")
  for message in result.messages:
    for call in message.tool_calls:
      print(f"  - {call.name}({call.parameters})")

  print(f"\nUsage: {result.usage.to_dict()}")


if __name__ == "__main__":
  main()
