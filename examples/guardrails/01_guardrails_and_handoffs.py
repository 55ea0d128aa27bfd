"""Guardrails and handoffs with scripted backends.

Demonstrates:
  1. block_topics     - reject input containing forbidden keywords
  2. max_length       - reject input over a character limit
  3. output_guardrail - rewrite the final output
  4. handoff          - delegate to a specialist agent on keywords

Prerequisites:
  No API keys needed - uses MockBackend.

Usage:
  python examples/guardrails/01_guardrails_and_handoffs.py
"""

from switchboard import Agent, GuardrailRejected, Runner
from switchboard.agent import block_topics, handoff, max_length, output_guardrail
from switchboard.testing import MockBackend


@output_guardrail
def sign_off(text: str, context) -> str:
  return f"{text}\n-- Support team"


billing = Agent(name="billing", instructions="You handle refunds and invoices.")

triage = Agent(
  name="triage",
  instructions="You route customer questions.",
  input_guardrails=[block_topics(["password", "exploit"]), max_length(200)],
  output_guardrails=[sign_off],
  handoffs=[handoff(billing, keywords=["refund", "invoice"])],
)

runner = Runner(backend=MockBackend(responses=["Happy to help with that."]))

# Allowed input, answered by triage.
result = runner.run(triage, "How do I change my shipping address?")
print(f"[{result.last_agent.name}] {result.final_output}")

# Handoff to billing.
result = runner.run(triage, "I want a refund for my last order")
print(f"[{result.last_agent.name}] {result.final_output}")

# Blocked input.
for text in ["What is the admin password?", "x" * 500]:
  try:
    runner.run(triage, text)
  except GuardrailRejected as e:
    print(f"Blocked by {e.guardrail_name} at {e.stage}: {e.reason}")
