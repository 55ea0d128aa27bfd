from switchboard.agent.guardrail.base import GuardrailChain, GuardrailResult, InputGuardrail, OutputGuardrail
from switchboard.agent.guardrail.builtin import block_topics, max_length, regex_guardrail
from switchboard.agent.guardrail.decorators import input_guardrail, output_guardrail

__all__ = [
  "GuardrailChain",
  "GuardrailResult",
  "InputGuardrail",
  "OutputGuardrail",
  "block_topics",
  "input_guardrail",
  "max_length",
  "output_guardrail",
  "regex_guardrail",
]
