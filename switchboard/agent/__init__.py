from switchboard.agent.agent import Agent
from switchboard.agent.guardrail import (
  GuardrailChain,
  GuardrailResult,
  InputGuardrail,
  OutputGuardrail,
  block_topics,
  input_guardrail,
  max_length,
  output_guardrail,
  regex_guardrail,
)
from switchboard.agent.handoff import Handoff, handoff, keyword_matcher
from switchboard.agent.tool_use import (
  CustomToolUse,
  RunLLMAgain,
  StopAtTools,
  StopOnFirstTool,
  ToolsToFinalOutputResult,
  ToolUseBehavior,
  resolve_tool_use,
)

__all__ = [
  "Agent",
  "CustomToolUse",
  "GuardrailChain",
  "GuardrailResult",
  "Handoff",
  "InputGuardrail",
  "OutputGuardrail",
  "RunLLMAgain",
  "StopAtTools",
  "StopOnFirstTool",
  "ToolUseBehavior",
  "ToolsToFinalOutputResult",
  "block_topics",
  "handoff",
  "input_guardrail",
  "keyword_matcher",
  "max_length",
  "output_guardrail",
  "regex_guardrail",
  "resolve_tool_use",
]
