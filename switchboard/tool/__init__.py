"""
Switchboard Tools - Tool decorator and Tool class.

Usage:
    from switchboard.tool import tool, Tool, ToolAvailability
"""

from switchboard.tool.decorator import tool
from switchboard.tool.function import Tool, ToolAvailability, stringify_tool_result

__all__ = ["tool", "Tool", "ToolAvailability", "stringify_tool_result"]
