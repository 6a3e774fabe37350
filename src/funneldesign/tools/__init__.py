"""Tools exposed to the assistant over MCP.

Each tool validates its arguments with a pydantic model and then calls
into the store. Handlers can also be called directly with a ``Storage``.
"""

from __future__ import annotations

from funneldesign.tools.base import ToolDefinition, to_jsonable
from funneldesign.tools.funnels import FUNNEL_TOOLS
from funneldesign.tools.projects import PROJECT_TOOLS
from funneldesign.tools.research import RESEARCH_TOOLS


def get_funnel_tools() -> dict[str, ToolDefinition]:
    """Return a dict of tool_name -> ToolDefinition, in registration order."""
    return {tool.name: tool for tool in [*PROJECT_TOOLS, *FUNNEL_TOOLS, *RESEARCH_TOOLS]}


__all__ = ["ToolDefinition", "get_funnel_tools", "to_jsonable"]
