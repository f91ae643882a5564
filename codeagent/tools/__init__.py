"""Tools for the code agent."""

from codeagent.tools.base import BaseTool, ToolResult
from codeagent.tools.files import CreateOrUpdateFilesTool, ReadFilesTool
from codeagent.tools.terminal import TerminalTool

__all__ = [
    "BaseTool",
    "ToolResult",
    "TerminalTool",
    "CreateOrUpdateFilesTool",
    "ReadFilesTool",
]


# Registry of all available tools
TOOL_REGISTRY = {
    "terminal": TerminalTool,
    "createOrUpdateFiles": CreateOrUpdateFilesTool,
    "readFiles": ReadFilesTool,
}


def get_tool(name: str) -> type[BaseTool]:
    """Get a tool class by name."""
    if name not in TOOL_REGISTRY:
        raise ValueError(f"Unknown tool: {name}")
    return TOOL_REGISTRY[name]


def list_tools() -> list[str]:
    """List all available tools."""
    return list(TOOL_REGISTRY.keys())
