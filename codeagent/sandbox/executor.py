"""Sandbox executor for running agent tools against one sandbox."""

from typing import Any, Dict, Optional

from codeagent.tools import TOOL_REGISTRY, BaseTool, ToolResult
from codeagent.utils import logger


class SandboxExecutor:
    """Executes tools within a sandbox."""

    def __init__(self, sandbox: Any = None):
        """Initialize sandbox executor with a sandbox handle."""
        self.sandbox = sandbox
        self.tools: Dict[str, BaseTool] = {}

        for tool_name, tool_class in TOOL_REGISTRY.items():
            self.tools[tool_name] = tool_class(executor=self)

    async def execute_tool(
        self, tool_name: str, parameters: Dict[str, Any]
    ) -> ToolResult:
        """
        Execute a tool with given parameters.

        Args:
            tool_name: Name of the tool to execute
            parameters: Tool parameters

        Returns:
            ToolResult with execution results
        """
        if tool_name not in self.tools:
            return ToolResult(
                success=False,
                output="",
                error=f"Unknown tool: {tool_name}",
            )

        tool = self.tools[tool_name]

        logger.info(f"Executing tool: {tool_name}")
        logger.debug(f"Parameters: {parameters}")

        try:
            return await tool.run(**parameters)

        except Exception as e:
            logger.error(f"Tool execution failed: {e}")
            return ToolResult(
                success=False,
                output="",
                error=f"Tool execution failed: {str(e)}",
            )

    def get_tool(self, tool_name: str) -> Optional[BaseTool]:
        return self.tools.get(tool_name)
