"""Base tool class and result types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional

from pydantic import BaseModel

if TYPE_CHECKING:
    from codeagent.agent.state import AgentState


class ToolParameters(BaseModel):
    """Base class for tool parameters."""

    pass


@dataclass
class ToolResult:
    """Result from tool execution."""

    success: bool
    output: str
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "output": self.output,
            "error": self.error,
            "metadata": self.metadata,
        }

    @property
    def content(self) -> str:
        """Text reported back to the model."""
        if self.success:
            return self.output
        return self.error or self.output


class BaseTool(ABC):
    """Base class for all tools."""

    name: str
    description: str
    parameters_class: type[ToolParameters]

    def __init__(self, executor: Optional[Any] = None):
        """Initialize tool with optional executor."""
        self.executor = executor

    @property
    def sandbox(self) -> Any:
        if self.executor is None:
            raise RuntimeError(f"Tool {self.name} has no sandbox executor")
        return self.executor.sandbox

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult:
        """Execute the tool with given parameters."""
        pass

    def validate_parameters(self, params: Dict[str, Any]) -> ToolParameters:
        """Validate and parse parameters."""
        return self.parameters_class(**params)

    async def run(self, **kwargs: Any) -> ToolResult:
        """Run the tool with parameter validation."""
        try:
            validated_params = self.validate_parameters(kwargs)
            return await self.execute(**validated_params.model_dump())

        except Exception as e:
            return ToolResult(
                success=False,
                output="",
                error=f"Tool execution failed: {str(e)}",
                metadata={"tool_name": self.name, "parameters": kwargs},
            )

    def update_state(self, state: "AgentState", result: ToolResult) -> None:
        """Fold a tool result into the shared agent state."""
        pass

    def to_langchain_tool(self) -> Dict[str, Any]:
        """Convert to LangChain tool calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters_class.model_json_schema(),
            },
        }
