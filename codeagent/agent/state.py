"""Shared state for one agent network run."""

from dataclasses import dataclass, field
from typing import Dict, List

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage


@dataclass
class AgentState:
    """State mutated by the agent and its tools during a single run.

    ``summary`` stays empty until the agent emits its completion marker.
    ``files`` accumulates every file written through the file tool.
    ``messages`` holds the conversation the agent sees, oldest first.
    """

    summary: str = ""
    files: Dict[str, str] = field(default_factory=dict)
    messages: List[BaseMessage] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return bool(self.summary)

    @property
    def is_error(self) -> bool:
        """A run failed when it produced no summary or no files."""
        return not self.summary or not self.files

    @classmethod
    def from_history(cls, history: List[Dict[str, str]]) -> "AgentState":
        """Seed state with persisted messages, already in chronological order."""
        messages: List[BaseMessage] = []
        for item in history:
            if item["role"] == "assistant":
                messages.append(AIMessage(content=item["content"]))
            else:
                messages.append(HumanMessage(content=item["content"]))
        return cls(messages=messages)
