"""Code agent, router network and agent state."""

from codeagent.agent.agent import CodeAgent, capture_task_summary, create_llm
from codeagent.agent.network import Network, NetworkResult, NetworkStatus, summary_router
from codeagent.agent.output import last_assistant_text, parse_agent_output
from codeagent.agent.state import AgentState

__all__ = [
    "AgentState",
    "CodeAgent",
    "Network",
    "NetworkResult",
    "NetworkStatus",
    "capture_task_summary",
    "create_llm",
    "last_assistant_text",
    "parse_agent_output",
    "summary_router",
]
