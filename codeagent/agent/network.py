"""Router loop that drives agents until the task is summarized."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from langchain_core.messages import HumanMessage

from codeagent.agent.agent import CodeAgent
from codeagent.agent.state import AgentState
from codeagent.config import config
from codeagent.utils import logger


class NetworkStatus(str, Enum):
    """Lifecycle of a network run: running -> completed | capped."""

    RUNNING = "running"
    COMPLETED = "completed"
    CAPPED = "capped"


Router = Callable[["Network", AgentState], Optional[CodeAgent]]


def summary_router(network: "Network", state: AgentState) -> Optional[CodeAgent]:
    """Stop once a summary exists, otherwise run the default agent again."""
    if state.is_complete:
        return None
    return network.default_agent


@dataclass
class NetworkResult:
    """Final state of a network run."""

    state: AgentState
    status: NetworkStatus
    iterations: int


class Network:
    """Bounded loop that asks the router for the next agent each iteration."""

    def __init__(
        self,
        agents: List[CodeAgent],
        max_iter: Optional[int] = None,
        router: Optional[Router] = None,
        name: str = "coding-agent-network",
    ):
        if not agents:
            raise ValueError("A network needs at least one agent")

        max_iter = config.max_iterations if max_iter is None else max_iter
        if max_iter < 1:
            raise ValueError(f"max_iter must be at least 1, got {max_iter}")

        self.name = name
        self.agents = agents
        self.max_iter = max_iter
        self.router = router or summary_router

    @property
    def default_agent(self) -> CodeAgent:
        return self.agents[0]

    async def run(self, prompt: str, state: Optional[AgentState] = None) -> NetworkResult:
        """
        Run the network on a prompt.

        Args:
            prompt: The user's request, appended after any seeded history
            state: Shared state (default: fresh)

        Returns:
            NetworkResult with the final state
        """
        state = state or AgentState()
        state.messages.append(HumanMessage(content=prompt))

        status = NetworkStatus.RUNNING
        iterations = 0

        while iterations < self.max_iter:
            agent = self.router(self, state)
            if agent is None:
                status = NetworkStatus.COMPLETED
                break

            iterations += 1
            logger.debug(f"[{self.name}] iteration {iterations}/{self.max_iter}: {agent.name}")
            await agent.run(state)

        if status is NetworkStatus.RUNNING:
            status = NetworkStatus.COMPLETED if state.summary else NetworkStatus.CAPPED

        if status is NetworkStatus.CAPPED:
            logger.warning(f"[{self.name}] reached {self.max_iter} iterations without a summary")
        else:
            logger.info(f"[{self.name}] completed after {iterations} iteration(s)")

        return NetworkResult(state=state, status=status, iterations=iterations)
