"""Durable code agent workflow.

The run is a LangGraph functional-API entrypoint. Each side effect
(sandbox creation, history load, every model turn, every tool call, the
summarizers, persistence) is a ``task``, so its result is checkpointed per
thread. Re-invoking a thread after a failure replays completed tasks from the
checkpoint instead of executing them again.
"""

from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, message_to_dict, messages_from_dict
from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.checkpoint.memory import MemorySaver
from langgraph.func import entrypoint, task

from codeagent.agent import (
    AgentState,
    CodeAgent,
    Network,
    capture_task_summary,
    create_llm,
    parse_agent_output,
)
from codeagent.agent.output import DEFAULT_FRAGMENT_TITLE
from codeagent.agent.prompts import FRAGMENT_TITLE_PROMPT, PROMPT, RESPONSE_PROMPT
from codeagent.config import config
from codeagent.db import MessageRepository
from codeagent.sandbox import SandboxManager
from codeagent.sandbox.executor import SandboxExecutor
from codeagent.tools import TOOL_REGISTRY, ToolResult
from codeagent.utils import logger

LLMFactory = Callable[[float], BaseChatModel]


class CodeAgentWorkflow:
    """Provision a sandbox, run the agent network, summarize and persist."""

    def __init__(
        self,
        sandbox_manager: Optional[SandboxManager] = None,
        repository: Optional[MessageRepository] = None,
        llm_factory: Optional[LLMFactory] = None,
        checkpointer: Optional[BaseCheckpointSaver] = None,
        template: Optional[str] = None,
        model: Optional[str] = None,
        max_iterations: Optional[int] = None,
        previous_messages_limit: Optional[int] = None,
    ):
        self.sandbox_manager = sandbox_manager or SandboxManager()
        self.repository = repository or MessageRepository()
        self.llm_factory = llm_factory or (
            lambda temperature: create_llm(model=model, temperature=temperature)
        )
        self.template = template or config.sandbox_template
        self.max_iterations = (
            config.max_iterations if max_iterations is None else max_iterations
        )
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")
        self.previous_messages_limit = (
            config.previous_messages_limit
            if previous_messages_limit is None
            else previous_messages_limit
        )
        if self.previous_messages_limit < 0:
            raise ValueError(
                f"previous_messages_limit cannot be negative, got {self.previous_messages_limit}"
            )
        self.function = self._build(checkpointer or MemorySaver())

    async def run(
        self, project_id: str, value: str, thread_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Run the workflow for one prompt.

        Args:
            project_id: Project the conversation belongs to
            value: The user's prompt
            thread_id: Checkpoint thread (default: a new one per run)

        Returns:
            ``{url, title, files, summary}``
        """
        thread_id = thread_id or str(uuid4())
        logger.info(f"Starting code agent run {thread_id} for project {project_id}")
        return await self.function.ainvoke(
            {"project_id": project_id, "value": value},
            config={"configurable": {"thread_id": thread_id}},
        )

    async def resume(self, thread_id: str) -> Dict[str, Any]:
        """Continue a failed run; completed steps are not executed again."""
        logger.info(f"Resuming code agent run {thread_id}")
        return await self.function.ainvoke(
            None, config={"configurable": {"thread_id": thread_id}}
        )

    def _build(self, checkpointer: BaseCheckpointSaver):
        workflow = self
        model_agent = self._create_agent(
            "code-agent", PROMPT, config.temperature, with_tools=True
        )

        @task
        async def get_sandbox_id() -> str:
            sandbox = await workflow.sandbox_manager.create(workflow.template)
            sandbox.set_timeout(config.sandbox_timeout)
            return sandbox.sandbox_id

        @task
        async def get_previous_messages(project_id: str) -> List[Dict[str, str]]:
            return workflow.repository.get_previous_messages(
                project_id, limit=workflow.previous_messages_limit
            )

        @task
        async def model_turn(messages: List[BaseMessage]) -> Dict[str, Any]:
            response = await model_agent.invoke_model(messages)
            return message_to_dict(response)

        @task
        async def run_tool(
            sandbox_id: str, tool_name: str, arguments: Dict[str, Any]
        ) -> Dict[str, Any]:
            sandbox = await workflow.sandbox_manager.connect(sandbox_id)
            result = await SandboxExecutor(sandbox).execute_tool(tool_name, arguments)
            return result.to_dict()

        @task
        async def generate_fragment_title(summary: str) -> str:
            agent = workflow._create_agent(
                "fragment-title-generator", FRAGMENT_TITLE_PROMPT, config.summary_temperature
            )
            return parse_agent_output(await agent.ask(summary))

        @task
        async def generate_response(summary: str) -> str:
            agent = workflow._create_agent(
                "response-generator", RESPONSE_PROMPT, config.summary_temperature
            )
            return parse_agent_output(await agent.ask(summary))

        @task
        async def get_sandbox_url(sandbox_id: str) -> str:
            sandbox = await workflow.sandbox_manager.connect(sandbox_id)
            return sandbox.get_url()

        @task
        async def save_result(project_id: str, outcome: Dict[str, Any]) -> str:
            message = workflow.repository.save_result(project_id, **outcome)
            return message.id

        @entrypoint(checkpointer=checkpointer)
        async def code_agent_function(event: Dict[str, Any]) -> Dict[str, Any]:
            project_id = event["project_id"]
            value = event["value"]

            sandbox_id = await get_sandbox_id()

            history = await get_previous_messages(project_id)
            # The prompt itself is stored before the run starts.
            if history and history[-1] == {"role": "user", "content": value}:
                history = history[:-1]
            state = AgentState.from_history(history)

            async def run_model(messages: List[BaseMessage]):
                return messages_from_dict([await model_turn(messages)])[0]

            async def run_tool_step(tool_name: str, arguments: Dict[str, Any]) -> ToolResult:
                return ToolResult(**await run_tool(sandbox_id, tool_name, arguments))

            # Model and tool calls run as tasks; the local tools only update state.
            code_agent = CodeAgent(
                name=model_agent.name,
                system_prompt=PROMPT,
                tools=list(model_agent.tools.values()),
                model_runner=run_model,
                tool_runner=run_tool_step,
                on_response=capture_task_summary,
            )

            network = Network([code_agent], max_iter=workflow.max_iterations)
            result = await network.run(value, state)
            summary = result.state.summary

            title = await generate_fragment_title(summary)
            response = await generate_response(summary)

            is_error = result.state.is_error
            files = {} if is_error else dict(result.state.files)

            sandbox_url = await get_sandbox_url(sandbox_id)

            await save_result(
                project_id,
                {
                    "is_error": is_error,
                    "response": response,
                    "sandbox_url": sandbox_url,
                    "title": title,
                    "files": files,
                },
            )

            if is_error:
                logger.warning(
                    f"Run for project {project_id} ended without "
                    f"{'a summary' if not summary else 'files'} ({result.status.value})"
                )

            return {
                "url": sandbox_url,
                "title": DEFAULT_FRAGMENT_TITLE,
                "files": files,
                "summary": summary,
            }

        return code_agent_function

    def _create_agent(
        self, name: str, system_prompt: str, temperature: float, with_tools: bool = False
    ) -> CodeAgent:
        if with_tools:
            return CodeAgent(
                name=name,
                system_prompt=system_prompt,
                llm=self.llm_factory(temperature),
                tools=[tool_class() for tool_class in TOOL_REGISTRY.values()],
                on_response=capture_task_summary,
            )
        return CodeAgent(
            name=name,
            system_prompt=system_prompt,
            llm=self.llm_factory(temperature),
        )
