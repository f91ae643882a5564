"""LLM-backed agent with native tool calling."""

from typing import Any, Awaitable, Callable, Dict, List, Optional

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from langchain_openai import AzureChatOpenAI, ChatOpenAI

from codeagent.agent.output import last_assistant_text
from codeagent.agent.prompts import TASK_SUMMARY_TAG
from codeagent.agent.state import AgentState
from codeagent.config import config
from codeagent.tools import BaseTool, ToolResult
from codeagent.utils import logger

ModelRunner = Callable[[List[BaseMessage]], Awaitable[AIMessage]]
ToolRunner = Callable[[str, Dict[str, Any]], Awaitable[ToolResult]]
ResponseHook = Callable[[AIMessage, AgentState], None]


def create_llm(
    model: Optional[str] = None, temperature: Optional[float] = None
) -> BaseChatModel:
    """Build the chat model for the configured provider."""
    model_name = model or config.model_name
    temperature = config.temperature if temperature is None else temperature

    if config.llm_provider == "azure":
        logger.info("Initializing Azure OpenAI client")
        return AzureChatOpenAI(
            azure_endpoint=config.azure_openai_endpoint,
            azure_deployment=config.azure_openai_deployment,
            api_key=config.azure_openai_api_key,
            api_version=config.azure_api_version,
            max_tokens=config.max_tokens,
            temperature=temperature,
        )

    if config.llm_provider == "openai":
        logger.info(f"Initializing OpenAI client ({model_name})")
        return ChatOpenAI(
            model=model_name,
            api_key=config.openai_api_key,
            max_tokens=config.max_tokens,
            temperature=temperature,
        )

    logger.info(f"Initializing Anthropic client ({model_name})")
    return ChatAnthropic(
        model=model_name,
        api_key=config.api_key,
        max_tokens=config.max_tokens,
        temperature=temperature,
    )


def capture_task_summary(response: AIMessage, state: AgentState) -> None:
    """Store the assistant text as the summary once it carries the completion tag."""
    text = last_assistant_text([response])
    if text and TASK_SUMMARY_TAG in text:
        state.summary = text


class CodeAgent:
    """
    A single LLM-backed actor.

    One ``run`` is one model turn: the model sees the system prompt plus the
    shared conversation, and every tool call it makes is executed before the
    turn ends. Model and tool invocations go through injectable runners so
    callers can checkpoint them.
    """

    def __init__(
        self,
        name: str,
        system_prompt: str,
        llm: Optional[BaseChatModel] = None,
        tools: Optional[List[BaseTool]] = None,
        model_runner: Optional[ModelRunner] = None,
        tool_runner: Optional[ToolRunner] = None,
        on_response: Optional[ResponseHook] = None,
    ):
        """
        Initialize the agent.

        Args:
            name: Agent name, used in logs
            system_prompt: System prompt sent on every turn
            llm: Chat model (default: built from config unless model_runner is given)
            tools: Tools the model may call
            model_runner: Replaces the direct model call
            tool_runner: Replaces the direct tool call
            on_response: Hook run after every model turn
        """
        self.name = name
        self.system_prompt = system_prompt
        if llm is None and model_runner is None:
            llm = create_llm()
        self.llm = llm
        self.tools: Dict[str, BaseTool] = {tool.name: tool for tool in tools or []}
        self.model_runner = model_runner or self.invoke_model
        self.tool_runner = tool_runner or self.invoke_tool
        self.on_response = on_response

        if self.llm is not None and self.tools:
            self.llm_with_tools = self.llm.bind_tools(
                [tool.to_langchain_tool() for tool in self.tools.values()]
            )
        else:
            self.llm_with_tools = self.llm

    async def invoke_model(self, messages: List[BaseMessage]) -> AIMessage:
        if self.llm_with_tools is None:
            raise RuntimeError(f"Agent {self.name} has no chat model")
        return await self.llm_with_tools.ainvoke(messages)

    async def invoke_tool(self, tool_name: str, arguments: Dict[str, Any]) -> ToolResult:
        return await self.tools[tool_name].run(**arguments)

    async def run(self, state: AgentState) -> AIMessage:
        """Run one turn against the shared state."""
        messages = [SystemMessage(content=self.system_prompt), *state.messages]

        response = await self.model_runner(messages)
        state.messages.append(response)

        for tool_call in response.tool_calls or []:
            tool_name = tool_call["name"]
            tool = self.tools.get(tool_name)

            if tool is None:
                result = ToolResult(
                    success=False, output="", error=f"Unknown tool: {tool_name}"
                )
            else:
                logger.debug(f"[{self.name}] calling {tool_name}")
                result = await self.tool_runner(tool_name, tool_call["args"])
                tool.update_state(state, result)

            if not result.success:
                logger.warning(f"Tool {tool_name} failed: {result.error}")

            state.messages.append(
                ToolMessage(
                    content=result.content,
                    tool_call_id=tool_call["id"],
                    name=tool_name,
                )
            )

        if self.on_response:
            self.on_response(response, state)

        return response

    async def ask(self, prompt: str) -> AIMessage:
        """Single-shot run on a fresh state."""
        state = AgentState(messages=[HumanMessage(content=prompt)])
        return await self.run(state)
