"""Agent, router loop and output parsing tests."""

import pytest
from conftest import ScriptedChatModel, FakeSandbox
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from codeagent.agent import (
    AgentState,
    CodeAgent,
    Network,
    NetworkStatus,
    capture_task_summary,
    last_assistant_text,
    parse_agent_output,
    summary_router,
)
from codeagent.sandbox.executor import SandboxExecutor
from codeagent.tools import TOOL_REGISTRY

SUMMARY = "<task_summary>\nBuilt a landing page.\n</task_summary>"


def write_call(path: str, content: str, call_id: str = "call_1") -> AIMessage:
    return AIMessage(
        content="",
        tool_calls=[
            {
                "name": "createOrUpdateFiles",
                "args": {"files": [{"path": path, "content": content}]},
                "id": call_id,
            }
        ],
    )


def make_agent(llm, sandbox=None) -> CodeAgent:
    executor = SandboxExecutor(sandbox or FakeSandbox())
    return CodeAgent(
        name="code-agent",
        system_prompt="You write code.",
        llm=llm,
        tools=list(executor.tools.values()),
        on_response=capture_task_summary,
    )


class TestParseAgentOutput:
    """Test literal text extraction."""

    @pytest.mark.parametrize(
        "value",
        [
            "Landing Page",
            AIMessage(content="Landing Page"),
            AIMessage(content=[{"type": "text", "text": "Landing "}, {"type": "text", "text": "Page"}]),
            [AIMessage(content="Landing Page")],
            {"type": "text", "content": "Landing Page"},
            {"type": "text", "content": ["Landing ", "Page"]},
        ],
    )
    def test_plain_and_tagged_agree(self, value):
        assert parse_agent_output(value) == "Landing Page"

    def test_idempotent(self):
        text = parse_agent_output(AIMessage(content="Chat Widget"))
        assert parse_agent_output(text) == text

    def test_skips_non_text_blocks(self):
        message = AIMessage(
            content=[
                {"type": "text", "text": "Done"},
                {"type": "tool_use", "id": "t1", "name": "terminal", "input": {}},
            ]
        )
        assert parse_agent_output(message) == "Done"

    @pytest.mark.parametrize(
        "value",
        [[], {"type": "tool_call", "content": "ignored"}, ToolMessage(content="x", tool_call_id="t1"), None],
    )
    def test_non_text_falls_back(self, value):
        assert parse_agent_output(value) == "Fragment"

    def test_last_assistant_text(self):
        messages = [
            HumanMessage(content="hi"),
            AIMessage(content="first"),
            ToolMessage(content="tool", tool_call_id="t1"),
            AIMessage(content="second"),
        ]
        assert last_assistant_text(messages) == "second"
        assert last_assistant_text([HumanMessage(content="hi")]) is None


class TestAgentState:
    """Test state seeding and failure classification."""

    def test_from_history_keeps_order(self):
        state = AgentState.from_history(
            [
                {"role": "user", "content": "one"},
                {"role": "assistant", "content": "two"},
                {"role": "user", "content": "three"},
            ]
        )

        assert [type(m) for m in state.messages] == [HumanMessage, AIMessage, HumanMessage]
        assert [m.content for m in state.messages] == ["one", "two", "three"]

    @pytest.mark.parametrize(
        "summary, files, is_error",
        [
            ("", {}, True),
            (SUMMARY, {}, True),
            ("", {"app/page.tsx": "x"}, True),
            (SUMMARY, {"app/page.tsx": "x"}, False),
        ],
    )
    def test_is_error(self, summary, files, is_error):
        assert AgentState(summary=summary, files=files).is_error is is_error

    def test_is_complete(self):
        assert not AgentState().is_complete
        assert AgentState(summary=SUMMARY).is_complete


@pytest.mark.asyncio
class TestCodeAgent:
    """Test a single agent turn."""

    async def test_turn_runs_tools_and_updates_state(self):
        sandbox = FakeSandbox()
        llm = ScriptedChatModel([write_call("app/page.tsx", "page")])
        agent = make_agent(llm, sandbox)
        state = AgentState(messages=[HumanMessage(content="build it")])

        await agent.run(state)

        assert state.files == {"app/page.tsx": "page"}
        assert sandbox.files.store == {"app/page.tsx": "page"}
        assert isinstance(state.messages[-1], ToolMessage)
        assert state.messages[-1].tool_call_id == "call_1"
        assert state.summary == ""

    async def test_system_prompt_leads_context(self):
        llm = ScriptedChatModel(["ok"])
        agent = make_agent(llm)

        await agent.run(AgentState(messages=[HumanMessage(content="hello")]))

        sent = llm.calls[0]
        assert isinstance(sent[0], SystemMessage)
        assert sent[0].content == "You write code."
        assert sent[1].content == "hello"

    async def test_tools_bound_to_model(self):
        llm = ScriptedChatModel()
        make_agent(llm)

        names = [tool["function"]["name"] for tool in llm.bound_tools]
        assert names == list(TOOL_REGISTRY)

    async def test_summary_captured_from_tag(self):
        llm = ScriptedChatModel([SUMMARY])
        agent = make_agent(llm)
        state = AgentState()

        await agent.run(state)

        assert state.summary == SUMMARY

    async def test_text_without_tag_is_not_summary(self):
        agent = make_agent(ScriptedChatModel(["Working on the layout"]))
        state = AgentState()

        await agent.run(state)

        assert state.summary == ""

    async def test_unknown_tool_reported(self):
        llm = ScriptedChatModel(
            [AIMessage(content="", tool_calls=[{"name": "deploy", "args": {}, "id": "c9"}])]
        )
        agent = make_agent(llm)
        state = AgentState()

        await agent.run(state)

        assert state.messages[-1].content == "Unknown tool: deploy"

    async def test_ask_uses_fresh_state(self):
        llm = ScriptedChatModel(["Landing Page"])
        agent = CodeAgent(name="title", system_prompt="Title it.", llm=llm)

        response = await agent.ask(SUMMARY)

        assert parse_agent_output(response) == "Landing Page"
        assert [m.content for m in llm.calls[0]] == ["Title it.", SUMMARY]

    async def test_runner_without_model(self):
        sandbox = FakeSandbox()
        executor = SandboxExecutor(sandbox)
        replies = [write_call("app/page.tsx", "page")]

        async def runner(messages):
            return replies.pop(0)

        agent = CodeAgent(
            name="code-agent",
            system_prompt="You write code.",
            tools=list(executor.tools.values()),
            model_runner=runner,
            tool_runner=executor.execute_tool,
        )
        state = AgentState()

        await agent.run(state)

        assert agent.llm is None
        assert state.files == {"app/page.tsx": "page"}
        with pytest.raises(RuntimeError):
            await agent.invoke_model([])


@pytest.mark.asyncio
class TestNetwork:
    """Test the router loop."""

    async def test_stops_when_summary_set(self):
        llm = ScriptedChatModel([write_call("app/page.tsx", "page"), SUMMARY])
        network = Network([make_agent(llm)], max_iter=15)

        result = await network.run("build a page")

        assert result.status is NetworkStatus.COMPLETED
        assert result.iterations == 2
        assert len(llm.calls) == 2
        assert result.state.summary == SUMMARY
        assert result.state.files == {"app/page.tsx": "page"}

    @pytest.mark.parametrize("cap", [1, 3, 15])
    async def test_never_exceeds_cap(self, cap):
        llm = ScriptedChatModel()
        network = Network([make_agent(llm)], max_iter=cap)

        result = await network.run("build a page")

        assert result.status is NetworkStatus.CAPPED
        assert result.iterations == cap
        assert len(llm.calls) == cap
        assert result.state.summary == ""

    async def test_summary_on_last_iteration_completes(self):
        llm = ScriptedChatModel(["thinking", SUMMARY])
        network = Network([make_agent(llm)], max_iter=2)

        result = await network.run("build a page")

        assert result.status is NetworkStatus.COMPLETED
        assert result.iterations == 2

    async def test_existing_summary_runs_no_turn(self):
        llm = ScriptedChatModel()
        network = Network([make_agent(llm)], max_iter=5)

        result = await network.run("again", AgentState(summary=SUMMARY))

        assert result.status is NetworkStatus.COMPLETED
        assert result.iterations == 0
        assert llm.calls == []

    async def test_prompt_follows_history(self):
        llm = ScriptedChatModel([SUMMARY])
        state = AgentState.from_history(
            [{"role": "user", "content": "old"}, {"role": "assistant", "content": "done"}]
        )

        await Network([make_agent(llm)]).run("new", state)

        assert [m.content for m in llm.calls[0][1:]] == ["old", "done", "new"]

    async def test_custom_router(self):
        llm = ScriptedChatModel()
        calls = []

        def router(network, state):
            calls.append(len(state.messages))
            return None if len(calls) > 2 else network.default_agent

        result = await Network([make_agent(llm)], max_iter=10, router=router).run("go")

        assert result.iterations == 2
        assert result.status is NetworkStatus.COMPLETED

    async def test_summary_router(self):
        network = Network([make_agent(ScriptedChatModel())])

        assert summary_router(network, AgentState()) is network.default_agent
        assert summary_router(network, AgentState(summary=SUMMARY)) is None

    async def test_invalid_cap(self):
        with pytest.raises(ValueError):
            Network([make_agent(ScriptedChatModel())], max_iter=0)

    async def test_requires_agent(self):
        with pytest.raises(ValueError):
            Network([])
