"""Tool tests against an in-memory sandbox."""

import json

import pytest

from codeagent.agent import AgentState
from codeagent.sandbox import CommandExitError
from codeagent.sandbox.executor import SandboxExecutor
from codeagent.tools import CreateOrUpdateFilesTool


@pytest.mark.asyncio
class TestTerminalTool:
    """Test terminal command execution."""

    async def test_returns_stdout(self, sandbox):
        executor = SandboxExecutor(sandbox)

        result = await executor.execute_tool("terminal", {"command": "ls"})

        assert result.success
        assert result.output == "ran ls\n"
        assert sandbox.commands.history == ["ls"]

    async def test_failure_becomes_description(self, sandbox):
        sandbox.commands.results["npm run lint"] = CommandExitError(
            "npm run lint", 1, "partial output", "lint error"
        )
        executor = SandboxExecutor(sandbox)

        result = await executor.execute_tool("terminal", {"command": "npm run lint"})

        assert not result.success
        assert result.content.startswith("Command failed:")
        assert "stdout: partial output" in result.content
        assert "stderr: lint error" in result.content

    async def test_dangerous_command_not_executed(self, sandbox):
        executor = SandboxExecutor(sandbox)

        result = await executor.execute_tool("terminal", {"command": "rm -rf /"})

        assert not result.success
        assert "Command failed" in result.content
        assert sandbox.commands.history == []

    async def test_missing_parameter(self, sandbox):
        executor = SandboxExecutor(sandbox)

        result = await executor.execute_tool("terminal", {})

        assert not result.success
        assert "Tool execution failed" in result.error


@pytest.mark.asyncio
class TestFileTools:
    """Test createOrUpdateFiles and readFiles."""

    async def test_write_merges_into_state(self, sandbox):
        executor = SandboxExecutor(sandbox)
        tool = executor.get_tool("createOrUpdateFiles")
        state = AgentState(files={"app/layout.tsx": "layout"})

        result = await executor.execute_tool(
            "createOrUpdateFiles",
            {"files": [{"path": "app/page.tsx", "content": "page"}]},
        )
        tool.update_state(state, result)

        assert result.success
        assert sandbox.files.store == {"app/page.tsx": "page"}
        assert state.files == {"app/layout.tsx": "layout", "app/page.tsx": "page"}

    async def test_rewrite_keeps_latest_content(self, sandbox):
        executor = SandboxExecutor(sandbox)
        tool = executor.get_tool("createOrUpdateFiles")
        state = AgentState()

        for content in ("v1", "v2"):
            result = await executor.execute_tool(
                "createOrUpdateFiles",
                {"files": [{"path": "app/page.tsx", "content": content}]},
            )
            tool.update_state(state, result)

        assert state.files == {"app/page.tsx": "v2"}

    async def test_failed_write_leaves_state(self, sandbox):
        executor = SandboxExecutor(sandbox)
        tool = executor.get_tool("createOrUpdateFiles")
        state = AgentState()

        result = await executor.execute_tool(
            "createOrUpdateFiles",
            {"files": [{"path": "/etc/hosts", "content": "x"}]},
        )
        tool.update_state(state, result)

        assert not result.success
        assert result.content.startswith("Error:")
        assert state.files == {}

    async def test_read_files(self, sandbox):
        sandbox.files.store["app/page.tsx"] = "page"
        executor = SandboxExecutor(sandbox)

        result = await executor.execute_tool("readFiles", {"files": ["app/page.tsx"]})

        assert result.success
        assert json.loads(result.output) == [{"path": "app/page.tsx", "content": "page"}]

    async def test_read_missing_file(self, sandbox):
        executor = SandboxExecutor(sandbox)

        result = await executor.execute_tool("readFiles", {"files": ["missing.tsx"]})

        assert not result.success
        assert "File not found" in result.content

    async def test_unknown_tool(self, sandbox):
        result = await SandboxExecutor(sandbox).execute_tool("Git", {})

        assert not result.success
        assert result.error == "Unknown tool: Git"


class TestToolWithoutSandbox:
    """Test tools report a missing executor instead of raising."""

    @pytest.mark.asyncio
    async def test_no_executor(self):
        result = await CreateOrUpdateFilesTool().run(
            files=[{"path": "a.txt", "content": "a"}]
        )

        assert not result.success
