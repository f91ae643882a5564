"""Terminal tool: run shell commands inside the sandbox."""

from pydantic import Field

from codeagent.config import config
from codeagent.sandbox.errors import CommandExitError
from codeagent.security.validator import InputValidator
from codeagent.tools.base import (
    BaseTool,
    ToolParameters,
    ToolResult,
)
from codeagent.utils import logger, truncate_output


class TerminalParameters(ToolParameters):
    """Parameters for terminal tool."""

    command: str = Field(description="The shell command to execute")


class TerminalTool(BaseTool):
    """Tool for executing commands in the sandbox terminal."""

    name = "terminal"
    description = "Use the terminal to run commands"
    parameters_class = TerminalParameters

    async def execute(self, command: str, **kwargs) -> ToolResult:
        """Run the command and return its stdout.

        Failures are reported as a description string rather than raised so
        the agent can react to them on its next turn.
        """
        stdout = ""
        stderr = ""

        try:
            validator = InputValidator(enabled=config.enable_command_validation)
            validator.validate_command(command)

            logger.info(f"Executing command: {command}")
            result = self.sandbox.commands.run(command)

            return ToolResult(
                success=True,
                output=truncate_output(result.stdout),
                metadata={"command": command, "exit_code": result.exit_code},
            )

        except CommandExitError as e:
            stdout, stderr = e.stdout, e.stderr
            error = e
        except Exception as e:
            error = e

        logger.warning(f"Command failed: {command}: {error}")
        message = truncate_output(
            f"Command failed: {error} \nstdout: {stdout}\nstderr: {stderr}"
        )
        return ToolResult(
            success=False,
            output=message,
            error=message,
            metadata={"command": command},
        )
