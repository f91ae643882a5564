"""Sandbox error types."""


class SandboxError(Exception):
    """Base error for sandbox failures."""


class SandboxNotFoundError(SandboxError):
    """Raised when a sandbox id no longer resolves to a container."""


class CommandExitError(SandboxError):
    """Raised when a sandbox command exits with a non-zero code."""

    def __init__(self, command: str, exit_code: int, stdout: str, stderr: str):
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Command exited with code {exit_code}: {command}")
