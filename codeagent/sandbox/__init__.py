"""Sandbox provisioning and access."""

from codeagent.sandbox.errors import (
    CommandExitError,
    SandboxError,
    SandboxNotFoundError,
)
from codeagent.sandbox.manager import CommandResult, Sandbox, SandboxManager

__all__ = [
    "CommandExitError",
    "CommandResult",
    "Sandbox",
    "SandboxError",
    "SandboxManager",
    "SandboxNotFoundError",
]
