"""Input validation for commands and paths the agent sends to the sandbox."""

import re

from codeagent.utils import logger


class InputValidator:
    """Validates agent inputs before they reach the sandbox."""

    # Dangerous command patterns
    DANGEROUS_COMMANDS = [
        r"\brm\s+-rf\s+/(\s|$)",  # rm -rf /
        r"\brm\s+-rf\s+\*",
        r";\s*rm\s+-rf\s+/",
        r"&&\s*rm\s+-rf\s+/",
        r"\|\s*rm\s+-rf",
        r"curl.*\|\s*(ba)?sh",
        r"wget.*\|\s*(ba)?sh",
        r">\s*/dev/sd",
        r"mkfs\.",
        r"\bdd\s+if=",
        r":\(\)\s*\{.*:\|:&\s*\};:",  # Fork bomb
        r"\bshutdown\b",
        r"\breboot\b",
    ]

    # System paths the agent has no reason to write
    DANGEROUS_PATHS = [
        "/etc/",
        "/root/",
        "/boot/",
        "/sys/",
        "/proc/",
        "/dev/",
        "/bin/",
        "/sbin/",
        "/usr/",
    ]

    def __init__(self, enabled: bool = True):
        """Initialize input validator."""
        self.enabled = enabled

    def validate_command(self, command: str) -> bool:
        """
        Validate a shell command for safety.

        Args:
            command: Command to validate

        Returns:
            True if safe

        Raises:
            ValueError: If command is dangerous
        """
        if not self.enabled:
            return True

        for pattern in self.DANGEROUS_COMMANDS:
            if re.search(pattern, command, re.IGNORECASE):
                raise ValueError(
                    f"Command contains dangerous pattern: {pattern}. "
                    f"Command: {command[:100]}"
                )

        if "$((" in command:
            logger.warning(f"Suspicious command syntax: {command[:100]}")

        return True

    def validate_file_path(self, file_path: str) -> bool:
        """
        Validate a file path for safety.

        Raises:
            ValueError: If path is empty, points into a system directory or
                contains a null byte
        """
        if not self.enabled:
            return True

        if not file_path.strip():
            raise ValueError("Path is empty")

        if "\x00" in file_path:
            raise ValueError("Path contains null byte")

        for dangerous_path in self.DANGEROUS_PATHS:
            if file_path.startswith(dangerous_path):
                raise ValueError(
                    f"Access to path is restricted: {file_path}. "
                    f"Cannot access system directory: {dangerous_path}"
                )

        if ".." in file_path.split("/"):
            logger.warning(f"Path contains ..: {file_path}")

        return True
