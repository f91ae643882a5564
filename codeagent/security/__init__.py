"""Security components for the code agent."""

from codeagent.security.validator import InputValidator

__all__ = [
    "InputValidator",
]
