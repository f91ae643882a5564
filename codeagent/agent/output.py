"""Extracting literal text from agent output."""

from typing import Any, List, Optional, Sequence

from langchain_core.messages import AIMessage, BaseMessage

DEFAULT_FRAGMENT_TITLE = "Fragment"


def content_text(content: Any) -> str:
    """Join the text parts of message content.

    Content is either a plain string or a list of content blocks, where a
    block is a string or a dict such as ``{"type": "text", "text": "..."}``.
    Non-text blocks (tool use, images) are skipped.
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content

    parts: List[str] = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text") or block.get("content") or "")
    return "".join(parts)


def last_assistant_text(messages: Sequence[BaseMessage]) -> Optional[str]:
    """Return the text of the most recent assistant message, if any."""
    for message in reversed(messages):
        if isinstance(message, AIMessage):
            return content_text(message.content)
    return None


def parse_agent_output(value: Any) -> str:
    """
    Return the literal text of an agent result.

    Accepts a plain string, a message, a list of messages (the first one is
    used), or a tagged envelope ``{"type": "text", "content": ...}``. Anything
    that carries no text falls back to ``"Fragment"``. Plain strings are
    returned unchanged.
    """
    if isinstance(value, str):
        return value

    if isinstance(value, (list, tuple)):
        if not value:
            return DEFAULT_FRAGMENT_TITLE
        value = value[0]
        if isinstance(value, str):
            return value

    if isinstance(value, BaseMessage):
        if not isinstance(value, AIMessage) and value.type != "human":
            return DEFAULT_FRAGMENT_TITLE
        return content_text(value.content)

    if isinstance(value, dict):
        if value.get("type") != "text":
            return DEFAULT_FRAGMENT_TITLE
        if "content" in value:
            return content_text(value["content"])
        return content_text(value.get("text"))

    return DEFAULT_FRAGMENT_TITLE
