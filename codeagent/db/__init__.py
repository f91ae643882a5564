"""Relational persistence for conversations and fragments."""

from codeagent.db.models import Base, Fragment, Message, MessageRole, MessageType, Project
from codeagent.db.repository import ERROR_MESSAGE, MessageRepository, ProjectNotFoundError
from codeagent.db.session import get_engine, get_session_factory, init_db, session_scope

__all__ = [
    "Base",
    "ERROR_MESSAGE",
    "Fragment",
    "Message",
    "MessageRepository",
    "MessageRole",
    "MessageType",
    "Project",
    "ProjectNotFoundError",
    "get_engine",
    "get_session_factory",
    "init_db",
    "session_scope",
]
