"""Queries and writes used by the workflow and the CLI."""

from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload, sessionmaker

from codeagent.db.models import (
    Fragment,
    Message,
    MessageRole,
    MessageType,
    Project,
    utc_now,
)
from codeagent.db.session import session_scope
from codeagent.utils import logger

ERROR_MESSAGE = "Something went wrong. Please try again."


class ProjectNotFoundError(LookupError):
    """Raised when a project id does not exist."""


class MessageRepository:
    """Persistence for projects, messages and fragments."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def create_project(self, name: str) -> Project:
        with session_scope(self.session_factory) as session:
            project = Project(name=name)
            session.add(project)
            session.flush()
            logger.info(f"Created project {project.id} ({name})")
            return project

    def get_project(self, project_id: str) -> Project:
        with session_scope(self.session_factory) as session:
            project = session.get(Project, project_id)
            if project is None:
                raise ProjectNotFoundError(f"Project not found: {project_id}")
            return project

    def list_projects(self) -> List[Project]:
        with session_scope(self.session_factory) as session:
            stmt = select(Project).order_by(Project.updated_at.desc())
            return list(session.scalars(stmt).all())

    def create_user_message(self, project_id: str, content: str) -> Message:
        """Store the prompt a user sent to a project."""
        with session_scope(self.session_factory) as session:
            if session.get(Project, project_id) is None:
                raise ProjectNotFoundError(f"Project not found: {project_id}")

            message = Message(
                project_id=project_id,
                role=MessageRole.USER,
                content=content,
                type=MessageType.RESULT,
            )
            session.add(message)
            session.flush()
            return message

    def list_messages(self, project_id: str) -> List[Message]:
        """All messages of a project, oldest first, with fragments loaded."""
        with session_scope(self.session_factory) as session:
            stmt = (
                select(Message)
                .where(Message.project_id == project_id)
                .options(selectinload(Message.fragment))
                .order_by(Message.created_at.asc())
            )
            return list(session.scalars(stmt).all())

    def get_previous_messages(self, project_id: str, limit: int = 5) -> List[Dict[str, str]]:
        """
        Load the newest ``limit`` messages as agent context.

        Rows are fetched newest first so the limit keeps the latest turns,
        then reversed to chronological order.
        """
        with session_scope(self.session_factory) as session:
            stmt = (
                select(Message)
                .where(Message.project_id == project_id)
                .order_by(Message.created_at.desc())
                .limit(limit)
            )
            rows = session.scalars(stmt).all()

            return [
                {
                    "role": "assistant" if row.role == MessageRole.ASSISTANT else "user",
                    "content": row.content,
                }
                for row in reversed(rows)
            ]

    def save_result(
        self,
        project_id: str,
        *,
        is_error: bool,
        response: str = "",
        sandbox_url: str = "",
        title: str = "",
        files: Optional[Dict[str, str]] = None,
    ) -> Message:
        """
        Store the assistant message of a run.

        A failed run stores the fixed error message and no fragment. A
        successful run stores the response text with a fragment holding the
        sandbox URL, title and files.
        """
        with session_scope(self.session_factory) as session:
            if is_error:
                message = Message(
                    project_id=project_id,
                    role=MessageRole.ASSISTANT,
                    content=ERROR_MESSAGE,
                    type=MessageType.ERROR,
                    fragment=None,
                )
            else:
                message = Message(
                    project_id=project_id,
                    role=MessageRole.ASSISTANT,
                    content=response,
                    type=MessageType.RESULT,
                    fragment=Fragment(
                        sandbox_url=sandbox_url,
                        title=title,
                        files=dict(files or {}),
                    ),
                )

            session.add(message)
            session.flush()

            project = session.get(Project, project_id)
            if project is not None:
                project.updated_at = utc_now()

            logger.info(f"Saved {message.type.value} message {message.id} for project {project_id}")
            return message
