"""Shared fixtures: scripted chat model, in-memory sandbox and database."""

from typing import Dict, List, Optional

import pytest
from langchain_core.messages import AIMessage
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from codeagent.db import Base, MessageRepository
from codeagent.sandbox import CommandResult, SandboxError, SandboxNotFoundError


class ScriptedChatModel:
    """Chat model double that replays queued responses in call order."""

    def __init__(self, responses=None, default: str = "Still working on it."):
        self.responses = list(responses or [])
        self.default = default
        self.calls: List[list] = []
        self.bound_tools: Optional[list] = None

    def bind_tools(self, tools):
        self.bound_tools = tools
        return self

    async def ainvoke(self, messages):
        self.calls.append(list(messages))
        item = self.responses.pop(0) if self.responses else self.default
        return AIMessage(content=item) if isinstance(item, str) else item


class FakeFiles:
    def __init__(self):
        self.store: Dict[str, str] = {}

    def write(self, path: str, content: str) -> None:
        self.store[path] = content

    def read(self, path: str) -> str:
        if path not in self.store:
            raise SandboxError(f"File not found: {path}")
        return self.store[path]


class FakeCommands:
    def __init__(self):
        self.history: List[str] = []
        self.results: Dict[str, object] = {}

    def run(self, command: str) -> CommandResult:
        self.history.append(command)
        result = self.results.get(command)
        if isinstance(result, Exception):
            raise result
        return result or CommandResult(exit_code=0, stdout=f"ran {command}\n", stderr="")


class FakeSandbox:
    def __init__(self, sandbox_id: str = "sbx-1"):
        self.sandbox_id = sandbox_id
        self.files = FakeFiles()
        self.commands = FakeCommands()
        self.timeout: Optional[int] = None

    def set_timeout(self, seconds: int) -> None:
        self.timeout = seconds

    def get_url(self, port: Optional[int] = None) -> str:
        return "http://localhost:49153"


class FakeSandboxManager:
    def __init__(self):
        self.created = 0
        self.templates: List[str] = []
        self.sandboxes: Dict[str, FakeSandbox] = {}

    async def create(self, template: Optional[str] = None) -> FakeSandbox:
        self.created += 1
        self.templates.append(template)
        sandbox = FakeSandbox(f"sbx-{self.created}")
        self.sandboxes[sandbox.sandbox_id] = sandbox
        return sandbox

    async def connect(self, sandbox_id: str) -> FakeSandbox:
        if sandbox_id not in self.sandboxes:
            raise SandboxNotFoundError(f"Sandbox not found: {sandbox_id}")
        return self.sandboxes[sandbox_id]


@pytest.fixture
def sandbox():
    return FakeSandbox()


@pytest.fixture
def sandbox_manager():
    return FakeSandboxManager()


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def repository(session_factory):
    return MessageRepository(session_factory)


@pytest.fixture
def project(repository):
    return repository.create_project("Test project")
