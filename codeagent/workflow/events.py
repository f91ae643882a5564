"""Inbound events that trigger workflow runs."""

from typing import Any, Awaitable, Callable, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from codeagent.db import MessageRepository
from codeagent.utils import logger
from codeagent.workflow.functions import CodeAgentWorkflow

RUN_EVENT = "code-agent/run"


class RunEventData(BaseModel):
    """Payload of a run event: ``{projectId, value}``."""

    model_config = ConfigDict(populate_by_name=True)

    project_id: str = Field(alias="projectId", min_length=1)
    value: str = Field(min_length=1, max_length=10000)


class Event(BaseModel):
    """A named event with a JSON payload."""

    name: str
    data: Dict[str, Any] = Field(default_factory=dict)
    id: str = Field(default_factory=lambda: str(uuid4()))


Handler = Callable[[Event], Awaitable[Any]]


class UnknownEventError(LookupError):
    """Raised when no handler is registered for an event name."""


class EventClient:
    """Routes events to the functions registered for their name."""

    def __init__(self):
        self._handlers: Dict[str, Handler] = {}

    def register(self, name: str, handler: Handler) -> None:
        self._handlers[name] = handler

    def on(self, name: str) -> Callable[[Handler], Handler]:
        """Decorator form of ``register``."""

        def decorator(handler: Handler) -> Handler:
            self.register(name, handler)
            return handler

        return decorator

    async def send(self, event: Event) -> Any:
        handler = self._handlers.get(event.name)
        if handler is None:
            raise UnknownEventError(f"No function registered for event: {event.name}")

        logger.debug(f"Dispatching {event.name} ({event.id})")
        return await handler(event)


def create_event_client(workflow: Optional[CodeAgentWorkflow] = None) -> EventClient:
    """Build a client with the code agent workflow bound to the run event."""
    workflow = workflow or CodeAgentWorkflow()
    client = EventClient()

    @client.on(RUN_EVENT)
    async def run_code_agent(event: Event) -> Dict[str, Any]:
        data = RunEventData.model_validate(event.data)
        return await workflow.run(data.project_id, data.value, thread_id=event.id)

    return client


async def submit_prompt(
    client: EventClient,
    repository: MessageRepository,
    project_id: str,
    value: str,
) -> Dict[str, Any]:
    """Store the user's prompt, then trigger a run for it."""
    data = RunEventData(project_id=project_id, value=value)
    repository.create_user_message(data.project_id, data.value)
    return await client.send(
        Event(name=RUN_EVENT, data=data.model_dump(by_alias=True))
    )
