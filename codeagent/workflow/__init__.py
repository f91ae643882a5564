"""Workflow function and the events that trigger it."""

from codeagent.workflow.events import (
    RUN_EVENT,
    Event,
    EventClient,
    RunEventData,
    UnknownEventError,
    create_event_client,
    submit_prompt,
)
from codeagent.workflow.functions import CodeAgentWorkflow

__all__ = [
    "CodeAgentWorkflow",
    "Event",
    "EventClient",
    "RUN_EVENT",
    "RunEventData",
    "UnknownEventError",
    "create_event_client",
    "submit_prompt",
]
