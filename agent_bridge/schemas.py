"""Request/event models — the contracts on both sides of the bridge.

Inbound:    RunRequest        (AG-UI RunAgentInput sent by the browser)
Upstream:   UpstreamRequest   (body POSTed to the agent service)
            UpstreamEvent     (one parsed frame of the agent service's stream)
Downstream: *Event            (AG-UI events re-streamed to the browser)

Wire fields are camelCase; Python attributes are snake_case.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Inbound
# ---------------------------------------------------------------------------


class InboundMessage(BaseModel):
    """A conversation message. ``content`` may be text or structured parts."""

    model_config = ConfigDict(extra="ignore")

    role: str = "user"
    content: Any = None


class InboundTool(BaseModel):
    """A client-side tool descriptor; only the name is forwarded."""

    model_config = ConfigDict(extra="ignore")

    name: str


class RunRequest(CamelModel):
    """Incoming request body. Everything is optional; the adapter fills gaps."""

    model_config = ConfigDict(extra="ignore")

    thread_id: str | None = None
    run_id: str | None = None
    messages: list[InboundMessage] | None = None
    state: Any = None
    tools: list[InboundTool] | None = None


# ---------------------------------------------------------------------------
# Upstream
# ---------------------------------------------------------------------------


class UpstreamMessage(BaseModel):
    role: str
    content: str


class UpstreamTool(BaseModel):
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class UpstreamRequest(CamelModel):
    """What the agent service accepts. Immutable once adapted."""

    model_config = ConfigDict(frozen=True)

    thread_id: str
    run_id: str
    messages: list[UpstreamMessage] = []
    state: Any = Field(default_factory=dict)
    tools: list[UpstreamTool] = []


class UpstreamEvent(CamelModel):
    """One event from the agent service stream.

    ``type`` is open-ended: unknown values are valid and get forwarded as CUSTOM.
    ``data`` is usually a mapping, but STATE_DELTA carries a list of patches.
    """

    type: str
    run_id: Any = None  # unused; any JSON value is accepted
    data: Any = None

    @property
    def payload(self) -> dict[str, Any]:
        """``data`` when it is a mapping, else an empty dict — for field lookups."""
        return self.data if isinstance(self.data, dict) else {}


# ---------------------------------------------------------------------------
# Downstream (AG-UI)
# ---------------------------------------------------------------------------


class EventType(str, Enum):
    RUN_STARTED = "RUN_STARTED"
    TEXT_MESSAGE_START = "TEXT_MESSAGE_START"
    TEXT_MESSAGE_CONTENT = "TEXT_MESSAGE_CONTENT"
    TEXT_MESSAGE_END = "TEXT_MESSAGE_END"
    TOOL_CALL_START = "TOOL_CALL_START"
    TOOL_CALL_ARGS = "TOOL_CALL_ARGS"
    TOOL_CALL_CONTENT = "TOOL_CALL_CONTENT"  # upstream only
    TOOL_CALL_END = "TOOL_CALL_END"
    STATE_DELTA = "STATE_DELTA"
    RUN_FINISHED = "RUN_FINISHED"
    RUN_ERROR = "RUN_ERROR"
    CUSTOM = "CUSTOM"


class BaseEvent(CamelModel):
    type: EventType


class RunStartedEvent(BaseEvent):
    type: Literal[EventType.RUN_STARTED] = EventType.RUN_STARTED
    thread_id: str
    run_id: str


class TextMessageStartEvent(BaseEvent):
    type: Literal[EventType.TEXT_MESSAGE_START] = EventType.TEXT_MESSAGE_START
    message_id: str
    role: str = "assistant"


class TextMessageContentEvent(BaseEvent):
    type: Literal[EventType.TEXT_MESSAGE_CONTENT] = EventType.TEXT_MESSAGE_CONTENT
    message_id: str
    delta: str


class TextMessageEndEvent(BaseEvent):
    type: Literal[EventType.TEXT_MESSAGE_END] = EventType.TEXT_MESSAGE_END
    message_id: str


class ToolCallStartEvent(BaseEvent):
    type: Literal[EventType.TOOL_CALL_START] = EventType.TOOL_CALL_START
    tool_call_id: str
    tool_call_name: str
    parent_message_id: str | None = None


class ToolCallArgsEvent(BaseEvent):
    """A JSON fragment the client appends to the tool call's argument text."""

    type: Literal[EventType.TOOL_CALL_ARGS] = EventType.TOOL_CALL_ARGS
    tool_call_id: str
    delta: str


class ToolCallEndEvent(BaseEvent):
    type: Literal[EventType.TOOL_CALL_END] = EventType.TOOL_CALL_END
    tool_call_id: str


class StateDeltaEvent(BaseEvent):
    type: Literal[EventType.STATE_DELTA] = EventType.STATE_DELTA
    delta: list[Any] = []


class RunFinishedEvent(BaseEvent):
    type: Literal[EventType.RUN_FINISHED] = EventType.RUN_FINISHED
    thread_id: str
    run_id: str


class RunErrorEvent(BaseEvent):
    type: Literal[EventType.RUN_ERROR] = EventType.RUN_ERROR
    message: str
    thread_id: str | None = None
    run_id: str | None = None


class CustomEvent(BaseEvent):
    type: Literal[EventType.CUSTOM] = EventType.CUSTOM
    name: str
    value: Any = None
