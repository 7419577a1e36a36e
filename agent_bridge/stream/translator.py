"""Event translator — maps the agent service's events onto AG-UI events.

One translator per run. It owns the run's correlation state: the id of
the message and of the tool call currently open. Start events allocate
a fresh id; content and end events reuse whatever is current.

Tool calls need care. The client builds a tool call's arguments by
concatenating every TOOL_CALL_ARGS delta, so only a clean JSON object may
go there, and only once. Seed arguments ride along with the start event;
progress updates go out as CUSTOM "TOOL_PROGRESS"; results are fetched
by the client separately and never sent as args.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum

from agent_bridge.schemas import (
    BaseEvent,
    CustomEvent,
    EventType,
    RunErrorEvent,
    RunFinishedEvent,
    RunStartedEvent,
    StateDeltaEvent,
    TextMessageContentEvent,
    TextMessageEndEvent,
    TextMessageStartEvent,
    ToolCallArgsEvent,
    ToolCallEndEvent,
    ToolCallStartEvent,
    UpstreamEvent,
)
from agent_bridge.stream.ids import CorrelationIdAllocator

logger = logging.getLogger(__name__)

TOOL_PROGRESS = "TOOL_PROGRESS"
SEED_ARG_FIELDS = ("keyword", "input")


class RunPhase(str, Enum):
    INIT = "init"
    RUNNING = "running"
    TERMINAL = "terminal"


@dataclass
class RunCorrelationState:
    """Ids of the currently open message / tool call. Empty until a start event."""

    current_message_id: str = ""
    current_tool_call_id: str = ""


class EventTranslator:
    """Per-run state machine: INIT → RUNNING → TERMINAL."""

    def __init__(
        self,
        thread_id: str,
        run_id: str,
        ids: CorrelationIdAllocator | None = None,
    ) -> None:
        self.thread_id = thread_id
        self.run_id = run_id
        self.ids = ids or CorrelationIdAllocator()
        self.state = RunCorrelationState()
        self.phase = RunPhase.INIT

    @property
    def finished(self) -> bool:
        return self.phase is RunPhase.TERMINAL

    def translate(self, event: UpstreamEvent) -> list[BaseEvent]:
        """Translate one upstream event into zero or more downstream events."""
        if self.finished:
            logger.debug(f"Run {self.run_id} already finished, ignoring {event.type}")
            return []
        self.phase = RunPhase.RUNNING

        out = self._dispatch(event)
        logger.debug(
            f"Run {self.run_id}: {event.type or '<empty>'} → "
            f"{[e.type.value for e in out]}"
        )
        return out

    def _dispatch(self, event: UpstreamEvent) -> list[BaseEvent]:
        payload = event.payload

        match event.type:
            case EventType.RUN_STARTED.value:
                return [RunStartedEvent(thread_id=self.thread_id, run_id=self.run_id)]

            case EventType.TEXT_MESSAGE_START.value:
                message_id = self.ids.new_message_id()
                self.state.current_message_id = message_id
                return [
                    TextMessageStartEvent(
                        message_id=message_id,
                        role=_text(payload.get("role")) or "assistant",
                    )
                ]

            case EventType.TEXT_MESSAGE_CONTENT.value:
                return [
                    TextMessageContentEvent(
                        message_id=self.state.current_message_id,
                        delta=_text(payload.get("delta")),
                    )
                ]

            case EventType.TEXT_MESSAGE_END.value:
                return [TextMessageEndEvent(message_id=self.state.current_message_id)]

            case EventType.TOOL_CALL_START.value:
                return self._tool_call_start(payload)

            case EventType.TOOL_CALL_CONTENT.value:
                # Progress, not arguments. Appending it to args would corrupt them.
                return [CustomEvent(name=TOOL_PROGRESS, value=_raw(event))]

            case EventType.TOOL_CALL_END.value:
                # Result payload intentionally dropped; the client fetches it separately.
                return [ToolCallEndEvent(tool_call_id=self.state.current_tool_call_id)]

            case EventType.STATE_DELTA.value:
                delta = event.data if isinstance(event.data, list) else []
                return [StateDeltaEvent(delta=delta)]

            case EventType.RUN_FINISHED.value:
                self.phase = RunPhase.TERMINAL
                return [RunFinishedEvent(thread_id=self.thread_id, run_id=self.run_id)]

            case EventType.RUN_ERROR.value:
                self.phase = RunPhase.TERMINAL
                return [
                    RunErrorEvent(
                        message=_text(payload.get("message")) or "Agent run failed",
                        thread_id=self.thread_id,
                        run_id=self.run_id,
                    )
                ]

            case _:
                return [CustomEvent(name=event.type, value=_raw(event))]

    def _tool_call_start(self, payload: dict) -> list[BaseEvent]:
        tool_call_id = self.ids.new_tool_call_id()
        self.state.current_tool_call_id = tool_call_id

        out: list[BaseEvent] = [
            ToolCallStartEvent(
                tool_call_id=tool_call_id,
                tool_call_name=_text(payload.get("toolName")) or "unknown",
                parent_message_id=self.state.current_message_id or None,
            )
        ]

        seed = {k: payload[k] for k in SEED_ARG_FIELDS if payload.get(k)}
        if seed:
            out.append(
                ToolCallArgsEvent(
                    tool_call_id=tool_call_id,
                    delta=json.dumps(seed, ensure_ascii=False, separators=(",", ":")),
                )
            )
        return out


def _raw(event: UpstreamEvent) -> object:
    return event.data if event.data is not None else {}


def _text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
