"""Data models for per-scenario screen recordings."""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class RecordingState(str, Enum):
    """Lifecycle of a scenario recording."""

    IDLE = "idle"
    RECORDING = "recording"
    STOPPED = "stopped"


class RecordingEvent(str, Enum):
    """Events that move a recording between states."""

    START = "start"
    PROCESS_EXITED = "process_exited"
    STOP = "stop"


# (state, event) -> next state; pairs not listed leave the state unchanged
TRANSITIONS = {
    (RecordingState.IDLE, RecordingEvent.START): RecordingState.RECORDING,
    (RecordingState.STOPPED, RecordingEvent.START): RecordingState.RECORDING,
    (RecordingState.RECORDING, RecordingEvent.PROCESS_EXITED): RecordingState.STOPPED,
    (RecordingState.RECORDING, RecordingEvent.STOP): RecordingState.STOPPED,
}


@dataclass
class Recording:
    """One capture job for a named scenario."""

    scenario_name: str
    output_path: Path
    state: RecordingState = RecordingState.IDLE
    process: Any = None
    supervisor: Optional[asyncio.Task] = None
    started_at: Optional[datetime] = None
    stopped_at: Optional[datetime] = None
    exit_code: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.state == RecordingState.RECORDING

    @property
    def process_alive(self) -> bool:
        """True until the supervisor has reaped the capture process, even after STOP."""
        return self.supervisor is not None and not self.supervisor.done()

    def apply(self, event: RecordingEvent) -> RecordingState:
        """Apply an event and return the resulting state."""
        next_state = TRANSITIONS.get((self.state, event))
        if next_state is None:
            return self.state
        if next_state == RecordingState.RECORDING:
            self.started_at = datetime.now(timezone.utc)
            self.stopped_at = None
        elif next_state == RecordingState.STOPPED:
            self.stopped_at = datetime.now(timezone.utc)
        self.state = next_state
        return self.state

    def to_dict(self) -> dict:
        return {
            "scenario_name": self.scenario_name,
            "output_path": str(self.output_path),
            "state": self.state.value,
            "pid": getattr(self.process, "pid", None),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "stopped_at": self.stopped_at.isoformat() if self.stopped_at else None,
            "exit_code": self.exit_code,
        }
