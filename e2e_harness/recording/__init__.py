"""Screen recording module - one ffmpeg capture per test scenario.

Recordings are diagnostic artifacts: a failure to record is logged and the
scenario carries on without a video.
"""

from .models import (
    Recording,
    RecordingEvent,
    RecordingState,
)
from .recorder import (
    ScreenRecorder,
    build_capture_command,
    get_recorder,
    get_recording_file,
    reset_recorder,
    sanitize_scenario_name,
    start_recording,
    stop_recording,
)

__all__ = [
    # Models
    "Recording",
    "RecordingEvent",
    "RecordingState",
    # Recorder
    "ScreenRecorder",
    "build_capture_command",
    "sanitize_scenario_name",
    "get_recorder",
    "reset_recorder",
    "start_recording",
    "stop_recording",
    "get_recording_file",
]
