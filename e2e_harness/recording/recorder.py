"""Screen recording of test scenarios with an external ffmpeg process.

Each scenario name gets at most one capture process at a time. The output
path is registered before the process is spawned and is never forgotten,
so the artifact collector can still find the video after the recording
has stopped.

Usage:
    recorder = ScreenRecorder()
    await recorder.start("Login Flow")
    ...
    await recorder.stop("Login Flow")
    path = recorder.get_output_path("Login Flow")
"""

import asyncio
import re
import signal
import sys
import time
from pathlib import Path
from typing import Optional

import structlog

from ..config import Settings, get_settings
from ..exceptions import ProcessSpawnError, UnsupportedPlatformError
from .models import Recording, RecordingEvent, RecordingState

logger = structlog.get_logger()

PROGRESS_MARKER = b"frame="
STDERR_CHUNK_SIZE = 4096


def sanitize_scenario_name(name: str) -> str:
    """Replace every non-alphanumeric character with '_'."""
    return re.sub(r"[^A-Za-z0-9]", "_", name)


def build_capture_command(
    output_path: Path | str,
    platform: Optional[str] = None,
    ffmpeg_path: str = "ffmpeg",
    framerate: int = 30,
    display: str = ":0.0",
) -> list[str]:
    """
    Build the ffmpeg command that captures the desktop on this platform.

    Args:
        output_path: File the capture is written to
        platform: sys.platform style name (defaults to the running platform)
        ffmpeg_path: ffmpeg executable
        framerate: Capture framerate
        display: X11 display to grab on Linux

    Raises:
        UnsupportedPlatformError: No capture device is known for the platform
    """
    platform = platform or sys.platform

    if platform == "darwin":
        # Screen index 1, no audio
        input_args = ["-f", "avfoundation", "-framerate", str(framerate), "-i", "1:none"]
    elif platform == "win32":
        input_args = ["-f", "gdigrab", "-framerate", str(framerate), "-i", "desktop"]
    elif platform.startswith("linux"):
        input_args = ["-f", "x11grab", "-framerate", str(framerate), "-i", display]
    else:
        raise UnsupportedPlatformError(platform)

    return [
        ffmpeg_path,
        *input_args,
        "-preset", "ultrafast",
        "-pix_fmt", "yuv420p",
        str(output_path),
    ]


class ScreenRecorder:
    """
    Supervises one capture process per scenario name.

    State per name: IDLE -> RECORDING -> STOPPED. Starting a scenario that
    is already recording is a no-op; stopping one that is not recording
    logs a warning. Recording failures are logged and never raised, since
    a video is a diagnostic aid rather than part of the test result.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        platform: Optional[str] = None,
    ):
        self.settings = settings or get_settings()
        self.platform = platform or sys.platform
        self.recordings_dir = Path(self.settings.recordings_dir)
        self.grace_period_ms = self.settings.recording_grace_period_ms
        self._recordings: dict[str, Recording] = {}
        self._paths: dict[str, Path] = {}
        self._starting: set[str] = set()
        self.log = logger.bind(component="screen_recorder")

    def state(self, scenario_name: str) -> RecordingState:
        recording = self._recordings.get(scenario_name)
        return recording.state if recording else RecordingState.IDLE

    def is_recording(self, scenario_name: str) -> bool:
        return self.state(scenario_name) == RecordingState.RECORDING

    @property
    def active(self) -> list[str]:
        """Names of scenarios currently recording."""
        return [name for name, rec in self._recordings.items() if rec.is_active]

    def get_recording(self, scenario_name: str) -> Optional[Recording]:
        return self._recordings.get(scenario_name)

    def get_output_path(self, scenario_name: str) -> Optional[Path]:
        """Output file of the latest recording for the scenario, even after stop."""
        return self._paths.get(scenario_name)

    def _build_output_path(self, scenario_name: str) -> Path:
        self.recordings_dir.mkdir(parents=True, exist_ok=True)
        timestamp_ms = int(time.time() * 1000)
        filename = f"{sanitize_scenario_name(scenario_name)}-{timestamp_ms}.{self.settings.recording_extension}"
        return self.recordings_dir / filename

    async def start(self, scenario_name: str) -> Optional[Path]:
        """
        Start recording a scenario.

        Returns:
            The output path, or None when the capture could not start
        """
        if self.is_recording(scenario_name) or scenario_name in self._starting:
            return self._paths.get(scenario_name)

        log = self.log.bind(scenario=scenario_name)
        previous = self._recordings.get(scenario_name)
        if previous is not None and previous.process_alive:
            log.warning(
                "Recording not started, previous capture process still running",
                pid=getattr(previous.process, "pid", None),
            )
            return None

        output_path = self._build_output_path(scenario_name)

        try:
            command = build_capture_command(
                output_path,
                platform=self.platform,
                ffmpeg_path=self.settings.ffmpeg_path,
                framerate=self.settings.recording_framerate,
                display=self.settings.recording_display,
            )
        except UnsupportedPlatformError as e:
            log.error("Recording not started", error=str(e), platform=e.platform)
            return None

        previous_path = self._paths.get(scenario_name)
        self._paths[scenario_name] = output_path
        recording = Recording(scenario_name=scenario_name, output_path=output_path)
        self._starting.add(scenario_name)

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            error = ProcessSpawnError(scenario_name, str(e))
            log.error("Recording not started", error=str(error))
            if previous_path is None:
                self._paths.pop(scenario_name, None)
            else:
                self._paths[scenario_name] = previous_path
            return None
        finally:
            self._starting.discard(scenario_name)

        recording.process = process
        recording.apply(RecordingEvent.START)
        self._recordings[scenario_name] = recording
        recording.supervisor = asyncio.create_task(self._supervise(recording))

        log.info("Recording started", path=str(output_path), pid=getattr(process, "pid", None))
        return output_path

    async def _supervise(self, recording: Recording) -> None:
        """Watch capture progress and record the exit code."""
        process = recording.process
        log = self.log.bind(scenario=recording.scenario_name)
        try:
            if process.stderr is not None:
                # Progress lines end with \r, not \n
                tail = b""
                while True:
                    chunk = await process.stderr.read(STDERR_CHUNK_SIZE)
                    if not chunk:
                        break
                    if PROGRESS_MARKER in tail + chunk:
                        log.info("Recording in progress")
                    tail = chunk[-(len(PROGRESS_MARKER) - 1):]
            recording.exit_code = await process.wait()
        except Exception as e:
            log.error("Capture process error", error=str(e))
        finally:
            recording.apply(RecordingEvent.PROCESS_EXITED)
        log.info("Capture process exited", exit_code=recording.exit_code)

    def _interrupt(self, process) -> None:
        try:
            if self.platform == "win32":
                process.terminate()
            else:
                process.send_signal(signal.SIGINT)
        except ProcessLookupError:
            pass

    async def stop(self, scenario_name: str) -> None:
        """
        Interrupt the capture process and wait for it to finalize the file.

        The wait ends when the process exits or the grace period elapses,
        whichever comes first. The output path stays queryable.
        """
        recording = self._recordings.get(scenario_name)
        log = self.log.bind(scenario=scenario_name)

        if recording is None or not recording.is_active or recording.process is None:
            log.warning("No recording process found")
            return

        self._interrupt(recording.process)

        exited = recording.supervisor if recording.supervisor is not None else recording.process.wait()
        try:
            await asyncio.wait_for(asyncio.shield(exited), timeout=self.grace_period_ms / 1000)
        except asyncio.TimeoutError:
            log.warning("Capture process still running after grace period", grace_period_ms=self.grace_period_ms)

        recording.apply(RecordingEvent.STOP)
        log.info("Stopped recording", path=str(recording.output_path), exit_code=recording.exit_code)

    async def stop_all(self) -> None:
        """Stop every active recording."""
        for scenario_name in self.active:
            await self.stop(scenario_name)


_recorder: Optional[ScreenRecorder] = None


def get_recorder() -> ScreenRecorder:
    """Get the process-wide recorder, creating it on first use."""
    global _recorder
    if _recorder is None:
        _recorder = ScreenRecorder()
    return _recorder


def reset_recorder() -> None:
    """Forget the process-wide recorder."""
    global _recorder
    _recorder = None


async def start_recording(scenario_name: str) -> Optional[Path]:
    return await get_recorder().start(scenario_name)


async def stop_recording(scenario_name: str) -> None:
    await get_recorder().stop(scenario_name)


def get_recording_file(scenario_name: str) -> Optional[Path]:
    return get_recorder().get_output_path(scenario_name)
