"""Scenario wiring - session, recording and after-scenario artifacts.

Artifacts are best effort: nothing collected here is allowed to fail or
mask the scenario's own result.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import structlog

from .config import Settings, get_settings
from .recording import ScreenRecorder, get_recorder, sanitize_scenario_name
from .tools.playwright_tools import BrowserSession, PlaywrightTools, close_browser, open_browser
from .utils.logging import LogContext, ScenarioLogger

logger = structlog.get_logger()


@dataclass
class Attachment:
    """A piece of evidence attached to a scenario result."""
    data: Union[bytes, str]
    media_type: str
    path: Optional[str] = None


async def collect_scenario_artifacts(
    scenario_name: str,
    session: Optional[BrowserSession] = None,
    recorder: Optional[ScreenRecorder] = None,
    screenshots_dir: Optional[Union[str, Path]] = None,
) -> list[Attachment]:
    """
    Gather the screenshot and recording link for a finished scenario.

    Returns:
        Whatever could be collected; failures are logged and skipped
    """
    log = logger.bind(component="artifacts", scenario=scenario_name)
    attachments: list[Attachment] = []

    if session is not None and session.page is not None:
        try:
            png = await session.page.screenshot(full_page=True, type="png")
            saved_path = None
            if screenshots_dir is not None:
                directory = Path(screenshots_dir)
                directory.mkdir(parents=True, exist_ok=True)
                timestamp = datetime.now(timezone.utc).isoformat().replace(":", "-").replace(".", "-")
                saved = directory / f"{sanitize_scenario_name(scenario_name)}-{timestamp}.png"
                saved.write_bytes(png)
                saved_path = str(saved)
            attachments.append(Attachment(data=png, media_type="image/png", path=saved_path))
        except Exception as e:
            log.error("Failed to capture scenario screenshot", error=str(e))

    if recorder is not None:
        recording_path = recorder.get_output_path(scenario_name)
        if recording_path is not None and recording_path.exists():
            try:
                relative = Path(recording_path).resolve().relative_to(Path.cwd())
            except ValueError:
                relative = Path(recording_path)
            attachments.append(Attachment(data=f"Recording: {relative}", media_type="text/plain", path=str(recording_path)))
            attachments.append(
                Attachment(data=f'<a href="{relative}">Download recording</a>', media_type="text/html", path=str(recording_path))
            )
        elif recording_path is not None:
            log.debug("Recording file missing, skipping attachment", path=str(recording_path))

    return attachments


class ScenarioRunner:
    """
    Runs one scenario inside a browser session.

    On entry: start the recording (optional), then open the session.
    On exit: stop the recording, collect artifacts, close the session.
    The scenario's own exception always propagates unchanged.

    Usage:
        async with ScenarioRunner("Login Flow", record=True) as tools:
            await tools.goto("https://www.saucedemo.com/")
    """

    def __init__(
        self,
        scenario_name: str,
        settings: Optional[Settings] = None,
        record: bool = False,
        recorder: Optional[ScreenRecorder] = None,
    ):
        self.scenario_name = scenario_name
        self.settings = settings or get_settings()
        self.record = record
        self.recorder = recorder or (get_recorder() if record else None)
        self.session: Optional[BrowserSession] = None
        self.attachments: list[Attachment] = []
        self.status: Optional[str] = None
        self.scenario_log = ScenarioLogger(scenario_name)
        self._log_context = LogContext(scenario=scenario_name)
        self._started_at = 0.0

    async def __aenter__(self) -> PlaywrightTools:
        self._log_context.__enter__()
        self._started_at = time.time()
        self.scenario_log.scenario_started({"record": self.record})

        if self.record and self.recorder is not None:
            await self.recorder.start(self.scenario_name)
        try:
            self.session = await open_browser(self.settings)
        except Exception:
            await self._stop_recording()
            self._log_context.__exit__(None, None, None)
            raise
        return PlaywrightTools(self.session, self.settings, scenario_log=self.scenario_log)

    async def _stop_recording(self) -> None:
        if self.record and self.recorder is not None:
            await self.recorder.stop(self.scenario_name)

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.status = "passed" if exc_type is None else "failed"
        if exc_val is not None:
            self.scenario_log.step_failed("scenario", str(exc_val))
        try:
            await self._stop_recording()
            self.attachments = await collect_scenario_artifacts(
                self.scenario_name,
                session=self.session,
                recorder=self.recorder,
                screenshots_dir=self.settings.screenshots_dir,
            )
            for attachment in self.attachments:
                self.scenario_log.artifact_attached(attachment.media_type, attachment.path)
        finally:
            if self.session is not None:
                await close_browser(self.session)
            duration_ms = int((time.time() - self._started_at) * 1000)
            self.scenario_log.scenario_completed(self.status, duration_ms)
            self._log_context.__exit__(None, None, None)
        return False
