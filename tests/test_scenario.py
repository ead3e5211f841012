"""Tests for scenario wiring and after-scenario artifacts."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from e2e_harness.recording import ScreenRecorder
from e2e_harness.scenario import Attachment, ScenarioRunner, collect_scenario_artifacts
from e2e_harness.tools.playwright_tools import PlaywrightTools


@pytest.fixture
def mock_recorder(tmp_path):
    """Recorder double whose output file already exists."""
    video = tmp_path / "recordings" / "Login_Flow-1700000000000.mp4"
    video.parent.mkdir(parents=True)
    video.write_bytes(b"\x00\x00\x00\x18ftypmp42")

    recorder = MagicMock(spec=ScreenRecorder)
    recorder.start = AsyncMock(return_value=video)
    recorder.stop = AsyncMock()
    recorder.get_output_path.return_value = video
    return recorder


class TestCollectScenarioArtifacts:
    """Tests for collect_scenario_artifacts."""

    @pytest.mark.asyncio
    async def test_screenshot_and_recording_links(self, mock_session, mock_recorder, tmp_path):
        attachments = await collect_scenario_artifacts(
            "Login Flow",
            session=mock_session,
            recorder=mock_recorder,
            screenshots_dir=tmp_path / "screenshots",
        )

        assert [a.media_type for a in attachments] == ["image/png", "text/plain", "text/html"]

        screenshot = attachments[0]
        assert screenshot.data == b"fake_png"
        assert screenshot.path is not None
        assert (tmp_path / "screenshots").exists()
        mock_session.page.screenshot.assert_awaited_once_with(full_page=True, type="png")

        assert attachments[1].data.startswith("Recording: ")
        assert attachments[1].data.endswith("Login_Flow-1700000000000.mp4")
        assert attachments[2].data.startswith('<a href="')
        assert attachments[2].data.endswith('Login_Flow-1700000000000.mp4">Download recording</a>')

    @pytest.mark.asyncio
    async def test_screenshot_not_saved_without_directory(self, mock_session):
        attachments = await collect_scenario_artifacts("Login Flow", session=mock_session)

        assert attachments == [Attachment(data=b"fake_png", media_type="image/png", path=None)]

    @pytest.mark.asyncio
    async def test_missing_recording_file_is_skipped(self, mock_session, mock_recorder, tmp_path):
        mock_recorder.get_output_path.return_value = tmp_path / "recordings" / "never_written.mp4"

        attachments = await collect_scenario_artifacts("Login Flow", session=mock_session, recorder=mock_recorder)

        assert [a.media_type for a in attachments] == ["image/png"]

    @pytest.mark.asyncio
    async def test_no_recording_registered(self, mock_recorder):
        mock_recorder.get_output_path.return_value = None

        assert await collect_scenario_artifacts("Login Flow", recorder=mock_recorder) == []

    @pytest.mark.asyncio
    async def test_screenshot_failure_is_not_raised(self, mock_session, mock_recorder):
        mock_session.page.screenshot.side_effect = RuntimeError("Target page, context or browser has been closed")

        attachments = await collect_scenario_artifacts("Login Flow", session=mock_session, recorder=mock_recorder)

        assert [a.media_type for a in attachments] == ["text/plain", "text/html"]

    @pytest.mark.asyncio
    async def test_closed_session(self, mock_session):
        mock_session.page = None

        assert await collect_scenario_artifacts("Login Flow", session=mock_session) == []


class TestScenarioRunner:
    """Tests for ScenarioRunner."""

    @pytest.mark.asyncio
    async def test_passing_scenario(self, harness_settings, mock_session, mock_recorder):
        page = mock_session.page
        browser = mock_session.browser

        with patch("e2e_harness.scenario.open_browser", AsyncMock(return_value=mock_session)):
            runner = ScenarioRunner("Login Flow", harness_settings, record=True, recorder=mock_recorder)
            async with runner as tools:
                assert isinstance(tools, PlaywrightTools)
                assert tools.page is page
                assert tools.scenario_log is runner.scenario_log
                mock_recorder.start.assert_awaited_once_with("Login Flow")

        assert runner.status == "passed"
        mock_recorder.stop.assert_awaited_once_with("Login Flow")
        assert [a.media_type for a in runner.attachments] == ["image/png", "text/plain", "text/html"]
        browser.close.assert_awaited_once()
        assert not mock_session.is_open

    @pytest.mark.asyncio
    async def test_failing_scenario_keeps_its_error(self, harness_settings, mock_session, mock_recorder):
        browser = mock_session.browser

        with patch("e2e_harness.scenario.open_browser", AsyncMock(return_value=mock_session)):
            runner = ScenarioRunner("Login Flow", harness_settings, record=True, recorder=mock_recorder)
            with pytest.raises(AssertionError, match="inventory"):
                async with runner:
                    raise AssertionError("inventory page not shown")

        assert runner.status == "failed"
        mock_recorder.stop.assert_awaited_once()
        # Screenshot is taken before the session closes
        assert runner.attachments[0].media_type == "image/png"
        browser.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cleanup_errors_do_not_mask_result(self, harness_settings, mock_session):
        mock_session.context.close.side_effect = RuntimeError("already closed")
        mock_session.page.screenshot.side_effect = RuntimeError("crashed")

        with patch("e2e_harness.scenario.open_browser", AsyncMock(return_value=mock_session)):
            runner = ScenarioRunner("Login Flow", harness_settings)
            async with runner:
                pass

        assert runner.status == "passed"
        assert runner.attachments == []

    @pytest.mark.asyncio
    async def test_without_recording(self, harness_settings, mock_session):
        with patch("e2e_harness.scenario.open_browser", AsyncMock(return_value=mock_session)):
            runner = ScenarioRunner("Login Flow", harness_settings)
            async with runner:
                pass

        assert runner.recorder is None
        assert [a.media_type for a in runner.attachments] == ["image/png"]

    @pytest.mark.asyncio
    async def test_browser_launch_failure_stops_recording(self, harness_settings, mock_recorder):
        failing_open = AsyncMock(side_effect=RuntimeError("Executable doesn't exist"))

        with patch("e2e_harness.scenario.open_browser", failing_open):
            runner = ScenarioRunner("Login Flow", harness_settings, record=True, recorder=mock_recorder)
            with pytest.raises(RuntimeError, match="Executable"):
                async with runner:
                    pass

        mock_recorder.start.assert_awaited_once()
        mock_recorder.stop.assert_awaited_once_with("Login Flow")
