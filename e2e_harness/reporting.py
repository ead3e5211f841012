"""Lightweight JSON result log for scenario steps.

Each call appends one timestamped entry to a JSON array file, creating the
file on first use.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field

from .config import get_settings

logger = structlog.get_logger()

ReportStatus = Literal["pass", "fail", "info", "skip"]


class ReportEntry(BaseModel):
    """One result line. Extra keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    scenario: Optional[str] = Field(None, description="Scenario or test name")
    step: Optional[str] = Field(None, description="Step description")
    status: ReportStatus = Field(..., description="Result status")
    message: Optional[str] = Field(None, description="Details or error message")

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


def read_report(json_path: Union[str, Path]) -> list:
    """Existing entries, or an empty list when the file is missing or not a JSON array."""
    path = Path(json_path)
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Unreadable report file, starting fresh", path=str(path), error=str(e))
        return []
    return data if isinstance(data, list) else []


def append_report(
    entry: Union[ReportEntry, dict],
    json_path: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Append an entry to the JSON report.

    Example:
        append_report({"scenario": "Login", "step": "Submit form", "status": "pass"})
    """
    if isinstance(entry, dict):
        entry = ReportEntry(**entry)
    path = Path(json_path or get_settings().report_path)

    entries = read_report(path)
    entries.append(entry.to_dict())

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(entries, indent=2), encoding="utf-8")
    logger.debug("Report entry appended", path=str(path), status=entry.status, total=len(entries))
    return path
