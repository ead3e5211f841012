"""Command-line runner for E2E scenario suites."""

import argparse
import os
import subprocess
import sys
from pathlib import Path
from typing import Optional

import structlog

from .config import BrowserEngine, get_settings
from .utils.logging import configure_logging

logger = structlog.get_logger()


def find_feature(feature: str, tests_dir: str) -> Optional[Path]:
    """Locate `<tests_dir>/<feature>` as a directory or test_<feature>.py module."""
    base = Path(tests_dir)
    for candidate in (base / feature, base / f"test_{feature}.py", base / feature / f"test_{feature}.py"):
        if candidate.exists():
            return candidate
    return None


def build_pytest_command(target: Path, extra_args: Optional[list[str]] = None) -> list[str]:
    return [sys.executable, "-m", "pytest", str(target), *(extra_args or [])]


def run_feature(
    feature: str,
    tests_dir: str = "scenarios",
    browser: Optional[str] = None,
    headed: bool = False,
    pytest_args: Optional[list[str]] = None,
) -> int:
    """
    Run one feature's scenarios with pytest and return its exit code.

    The browser choice reaches the scenarios through the same environment
    variables the session reads.
    """
    target = find_feature(feature, tests_dir)
    if target is None:
        logger.error("Feature not found", feature=feature, tests_dir=tests_dir)
        return 2

    env = dict(os.environ)
    if browser:
        env["E2E_BROWSER"] = browser
    if headed:
        env["HEADLESS"] = "false"

    command = build_pytest_command(target, pytest_args)
    logger.info("Running feature", feature=feature, target=str(target), browser=env.get("E2E_BROWSER"))
    result = subprocess.run(command, env=env)
    logger.info("Feature finished", feature=feature, exit_code=result.returncode)
    return result.returncode


def cli(argv: Optional[list[str]] = None):
    """Command-line interface."""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Run an E2E scenario suite in a real browser"
    )
    parser.add_argument(
        "feature",
        nargs="?",
        help="Feature to run, e.g. 'saucedemo'"
    )
    parser.add_argument(
        "--tests-dir", "-d",
        default="scenarios",
        help="Directory holding the feature suites (default: scenarios)"
    )
    parser.add_argument(
        "--browser", "-b",
        choices=[engine.value for engine in BrowserEngine],
        help="Browser engine (default: from E2E_BROWSER, else chromium)"
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window"
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help=f"Log level (default: {settings.log_level})"
    )

    args, pytest_args = parser.parse_known_args(argv)
    configure_logging(level=args.log_level, json_format=settings.log_json)

    if not args.feature:
        logger.error("Feature not found", reason="no feature name given")
        sys.exit(2)

    exit_code = run_feature(
        args.feature,
        tests_dir=args.tests_dir,
        browser=args.browser,
        headed=args.headed,
        pytest_args=pytest_args,
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
