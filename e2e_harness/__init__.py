"""Browser automation helpers for end-to-end UI test scenarios.

- tools: selector notation, element waits, browser sessions, interactions
- recording: per-scenario screen capture with ffmpeg
- scenario: session/recording wiring and after-scenario artifacts
"""

__version__ = "0.1.0"
