"""Shared test fixtures."""

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's PROCUTIL_* / CI settings out of the tests."""
    for key in (
        "PROCUTIL_CONFIG",
        "PROCUTIL_WINDOWS_SHELL",
        "PROCUTIL_WINDOWS_SHELL_FLAG",
        "PROCUTIL_ENCODING",
        "PROCUTIL_DEBUG",
        "GITHUB_ACTIONS",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def recording_logger():
    """A logger double that records debug/error messages."""
    messages = []

    class RecordingLogger:
        def debug(self, msg):
            messages.append(("debug", msg))

        def error(self, msg):
            messages.append(("error", msg))

    logger = RecordingLogger()
    logger.messages = messages
    return logger
