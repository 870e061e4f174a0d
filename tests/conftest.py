from __future__ import annotations

import logging

import pytest

from hostinfo.cache import DetectionContext
from hostinfo.log_setup import LOGGER_NAME


class FakeLocator:
    """Type locator answering from a fixed set of present markers."""

    def __init__(self, present=(), fail_after_hit: bool = False):
        self.present = set(present)
        self.fail_after_hit = fail_after_hit
        self.calls: list[str] = []
        self._hit = False

    def exists(self, marker: str) -> bool:
        if self._hit and self.fail_after_hit:
            raise AssertionError(f"locator consulted after a positive answer: {marker}")
        self.calls.append(marker)
        found = marker in self.present
        self._hit = self._hit or found
        return found


class FakeProbe:
    """Host probe with canned filesystem contents and command output."""

    def __init__(self, files=None, command_output=None, forbid: bool = False):
        self.files = dict(files or {})
        self.command_output = command_output
        self.forbid = forbid
        self.exists_calls: list[str] = []
        self.command_calls: list[tuple] = []

    def _check(self):
        if self.forbid:
            raise AssertionError("probe consulted unexpectedly")

    def path_exists(self, path: str) -> bool:
        self._check()
        self.exists_calls.append(path)
        return path in self.files

    def read_all_text(self, path: str):
        self._check()
        return self.files.get(path)

    def run_command(self, command, args, timeout):
        self._check()
        self.command_calls.append((command, list(args), timeout))
        return self.command_output


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers installed by setup_logging so they never outlive a test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for h in logger.handlers:
        h.close()
    logger.handlers.clear()


@pytest.fixture
def context():
    return DetectionContext()

