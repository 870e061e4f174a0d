from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)


class HostProbe:
    """Best-effort access to the filesystem and external commands.

    None of the methods raise on permission, availability or timeout
    problems; failures come back as negative answers.
    """

    def path_exists(self, path: str) -> bool:
        """Check whether anything exists at ``path``.

        Args:
            path: Absolute path to check.

        Returns:
            True if the path exists, False if it does not or cannot be
            inspected.
        """
        try:
            return os.path.exists(path)
        except (OSError, TypeError, ValueError):
            logger.debug("Cannot probe path: %s", path)
            return False

    def read_all_text(self, path: str) -> str | None:
        """Read a whole text file, or return None when it is unreadable."""
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                return f.read()
        except (OSError, TypeError, ValueError):
            logger.debug("Cannot read file: %s", path)
            return None

    def run_command(
        self, command: str, args: list[str], timeout: float
    ) -> str | None:
        """Run a command and return its stdout, or None if it did not finish.

        The child is killed when ``timeout`` seconds pass without it
        exiting. A command that cannot be launched at all is treated the
        same way as one that timed out.

        Args:
            command: Executable name, resolved through PATH.
            args: Arguments passed to the command.
            timeout: Upper bound in seconds on how long to wait.

        Returns:
            Stripped stdout text, or None on timeout or launch failure.
        """
        try:
            result = subprocess.run(
                [command, *args], capture_output=True, text=True, timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            logger.debug("%s did not finish within %.1fs", command, timeout)
            return None
        except (OSError, TypeError, ValueError, subprocess.SubprocessError) as e:
            logger.debug("Cannot run %s: %s", command, e)
            return None
        return result.stdout.strip()
