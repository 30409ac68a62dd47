"""Running external media tools such as ffprobe."""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - ffprobe has to run as a child process
import time
from pathlib import Path

logger = logging.getLogger(__name__)


def run_command(
    args: list[str | Path], timeout: float = 120
) -> tuple[str, str, int]:
    """Run a tool to completion and return ``(stdout, stderr, returncode)``.

    Output is decoded as text with undecodable bytes replaced, and stdin is
    closed so a tool can never block waiting on it.

    Raises:
        subprocess.TimeoutExpired: The tool ran longer than ``timeout``
            seconds. The child has already been killed.
        FileNotFoundError: The executable does not exist.
    """
    argv = [str(arg) for arg in args]
    tool = Path(argv[0]).name if argv else "unknown"
    started = time.monotonic()
    logger.debug("Running %s", " ".join(argv), extra={"command": tool})

    try:
        completed = subprocess.run(  # nosec B603 - argv built by the caller
            argv,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.warning(
            "%s timed out after %ss",
            tool,
            timeout,
            extra={"command": tool, "target": argv[-1] if len(argv) > 1 else None},
        )
        raise

    logger.debug(
        "%s exited with %d in %.3fs",
        tool,
        completed.returncode,
        time.monotonic() - started,
        extra={"command": tool},
    )
    return completed.stdout or "", completed.stderr or "", completed.returncode
