"""FFprobe-based implementation of the MediaProber protocol."""

import json
import logging
import shutil
import subprocess  # nosec B404 - needed for TimeoutExpired
from pathlib import Path

from media_analyzer.core.subprocess_utils import run_command
from media_analyzer.introspector.interface import ProbeError, ProbeSuccess
from media_analyzer.introspector.parsers import parse_ffprobe_output

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 60.0


class FFprobeProber:
    """ffprobe-based implementation of the MediaProber protocol.

    Runs one ``ffprobe`` subprocess per file requesting JSON container and
    stream information. Failed probes are never retried.
    """

    def __init__(
        self,
        ffprobe_path: Path | str | None = None,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        """Initialize the prober.

        Args:
            ffprobe_path: Explicit ffprobe executable. Defaults to "ffprobe"
                looked up on PATH at call time.
            timeout: Seconds before a hung probe is killed.
        """
        self._ffprobe_path = str(ffprobe_path) if ffprobe_path else "ffprobe"
        self._timeout = timeout

    @property
    def ffprobe_path(self) -> str:
        return self._ffprobe_path

    def is_available(self) -> bool:
        """Check whether the configured ffprobe executable can be found."""
        return shutil.which(self._ffprobe_path) is not None

    def probe(self, path: Path) -> ProbeSuccess:
        """Probe a media file.

        Args:
            path: Absolute path to an existing regular file.

        Returns:
            ProbeSuccess with container and stream information.

        Raises:
            ProbeError: If ffprobe is missing, exits non-zero, times out, or
                prints output that is not valid JSON.
        """
        try:
            stdout, stderr, returncode = run_command(
                [
                    self._ffprobe_path,
                    "-v",
                    "error",
                    "-print_format",
                    "json",
                    "-show_format",
                    "-show_streams",
                    str(path),
                ],
                timeout=self._timeout,
            )
        except FileNotFoundError as e:
            raise ProbeError(
                f"ffprobe not found ({self._ffprobe_path}). Install ffmpeg or set "
                "MEDIA_ANALYZER_FFPROBE_PATH."
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ProbeError(f"ffprobe timed out after {e.timeout}s") from e
        except OSError as e:
            raise ProbeError(f"Failed to run ffprobe: {e}") from e

        if returncode != 0:
            raise ProbeError(f"ffprobe exited with code {returncode}: {stderr.strip()}")

        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise ProbeError(f"Failed to parse ffprobe JSON: {e}") from e

        return parse_ffprobe_output(data)
