"""Stub prober for tests and for running without ffprobe."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from media_analyzer.introspector.interface import ProbeError, ProbeSuccess
from media_analyzer.introspector.parsers import parse_ffprobe_output


class StubProber:
    """MediaProber that returns canned ffprobe documents.

    Responses are keyed by file name. A value that is an Exception is
    raised (wrapped in ProbeError if it is not one already). Unknown files
    raise ProbeError. Every probed path is recorded in ``calls``.
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[Path] = []

    def probe(self, path: Path) -> ProbeSuccess:
        self.calls.append(path)
        response = self.responses.get(path.name)
        if response is None:
            raise ProbeError(f"No stub response for {path.name}")
        if isinstance(response, ProbeError):
            raise response
        if isinstance(response, Exception):
            raise ProbeError(str(response)) from response
        return parse_ffprobe_output(response)
