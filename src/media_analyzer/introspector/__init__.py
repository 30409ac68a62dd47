"""Introspector module for Media Analyzer.

This module provides media probing and kind classification:

- MediaProber: Protocol defining the probe interface
- FFprobeProber: Production implementation using ffprobe
- StubProber: Stub implementation for testing
- ProbeError: Exception for probe failures
- ProbeSuccess / ProbeFailure: typed probe outcome
- classify / guess_kind_from_extension: Kind Classifier
"""

from media_analyzer.introspector.classify import (
    classify,
    classify_streams,
    guess_kind_from_extension,
)
from media_analyzer.introspector.ffprobe import FFprobeProber
from media_analyzer.introspector.interface import (
    MediaProber,
    ProbeError,
    ProbeFailure,
    ProbeOutcome,
    ProbeSuccess,
    StreamInfo,
    run_probe,
)
from media_analyzer.introspector.parsers import parse_ffprobe_output, to_number_maybe
from media_analyzer.introspector.stub import StubProber

__all__ = [
    "MediaProber",
    "ProbeError",
    "ProbeFailure",
    "ProbeOutcome",
    "ProbeSuccess",
    "StreamInfo",
    "run_probe",
    "FFprobeProber",
    "StubProber",
    # Parsers
    "parse_ffprobe_output",
    "to_number_maybe",
    # Classifier
    "classify",
    "classify_streams",
    "guess_kind_from_extension",
]
