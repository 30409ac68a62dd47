"""Pure parsing functions for ffprobe JSON output.

These functions transform ffprobe JSON data into probe outcome objects.
All functions are pure (no I/O, no side effects) for easy testing.
"""

import logging
import math
from typing import Any

from media_analyzer.domain import Number
from media_analyzer.introspector.interface import ProbeError, ProbeSuccess, StreamInfo

logger = logging.getLogger(__name__)


def sanitize_string(value: Any) -> str | None:
    """Return a clean string, or None for non-string values.

    Invalid UTF-8 sequences are replaced rather than raising.
    """
    if not isinstance(value, str):
        return None
    return value.encode("utf-8", errors="replace").decode("utf-8")


def to_number_maybe(value: Any) -> Number | None:
    """Coerce a probe value to a finite number, or None.

    ffprobe reports many numeric fields as strings ("48000", "10.5").
    Integral strings become int, others float. NaN, infinities, booleans
    and unparseable values become None.

    Examples:
        >>> to_number_maybe("48000")
        48000
        >>> to_number_maybe("10.5")
        10.5
        >>> to_number_maybe("N/A") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def parse_stream(stream: dict[str, Any], position: int) -> StreamInfo:
    """Parse a single ffprobe stream dict into a StreamInfo.

    Args:
        stream: Stream dictionary from ffprobe JSON.
        position: Position of the stream in the probe's stream list, used
            when ffprobe omits the stream index.
    """
    index = stream.get("index")
    if not isinstance(index, int) or isinstance(index, bool):
        index = position

    return StreamInfo(
        index=index,
        codec_type=sanitize_string(stream.get("codec_type")),
        codec_name=sanitize_string(stream.get("codec_name")),
        codec_long_name=sanitize_string(stream.get("codec_long_name")),
        width=stream.get("width"),
        height=stream.get("height"),
        pix_fmt=sanitize_string(stream.get("pix_fmt")),
        r_frame_rate=sanitize_string(stream.get("r_frame_rate")),
        sample_rate=stream.get("sample_rate"),
        channels=stream.get("channels"),
    )


def parse_ffprobe_output(data: Any) -> ProbeSuccess:
    """Parse ffprobe's JSON document into a ProbeSuccess.

    Args:
        data: Decoded JSON from ``ffprobe -show_format -show_streams``.

    Returns:
        ProbeSuccess with streams kept in probe order.

    Raises:
        ProbeError: If the document is not an object, or its ``format`` /
            ``streams`` members have the wrong shape.
    """
    if not isinstance(data, dict):
        raise ProbeError(f"Unexpected ffprobe output type: {type(data).__name__}")

    format_data = data.get("format") or {}
    if not isinstance(format_data, dict):
        raise ProbeError("Malformed ffprobe output: 'format' is not an object")

    raw_streams = data.get("streams") or []
    if not isinstance(raw_streams, list):
        raise ProbeError("Malformed ffprobe output: 'streams' is not a list")

    streams: list[StreamInfo] = []
    for position, stream in enumerate(raw_streams):
        if not isinstance(stream, dict):
            logger.warning("Skipping malformed ffprobe stream at position %d", position)
            continue
        streams.append(parse_stream(stream, position))

    return ProbeSuccess(format=format_data, streams=tuple(streams))
