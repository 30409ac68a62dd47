"""Build canonical Analysis Records from file stats and probe outcomes.

Everything here is a pure function of (relative path, stat, probe outcome).
"""

from __future__ import annotations

from media_analyzer.core.datetime_utils import timestamp_to_iso
from media_analyzer.domain import (
    AnalysisFailed,
    AnalysisOk,
    AnalysisRecord,
    AudioInfo,
    ContainerInfo,
    FileStat,
    VideoInfo,
)
from media_analyzer.introspector.classify import classify, guess_kind_from_extension
from media_analyzer.introspector.interface import (
    ProbeFailure,
    ProbeOutcome,
    ProbeSuccess,
    StreamInfo,
)
from media_analyzer.introspector.parsers import sanitize_string, to_number_maybe

NOT_A_FILE_ERROR = "Not a file"
NOT_PROBED_ERROR = "Not probed"


def build_error_record(
    rel_path: str,
    file_stat: FileStat | None,
    error: str,
) -> AnalysisFailed:
    """Build an error record carrying whatever is known without a probe.

    The kind is guessed from the extension. Size and modification time are
    filled in when a stat is available.
    """
    return AnalysisFailed(
        path=rel_path,
        kind=guess_kind_from_extension(rel_path),
        error=error,
        size_bytes=file_stat.size if file_stat else None,
        modified_at=timestamp_to_iso(file_stat.modified_time) if file_stat else None,
    )


def normalize_analysis(
    rel_path: str,
    file_stat: FileStat,
    outcome: ProbeOutcome | None,
) -> AnalysisRecord:
    """Produce exactly one Analysis Record for a file.

    Args:
        rel_path: POSIX path relative to the media root.
        file_stat: Stat of the file.
        outcome: Probe outcome, or None if the file was never probed.

    Returns:
        AnalysisOk for a successful probe of a regular file, otherwise
        AnalysisFailed. A non-regular path always yields the "Not a file"
        error, whatever the outcome.
    """
    if not file_stat.is_regular_file:
        return build_error_record(rel_path, file_stat, NOT_A_FILE_ERROR)
    if outcome is None:
        return build_error_record(rel_path, file_stat, NOT_PROBED_ERROR)
    if isinstance(outcome, ProbeFailure):
        return build_error_record(rel_path, file_stat, outcome.diagnostic)
    if isinstance(outcome, ProbeSuccess):
        return _build_ok_record(rel_path, file_stat, outcome)
    raise TypeError(f"Unsupported probe outcome: {type(outcome).__name__}")


def _build_ok_record(
    rel_path: str, file_stat: FileStat, probe: ProbeSuccess
) -> AnalysisOk:
    fmt = probe.format
    video = probe.first_stream("video")
    audio = probe.first_stream("audio")

    return AnalysisOk(
        path=rel_path,
        kind=classify(rel_path, probe),
        size_bytes=file_stat.size,
        modified_at=timestamp_to_iso(file_stat.modified_time),
        container=ContainerInfo(
            format_name=sanitize_string(fmt.get("format_name")),
            format_long_name=sanitize_string(fmt.get("format_long_name")),
        ),
        video=_video_info(video) if video else None,
        audio=_audio_info(audio) if audio else None,
        duration_sec=to_number_maybe(fmt.get("duration")),
        bit_rate=to_number_maybe(fmt.get("bit_rate")),
        stream_count=len(probe.streams),
    )


def _video_info(stream: StreamInfo) -> VideoInfo:
    return VideoInfo(
        codec=stream.codec_name,
        codec_long_name=stream.codec_long_name,
        width=to_number_maybe(stream.width),
        height=to_number_maybe(stream.height),
        pixel_format=stream.pix_fmt,
        frame_rate=stream.r_frame_rate,
    )


def _audio_info(stream: StreamInfo) -> AudioInfo:
    return AudioInfo(
        codec=stream.codec_name,
        codec_long_name=stream.codec_long_name,
        sample_rate=to_number_maybe(stream.sample_rate),
        channels=to_number_maybe(stream.channels),
    )
