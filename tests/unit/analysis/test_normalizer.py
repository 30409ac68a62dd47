"""Tests for the metadata normalizer."""

import pytest

from media_analyzer.analysis import (
    NOT_A_FILE_ERROR,
    build_error_record,
    normalize_analysis,
)
from media_analyzer.domain import AnalysisFailed, AnalysisOk, FileStat, MediaKind
from media_analyzer.introspector import ProbeFailure, parse_ffprobe_output

REGULAR = FileStat(size=1_312_500, modified_time=0.0, is_regular_file=True)
DIRECTORY = FileStat(size=4096, modified_time=0.0, is_regular_file=False)


class TestNormalizeAnalysis:
    """Tests for normalize_analysis."""

    def test_video_with_audio(self, ffprobe_fixture) -> None:
        probe = parse_ffprobe_output(ffprobe_fixture("video_with_audio"))

        record = normalize_analysis("movies/movie.mp4", REGULAR, probe)

        assert isinstance(record, AnalysisOk)
        assert record.kind is MediaKind.VIDEO
        assert record.size_bytes == 1_312_500
        assert record.modified_at == "1970-01-01T00:00:00.000Z"
        assert record.container.format_name == "mov,mp4,m4a,3gp,3g2,mj2"
        assert record.container.format_long_name == "QuickTime / MOV"
        assert record.video.codec == "h264"
        assert record.video.resolution == "1920x1080"
        assert record.video.pixel_format == "yuv420p"
        assert record.video.frame_rate == "30000/1001"
        assert record.audio.codec == "aac"
        assert record.audio.sample_rate == 48000
        assert record.audio.channels == 2
        assert record.duration_sec == 10.5
        assert record.bit_rate == 1_000_000
        assert record.stream_count == 2

    def test_audio_only(self, ffprobe_fixture) -> None:
        probe = parse_ffprobe_output(ffprobe_fixture("audio_only"))

        record = normalize_analysis("music/song.mp3", REGULAR, probe)

        assert record.kind is MediaKind.AUDIO
        assert record.video is None
        assert record.audio.sample_rate == 44100

    def test_missing_metadata_becomes_none(self, ffprobe_fixture) -> None:
        probe = parse_ffprobe_output(ffprobe_fixture("edge_case_missing_metadata"))

        record = normalize_analysis("odd.bin", REGULAR, probe)

        assert isinstance(record, AnalysisOk)
        assert record.kind is MediaKind.IMAGE
        assert record.video.width is None
        assert record.video.height is None
        assert record.video.resolution is None
        assert record.duration_sec is None
        assert record.bit_rate is None
        assert record.container.format_name is None
        assert record.stream_count == 2

    def test_probe_failure(self) -> None:
        outcome = ProbeFailure(diagnostic="ffprobe exited with code 1: moov atom")

        record = normalize_analysis("movies/broken.mp4", REGULAR, outcome)

        assert isinstance(record, AnalysisFailed)
        assert record.error == "ffprobe exited with code 1: moov atom"
        assert record.kind is MediaKind.VIDEO
        assert record.size_bytes == 1_312_500

    def test_not_a_regular_file(self, ffprobe_fixture) -> None:
        probe = parse_ffprobe_output(ffprobe_fixture("video_with_audio"))

        record = normalize_analysis("movies", DIRECTORY, probe)

        assert isinstance(record, AnalysisFailed)
        assert record.error == NOT_A_FILE_ERROR

    def test_not_probed(self) -> None:
        record = normalize_analysis("a.mp4", REGULAR, None)
        assert isinstance(record, AnalysisFailed)
        assert record.error == "Not probed"

    def test_unsupported_outcome(self) -> None:
        with pytest.raises(TypeError):
            normalize_analysis("a.mp4", REGULAR, "nonsense")


class TestBuildErrorRecord:
    """Tests for build_error_record."""

    def test_without_stat(self) -> None:
        record = build_error_record("gone.flac", None, "Cannot stat file")

        assert record.kind is MediaKind.AUDIO
        assert record.size_bytes is None
        assert record.modified_at is None

    def test_with_stat(self) -> None:
        record = build_error_record("a.png", REGULAR, "boom")

        assert record.kind is MediaKind.IMAGE
        assert record.size_bytes == 1_312_500
        assert record.modified_at == "1970-01-01T00:00:00.000Z"
