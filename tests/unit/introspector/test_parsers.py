"""Tests for ffprobe output parsing and kind classification."""

import math

import pytest

from media_analyzer.domain import MediaKind
from media_analyzer.introspector import (
    ProbeError,
    ProbeSuccess,
    StreamInfo,
    classify,
    classify_streams,
    guess_kind_from_extension,
    parse_ffprobe_output,
    to_number_maybe,
)
from media_analyzer.introspector.parsers import sanitize_string


class TestToNumberMaybe:
    """Tests for to_number_maybe."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (48000, 48000),
            (10.5, 10.5),
            ("48000", 48000),
            ("10.500000", 10.5),
            (" 42 ", 42),
        ],
    )
    def test_numbers(self, value, expected) -> None:
        result = to_number_maybe(value)
        assert result == expected
        assert type(result) is type(expected)

    @pytest.mark.parametrize(
        "value",
        [None, "", "N/A", "abc", True, False, math.nan, math.inf, "inf", [], {}],
    )
    def test_not_numbers(self, value) -> None:
        assert to_number_maybe(value) is None


class TestSanitizeString:
    """Tests for sanitize_string."""

    def test_plain_string(self) -> None:
        assert sanitize_string("h264") == "h264"

    def test_non_string(self) -> None:
        assert sanitize_string(42) is None
        assert sanitize_string(None) is None

    def test_lone_surrogate_replaced(self) -> None:
        assert sanitize_string("bad\udcff") == "bad?"


class TestParseFFprobeOutput:
    """Tests for parse_ffprobe_output."""

    def test_video_with_audio(self, ffprobe_fixture) -> None:
        probe = parse_ffprobe_output(ffprobe_fixture("video_with_audio"))

        assert len(probe.streams) == 2
        video = probe.first_stream("video")
        assert video.codec_name == "h264"
        assert video.width == 1920
        assert video.r_frame_rate == "30000/1001"
        audio = probe.first_stream("audio")
        assert audio.sample_rate == "48000"
        assert probe.format["format_name"] == "mov,mp4,m4a,3gp,3g2,mj2"

    def test_stream_index_defaults_to_position(self) -> None:
        probe = parse_ffprobe_output(
            {"streams": [{"codec_type": "audio"}, {"codec_type": "video"}]}
        )
        assert [s.index for s in probe.streams] == [0, 1]

    def test_missing_members_are_empty(self) -> None:
        probe = parse_ffprobe_output({})
        assert probe.format == {}
        assert probe.streams == ()

    def test_non_dict_stream_skipped(self, caplog) -> None:
        probe = parse_ffprobe_output({"streams": ["junk", {"codec_type": "audio"}]})

        assert len(probe.streams) == 1
        assert "malformed ffprobe stream" in caplog.text

    @pytest.mark.parametrize(
        "data",
        [[], "text", {"format": "mp4"}, {"streams": {"0": {}}}],
    )
    def test_malformed_document_raises(self, data) -> None:
        with pytest.raises(ProbeError):
            parse_ffprobe_output(data)

    def test_first_stream_uses_probe_order(self) -> None:
        probe = ProbeSuccess(
            streams=(
                StreamInfo(index=0, codec_type="audio", codec_name="aac"),
                StreamInfo(index=1, codec_type="audio", codec_name="opus"),
            )
        )
        assert probe.first_stream("audio").codec_name == "aac"
        assert probe.first_stream("video") is None


class TestClassify:
    """Tests for the kind classifier."""

    @pytest.mark.parametrize(
        ("has_video", "has_audio", "expected"),
        [
            (True, True, MediaKind.VIDEO),
            (True, False, MediaKind.IMAGE),
            (False, True, MediaKind.AUDIO),
            (False, False, MediaKind.UNKNOWN),
        ],
    )
    def test_classify_streams(self, has_video, has_audio, expected) -> None:
        assert classify_streams(has_video, has_audio) is expected

    @pytest.mark.parametrize(
        ("rel_path", "expected"),
        [
            ("a.MP4", MediaKind.VIDEO),
            ("dir/b.mkv", MediaKind.VIDEO),
            ("song.mp3", MediaKind.AUDIO),
            ("x.flac", MediaKind.AUDIO),
            ("photo.JPG", MediaKind.IMAGE),
            ("notes.txt", MediaKind.UNKNOWN),
            ("noext", MediaKind.UNKNOWN),
            (None, MediaKind.UNKNOWN),
        ],
    )
    def test_guess_kind_from_extension(self, rel_path, expected) -> None:
        assert guess_kind_from_extension(rel_path) is expected

    def test_probe_data_overrides_extension(self, ffprobe_fixture) -> None:
        probe = parse_ffprobe_output(ffprobe_fixture("audio_only"))
        assert classify("misnamed.mp4", probe) is MediaKind.AUDIO

    def test_silent_video_is_image(self, ffprobe_fixture) -> None:
        probe = parse_ffprobe_output(ffprobe_fixture("video_only"))
        assert classify("silent.webm", probe) is MediaKind.IMAGE

    def test_no_streams_is_unknown_even_with_media_extension(self) -> None:
        assert classify("movie.mp4", ProbeSuccess()) is MediaKind.UNKNOWN

    def test_without_probe_uses_extension(self) -> None:
        assert classify("movie.mp4") is MediaKind.VIDEO
