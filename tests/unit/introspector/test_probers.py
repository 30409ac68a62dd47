"""Tests for FFprobeProber and StubProber."""

import json
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from media_analyzer.introspector import (
    FFprobeProber,
    ProbeError,
    ProbeFailure,
    ProbeSuccess,
    StubProber,
    run_probe,
)

RUN_COMMAND = "media_analyzer.introspector.ffprobe.run_command"


class TestFFprobeProber:
    """Tests for FFprobeProber with run_command mocked."""

    def test_successful_probe(self, ffprobe_fixture) -> None:
        stdout = json.dumps(ffprobe_fixture("video_with_audio"))
        with patch(RUN_COMMAND, return_value=(stdout, "", 0)) as mock_run:
            result = FFprobeProber().probe(Path("/media/movie.mp4"))

        assert isinstance(result, ProbeSuccess)
        assert result.first_stream("video").codec_name == "h264"
        args = mock_run.call_args.args[0]
        assert args[0] == "ffprobe"
        assert "-show_streams" in args
        assert args[-1] == "/media/movie.mp4"

    def test_custom_path_and_timeout(self) -> None:
        prober = FFprobeProber("/opt/ffmpeg/bin/ffprobe", timeout=5)
        with patch(RUN_COMMAND, return_value=("{}", "", 0)) as mock_run:
            prober.probe(Path("/media/a.mp4"))

        assert mock_run.call_args.args[0][0] == "/opt/ffmpeg/bin/ffprobe"
        assert mock_run.call_args.kwargs["timeout"] == 5

    def test_non_zero_exit(self) -> None:
        with patch(RUN_COMMAND, return_value=("", "Invalid data found\n", 1)):
            with pytest.raises(ProbeError, match="exited with code 1: Invalid data"):
                FFprobeProber().probe(Path("/media/bad.mp4"))

    def test_missing_executable(self) -> None:
        with patch(RUN_COMMAND, side_effect=FileNotFoundError("ffprobe")):
            with pytest.raises(ProbeError, match="ffprobe not found"):
                FFprobeProber().probe(Path("/media/a.mp4"))

    def test_timeout(self) -> None:
        error = subprocess.TimeoutExpired(cmd="ffprobe", timeout=60)
        with patch(RUN_COMMAND, side_effect=error):
            with pytest.raises(ProbeError, match="timed out after 60s"):
                FFprobeProber().probe(Path("/media/a.mp4"))

    def test_invalid_json(self) -> None:
        with patch(RUN_COMMAND, return_value=("not json", "", 0)):
            with pytest.raises(ProbeError, match="Failed to parse ffprobe JSON"):
                FFprobeProber().probe(Path("/media/a.mp4"))

    def test_is_available(self) -> None:
        with patch("media_analyzer.introspector.ffprobe.shutil.which") as which:
            which.return_value = None
            assert FFprobeProber().is_available() is False
            which.return_value = "/usr/bin/ffprobe"
            assert FFprobeProber().is_available() is True


class TestStubProber:
    """Tests for StubProber."""

    def test_returns_canned_response(self, ffprobe_fixture) -> None:
        prober = StubProber({"song.mp3": ffprobe_fixture("audio_only")})

        result = prober.probe(Path("/media/music/song.mp3"))

        assert result.first_stream("audio").codec_name == "mp3"
        assert prober.calls == [Path("/media/music/song.mp3")]

    def test_unknown_file_raises(self) -> None:
        with pytest.raises(ProbeError, match="No stub response"):
            StubProber().probe(Path("/media/x.mp4"))

    def test_exception_response_is_wrapped(self) -> None:
        prober = StubProber({"x.mp4": RuntimeError("decoder exploded")})
        with pytest.raises(ProbeError, match="decoder exploded"):
            prober.probe(Path("/media/x.mp4"))


class TestRunProbe:
    """Tests for run_probe."""

    def test_success(self, ffprobe_fixture) -> None:
        prober = StubProber({"a.mp4": ffprobe_fixture("video_with_audio")})
        assert isinstance(run_probe(prober, Path("/m/a.mp4")), ProbeSuccess)

    def test_failure_becomes_value(self) -> None:
        outcome = run_probe(StubProber(), Path("/m/a.mp4"))
        assert isinstance(outcome, ProbeFailure)
        assert "No stub response" in outcome.diagnostic

    def test_empty_message_gets_default(self) -> None:
        prober = StubProber({"a.mp4": ProbeError()})
        outcome = run_probe(prober, Path("/m/a.mp4"))
        assert outcome.diagnostic == "Analyze failed"
