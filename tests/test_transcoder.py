"""Tests for the ffmpeg and afconvert invocations."""

import io
import os
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from app.audiosprite.errors import ConversionFailed, ExportFailed, ToolUnavailable
from app.audiosprite.transcoder import FfmpegTranscoder, exit_details


def _has_pair(args, flag, value):
    return any(a == flag and b == value for a, b in zip(args, args[1:]))


@pytest.fixture
def transcoder():
    return FfmpegTranscoder(44100, 2)


def test_exit_details():
    assert exit_details(0) == (0, None)
    assert exit_details(3) == (3, None)
    assert exit_details(-9) == (None, "SIGKILL")


def test_decode_command(transcoder):
    args = transcoder.decode_stream("clips/jump.wav").compile()

    assert args[0] == "ffmpeg"
    assert _has_pair(args, "-i", os.path.abspath("clips/jump.wav"))
    assert _has_pair(args, "-ar", "44100")
    assert _has_pair(args, "-ac", "2")
    assert _has_pair(args, "-f", "s16le")
    assert args[-1] == "pipe:"
    assert args.index("-ar") > args.index("-i")


def test_encode_command(transcoder):
    args = transcoder.encode_stream(
        "/tmp/track",
        "out/sprite.ogg",
        {"acodec": "libvorbis", "format": "ogg", "ab": "128k"},
    ).compile()

    assert args[0] == "ffmpeg"
    assert "-y" in args
    assert _has_pair(args, "-i", "/tmp/track")
    input_args = args[: args.index("-i")]
    assert _has_pair(input_args, "-f", "s16le")
    assert _has_pair(input_args, "-ar", "44100")
    assert _has_pair(input_args, "-ac", "2")
    output_args = args[args.index("-i") + 2 :]
    assert _has_pair(output_args, "-f", "ogg")
    assert _has_pair(output_args, "-acodec", "libvorbis")
    assert _has_pair(output_args, "-ab", "128k")
    assert "out/sprite.ogg" in output_args


def test_encode_command_with_vorbis_quality(transcoder):
    stream = transcoder.encode_stream("/tmp/track", "out/sprite.webm", {"qscale:a": 4})
    args = stream.compile()

    assert _has_pair(args, "-qscale:a", "4")


def test_check_available_ok(transcoder):
    with patch("subprocess.run", return_value=MagicMock(returncode=0)) as run:
        transcoder.check_available()
    assert run.call_args[0][0] == ["ffmpeg", "-version"]


def test_check_available_non_zero_exit(transcoder):
    with patch("subprocess.run", return_value=MagicMock(returncode=1)):
        with pytest.raises(ToolUnavailable, match="ffmpeg was not found on your path"):
            transcoder.check_available()


def test_check_available_missing_binary(transcoder):
    with patch("subprocess.run", side_effect=FileNotFoundError("ffmpeg")):
        with pytest.raises(ToolUnavailable):
            transcoder.check_available()


def _process(returncode, stdout=b""):
    process = MagicMock()
    process.stdout = io.BytesIO(stdout)
    process.wait.return_value = returncode
    return process


def test_decode_streams_stdout_to_file(transcoder, tmp_path):
    src = tmp_path / "jump.wav"
    src.write_bytes(b"RIFF")
    dest = tmp_path / "jump.raw"

    with patch("subprocess.Popen", return_value=_process(0, b"\x01\x00" * 8)) as popen:
        transcoder.decode_to_raw(str(src), str(dest))

    assert dest.read_bytes() == b"\x01\x00" * 8
    assert popen.call_args[0][0][-1] == "pipe:"


def test_decode_failure_carries_exit_status(transcoder, tmp_path):
    dest = tmp_path / "jump.raw"

    with patch("subprocess.Popen", return_value=_process(-15)):
        with pytest.raises(ConversionFailed) as excinfo:
            transcoder.decode_to_raw("jump.wav", str(dest))

    assert excinfo.value.to_dict() == {
        "msg": "File could not be added",
        "file": "jump.wav",
        "retcode": None,
        "signal": "SIGTERM",
    }


def test_encode_failure_carries_format(transcoder):
    with patch("subprocess.Popen", return_value=_process(1)):
        with pytest.raises(ExportFailed) as excinfo:
            transcoder.encode("/tmp/track", "out/sprite.mp3", "mp3", {"format": "mp3"})

    assert excinfo.value.context == {"format": "mp3", "retcode": 1, "signal": None}


def test_encode_success(transcoder):
    with patch("subprocess.Popen", return_value=_process(0)) as popen:
        transcoder.encode("/tmp/track", "out/sprite.wav", "wav", {})

    assert "out/sprite.wav" in popen.call_args[0][0]


def test_caf_is_not_attempted_off_macos(transcoder, monkeypatch):
    monkeypatch.setattr("sys.platform", "linux")

    with patch("subprocess.run") as run:
        with pytest.raises(ExportFailed) as excinfo:
            transcoder.convert_to_caf("a.aiff", "a.caf")

    run.assert_not_called()
    assert excinfo.value.context["format"] == "caf"


def test_caf_on_macos(transcoder, monkeypatch):
    monkeypatch.setattr("sys.platform", "darwin")

    with patch("subprocess.run", return_value=MagicMock(returncode=0)) as run:
        transcoder.convert_to_caf("a.aiff", "a.caf")

    cmd = run.call_args[0][0]
    assert cmd == ["afconvert", "-f", "caff", "-d", "ima4", "a.aiff", "a.caf"]


def test_caf_failure_on_macos(transcoder, monkeypatch):
    monkeypatch.setattr("sys.platform", "darwin")

    with patch("subprocess.run", return_value=MagicMock(returncode=2)):
        with pytest.raises(ExportFailed) as excinfo:
            transcoder.convert_to_caf("a.aiff", "a.caf")

    assert excinfo.value.context["retcode"] == 2


def test_decode_write_error_kills_ffmpeg(transcoder, tmp_path):
    dest = tmp_path / "missing" / "jump.raw"
    process = _process(0, b"\x01\x00" * 8)

    with patch("subprocess.Popen", return_value=process):
        with pytest.raises(ConversionFailed) as excinfo:
            transcoder.decode_to_raw("jump.wav", str(dest))

    assert isinstance(excinfo.value.__cause__, OSError)
    process.kill.assert_called_once()
    process.wait.assert_called_once()
    assert process.stdout.closed
