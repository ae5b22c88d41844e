"""Shared fixtures for the audiosprite test suite.

The real FfmpegTranscoder is replaced by FakeTranscoder, which writes
deterministic raw PCM instead of running ffmpeg: decoding a clip produces
silence of the duration configured for its name, and encoding copies the
raw source to the output file so byte lengths can be checked.
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from app.audiosprite.clip_loader import clip_name
from app.audiosprite.errors import ConversionFailed, ExportFailed, ToolUnavailable

SAMPLERATE = 44100
CHANNELS = 1


class FakeTranscoder:
    def __init__(
        self,
        durations=None,
        samplerate=SAMPLERATE,
        channels=CHANNELS,
        available=True,
        fail_decode=(),
        fail_encode=(),
        caf_available=False,
    ):
        self.durations = durations or {}
        self.samplerate = samplerate
        self.channels = channels
        self.available = available
        self.fail_decode = set(fail_decode)
        self.fail_encode = set(fail_encode)
        self.caf_available = caf_available
        self.calls = []

    def check_available(self):
        self.calls.append(("version",))
        if not self.available:
            raise ToolUnavailable("ffmpeg was not found on your path", retcode=1)

    def decode_to_raw(self, src, dest):
        name = clip_name(src)
        self.calls.append(("decode", name))
        if name in self.fail_decode:
            raise ConversionFailed("File could not be added", file=src, retcode=1)
        seconds = self.durations.get(name, 1.0)
        with open(dest, "wb") as f:
            f.write(bytes(round(seconds * self.samplerate * self.channels * 2)))

    def encode(self, src, out_file, ext, output_args):
        self.calls.append(("encode", out_file, ext))
        if ext in self.fail_encode:
            raise ExportFailed("Error exporting file", format=ext, retcode=1)
        shutil.copyfile(src, out_file)

    def convert_to_caf(self, src, dest):
        self.calls.append(("caf", dest))
        if not self.caf_available:
            raise ExportFailed("Error exporting file", format="caf")
        shutil.copyfile(src, dest)

    def encoded(self):
        return [call[1] for call in self.calls if call[0] == "encode"]


@pytest.fixture
def temp_dir(tmp_path, monkeypatch):
    """Redirect temporary files to a directory the test can inspect."""
    directory = tmp_path / "tmp"
    directory.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(directory))
    return directory


@pytest.fixture
def make_clips(tmp_path):
    """Create empty clip files; FakeTranscoder only cares about their names."""

    def _make(*names):
        clips_dir = tmp_path / "clips"
        clips_dir.mkdir(exist_ok=True)
        paths = []
        for name in names:
            path = clips_dir / name
            path.write_bytes(b"")
            paths.append(str(path))
        return paths

    return _make


@pytest.fixture
def output(tmp_path) -> str:
    return str(tmp_path / "out" / "sprite")


@pytest.fixture
def raw_file(tmp_path):
    """Write a raw PCM file of the given duration and return its path."""

    def _write(name: str, seconds: float) -> str:
        path = Path(tmp_path) / f"{name}.raw"
        path.write_bytes(bytes(round(seconds * SAMPLERATE * CHANNELS * 2)))
        return str(path)

    return _write
