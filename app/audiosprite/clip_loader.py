"""Clip discovery for sprite builds.

Provides the clip naming rule used for manifest keys and a loader that finds
the clips of a media directory and probes them with ffprobe.

Classes:
    ClipInfo: A clip path with its sprite name and lazily probed metadata
    ClipLoader: Loads the clips that the service builds sprites from
"""

import re
from pathlib import Path

import ffmpeg  # type: ignore

BASE_DIR = Path(__file__).parent.parent.parent.resolve()
MEDIA_DIR = BASE_DIR / "media"
CLIPS_DIR = MEDIA_DIR / "clips"

_EXTENSION = re.compile(r"\.[a-zA-Z0-9]+$")


def clip_name(path: str) -> str:
    """Sprite name of a clip: its basename without the extension.

    Args:
        path (str): Path of the clip

    Returns:
        str: e.g. "jump" for "sounds/jump.wav"
    """
    return _EXTENSION.sub("", Path(path).name)


class ClipInfo:
    """A clip on disk plus its ffprobe metadata.

    The probe only runs the first time metadata is requested.

    Args:
        file_path (str): Path to the audio file
    """

    def __init__(self, file_path: str) -> None:
        self.path = file_path
        self.name = clip_name(file_path)
        self._probe: dict | None = None

    @property
    def probe(self) -> dict:
        if self._probe is None:
            self._probe = ffmpeg.probe(self.path)
        return self._probe

    def duration(self) -> float:
        """Duration in seconds of the first audio stream.

        Falls back to the container duration when the stream has none.
        """
        for stream in self.probe["streams"]:
            if stream.get("codec_type") == "audio" and "duration" in stream:
                return float(stream["duration"])
        return float(self.probe["format"]["duration"])


class ClipLoader:
    """Manages access to the clips of a sprite.

    Clips are every file of the directory, sorted by file name so the
    sprite order is stable.

    Args:
        clips_dir (Path, optional): Directory to scan. Defaults to CLIPS_DIR.
    """

    def __init__(self, clips_dir: Path = CLIPS_DIR) -> None:
        self.clips_dir = Path(clips_dir)
        self.clips = [
            ClipInfo(str(path))
            for path in sorted(self.clips_dir.glob("*"))
            if path.is_file() and not path.name.startswith(".")
        ]

    def paths(self) -> list[str]:
        return [clip.path for clip in self.clips]

    def describe(self) -> list[dict]:
        """Name, path and probed duration of every clip."""
        return [
            {"name": clip.name, "file": clip.path, "duration": clip.duration()}
            for clip in self.clips
        ]
