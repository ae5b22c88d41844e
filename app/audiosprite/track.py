"""Merged track assembly and the sprite timing model.

The merged track is a single raw s16le file. Clips are appended one after
the other; after every clip silence is added so the next clip starts on a
whole second plus the configured gap. The offset cursor always equals the
duration of everything written to the track so far.

Key Components:
    MergedTrack: Appends clips and silence, owns the cursor
    raw_duration: Seconds of audio in a number of raw PCM bytes
    silence_bytes: Zero-valued raw PCM of a given duration
"""

import logging
import math
import os
import shutil

from app.audiosprite.errors import ConversionFailed
from app.audiosprite.manifest import Manifest, SpriteEntry
from app.audiosprite.options import SpriteOptions

BYTES_PER_SAMPLE = 2  # s16le

SILENCE_NAME = "silence"


def raw_duration(byte_length: int, samplerate: int, channels: int) -> float:
    """Duration in seconds of `byte_length` bytes of s16le PCM."""
    return byte_length / samplerate / channels / BYTES_PER_SAMPLE


def silence_bytes(duration: float, samplerate: int, channels: int) -> bytes:
    return bytes(round(samplerate * BYTES_PER_SAMPLE * channels * duration))


class MergedTrack:
    """The growing raw PCM track and its position on the sprite timeline.

    Args:
        path (str): Raw PCM file to append to; it must exist
        manifest (Manifest): Receives one SpriteEntry per appended clip
        options (SpriteOptions): Sample layout, gap, minimum length and loop names
        logger (logging.Logger, optional): Receives "File added OK" and
            "Silence gap added" events
    """

    def __init__(
        self,
        path: str,
        manifest: Manifest,
        options: SpriteOptions,
        logger: logging.Logger | None = None,
    ) -> None:
        self.path = path
        self.manifest = manifest
        self.options = options
        self.logger = logger or logging.getLogger(__name__)
        self.cursor = 0.0

    def pad_silence(self, duration: float) -> None:
        """Append `duration` seconds of silence and advance the cursor."""
        with open(self.path, "ab") as f:
            f.write(
                silence_bytes(duration, self.options.samplerate, self.options.channels)
            )
        self.logger.info(
            f"Silence gap added: {duration}s", extra={"details": {"duration": duration}}
        )
        self.cursor += duration

    def add_leading_silence(self, silence: float, gap: float) -> SpriteEntry:
        """Record the looping `silence` sprite at 0 and pad `silence + gap`."""
        entry = SpriteEntry(start=0, end=silence, loop=True)
        self.manifest.spritemap[SILENCE_NAME] = entry
        self.pad_silence(silence + gap)
        return entry

    def append_clip(self, name: str, raw_path: str) -> SpriteEntry:
        """Append a raw clip, record its sprite entry and pad the track.

        Clips shorter than the minimum length get an entry stretched to the
        minimum; the missing audio is written as silence together with the
        rounding to the next whole second and the gap.

        Args:
            name (str): Sprite name (manifest key)
            raw_path (str): Raw PCM file of the clip

        Returns:
            SpriteEntry: The entry written to the manifest

        Raises:
            ConversionFailed: If the decoded clip holds no audio
        """
        size = os.path.getsize(raw_path)
        if size == 0:
            raise ConversionFailed("File could not be added", file=raw_path, name=name)
        with open(raw_path, "rb") as src, open(self.path, "ab") as dest:
            shutil.copyfileobj(src, dest)

        original_duration = raw_duration(
            size, self.options.samplerate, self.options.channels
        )
        self.logger.info(
            f"File added OK: {name} ({original_duration}s)",
            extra={"details": {"file": raw_path, "duration": original_duration}},
        )
        extra_duration = max(0, self.options.minlength - original_duration)
        duration = original_duration + extra_duration

        entry = SpriteEntry(
            start=self.cursor,
            end=self.cursor + duration,
            loop=self.options.loops(name),
        )
        self.manifest.spritemap[name] = entry
        self.cursor += original_duration
        self.pad_silence(
            extra_duration + math.ceil(duration) - duration + self.options.gap
        )
        return entry
