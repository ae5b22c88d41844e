"""Build options for an audio sprite.

SpriteOptions is created once per build from the defaults overlaid with the
caller's overrides and is never mutated afterwards.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from app.audiosprite.errors import ConfigurationError

# Alternative spellings accepted by from_overrides.
_ALIASES = {
    "vbr:vorbis": "vbr_vorbis",
    "vbr-vorbis": "vbr_vorbis",
}


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class SpriteOptions:
    """Immutable configuration of a single sprite build.

    Attributes:
        output: Base path of the exported files, without extension
        path: Destination prefix written into the manifest resources
        export: Comma-separated list of formats to export
        format: Manifest serializer id (jukebox, howler or createjs)
        autoplay: Sprite to play on load; it is also looped
        loop: Additional sprite names to loop
        silence: Seconds of leading silence sprite, 0 disables it
        gap: Seconds of silence after every sprite
        minlength: Minimum sprite length in seconds
        bitrate: Bitrate in kbps for lossy formats
        vbr: mp3 VBR quality (0-9), -1 disables
        vbr_vorbis: webm vorbis quality (0-10), -1 disables
        samplerate: Sample rate of the merged track in Hz
        channels: Channel count of the merged track
        rawparts: Comma-separated formats to export for every single clip
        logger: Logger receiving build events, defaults to the module logger
    """

    output: str = "output"
    path: str = ""
    export: str = "ogg,m4a,mp3,ac3"
    format: str = "jukebox"
    autoplay: str | None = None
    loop: tuple[str, ...] = ()
    silence: float = 0
    gap: float = 1
    minlength: float = 0
    bitrate: int = 128
    vbr: int = -1
    vbr_vorbis: int = -1
    samplerate: int = 44100
    channels: int = 1
    rawparts: str = ""
    logger: logging.Logger | logging.LoggerAdapter | None = field(
        default=None, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        # Accept any iterable of names but keep the frozen value hashable.
        loop = (self.loop,) if isinstance(self.loop, str) else (self.loop or ())
        object.__setattr__(self, "loop", tuple(loop))
        if self.samplerate <= 0:
            raise ConfigurationError("Invalid sample rate", samplerate=self.samplerate)
        if self.channels <= 0:
            raise ConfigurationError("Invalid channel count", channels=self.channels)
        if self.bitrate <= 0:
            raise ConfigurationError("Invalid bitrate", bitrate=self.bitrate)
        for name in ("silence", "gap", "minlength"):
            if getattr(self, name) < 0:
                raise ConfigurationError(
                    f"Option {name} must not be negative", option=name
                )

    @classmethod
    def from_overrides(
        cls, overrides: Mapping[str, Any] | None = None
    ) -> "SpriteOptions":
        """Build options from the defaults plus the given overrides.

        Args:
            overrides: Option name -> value. None values keep the default.

        Returns:
            SpriteOptions: A fresh instance, the defaults are never shared

        Raises:
            ConfigurationError: If an option name is unknown
        """
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in (overrides or {}).items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError("Unknown option", option=key)
            if value is not None:
                values[name] = value
        return cls(**values)

    @property
    def export_formats(self) -> list[str]:
        return _split_list(self.export)

    @property
    def raw_part_formats(self) -> list[str]:
        return _split_list(self.rawparts)

    def loops(self, name: str) -> bool:
        """Whether the sprite with this name should be flagged as looping."""
        return name == self.autoplay or name in self.loop
