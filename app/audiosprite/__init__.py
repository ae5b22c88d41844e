"""Audio Sprite Core Module

This package builds audio sprites: it merges a list of clips into one track
separated by silence, exports the track to several formats with ffmpeg and
describes where every clip lives in the track.

Modules:
    sprite_builder: Orchestrates a build and reports its outcome
    converter: Decodes clips to temporary raw PCM files
    track: Appends clips and silence to the merged track, owns the timing
    exporters: Encodes raw PCM into the distribution formats
    serializers: Turns the manifest into library specific JSON
    clip_loader: Names, discovers and probes clips
"""

from app.audiosprite.errors import (
    AddFileError,
    AudioSpriteError,
    ConfigurationError,
    ConversionFailed,
    ExportFailed,
    SourceMissing,
    ToolUnavailable,
)
from app.audiosprite.manifest import Manifest, SpriteEntry
from app.audiosprite.options import SpriteOptions
from app.audiosprite.serializers import SERIALIZERS
from app.audiosprite.sprite_builder import SpriteBuilder, build_sprite

__all__ = [
    "AddFileError",
    "AudioSpriteError",
    "ConfigurationError",
    "ConversionFailed",
    "ExportFailed",
    "Manifest",
    "SERIALIZERS",
    "SourceMissing",
    "SpriteBuilder",
    "SpriteEntry",
    "SpriteOptions",
    "ToolUnavailable",
    "build_sprite",
]
