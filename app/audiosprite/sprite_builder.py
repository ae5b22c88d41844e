"""Audio sprite build pipeline.

Builds a single audio sprite out of a list of clips: every clip is decoded to
raw PCM, appended to a merged track with silence padding, and the merged
track is exported to every requested format. The resulting manifest maps
each clip name to its {start, end, loop} range in seconds and is finally
serialized for the configured playback library.

Stages run strictly one after another: the merged track and its offset
cursor are shared by every step, so clips are appended one at a time and
formats are encoded one at a time.

Key Components:
    SpriteBuilder: Owns the options, manifest and merged track of one build
    build_sprite: Entry point reporting the outcome through a callback
"""

import logging
import os
from typing import Any, Callable, Iterable

from app.audiosprite.clip_loader import clip_name
from app.audiosprite.converter import RawAudioConverter, make_temp_file, remove_file
from app.audiosprite.errors import (
    AddFileError,
    AudioSpriteError,
    ConfigurationError,
    ExportFailed,
)
from app.audiosprite.exporters import (
    FormatExporter,
    format_arguments,
    requested_formats,
)
from app.audiosprite.manifest import Manifest
from app.audiosprite.options import SpriteOptions
from app.audiosprite.serializers import get_serializer
from app.audiosprite.track import SILENCE_NAME, MergedTrack
from app.audiosprite.transcoder import FfmpegTranscoder

logger = logging.getLogger(__name__)


class SpriteBuilder:
    """Builds one audio sprite from an ordered list of clips.

    Args:
        files (Iterable[str]): Input clips, in sprite order
        options (SpriteOptions, optional): Build options. Defaults to SpriteOptions().
        transcoder (optional): Replaces the FfmpegTranscoder built from the options

    Raises:
        ConfigurationError: If no files are given, two clips share a name or
            a raw part format is unknown

    Example:
        ```python
        options = SpriteOptions(format="howler")
        builder = SpriteBuilder(["jump.wav", "coin.mp3"], options)
        sprite = builder.build()
        ```
    """

    def __init__(
        self,
        files: Iterable[str],
        options: SpriteOptions | None = None,
        transcoder=None,
    ) -> None:
        self.files = list(files or [])
        self.options = options or SpriteOptions()
        self.logger = self.options.logger or logger
        self.transcoder = transcoder or FfmpegTranscoder(
            self.options.samplerate, self.options.channels, logger=self.logger
        )
        self.manifest = Manifest()
        self.track: MergedTrack | None = None

        if not self.files:
            raise ConfigurationError("No input files specified.")

        self.names = [clip_name(path) for path in self.files]
        reserved = {SILENCE_NAME} if self.options.silence > 0 else set()
        seen: set[str] = set()
        for path, name in zip(self.files, self.names):
            if name in seen or name in reserved:
                raise ConfigurationError("Duplicate clip name", name=name, file=path)
            seen.add(name)

        supported = format_arguments(self.options)
        for ext in self.options.raw_part_formats:
            if ext not in supported:
                raise ConfigurationError("Unknown raw part format", format=ext)

        self.converter = RawAudioConverter(self.transcoder, logger=self.logger)
        self.exporter = FormatExporter(
            self.transcoder, self.manifest, self.options, logger=self.logger
        )

    def build(self) -> Any:
        """Run the whole pipeline and serialize the manifest.

        The merged track temporary file is removed on every exit path.

        Returns:
            Any: The output of the configured manifest serializer

        Raises:
            ConfigurationError: If the output directory or the merged track
                file cannot be created, or no serializer matches options.format
            ToolUnavailable: If ffmpeg cannot be run
            AddFileError: If a clip could not be decoded, appended or sliced
            ExportFailed: If a format could not be exported or written
        """
        output_dir = os.path.dirname(self.options.output)
        if output_dir:
            try:
                os.makedirs(output_dir, exist_ok=True)
            except OSError as e:
                raise ConfigurationError(
                    "Could not create output directory", path=output_dir
                ) from e

        self.transcoder.check_available()

        try:
            track_file = make_temp_file()
        except OSError as e:
            raise ConfigurationError("Could not create temporary file") from e
        self.logger.debug(
            f"Created temporary file {track_file}",
            extra={"details": {"file": track_file}},
        )
        try:
            self.track = MergedTrack(
                track_file, self.manifest, self.options, logger=self.logger
            )
            if self.options.silence > 0:
                self._add_leading_silence()
            self._process_files()
            self._export_formats()
        finally:
            remove_file(track_file)

        return self._finalize()

    def _add_leading_silence(self) -> None:
        self.track.add_leading_silence(self.options.silence, self.options.gap)
        if not self.options.autoplay:
            self.manifest.autoplay = SILENCE_NAME

    def _process_files(self) -> None:
        for i, (path, name) in enumerate(zip(self.files, self.names), start=1):
            try:
                self._process_file(i, path, name)
            except AudioSpriteError as e:
                self.logger.error(f"Error adding file {path}: {e.to_dict()}")
                raise AddFileError(
                    "Error adding file", file=path, cause=e.to_dict()
                ) from e
            except OSError as e:
                self.logger.error(f"Error adding file {path}: {e}")
                raise AddFileError(
                    "Error adding file", file=path, cause={"msg": str(e)}
                ) from e

    def _process_file(self, i: int, path: str, name: str) -> None:
        with self.converter.raw_clip(path) as raw:
            self.track.append_clip(name, raw)
            for ext in self.options.raw_part_formats:
                self.logger.debug(
                    f"Start export slice {name} as {ext}",
                    extra={"details": {"name": name, "format": ext, "i": i}},
                )
                self.exporter.export(
                    raw, f"{self.options.output}_{i:03d}", ext, store=False
                )

    def _export_formats(self) -> None:
        for ext in requested_formats(self.options):
            self.logger.debug(f"Start export {ext}", extra={"details": {"format": ext}})
            try:
                self.exporter.export(
                    self.track.path, self.options.output, ext, store=True
                )
            except OSError as e:
                self.logger.error(f"Error exporting {ext}: {e}")
                raise ExportFailed("Error exporting file", format=ext) from e

    def _finalize(self) -> Any:
        if self.options.path:
            self.manifest.resources = [
                os.path.join(self.options.path, os.path.basename(resource))
                for resource in self.manifest.resources
            ]
        if self.options.autoplay:
            self.manifest.autoplay = self.options.autoplay
        serializer = get_serializer(self.options.format)
        return serializer(self.manifest)


def build_sprite(
    files: Iterable[str],
    callback: Callable[..., None] | None = None,
    options: SpriteOptions | None = None,
    transcoder=None,
    **overrides: Any,
) -> Any:
    """Build a sprite and report the outcome.

    With a callback, it is invoked exactly once: `callback(error, None)` on
    failure or `callback(None, result)` on success. Without one, errors are
    raised.

    Args:
        files (Iterable[str]): Input clips, in sprite order
        callback (Callable, optional): Completion callback
        options (SpriteOptions, optional): Complete options, exclusive with overrides
        transcoder (optional): Replaces the default FfmpegTranscoder
        **overrides: SpriteOptions fields

    Returns:
        Any: The serialized manifest, or None when the build failed

    Raises:
        AudioSpriteError: Without a callback, if the build fails
    """
    try:
        if options is None:
            options = SpriteOptions.from_overrides(overrides)
        elif overrides:
            raise ConfigurationError(
                "options and overrides are exclusive", overrides=sorted(overrides)
            )
        result = SpriteBuilder(files, options, transcoder=transcoder).build()
    except AudioSpriteError as e:
        if callback is None:
            raise
        callback(e, None)
        return None
    if callback is not None:
        callback(None, result)
    return result
