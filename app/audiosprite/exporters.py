"""Export of raw PCM tracks into distribution formats.

Every supported format maps to the ffmpeg output arguments used to encode
it. aiff is only an intermediate: it is converted to an IMA4 caf file with
afconvert (macOS only) and then deleted.
"""

import logging

from app.audiosprite.converter import remove_file
from app.audiosprite.errors import ExportFailed
from app.audiosprite.manifest import Manifest
from app.audiosprite.options import SpriteOptions

DEFAULT_FORMAT_ORDER = ("aiff", "wav", "ac3", "mp3", "mp4", "m4a", "ogg", "webm")

logger = logging.getLogger(__name__)


def format_arguments(options: SpriteOptions) -> dict[str, dict]:
    """ffmpeg output arguments for every supported format.

    Args:
        options (SpriteOptions): Provides bitrate, sample rate and VBR settings

    Returns:
        dict[str, dict]: Format id -> ffmpeg-python output keyword arguments
    """
    bitrate = f"{options.bitrate}k"
    formats: dict[str, dict] = {
        "aiff": {},
        "wav": {},
        "ac3": {"acodec": "ac3", "ab": bitrate},
        "mp3": {"ar": options.samplerate, "format": "mp3"},
        "mp4": {"ab": bitrate},
        "m4a": {"ab": bitrate},
        "ogg": {"acodec": "libvorbis", "format": "ogg", "ab": bitrate},
        "webm": {"acodec": "libvorbis", "format": "webm"},
    }

    if 0 <= options.vbr <= 9:
        formats["mp3"]["aq"] = options.vbr
    else:
        formats["mp3"]["ab"] = bitrate

    # https://trac.ffmpeg.org/wiki/TheoraVorbisEncodingGuide
    if 0 <= options.vbr_vorbis <= 10:
        formats["webm"]["qscale:a"] = options.vbr_vorbis
    else:
        formats["webm"]["ab"] = bitrate

    return formats


def requested_formats(options: SpriteOptions) -> list[str]:
    """Formats to export, in the configured order.

    Unknown ids are skipped. An empty export list selects every format in
    DEFAULT_FORMAT_ORDER.
    """
    requested = options.export_formats
    if not requested:
        return list(DEFAULT_FORMAT_ORDER)
    formats = []
    for ext in requested:
        if ext not in DEFAULT_FORMAT_ORDER:
            logger.warning(f"Skipping unknown export format: {ext}")
            continue
        if ext not in formats:
            formats.append(ext)
    return formats


class FormatExporter:
    """Encodes raw PCM files and records the stored outputs.

    Args:
        transcoder: Object providing encode() and convert_to_caf()
        manifest (Manifest): Receives the stored output paths
        options (SpriteOptions): Source of the per-format arguments
        logger (logging.Logger, optional): Receives "Exported ... OK" events
    """

    def __init__(
        self,
        transcoder,
        manifest: Manifest,
        options: SpriteOptions,
        logger: logging.Logger | None = None,
    ) -> None:
        self.transcoder = transcoder
        self.manifest = manifest
        self.formats = format_arguments(options)
        self.logger = logger or logging.getLogger(__name__)

    def export(self, src: str, dest: str, ext: str, store: bool) -> str | None:
        """Encode `src` into `dest.ext`.

        Args:
            src (str): Raw PCM file
            dest (str): Output path without extension
            ext (str): Format id, a key of format_arguments()
            store (bool): Whether to append the output path to the manifest

        Returns:
            str | None: Path of the produced file, None if the caf step failed

        Raises:
            ExportFailed: If ffmpeg fails
        """
        out_file = f"{dest}.{ext}"
        self.transcoder.encode(src, out_file, ext, self.formats[ext])

        if ext == "aiff":
            return self._export_caf(out_file, f"{dest}.caf", store)

        self.logger.info(f"Exported {ext} OK", extra={"details": {"file": out_file}})
        if store:
            self.manifest.resources.append(out_file)
        return out_file

    def _export_caf(self, aiff_file: str, caf_file: str, store: bool) -> str | None:
        try:
            self.transcoder.convert_to_caf(aiff_file, caf_file)
        except ExportFailed as e:
            self.logger.warning(
                f"Could not convert {aiff_file} to caf: {e.to_dict()}",
                extra={"details": e.context},
            )
            return None
        finally:
            remove_file(aiff_file)

        self.logger.info("Exported caf OK", extra={"details": {"file": caf_file}})
        if store:
            self.manifest.resources.append(caf_file)
        return caf_file
