"""Conversion of input clips into temporary raw PCM files."""

import contextlib
import logging
import os
import tempfile
from typing import Iterator

from app.audiosprite.errors import SourceMissing


def make_temp_file(prefix: str = "audiosprite") -> str:
    """Create an empty temporary file and return its name.

    The file is closed straight away; callers own it and must unlink it.
    """
    tmp = tempfile.NamedTemporaryFile(prefix=prefix, delete=False)
    tmp.close()
    return tmp.name


def remove_file(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


class RawAudioConverter:
    """Turns one input clip into a temporary s16le file.

    Args:
        transcoder: Object providing decode_to_raw(src, dest)
        logger (logging.Logger, optional): Receives "Start processing" events
    """

    def __init__(self, transcoder, logger: logging.Logger | None = None) -> None:
        self.transcoder = transcoder
        self.logger = logger or logging.getLogger(__name__)

    def convert(self, src: str) -> str:
        """Decode `src` into a new temporary raw PCM file.

        Args:
            src (str): Path of the input clip

        Returns:
            str: Path of the temporary file, owned by the caller

        Raises:
            SourceMissing: If `src` does not exist
            ConversionFailed: If ffmpeg fails; the temporary file is removed
        """
        if not os.path.exists(src):
            raise SourceMissing("File does not exist", file=src)
        dest = make_temp_file()
        self.logger.debug(f"Start processing {src}", extra={"details": {"file": src}})
        try:
            self.transcoder.decode_to_raw(src, dest)
        except Exception:
            remove_file(dest)
            raise
        return dest

    @contextlib.contextmanager
    def raw_clip(self, src: str) -> Iterator[str]:
        """Context manager yielding the raw PCM path of `src`, removed on exit."""
        dest = self.convert(src)
        try:
            yield dest
        finally:
            remove_file(dest)
