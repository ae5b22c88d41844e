"""External process invocations used by the sprite builder.

All decoding and encoding is delegated to ffmpeg; this module only builds the
command lines (with ffmpeg-python), runs them and turns a non-zero exit
status or a terminating signal into the matching error. The caf post step
uses Apple's afconvert, which only exists on macOS.

Key Components:
    FfmpegTranscoder: Runs the version probe, decode, encode and caf steps
    exit_details: Maps a process return code to (retcode, signal)
"""

import logging
import os
import shutil
import signal
import subprocess
import sys

import ffmpeg  # type: ignore

from app.audiosprite.errors import ConversionFailed, ExportFailed, ToolUnavailable

RAW_FORMAT = "s16le"


def exit_details(returncode: int) -> tuple[int | None, str | None]:
    """Split a Popen return code into an exit code and a signal name.

    Negative return codes mean the process was killed by a signal.
    """
    if returncode >= 0:
        return returncode, None
    try:
        return None, signal.Signals(-returncode).name
    except ValueError:
        return None, str(-returncode)


class FfmpegTranscoder:
    """Runs ffmpeg (and afconvert) for a fixed raw PCM layout.

    Args:
        samplerate (int): Sample rate of the raw PCM in Hz
        channels (int): Channel count of the raw PCM
        binary (str, optional): ffmpeg executable name. Defaults to "ffmpeg".
        logger (logging.Logger, optional): Receives "Spawn" events
    """

    def __init__(
        self,
        samplerate: int,
        channels: int,
        binary: str = "ffmpeg",
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.samplerate = samplerate
        self.channels = channels
        self.binary = binary
        self.logger = logger or logging.getLogger(__name__)

    def _log_spawn(self, cmd: list[str]) -> None:
        self.logger.debug(
            f"Spawn: {' '.join(cmd)}", extra={"details": {"cmd": " ".join(cmd)}}
        )

    def check_available(self) -> None:
        """Run `ffmpeg -version` and make sure it exits cleanly.

        Raises:
            ToolUnavailable: If ffmpeg is missing or the probe fails
        """
        cmd = [self.binary, "-version"]
        self._log_spawn(cmd)
        try:
            result = subprocess.run(
                cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL
            )
        except OSError as e:
            raise ToolUnavailable("ffmpeg was not found on your path") from e
        if result.returncode != 0:
            retcode, sig = exit_details(result.returncode)
            raise ToolUnavailable(
                "ffmpeg was not found on your path", retcode=retcode, signal=sig
            )

    def decode_stream(self, src: str):
        """ffmpeg graph decoding `src` to raw PCM on stdout."""
        return ffmpeg.input(os.path.abspath(src)).output(
            "pipe:", format=RAW_FORMAT, ar=self.samplerate, ac=self.channels
        )

    def encode_stream(self, src: str, out_file: str, output_args: dict):
        """ffmpeg graph encoding the raw PCM file `src` into `out_file`."""
        return (
            ffmpeg.input(src, format=RAW_FORMAT, ar=self.samplerate, ac=self.channels)
            .output(out_file, **output_args)
            .overwrite_output()
        )

    def decode_to_raw(self, src: str, dest: str) -> None:
        """Decode `src` and write its raw PCM bytes into `dest`.

        Raises:
            ConversionFailed: If ffmpeg exits with an error or is killed
        """
        stream = self.decode_stream(src)
        self._log_spawn(stream.compile(cmd=self.binary))
        try:
            process = stream.run_async(cmd=self.binary, pipe_stdout=True)
        except OSError as e:
            raise ConversionFailed("File could not be added", file=src) from e
        try:
            with open(dest, "wb") as f:
                shutil.copyfileobj(process.stdout, f)
        except OSError as e:
            process.kill()
            process.stdout.close()
            process.wait()
            raise ConversionFailed("File could not be added", file=src) from e
        process.stdout.close()
        returncode = process.wait()
        if returncode != 0:
            retcode, sig = exit_details(returncode)
            raise ConversionFailed(
                "File could not be added", file=src, retcode=retcode, signal=sig
            )

    def encode(self, src: str, out_file: str, ext: str, output_args: dict) -> None:
        """Encode the raw PCM file `src` into `out_file`.

        Raises:
            ExportFailed: If ffmpeg exits with an error or is killed
        """
        stream = self.encode_stream(src, out_file, output_args)
        self._log_spawn(stream.compile(cmd=self.binary))
        try:
            process = stream.run_async(cmd=self.binary)
        except OSError as e:
            raise ExportFailed("Error exporting file", format=ext) from e
        returncode = process.wait()
        if returncode != 0:
            retcode, sig = exit_details(returncode)
            raise ExportFailed(
                "Error exporting file", format=ext, retcode=retcode, signal=sig
            )

    def convert_to_caf(self, src: str, dest: str) -> None:
        """Convert an aiff file into an IMA4 caf container with afconvert.

        Raises:
            ExportFailed: Immediately when not running on macOS, or when
                afconvert fails
        """
        if sys.platform != "darwin":
            raise ExportFailed(
                "Error exporting file", format="caf", platform=sys.platform
            )
        cmd = ["afconvert", "-f", "caff", "-d", "ima4", src, dest]
        self._log_spawn(cmd)
        try:
            result = subprocess.run(cmd)
        except OSError as e:
            raise ExportFailed("Error exporting file", format="caf") from e
        if result.returncode != 0:
            retcode, sig = exit_details(result.returncode)
            raise ExportFailed(
                "Error exporting file", format="caf", retcode=retcode, signal=sig
            )
