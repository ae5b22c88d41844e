"""Error types raised while building an audio sprite.

Every failure carries a human readable message plus the context that
explains it (file, format, exit code, signal). Nothing is retried: the first
error aborts the build and is handed to the caller.
"""

from typing import Any


class AudioSpriteError(Exception):
    """Base class for all audio sprite build failures.

    Args:
        message (str): Short description, e.g. "Error exporting file"
        **context: Extra fields describing the failure (file, format, retcode, signal)
    """

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Flatten the error into a JSON friendly dict."""
        return {"msg": self.message, **self.context}


class ConfigurationError(AudioSpriteError):
    """Invalid options, no input files or an unknown serializer."""


class ToolUnavailable(AudioSpriteError):
    """The ffmpeg binary could not be run."""


class SourceMissing(AudioSpriteError):
    """An input clip does not exist."""


class ConversionFailed(AudioSpriteError):
    """ffmpeg could not decode an input clip to raw PCM."""


class ExportFailed(AudioSpriteError):
    """ffmpeg (or afconvert) could not encode an output format."""


class AddFileError(AudioSpriteError):
    """A clip could not be merged into the sprite; the cause is chained."""
