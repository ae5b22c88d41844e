"""Command line front-end for building audio sprites.

Usage:
    audiosprite --output sprites/sfx --format howler --export ogg,mp3 sounds/*.wav

The serialized manifest is written to `<output>.json`.
"""

import argparse
import json
import logging
import sys

from app.audiosprite import AudioSpriteError, SpriteOptions, build_sprite

logger = logging.getLogger("audiosprite")

LOG_LEVELS = ("debug", "info", "warning", "error")


def build_parser() -> argparse.ArgumentParser:
    defaults = SpriteOptions()
    parser = argparse.ArgumentParser(
        prog="audiosprite",
        description="Merge audio clips into a single sprite and export it.",
    )
    parser.add_argument("files", nargs="+", help="Input audio clips, in sprite order")
    parser.add_argument(
        "-o", "--output", default=defaults.output, help="Name for the output files"
    )
    parser.add_argument(
        "-u", "--path", default=defaults.path, help="Path prefix for resources"
    )
    parser.add_argument(
        "-e",
        "--export",
        default=defaults.export,
        help="Comma-separated formats to export (empty for all)",
    )
    parser.add_argument(
        "-f",
        "--format",
        default=defaults.format,
        help="Manifest format: jukebox, howler or createjs",
    )
    parser.add_argument("-a", "--autoplay", help="Autoplay sprite name")
    parser.add_argument(
        "-l", "--loop", action="append", default=[], help="Loop sprite name"
    )
    parser.add_argument(
        "-s",
        "--silence",
        type=float,
        default=defaults.silence,
        help="Add a looping silence sprite of this many seconds",
    )
    parser.add_argument(
        "-g",
        "--gap",
        type=float,
        default=defaults.gap,
        help="Silence gap between sprites in seconds",
    )
    parser.add_argument(
        "-m",
        "--minlength",
        type=float,
        default=defaults.minlength,
        help="Minimum sprite length in seconds",
    )
    parser.add_argument(
        "-b", "--bitrate", type=int, default=defaults.bitrate, help="Bitrate in kbps"
    )
    parser.add_argument(
        "-v",
        "--vbr",
        type=int,
        default=defaults.vbr,
        help="mp3 VBR quality 0-9, -1 disables",
    )
    parser.add_argument(
        "-q",
        "--vbr-vorbis",
        type=int,
        default=defaults.vbr_vorbis,
        help="webm vorbis quality 0-10, -1 disables",
    )
    parser.add_argument(
        "-r",
        "--samplerate",
        type=int,
        default=defaults.samplerate,
        help="Sample rate in Hz",
    )
    parser.add_argument(
        "-c",
        "--channels",
        type=int,
        default=defaults.channels,
        help="Number of channels",
    )
    parser.add_argument(
        "-p",
        "--rawparts",
        default=defaults.rawparts,
        help="Comma-separated formats to export for every single clip",
    )
    parser.add_argument("--log", choices=LOG_LEVELS, default="info", help="Log level")
    return parser


def options_from_args(args: argparse.Namespace) -> SpriteOptions:
    return SpriteOptions(
        output=args.output,
        path=args.path,
        export=args.export,
        format=args.format,
        autoplay=args.autoplay,
        loop=tuple(args.loop),
        silence=args.silence,
        gap=args.gap,
        minlength=args.minlength,
        bitrate=args.bitrate,
        vbr=args.vbr,
        vbr_vorbis=args.vbr_vorbis,
        samplerate=args.samplerate,
        channels=args.channels,
        rawparts=args.rawparts,
        logger=logger,
    )


def _configure_logging(level: str) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root = logging.getLogger()
    root.setLevel(level.upper())
    root.addHandler(handler)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log)

    try:
        options = options_from_args(args)
    except AudioSpriteError as e:
        logger.error(f"Invalid options: {e.to_dict()}")
        return 1

    outcome = {}

    def done(error, result):
        outcome["error"] = error
        outcome["result"] = result

    build_sprite(args.files, done, options=options)
    if outcome["error"] is not None:
        logger.error(f"Build failed: {outcome['error'].to_dict()}")
        return 1

    json_file = f"{options.output}.json"
    with open(json_file, "w") as f:
        json.dump(outcome["result"], f, indent=2)
    logger.info(f"Exported json OK: {json_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
