"""Manifest serializers for the supported playback libraries.

Each serializer is a pure function from a Manifest to the JSON shape the
library expects. SERIALIZERS maps the export strategy id to its function.
"""

from typing import Any, Callable

from app.audiosprite.errors import ConfigurationError
from app.audiosprite.manifest import Manifest


def export_jukebox(manifest: Manifest) -> dict[str, Any]:
    """Generic format: the manifest as is."""
    return manifest.to_dict()


def export_howler(manifest: Manifest) -> dict[str, Any]:
    """howler.js: comma-joined urls and name -> [start ms, duration ms(, loop)]."""
    sprite: dict[str, list] = {}
    for name, entry in manifest.spritemap.items():
        sprite[name] = [entry.start * 1000, (entry.end - entry.start) * 1000]
        if entry.loop:
            sprite[name].append(True)
    return {"urls": ",".join(manifest.resources), "sprite": sprite}


def export_createjs(manifest: Manifest) -> dict[str, Any]:
    """CreateJS SoundJS: first resource plus a list of audioSprite records."""
    audio_sprite = [
        {
            "id": name,
            "startTime": entry.start * 1000,
            "duration": (entry.end - entry.start) * 1000,
        }
        for name, entry in manifest.spritemap.items()
    ]
    return {
        "src": manifest.resources[0] if manifest.resources else None,
        "data": {"audioSprite": audio_sprite},
    }


SERIALIZERS: dict[str, Callable[[Manifest], Any]] = {
    "jukebox": export_jukebox,
    "howler": export_howler,
    "createjs": export_createjs,
}


def get_serializer(name: str) -> Callable[[Manifest], Any]:
    """Look up a serializer by its (case-insensitive) id.

    Raises:
        ConfigurationError: If no serializer is registered under `name`
    """
    try:
        return SERIALIZERS[name.lower()]
    except KeyError:
        raise ConfigurationError(f"No exporter for format: {name}", format=name)
