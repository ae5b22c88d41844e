"""Sprite manifest data model.

The manifest is built up while the merged track is written: every clip (and
the optional leading silence) gets a SpriteEntry measured in seconds on the
merged track's timeline, and every exported file is appended to resources.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SpriteEntry:
    start: float
    end: float
    loop: bool = False

    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start, "end": self.end, "loop": self.loop}


@dataclass
class Manifest:
    """Accumulating build output.

    Attributes:
        resources: Output file paths, in export order
        spritemap: Clip name -> SpriteEntry, in processing order
        autoplay: Name of the sprite to start on load, if any
    """

    resources: list[str] = field(default_factory=list)
    spritemap: dict[str, SpriteEntry] = field(default_factory=dict)
    autoplay: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "resources": list(self.resources),
            "spritemap": {
                name: entry.to_dict() for name, entry in self.spritemap.items()
            },
        }
        if self.autoplay:
            data["autoplay"] = self.autoplay
        return data
