import logging
import sys
import threading
from pathlib import Path

import ffmpeg  # type: ignore
from fastapi import FastAPI, HTTPException
from fastapi.staticfiles import StaticFiles

from app.audiosprite import AudioSpriteError, SpriteOptions, build_sprite
from app.audiosprite.clip_loader import ClipLoader

root = logging.getLogger()
root.setLevel(logging.DEBUG)

handler = logging.StreamHandler(sys.stdout)
handler.setLevel(logging.DEBUG)
formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
handler.setFormatter(formatter)
root.addHandler(handler)

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent.parent.resolve()
STATIC_DIR = BASE_DIR / "static"
SPRITES_DIR = STATIC_DIR / "sprites"
SPRITES_PATH = "/sprites"

SPRITES_DIR.mkdir(parents=True, exist_ok=True)

loader = ClipLoader()

# cache maps from (format, export) -> serialized sprite.
cache: dict[tuple[str, str], dict] = {}
# Builds share the output files, only one may run at a time.
build_lock = threading.Lock()

app = FastAPI()

app.mount(SPRITES_PATH, StaticFiles(directory=SPRITES_DIR), name="sprites")


@app.get("/clips")
def clips():
    try:
        return loader.describe()
    except ffmpeg.Error as e:
        raise HTTPException(status_code=500, detail=f"Could not probe clips: {e}")


@app.get("/sprite")
def sprite(format: str = SpriteOptions.format, export: str = SpriteOptions.export):
    key = (format, export)
    with build_lock:
        if key in cache:
            logger.debug(f"Using cached sprite for {key}")
            return cache[key]
        try:
            result = build_sprite(
                loader.paths(),
                output=str(SPRITES_DIR / "sprite"),
                path=SPRITES_PATH,
                format=format,
                export=export,
            )
        except AudioSpriteError as e:
            raise HTTPException(status_code=500, detail=e.to_dict())
        cache[key] = result
        return result
