from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image

LOGGER = logging.getLogger(__name__)


def resolve_output_format(fmt: str) -> tuple[str, str]:
    f = fmt.lower()
    if f == "png":
        return "png", "PNG"
    if f in {"jpeg", "jpg"}:
        return "jpg", "JPEG"
    raise ValueError(f"output format must be png or jpeg/jpg, got: {fmt!r}")


def save_image(image: Image.Image, path: Path, pil_format: str = "PNG", quality: int = 92) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if pil_format == "JPEG":
        image.convert("RGB").save(path, format="JPEG", quality=max(1, min(100, quality)), optimize=True)
    else:
        image.save(path, format="PNG", optimize=True)
    LOGGER.debug("saved %s", path)
    return path
