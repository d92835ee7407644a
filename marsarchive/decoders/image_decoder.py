from __future__ import annotations

from pathlib import Path

from PIL import Image, ImageOps

from marsarchive.constants import HEIF_EXTENSIONS, STANDARD_EXTENSIONS

_HEIF_REGISTERED = False


def _register_heif_opener() -> bool:
    global _HEIF_REGISTERED
    if _HEIF_REGISTERED:
        return True
    try:
        from pillow_heif import register_heif_opener
    except ImportError:
        return False
    register_heif_opener()
    _HEIF_REGISTERED = True
    return True


def _decode_standard(path: Path) -> Image.Image:
    with Image.open(path) as image:
        decoded = ImageOps.exif_transpose(image).convert("RGB").copy()
    if decoded.width <= 0 or decoded.height <= 0:
        raise RuntimeError(f"decoded image has no area: {path}")
    return decoded


def decode_image(path: Path) -> Image.Image:
    ext = path.suffix.lower()
    if ext in STANDARD_EXTENSIONS:
        return _decode_standard(path)
    if ext in HEIF_EXTENSIONS:
        if not _register_heif_opener():
            raise RuntimeError("pillow-heif is required to decode HEIF/HEIC/HIF")
        return _decode_standard(path)
    raise RuntimeError(f"unsupported image format: {path.suffix}")
