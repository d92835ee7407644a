from __future__ import annotations

import random

import numpy as np
from PIL import Image

from marsarchive.constants import GRAIN_MODE_LUMINANCE, VALID_GRAIN_MODES


def grain_generator(rng: random.Random) -> np.random.Generator:
    """NumPy generator derived from the pass's random source, so a fixed seed reproduces the grain."""
    return np.random.default_rng(rng.getrandbits(64))


def apply_grain(
    image: Image.Image,
    rng: random.Random,
    *,
    amount: float = 15.0,
    clamp: bool = True,
    mode: str = "chromatic",
) -> Image.Image:
    """Add uniform noise in ``[-amount/2, amount/2)`` to the RGB channels of every pixel.

    ``chromatic`` samples each channel independently; ``luminance`` shares one
    offset across the three channels of a pixel. Alpha is left untouched.
    Without ``clamp`` out-of-range values wrap around like an unchecked 8-bit
    buffer would.
    """
    if mode not in VALID_GRAIN_MODES:
        raise ValueError(f"unsupported grain mode: {mode}")
    rgba = image.convert("RGBA")
    if amount <= 0:
        return rgba

    pixels = np.asarray(rgba, dtype=np.int16).copy()
    height, width = pixels.shape[:2]
    generator = grain_generator(rng)
    if mode == GRAIN_MODE_LUMINANCE:
        noise = generator.random((height, width, 1)) - 0.5
        noise = np.repeat(noise, 3, axis=2)
    else:
        noise = generator.random((height, width, 3)) - 0.5
    offsets = np.rint(noise * amount).astype(np.int16)

    rgb = pixels[:, :, :3] + offsets
    if clamp:
        rgb = np.clip(rgb, 0, 255)
    else:
        rgb = np.mod(rgb, 256)
    pixels[:, :, :3] = rgb
    return Image.fromarray(pixels.astype(np.uint8))
