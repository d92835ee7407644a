# Pixel-level tonal filters and shadows used by the sprite and photo layers.
from __future__ import annotations

from PIL import Image, ImageFilter


def _clip8(value: float) -> int:
    return max(0, min(255, int(round(value))))


def _split_alpha(image: Image.Image) -> tuple[Image.Image, Image.Image]:
    rgba = image.convert("RGBA")
    return rgba.convert("RGB"), rgba.getchannel("A")


def sepia_matrix(amount: float) -> tuple[float, ...]:
    """Color matrix matching the CSS ``sepia(amount)`` filter."""
    a = 1.0 - max(0.0, min(1.0, amount))
    return (
        0.393 + 0.607 * a, 0.769 - 0.769 * a, 0.189 - 0.189 * a, 0.0,
        0.349 - 0.349 * a, 0.686 + 0.314 * a, 0.168 - 0.168 * a, 0.0,
        0.272 - 0.272 * a, 0.534 - 0.534 * a, 0.131 + 0.869 * a, 0.0,
    )


def apply_sepia(image: Image.Image, amount: float) -> Image.Image:
    if amount <= 0:
        return image.convert("RGBA")
    rgb, alpha = _split_alpha(image)
    toned = rgb.convert("RGB", sepia_matrix(amount))
    toned.putalpha(alpha)
    return toned


def apply_contrast(image: Image.Image, amount: float) -> Image.Image:
    """CSS ``contrast(amount)``: scales each channel around mid-gray."""
    if amount == 1.0:
        return image.convert("RGBA")
    rgb, alpha = _split_alpha(image)
    offset = 127.5 * (1.0 - amount)
    lut = [_clip8(value * amount + offset) for value in range(256)] * 3
    adjusted = rgb.point(lut)
    adjusted.putalpha(alpha)
    return adjusted


def apply_opacity(image: Image.Image, opacity: float) -> Image.Image:
    rgba = image.convert("RGBA")
    if opacity >= 1.0:
        return rgba
    factor = max(0.0, opacity)
    alpha = rgba.getchannel("A").point([_clip8(value * factor) for value in range(256)])
    rgba.putalpha(alpha)
    return rgba


def build_drop_shadow(
    image: Image.Image,
    color: tuple[int, int, int, int],
    blur: float,
) -> tuple[Image.Image, int]:
    """Return a blurred silhouette of ``image`` and the padding added on every side."""
    rgba = image.convert("RGBA")
    pad = max(1, int(round(blur * 2)))
    strength = color[3] / 255.0
    silhouette = rgba.getchannel("A").point([_clip8(value * strength) for value in range(256)])
    mask = Image.new("L", (rgba.width + pad * 2, rgba.height + pad * 2), 0)
    mask.paste(silhouette, (pad, pad))
    if blur > 0:
        # canvas-style shadow blur is roughly twice the gaussian sigma
        mask = mask.filter(ImageFilter.GaussianBlur(radius=blur / 2.0))
    shadow = Image.new("RGBA", mask.size, (color[0], color[1], color[2], 0))
    shadow.putalpha(mask)
    return shadow, pad
