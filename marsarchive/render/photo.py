from __future__ import annotations

import math

from PIL import Image, ImageDraw

from marsarchive.models import Rect, RenderContext
from marsarchive.render.filters import build_drop_shadow


def compute_cover_rect(image_width: float, image_height: float, target: Rect) -> Rect:
    """Scale a source to cover ``target`` without distortion, centering the overflow.

    A relatively wider source is fitted to the target height and overflows
    horizontally; a relatively taller one is fitted to the width and overflows
    vertically.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"source image has no area: {image_width}x{image_height}")
    if target.width <= 0 or target.height <= 0:
        raise ValueError(f"target rectangle has no area: {target.width}x{target.height}")

    image_ratio = image_width / float(image_height)
    target_ratio = target.width / float(target.height)
    if image_ratio > target_ratio:
        render_h = target.height
        render_w = target.height * image_ratio
        render_x = target.x - (render_w - target.width) / 2.0
        render_y = target.y
    else:
        render_w = target.width
        render_h = target.width / image_ratio
        render_x = target.x
        render_y = target.y - (render_h - target.height) / 2.0
    return Rect(render_x, render_y, render_w, render_h)


def _clip_box(target: Rect) -> tuple[int, int, int, int]:
    left = int(math.floor(target.x))
    top = int(math.floor(target.y))
    return (left, top, int(math.ceil(target.right)), int(math.ceil(target.bottom)))


def render_cover_layer(photo: Image.Image, target: Rect) -> Image.Image:
    """Photo resampled to its cover rectangle and cropped to exactly ``target``."""
    cover = compute_cover_rect(photo.width, photo.height, target)
    left, top, right, bottom = _clip_box(target)
    scaled_size = (max(1, int(round(cover.width))), max(1, int(round(cover.height))))
    scaled = photo.convert("RGBA").resize(scaled_size, Image.Resampling.LANCZOS)
    offset_x = int(round(cover.x)) - left
    offset_y = int(round(cover.y)) - top
    layer = Image.new("RGBA", (right - left, bottom - top), (0, 0, 0, 0))
    layer.paste(scaled, (offset_x, offset_y))
    return layer


def _inset_stroke_layer(size: tuple[int, int], ctx: RenderContext) -> Image.Image:
    style = ctx.style
    width, height = size
    stroke = Image.new("RGBA", size, (0, 0, 0, 0))
    # a stroke centered on the clip edge only shows its inner half
    inner = max(1, style.photo_stroke_width // 2)
    ImageDraw.Draw(stroke).rectangle(
        [(0, 0), (width - 1, height - 1)],
        outline=style.photo_stroke_color,
        width=inner,
    )
    shadow, pad = build_drop_shadow(
        stroke,
        color=style.photo_shadow_color,
        blur=style.photo_shadow_blur,
    )
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    layer.alpha_composite(shadow.crop((pad, pad, pad + width, pad + height)))
    layer.alpha_composite(stroke)
    return layer


def draw_photo(ctx: RenderContext, photo: Image.Image) -> Rect:
    """Draw ``photo`` cover-fitted into the style's photo rectangle; returns the cover rect."""
    target = ctx.style.photo_rect
    cover = compute_cover_rect(photo.width, photo.height, target)
    layer = render_cover_layer(photo, target)
    layer.alpha_composite(_inset_stroke_layer(layer.size, ctx))
    left, top, _, _ = _clip_box(target)
    ctx.composite(layer, (left, top))
    return cover
