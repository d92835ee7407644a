from __future__ import annotations

import math
from typing import Sequence

from PIL import Image, ImageDraw

from marsarchive.models import RenderContext
from marsarchive.randomness import range_value
from marsarchive.render.typography import FONT_ROLE_HAND, load_font


def _draw_rotated_line(
    ctx: RenderContext,
    text: str,
    *,
    x: float,
    y: float,
    rotation: float,
    font,
    color: str,
) -> None:
    """Draw ``text`` left-aligned on its baseline at (x, y), rotated about that point."""
    left, top, right, bottom = ctx.draw.textbbox((0, 0), text, font=font, anchor="ls")
    if right <= left or bottom <= top:
        return
    # square layer centered on the baseline origin so rotation pivots there
    reach = int(math.ceil(max(abs(left), abs(right), abs(top), abs(bottom)))) + 4
    layer = Image.new("RGBA", (reach * 2, reach * 2), (0, 0, 0, 0))
    ImageDraw.Draw(layer).text((reach, reach), text, font=font, fill=color, anchor="ls")
    if rotation:
        layer = layer.rotate(-math.degrees(rotation), resample=Image.Resampling.BICUBIC)
    ctx.composite(layer, (int(round(x)) - reach, int(round(y)) - reach))


def draw_caption(ctx: RenderContext, lines: Sequence[str], start_y: float) -> float:
    """Draw caption lines with independent handwriting jitter; returns the advanced cursor."""
    style = ctx.style
    font = load_font(style.hand_font_path, style.fonts["hand"], role=FONT_ROLE_HAND)
    y = start_y
    for line in lines:
        offset_x = style.caption_x + range_value(ctx.rng, 0.0, style.caption_jitter)
        rotation = range_value(ctx.rng, -style.caption_rotation, style.caption_rotation)
        if line:
            _draw_rotated_line(
                ctx,
                line,
                x=offset_x,
                y=y,
                rotation=rotation,
                font=font,
                color=style.colors["text"],
            )
        y += style.caption_line_height
    return y
