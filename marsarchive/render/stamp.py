from __future__ import annotations

import math
from datetime import date

from PIL import Image, ImageDraw

from marsarchive.constants import DATE_FORMAT
from marsarchive.models import RenderContext
from marsarchive.randomness import range_value
from marsarchive.render.typography import FONT_ROLE_MONO, FONT_ROLE_MONO_BOLD, load_font


def format_archive_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def draw_date(ctx: RenderContext, today: date) -> str:
    style = ctx.style
    text = format_archive_date(today)
    font = load_font(style.mono_font_path, style.fonts["mono"], role=FONT_ROLE_MONO)
    ctx.draw.text(
        (style.width - style.date_margin_x, style.height - style.date_margin_y),
        text,
        font=font,
        fill=style.colors["date"],
        anchor="rs",
    )
    return text


def draw_stamp(ctx: RenderContext) -> float:
    """Circular archive stamp near the bottom-right corner; returns the applied rotation."""
    style = ctx.style
    rotation = range_value(ctx.rng, -style.stamp_rotation, style.stamp_rotation)
    color = style.colors["date"]

    half = style.stamp_outer_radius + 8
    size = half * 2
    layer = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    outer = style.stamp_outer_radius
    inner = style.stamp_inner_radius
    # strokes are centered on the circle path
    draw.ellipse([(half - outer - 1, half - outer - 1), (half + outer + 1, half + outer + 1)], outline=color, width=3)
    draw.ellipse([(half - inner, half - inner), (half + inner, half + inner)], outline=color, width=1)

    title, subtitle = style.stamp_lines
    title_font = load_font(style.mono_font_path, style.fonts["stamp_title"], role=FONT_ROLE_MONO_BOLD)
    subtitle_font = load_font(style.mono_font_path, style.fonts["stamp_subtitle"], role=FONT_ROLE_MONO)
    draw.text((half, half - 5), title, font=title_font, fill=color, anchor="mm")
    draw.text((half, half + 10), subtitle, font=subtitle_font, fill=color, anchor="mm")

    if rotation:
        layer = layer.rotate(-math.degrees(rotation), resample=Image.Resampling.BICUBIC)
    center_x = style.width - style.stamp_offset_x
    center_y = style.height - style.stamp_offset_y
    ctx.composite(layer, (center_x - half, center_y - half))
    return rotation


def draw_date_and_stamp(ctx: RenderContext, today: date | None = None) -> str:
    text = draw_date(ctx, today or date.today())
    draw_stamp(ctx)
    return text
