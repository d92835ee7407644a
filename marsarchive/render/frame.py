from __future__ import annotations

from marsarchive.models import RenderContext


def draw_frame(ctx: RenderContext) -> None:
    """Paper background, inset border and the divider below the photo area."""
    style = ctx.style
    width, height = style.width, style.height
    ctx.draw.rectangle([(0, 0), (width, height)], fill=style.colors["background"])

    # the border stroke is centered on the inset rectangle
    half = style.border_width / 2.0
    margin = style.frame_margin
    ctx.draw.rectangle(
        [
            (int(round(margin - half)), int(round(margin - half))),
            (int(round(width - margin + half)) - 1, int(round(height - margin + half)) - 1),
        ],
        outline=style.colors["border"],
        width=style.border_width,
    )

    divider_y = style.photo_height + style.divider_offset
    ctx.draw.line(
        [(style.divider_inset, divider_y), (width - style.divider_inset, divider_y)],
        fill=style.colors["divider"],
        width=style.divider_width,
    )
