from __future__ import annotations

import logging
import math
import random
from typing import Sequence

from PIL import Image

from marsarchive.models import LoadedAsset, Rect, RenderContext, SpritePlacement
from marsarchive.randomness import pick_one, range_int, range_value
from marsarchive.render.filters import apply_contrast, apply_opacity, apply_sepia, build_drop_shadow

LOGGER = logging.getLogger(__name__)

SIDE_TOP = "top"
SIDE_RIGHT = "right"
SIDE_BOTTOM = "bottom"
SIDE_LEFT = "left"
FRAME_SIDES = (SIDE_TOP, SIDE_RIGHT, SIDE_BOTTOM, SIDE_LEFT)


def _scale_to_max_width(image: Image.Image, max_width: float) -> Image.Image:
    """Shrink to ``max_width`` keeping the aspect ratio; never enlarges."""
    scale = min(1.0, max_width / float(image.width)) if image.width > 0 else 1.0
    if scale >= 1.0:
        return image.convert("RGBA")
    new_size = (max(1, int(round(image.width * scale))), max(1, int(round(image.height * scale))))
    return image.convert("RGBA").resize(new_size, Image.Resampling.LANCZOS)


def _fit_into_square(image: Image.Image, size: float) -> Image.Image:
    longest = max(image.width, image.height)
    scale = size / float(longest)
    new_size = (max(1, int(round(image.width * scale))), max(1, int(round(image.height * scale))))
    return image.convert("RGBA").resize(new_size, Image.Resampling.LANCZOS)


def flower_count(rng: random.Random, count_range: tuple[int, int]) -> int:
    return range_int(rng, count_range[0], count_range[1])


def place_on_frame_side(rng: random.Random, frame: Rect, side: str) -> tuple[float, float]:
    if side == SIDE_TOP:
        return range_value(rng, frame.x, frame.right), frame.y
    if side == SIDE_RIGHT:
        return frame.right, range_value(rng, frame.y, frame.bottom)
    if side == SIDE_BOTTOM:
        return range_value(rng, frame.x, frame.right), frame.bottom
    if side == SIDE_LEFT:
        return frame.x, range_value(rng, frame.y, frame.bottom)
    raise ValueError(f"unknown frame side: {side}")


def plan_flower_placements(
    rng: random.Random,
    frame: Rect,
    count: int,
    size_range: tuple[float, float],
    opacity: float = 1.0,
) -> list[SpritePlacement]:
    placements: list[SpritePlacement] = []
    for _ in range(count):
        side = pick_one(rng, FRAME_SIDES)
        x, y = place_on_frame_side(rng, frame, side)
        placements.append(
            SpritePlacement(
                side=side,
                x=x,
                y=y,
                rotation=range_value(rng, 0.0, math.pi * 2),
                size=range_value(rng, size_range[0], size_range[1]),
                opacity=opacity,
            )
        )
    return placements


def draw_tree(ctx: RenderContext, tree: Image.Image) -> tuple[int, int, int, int]:
    """Tree hugging the left edge, its bottom a fixed offset above the canvas bottom."""
    style = ctx.style
    sprite = _scale_to_max_width(tree, style.tree_max_width)
    sprite = apply_sepia(sprite, style.tree_sepia)
    sprite = apply_contrast(sprite, style.tree_contrast)
    sprite = apply_opacity(sprite, style.tree_opacity)
    x = style.tree_offset_x
    y = style.height - sprite.height - style.tree_bottom_offset
    ctx.composite(sprite, (x, y))
    return (x, y, sprite.width, sprite.height)


def draw_flower(ctx: RenderContext, flower: Image.Image, placement: SpritePlacement) -> None:
    style = ctx.style
    sprite = _fit_into_square(flower, placement.size)
    # canvas rotation is clockwise in screen space, PIL's is counter-clockwise
    sprite = sprite.rotate(
        -math.degrees(placement.rotation),
        resample=Image.Resampling.BICUBIC,
        expand=True,
    )
    sprite = apply_opacity(sprite, placement.opacity)
    shadow, pad = build_drop_shadow(sprite, color=style.flower_shadow_color, blur=style.flower_shadow_blur)
    left = int(round(placement.x - sprite.width / 2.0))
    top = int(round(placement.y - sprite.height / 2.0))
    ctx.composite(shadow, (left - pad, top - pad))
    ctx.composite(sprite, (left, top))


def draw_flowers(
    ctx: RenderContext,
    flowers: Sequence[LoadedAsset],
    placements: Sequence[SpritePlacement],
) -> int:
    """Draw each loaded flower at its placement; absent assets are skipped."""
    drawn = 0
    for asset, placement in zip(flowers, placements):
        if asset.image is None:
            LOGGER.debug("flower skipped, asset unavailable: %s", asset.path)
            continue
        draw_flower(ctx, asset.image, placement)
        drawn += 1
    return drawn


def draw_flower_bed(ctx: RenderContext, bed: Image.Image) -> tuple[int, int, int, int]:
    """Flower-bed flush with the left and bottom canvas edges."""
    style = ctx.style
    sprite = _scale_to_max_width(bed, style.width)
    sprite = apply_sepia(sprite, style.bed_sepia)
    sprite = apply_opacity(sprite, style.bed_opacity)
    y = style.height - sprite.height
    ctx.composite(sprite, (0, y))
    return (0, y, sprite.width, sprite.height)
