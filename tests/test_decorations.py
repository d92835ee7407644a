import math
import random
from pathlib import Path

from PIL import Image

from marsarchive.models import ArchiveStyle, LoadedAsset, Rect, RenderContext, SpritePlacement
from marsarchive.render.decorations import (
    FRAME_SIDES,
    draw_flower_bed,
    draw_flowers,
    draw_tree,
    flower_count,
    place_on_frame_side,
    plan_flower_placements,
)

FRAME = Rect(40, 40, 820, 720)


def test_side_placements_stay_on_their_edge() -> None:
    rng = random.Random(21)
    for _ in range(400):
        for side in FRAME_SIDES:
            x, y = place_on_frame_side(rng, FRAME, side)
            if side == "top":
                assert y == FRAME.y and FRAME.x <= x <= FRAME.right
            elif side == "bottom":
                assert y == FRAME.bottom and FRAME.x <= x <= FRAME.right
            elif side == "left":
                assert x == FRAME.x and FRAME.y <= y <= FRAME.bottom
            else:
                assert x == FRAME.right and FRAME.y <= y <= FRAME.bottom


def test_planned_flowers_have_valid_transforms() -> None:
    placements = plan_flower_placements(random.Random(4), FRAME, 50, (60.0, 100.0))

    assert len(placements) == 50
    assert {p.side for p in placements} == set(FRAME_SIDES)
    for placement in placements:
        assert 0.0 <= placement.rotation < math.pi * 2
        assert 60.0 <= placement.size < 100.0
        assert placement.opacity == 1.0


def test_flower_count_is_between_four_and_six() -> None:
    rng = random.Random(9)
    counts = [flower_count(rng, (4, 7)) for _ in range(500)]
    assert set(counts) == {4, 5, 6}


def test_tree_is_never_upscaled_and_anchored_bottom_left() -> None:
    style = ArchiveStyle()
    ctx = RenderContext.create(style, random.Random(0))

    small = Image.new("RGBA", (100, 200), (20, 120, 20, 255))
    x, y, width, height = draw_tree(ctx, small)
    assert (width, height) == (100, 200)
    assert x == -20
    assert y + height == style.height - 100

    large = Image.new("RGBA", (500, 800), (20, 120, 20, 255))
    _, y, width, height = draw_tree(ctx, large)
    assert (width, height) == (250, 400)
    assert y + height == style.height - 100


def test_tree_gets_sepia_tone() -> None:
    style = ArchiveStyle()
    ctx = RenderContext.create(style, random.Random(0))

    draw_tree(ctx, Image.new("RGBA", (100, 100), (40, 80, 200, 255)))

    red, green, blue, alpha = ctx.image.getpixel((10, style.height - 150))
    assert alpha == 255
    assert red > 40
    assert blue < 200


def test_flower_bed_is_flush_with_canvas_corner() -> None:
    style = ArchiveStyle()
    ctx = RenderContext.create(style, random.Random(0))

    x, y, width, height = draw_flower_bed(ctx, Image.new("RGBA", (1800, 300), (200, 50, 50, 255)))

    assert (x, width, height) == (0, 900, 150)
    assert y + height == style.height
    assert ctx.image.getpixel((0, style.height - 1))[3] == 255
    assert ctx.image.getpixel((899, style.height - 151))[3] == 0


def test_missing_flower_assets_are_skipped() -> None:
    style = ArchiveStyle()
    ctx = RenderContext.create(style, random.Random(0))
    flower = Image.new("RGBA", (40, 40), (250, 200, 0, 255))
    assets = [
        LoadedAsset(path=Path("flower1.png"), image=flower),
        LoadedAsset(path=Path("flower2.png"), error="broken"),
        LoadedAsset(path=Path("flower3.png"), image=flower),
    ]
    placements = [
        SpritePlacement(side="top", x=200, y=40, rotation=0.0, size=80),
        SpritePlacement(side="left", x=40, y=400, rotation=1.0, size=80),
        SpritePlacement(side="bottom", x=600, y=760, rotation=2.0, size=80),
    ]

    drawn = draw_flowers(ctx, assets, placements)

    assert drawn == 2
    assert ctx.image.getpixel((200, 40))[3] == 255
    assert ctx.image.getpixel((40, 400))[3] == 0
    assert ctx.image.getpixel((600, 760))[3] == 255
