import random

import pytest
from PIL import Image

from marsarchive.models import ArchiveStyle, Rect, RenderContext
from marsarchive.render.photo import compute_cover_rect, draw_photo, render_cover_layer


def test_cover_rect_for_landscape_source_matches_reference_numbers() -> None:
    cover = compute_cover_rect(400, 300, Rect(40, 40, 820, 720))

    assert cover.height == pytest.approx(720)
    assert cover.width == pytest.approx(960)
    assert cover.x == pytest.approx(-30)
    assert cover.y == pytest.approx(40)


def test_cover_rect_for_tall_source_overflows_vertically() -> None:
    target = Rect(40, 40, 820, 720)
    cover = compute_cover_rect(300, 1200, target)

    assert cover.width == pytest.approx(820)
    assert cover.height == pytest.approx(3280)
    assert cover.x == pytest.approx(40)
    assert cover.y == pytest.approx(40 - (3280 - 720) / 2)


def test_cover_rect_covers_target_and_keeps_aspect_for_any_ratio() -> None:
    rng = random.Random(5)
    target = Rect(40, 40, 820, 720)
    for _ in range(300):
        iw = rng.randint(1, 5000)
        ih = rng.randint(1, 5000)
        cover = compute_cover_rect(iw, ih, target)
        assert cover.contains_rect(target)
        assert cover.width / cover.height == pytest.approx(iw / ih, rel=1e-9)
        # overflow is centered
        assert (target.x - cover.x) == pytest.approx(cover.right - target.right)
        assert (target.y - cover.y) == pytest.approx(cover.bottom - target.bottom)


def test_cover_rect_rejects_zero_area_source() -> None:
    with pytest.raises(ValueError):
        compute_cover_rect(0, 300, Rect(0, 0, 10, 10))


def test_cover_layer_is_clipped_to_target_size() -> None:
    photo = Image.new("RGB", (400, 300), color="#336699")
    layer = render_cover_layer(photo, Rect(40, 40, 820, 720))

    assert layer.size == (820, 720)
    assert layer.getpixel((0, 0))[3] == 255
    assert layer.getpixel((819, 719))[3] == 255


def test_draw_photo_leaves_outside_of_photo_area_untouched() -> None:
    style = ArchiveStyle()
    ctx = RenderContext.create(style, random.Random(0))
    photo = Image.new("RGB", (400, 300), color=(10, 200, 30))

    draw_photo(ctx, photo)

    assert ctx.image.getpixel((20, 400)) == (0, 0, 0, 0)
    assert ctx.image.getpixel((450, 900)) == (0, 0, 0, 0)
    center = ctx.image.getpixel((450, 400))
    assert center[1] > 180 and center[0] < 40
