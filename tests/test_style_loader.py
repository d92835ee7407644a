from marsarchive.models import ArchiveStyle
from marsarchive.style_loader import load_style, normalize_style_dict


def test_defaults_match_reference_layout() -> None:
    style = normalize_style_dict({})

    assert (style.width, style.height, style.photo_height) == (900, 1100, 720)
    rect = style.photo_rect
    assert (rect.x, rect.y, rect.width, rect.height) == (40, 40, 820, 720)
    assert style.colors == ArchiveStyle().colors


def test_normalize_style_dict_clamps_values() -> None:
    style = normalize_style_dict(
        {
            "width": 10,
            "photo_height": 99999,
            "fonts": {"mono": 1, "hand": 2},
            "flower_count": [9, 3],
            "flower_size": [5, 40],
            "tree_opacity": 3.0,
            "grain_amount": -5,
            "grain_mode": "sparkle",
        }
    )

    assert style.width == 200
    assert style.photo_height == style.height - 100
    assert style.fonts["mono"] == 8
    assert style.fonts["hand"] == 8
    assert style.flower_count == (4, 7)
    assert style.flower_size == (5.0, 40.0)
    assert style.tree_opacity == 1.0
    assert style.grain_amount == 0.0
    assert style.grain_mode == "chromatic"


def test_theme_then_explicit_colors_apply_in_order() -> None:
    style = normalize_style_dict({"theme": "ink", "colors": {"date": "#ff0000"}})

    assert style.colors["border"] == "#26323f"
    assert style.colors["date"] == "#ff0000"


def test_load_style_takes_grain_mode_from_config() -> None:
    style = load_style({"grain_mode": "luminance", "style": {"stamp_lines": ["RED", "PLANET"]}})

    assert style.grain_mode == "luminance"
    assert style.stamp_lines == ("RED", "PLANET")
