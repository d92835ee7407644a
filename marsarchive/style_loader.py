from __future__ import annotations

from pathlib import Path
from typing import Any

from marsarchive.constants import CANVAS_HEIGHT, CANVAS_WIDTH, PHOTO_HEIGHT, VALID_GRAIN_MODES
from marsarchive.models import ArchiveStyle

THEME_OVERRIDES: dict[str, dict[str, str]] = {
    "mars": {
        "background": "#f5f1eb",
        "border": "#8c2f2f",
        "divider": "#6e1f1f",
        "text": "#3a0f0f",
        "date": "#7a1f1f",
    },
    "dust": {
        "background": "#efe6d8",
        "border": "#9a5b34",
        "divider": "#7d4523",
        "text": "#3b2414",
        "date": "#8a4a25",
    },
    "ink": {
        "background": "#f2f2ef",
        "border": "#26323f",
        "divider": "#1c2530",
        "text": "#141a21",
        "date": "#26323f",
    },
}


def _clamp_int(value: Any, minimum: int, maximum: int, fallback: int) -> int:
    try:
        parsed = int(float(value))
    except Exception:
        parsed = fallback
    return max(minimum, min(maximum, parsed))


def _clamp_float(value: Any, minimum: float, maximum: float, fallback: float) -> float:
    try:
        parsed = float(value)
    except Exception:
        parsed = fallback
    return max(minimum, min(maximum, parsed))


def _optional_path(value: Any) -> Path | None:
    text = str(value or "").strip()
    return Path(text).expanduser() if text else None


def _float_range(value: Any, fallback: tuple[float, float], minimum: float) -> tuple[float, float]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return fallback
    low = _clamp_float(value[0], minimum, 10000.0, fallback[0])
    high = _clamp_float(value[1], minimum, 10000.0, fallback[1])
    if high <= low:
        return fallback
    return (low, high)


def normalize_style_dict(data: dict[str, Any]) -> ArchiveStyle:
    defaults = ArchiveStyle()

    colors = dict(defaults.colors)
    theme = str(data.get("theme") or "").strip().lower()
    if theme in THEME_OVERRIDES:
        colors.update(THEME_OVERRIDES[theme])
    colors.update(data.get("colors") or {})

    fonts = dict(defaults.fonts)
    fonts.update(data.get("fonts") or {})

    font_paths = data.get("font_paths") or {}
    if not isinstance(font_paths, dict):
        font_paths = {}

    width = _clamp_int(data.get("width"), 200, 8000, CANVAS_WIDTH)
    height = _clamp_int(data.get("height"), 200, 8000, CANVAS_HEIGHT)
    photo_height = _clamp_int(data.get("photo_height"), 50, height - 100, PHOTO_HEIGHT)

    grain_mode = str(data.get("grain_mode") or defaults.grain_mode).lower()
    if grain_mode not in VALID_GRAIN_MODES:
        grain_mode = defaults.grain_mode

    count = data.get("flower_count")
    flower_count = defaults.flower_count
    if isinstance(count, (list, tuple)) and len(count) == 2:
        low = _clamp_int(count[0], 0, 50, defaults.flower_count[0])
        high = _clamp_int(count[1], 0, 51, defaults.flower_count[1])
        if high > low:
            flower_count = (low, high)

    stamp_lines = data.get("stamp_lines")
    if isinstance(stamp_lines, (list, tuple)) and len(stamp_lines) == 2:
        stamp = (str(stamp_lines[0]), str(stamp_lines[1]))
    else:
        stamp = defaults.stamp_lines

    return ArchiveStyle(
        width=width,
        height=height,
        photo_height=photo_height,
        photo_margin=_clamp_int(data.get("photo_margin"), 0, width // 4, defaults.photo_margin),
        colors=colors,
        fonts={
            "mono": max(8, int(fonts["mono"])),
            "hand": max(8, int(fonts["hand"])),
            "stamp_title": max(6, int(fonts["stamp_title"])),
            "stamp_subtitle": max(6, int(fonts["stamp_subtitle"])),
        },
        mono_font_path=_optional_path(font_paths.get("mono")),
        hand_font_path=_optional_path(font_paths.get("hand")),
        caption_jitter=_clamp_float(data.get("caption_jitter"), 0.0, 200.0, defaults.caption_jitter),
        caption_rotation=_clamp_float(data.get("caption_rotation"), 0.0, 0.5, defaults.caption_rotation),
        caption_line_height=_clamp_float(
            data.get("caption_line_height"), 1.0, 400.0, defaults.caption_line_height
        ),
        stamp_rotation=_clamp_float(data.get("stamp_rotation"), 0.0, 3.2, defaults.stamp_rotation),
        stamp_lines=stamp,
        flower_count=flower_count,
        flower_size=_float_range(data.get("flower_size"), defaults.flower_size, 1.0),
        flower_opacity=_clamp_float(data.get("flower_opacity"), 0.0, 1.0, defaults.flower_opacity),
        tree_max_width=_clamp_int(data.get("tree_max_width"), 1, width, defaults.tree_max_width),
        tree_opacity=_clamp_float(data.get("tree_opacity"), 0.0, 1.0, defaults.tree_opacity),
        bed_opacity=_clamp_float(data.get("bed_opacity"), 0.0, 1.0, defaults.bed_opacity),
        grain_amount=_clamp_float(data.get("grain_amount"), 0.0, 255.0, defaults.grain_amount),
        grain_clamp=bool(data.get("grain_clamp", defaults.grain_clamp)),
        grain_mode=grain_mode,
    )


def load_style(config: dict[str, Any]) -> ArchiveStyle:
    style_data = config.get("style") or {}
    if not isinstance(style_data, dict):
        style_data = {}
    style_data = dict(style_data)
    if "grain_mode" not in style_data and config.get("grain_mode"):
        style_data["grain_mode"] = config["grain_mode"]
    return normalize_style_dict(style_data)
