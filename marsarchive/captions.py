from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

LOGGER = logging.getLogger(__name__)

CaptionGroup = tuple[str, ...]

FALLBACK_CAPTIONS: tuple[CaptionGroup, ...] = (
    ("在孤独里", "我依然狂奔"),
    ("记录此刻", "永恒的红"),
    ("致遥远的", "蓝色星球"),
)


def _parse_text(text: str, suffix: str) -> Any:
    if suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def normalize_caption_data(data: Any) -> tuple[CaptionGroup, ...]:
    """Accept either a bare list of groups or a mapping with a ``captions`` key."""
    if isinstance(data, dict):
        data = data.get("captions", data.get("lyrics"))
    if not isinstance(data, list):
        raise ValueError("caption set must be a list of line groups")
    groups: list[CaptionGroup] = []
    for item in data:
        if isinstance(item, str):
            lines = [item]
        elif isinstance(item, list):
            lines = [str(line) for line in item if line is not None]
        else:
            raise ValueError(f"caption group must be a list of lines, got {type(item).__name__}")
        lines = [line.strip() for line in lines if line.strip()]
        if lines:
            groups.append(tuple(lines))
    if not groups:
        raise ValueError("caption set is empty")
    return tuple(groups)


def load_caption_set(path: Path | None = None) -> tuple[CaptionGroup, ...]:
    """Load caption groups from ``path`` (built-in set when None); falls back on any failure."""
    try:
        if path is None:
            text = resources.files("marsarchive.resources").joinpath("captions.yaml").read_text(encoding="utf-8")
            data = _parse_text(text, ".yaml")
        else:
            data = _parse_text(path.read_text(encoding="utf-8"), path.suffix.lower())
        return normalize_caption_data(data)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        LOGGER.warning("Caption set unavailable (%s), using fallback captions: %s", path or "built-in", exc)
        return FALLBACK_CAPTIONS
