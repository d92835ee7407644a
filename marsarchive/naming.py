from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

from marsarchive.constants import TIMESTAMP_FORMAT

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1F]')


def sanitize_token(value: str | None, fallback: str = "NA") -> str:
    text = (value or "").strip()
    if not text:
        text = fallback
    text = INVALID_FILENAME_CHARS.sub("_", text)
    text = re.sub(r"\s+", "_", text)
    text = text.strip(" ._")
    return text or fallback


def sanitize_filename(value: str, fallback: str = "output") -> str:
    text = INVALID_FILENAME_CHARS.sub("_", value).strip()
    text = text.strip(" .")
    return text or fallback


def build_output_name(
    name_template: str,
    source: Path,
    extension: str,
    *,
    now: datetime,
    variant: int = 1,
) -> str:
    ext = extension.lower().lstrip(".")
    values = {
        "stem": sanitize_token(source.stem, fallback="photo"),
        "timestamp": now.strftime(TIMESTAMP_FORMAT),
        "date": now.strftime("%Y%m%d"),
        "variant": variant,
        "ext": ext,
    }
    try:
        rendered = name_template.format(**values)
    except KeyError as exc:
        missing = str(exc).strip("'")
        raise ValueError(f"name template contains unknown key: {missing}") from exc

    rendered = sanitize_filename(rendered, fallback=f"{values['stem']}__archive.{ext}")
    if not Path(rendered).suffix:
        rendered = f"{rendered}.{ext}"
    return rendered


def unique_output_path(directory: Path, file_name: str) -> Path:
    """``directory / file_name``, with ``_2``, ``_3``... appended to the stem while it exists."""
    target = directory / file_name
    counter = 2
    while target.exists():
        target = directory / f"{Path(file_name).stem}_{counter}{Path(file_name).suffix}"
        counter += 1
    return target
