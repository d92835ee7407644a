from __future__ import annotations

import copy
import os
import platform
import sys
from pathlib import Path
from typing import Any

import yaml

from marsarchive.constants import GRAIN_MODE_CHROMATIC


def default_jobs() -> int:
    cpu_count = os.cpu_count() or 2
    return max(1, min(8, cpu_count - 1))


DEFAULT_CONFIG: dict[str, Any] = {
    "assets_dir": "resources",
    "catalog": None,
    "captions": None,
    "output_format": "png",
    "name_template": "{stem}__archive_{timestamp}.{ext}",
    "variants": 1,
    "seed": None,
    "jobs": default_jobs(),
    "grain": True,
    "grain_mode": GRAIN_MODE_CHROMATIC,
    "style": {},
}


def get_app_dir() -> Path:
    """Return the application root directory.

    - Frozen (PyInstaller): directory containing the executable.
    - Development: project root (two levels up from this file).
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    # marsarchive/config.py → marsarchive/ → project_root/
    return Path(__file__).resolve().parent.parent


def get_user_data_dir() -> Path:
    """Writable per-user data directory; the project root during development."""
    if not getattr(sys, "frozen", False):
        return get_app_dir()

    system_name = platform.system().lower()
    if system_name == "windows":
        base = (
            os.environ.get("APPDATA")
            or os.environ.get("LOCALAPPDATA")
            or str(Path.home() / "AppData" / "Roaming")
        )
        return Path(base) / "MarsArchive"
    if system_name == "darwin":
        return Path.home() / "Library" / "Application Support" / "MarsArchive"

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home) / "MarsArchive"
    return Path.home() / ".config" / "MarsArchive"


def get_config_path() -> Path:
    return get_user_data_dir() / "Config" / "config.yaml"


def _deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    cfg_path = path or get_config_path()
    if not cfg_path.exists():
        cfg = copy.deepcopy(DEFAULT_CONFIG)
        cfg["jobs"] = default_jobs()
        return cfg

    text = cfg_path.read_text(encoding="utf-8")
    loaded = yaml.safe_load(text) or {}
    if not isinstance(loaded, dict):
        loaded = {}
    cfg = _deep_merge(DEFAULT_CONFIG, loaded)
    if not cfg.get("jobs"):
        cfg["jobs"] = default_jobs()
    return cfg


def resolve_config_path_value(value: Any, base_dir: Path | None = None) -> Path | None:
    """Turn a path-like config value into a Path, relative ones anchored at ``base_dir``."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    candidate = Path(text).expanduser()
    if candidate.is_absolute():
        return candidate
    return (base_dir or get_app_dir()) / candidate


def write_default_config(path: Path | None = None, force: bool = False) -> Path:
    cfg_path = path or get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if cfg_path.exists() and not force:
        return cfg_path
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    cfg["jobs"] = default_jobs()
    cfg_path.write_text(yaml.safe_dump(cfg, sort_keys=False, allow_unicode=True), encoding="utf-8")
    return cfg_path
