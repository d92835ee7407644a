from __future__ import annotations

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Sequence

import yaml
from PIL import Image

from marsarchive.constants import CATEGORY_FLOWER, CATEGORY_FLOWER_BED, CATEGORY_TREE
from marsarchive.models import AssetCatalog, LoadedAsset
from marsarchive.randomness import pick_one

LOGGER = logging.getLogger(__name__)

AssetLoader = Callable[[Path], LoadedAsset]


@dataclass(frozen=True, slots=True)
class AssetSelection:
    tree: Path | None
    flower_bed: Path | None
    flowers: tuple[Path, ...]


@dataclass(frozen=True, slots=True)
class LoadedAssets:
    tree: LoadedAsset | None
    flower_bed: LoadedAsset | None
    flowers: tuple[LoadedAsset, ...]


def _read_catalog_text(catalog_path: Path | None) -> str:
    if catalog_path is not None:
        return catalog_path.read_text(encoding="utf-8")
    return resources.files("marsarchive.resources").joinpath("catalog.yaml").read_text(encoding="utf-8")


def _entries(data: dict[str, Any], key: str, assets_dir: Path) -> tuple[Path, ...]:
    raw = data.get(key) or []
    if not isinstance(raw, list):
        raise ValueError(f"catalog entry {key!r} must be a list")
    paths: list[Path] = []
    for item in raw:
        text = str(item or "").strip()
        if not text:
            continue
        candidate = Path(text).expanduser()
        paths.append(candidate if candidate.is_absolute() else assets_dir / candidate)
    return tuple(paths)


def load_catalog(assets_dir: Path, catalog_path: Path | None = None) -> AssetCatalog:
    """Read the sprite catalog (built-in when ``catalog_path`` is None) and anchor it at ``assets_dir``."""
    data = yaml.safe_load(_read_catalog_text(catalog_path)) or {}
    if not isinstance(data, dict):
        raise ValueError(f"catalog is not a dict: {catalog_path or 'built-in'}")
    return AssetCatalog(
        trees=_entries(data, CATEGORY_TREE, assets_dir),
        flowers=_entries(data, CATEGORY_FLOWER, assets_dir),
        flower_beds=_entries(data, CATEGORY_FLOWER_BED, assets_dir),
    )


def select_assets(rng: random.Random, catalog: AssetCatalog, flower_count: int) -> AssetSelection:
    """Pick one tree, one flower-bed and ``flower_count`` flowers (with repetition)."""
    flowers: tuple[Path, ...] = ()
    if catalog.flowers:
        flowers = tuple(pick_one(rng, catalog.flowers) for _ in range(flower_count))
    tree = pick_one(rng, catalog.trees) if catalog.trees else None
    flower_bed = pick_one(rng, catalog.flower_beds) if catalog.flower_beds else None
    return AssetSelection(tree=tree, flower_bed=flower_bed, flowers=flowers)


def load_asset(path: Path) -> LoadedAsset:
    try:
        with Image.open(path) as image:
            return LoadedAsset(path=path, image=image.convert("RGBA"))
    except (OSError, ValueError) as exc:
        LOGGER.warning("Failed to load asset: %s (%s)", path, exc)
        return LoadedAsset(path=path, error=str(exc))


def load_assets(
    paths: Sequence[Path],
    *,
    jobs: int = 4,
    loader: AssetLoader = load_asset,
) -> list[LoadedAsset]:
    """Load every path concurrently and wait for all of them; failures become absent assets."""
    if not paths:
        return []
    results: list[LoadedAsset] = []
    with ThreadPoolExecutor(max_workers=max(1, min(jobs, len(paths)))) as pool:
        futures = [pool.submit(loader, path) for path in paths]
        for path, future in zip(paths, futures):
            try:
                results.append(future.result())
            except Exception as exc:
                LOGGER.warning("Failed to load asset: %s (%s)", path, exc)
                results.append(LoadedAsset(path=path, error=str(exc)))
    return results


def load_selection(
    selection: AssetSelection,
    *,
    jobs: int = 4,
    loader: AssetLoader = load_asset,
) -> LoadedAssets:
    paths: list[Path] = []
    if selection.tree is not None:
        paths.append(selection.tree)
    if selection.flower_bed is not None:
        paths.append(selection.flower_bed)
    paths.extend(selection.flowers)

    loaded = load_assets(paths, jobs=jobs, loader=loader)
    cursor = 0
    tree = None
    if selection.tree is not None:
        tree = loaded[cursor]
        cursor += 1
    flower_bed = None
    if selection.flower_bed is not None:
        flower_bed = loaded[cursor]
        cursor += 1
    return LoadedAssets(tree=tree, flower_bed=flower_bed, flowers=tuple(loaded[cursor:]))
