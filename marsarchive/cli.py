from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import typer

from marsarchive.assets import load_catalog
from marsarchive.captions import load_caption_set
from marsarchive.config import get_app_dir, load_config, resolve_config_path_value, write_default_config
from marsarchive.constants import VALID_GRAIN_MODES
from marsarchive.decoders.image_decoder import decode_image
from marsarchive.discover import discover_photos
from marsarchive.exporter import resolve_output_format, save_image
from marsarchive.naming import build_output_name, unique_output_path
from marsarchive.pipeline import ArchiveGenerator
from marsarchive.randomness import make_rng
from marsarchive.style_loader import load_style

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Mars archive postcard CLI.")
LOGGER = logging.getLogger("marsarchive")


@dataclass(slots=True)
class _Result:
    source: Path
    status: str          # ok | failed
    outputs: list[Path]
    elapsed: float = 0.0
    error: str | None = None


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


@app.command()
def render(
    input_path: Path = typer.Argument(..., exists=True, resolve_path=True),
    out: Path | None = typer.Option(None, "--out", help="Output directory."),
    recursive: bool = typer.Option(False, "--recursive", help="Recursively scan input directories."),
    variants: int | None = typer.Option(None, "--variants", min=1, help="Layouts to render per photo."),
    seed: int | None = typer.Option(None, "--seed", help="Seed for a reproducible layout."),
    config_path: Path | None = typer.Option(None, "--config", exists=True, dir_okay=False, help="Config YAML."),
    assets_dir: Path | None = typer.Option(None, "--assets", help="Directory holding the sprite images."),
    catalog: Path | None = typer.Option(None, "--catalog", help="Sprite catalog YAML."),
    captions: Path | None = typer.Option(None, "--captions", help="Caption set YAML/JSON."),
    output_format: str | None = typer.Option(None, "--format", help="Output format: png|jpeg"),
    grain: bool | None = typer.Option(None, "--grain/--no-grain", help="Apply film grain."),
    grain_mode: str | None = typer.Option(None, "--grain-mode", help="chromatic|luminance"),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Composite photos into archive postcards."""
    _setup_logging(log_level)
    cfg = load_config(config_path)
    if grain_mode:
        if grain_mode.lower() not in VALID_GRAIN_MODES:
            typer.secho(f"unsupported grain mode: {grain_mode}", err=True, fg=typer.colors.RED)
            raise typer.Exit(1)
        style_cfg = cfg.get("style") if isinstance(cfg.get("style"), dict) else {}
        cfg["style"] = {**style_cfg, "grain_mode": grain_mode.lower()}

    try:
        out_ext, pil_format = resolve_output_format(output_format or str(cfg.get("output_format", "png")))
    except ValueError as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(1)

    base_dir = config_path.parent if config_path else get_app_dir()
    assets_root = assets_dir or resolve_config_path_value(cfg.get("assets_dir"), base_dir) or base_dir
    catalog_path = catalog or resolve_config_path_value(cfg.get("catalog"), base_dir)
    captions_path = captions or resolve_config_path_value(cfg.get("captions"), base_dir)

    try:
        asset_catalog = load_catalog(assets_root, catalog_path)
    except Exception as exc:
        typer.secho(f"Catalog load failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)
    caption_set = load_caption_set(captions_path)
    style = load_style(cfg)

    files = discover_photos(input_path, recursive=recursive)
    if not files:
        typer.echo("No supported image files found.")
        raise typer.Exit(0)

    out_dir = out
    if out_dir is None:
        out_dir = (input_path / "output") if input_path.is_dir() else (input_path.parent / "output")
    out_dir.mkdir(parents=True, exist_ok=True)

    seed_value = seed if seed is not None else cfg.get("seed")
    generator = ArchiveGenerator(
        style,
        asset_catalog,
        caption_set,
        rng=make_rng(int(seed_value) if seed_value is not None else None),
        jobs=int(cfg.get("jobs") or 1),
        grain=bool(cfg.get("grain", True)) if grain is None else grain,
    )
    variant_count = int(variants if variants is not None else cfg.get("variants", 1) or 1)
    name_tmpl = str(cfg.get("name_template") or "{stem}__archive_{timestamp}.{ext}")

    def process_one(source: Path) -> _Result:
        t0 = time.perf_counter()
        outputs: list[Path] = []
        try:
            generator.set_photo(decode_image(source))
            for index in range(variant_count):
                rendered = generator.generate()
                if rendered is None:
                    raise RuntimeError("generation failed, see log for details")
                name = build_output_name(name_tmpl, source, out_ext, now=datetime.now(), variant=index + 1)
                outputs.append(save_image(rendered, unique_output_path(out_dir, name), pil_format=pil_format))
            return _Result(source=source, status="ok", outputs=outputs, elapsed=time.perf_counter() - t0)
        except Exception as exc:
            return _Result(
                source=source,
                status="failed",
                outputs=outputs,
                error=str(exc),
                elapsed=time.perf_counter() - t0,
            )

    results: list[_Result] = []
    for f in files:
        r = process_one(f)
        results.append(r)
        if r.status == "ok":
            names = ", ".join(p.name for p in r.outputs)
            LOGGER.info("OK   %s -> %s  (%.2fs)", r.source.name, names, r.elapsed)
        else:
            LOGGER.error("FAIL %s  %s", r.source.name, r.error)

    ok = sum(1 for r in results if r.status == "ok")
    failed = [r for r in results if r.status == "failed"]
    typer.echo(f"Done. success={ok} failed={len(failed)}")
    if failed:
        typer.secho("Failures:", fg=typer.colors.RED)
        for r in failed:
            typer.secho(f"  {r.source}: {r.error}", fg=typer.colors.RED)
        raise typer.Exit(1)


@app.command("captions")
def list_captions(
    captions: Path | None = typer.Option(None, "--captions", help="Caption set YAML/JSON."),
) -> None:
    """Print the caption groups that would be used."""
    for index, group in enumerate(load_caption_set(captions), start=1):
        typer.echo(f"{index:>2}. " + " / ".join(group))


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config file."),
) -> None:
    path = write_default_config(force=force)
    typer.echo(f"Config initialized: {path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
