import random
import threading
from datetime import date
from pathlib import Path

from PIL import Image

from marsarchive import pipeline
from marsarchive.assets import LoadedAssets
from marsarchive.captions import FALLBACK_CAPTIONS
from marsarchive.models import ArchiveStyle, AssetCatalog, GenerationState, LoadedAsset
from marsarchive.pipeline import ArchiveGenerator, compose_archive


def _catalog(root: Path) -> AssetCatalog:
    return AssetCatalog(
        trees=(root / "tree.png",),
        flowers=tuple(root / f"flower{i}.png" for i in range(1, 4)),
        flower_beds=(root / "flowerbed1.png",),
    )


def _write_assets(root: Path) -> None:
    Image.new("RGBA", (300, 500), (30, 90, 40, 255)).save(root / "tree.png")
    for i in range(1, 4):
        Image.new("RGBA", (64, 64), (230, 180, 20, 255)).save(root / f"flower{i}.png")
    Image.new("RGBA", (1200, 240), (150, 60, 60, 255)).save(root / "flowerbed1.png")


def _in_memory_loader(path: Path) -> LoadedAsset:
    return LoadedAsset(path=path, image=Image.new("RGBA", (64, 64), (200, 200, 0, 255)))


def test_generate_without_photo_changes_nothing(tmp_path: Path) -> None:
    busy_events: list[bool] = []
    generator = ArchiveGenerator(ArchiveStyle(), _catalog(tmp_path), FALLBACK_CAPTIONS, on_busy=busy_events.append)
    previous = Image.new("RGBA", (900, 1100), (1, 2, 3, 255))
    generator.canvas = previous
    generator.export_enabled = True

    assert generator.generate() is None

    assert generator.canvas is previous
    assert generator.export_enabled is True
    assert generator.state is GenerationState.IDLE
    assert busy_events == []


def test_generate_end_to_end_publishes_canvas(tmp_path: Path) -> None:
    _write_assets(tmp_path)
    busy_events: list[bool] = []
    ready: list[Image.Image] = []
    generator = ArchiveGenerator(
        ArchiveStyle(),
        _catalog(tmp_path),
        FALLBACK_CAPTIONS,
        rng=random.Random(42),
        jobs=3,
        on_busy=busy_events.append,
        on_export_ready=ready.append,
    )
    generator.set_photo(Image.new("RGB", (400, 300), (60, 120, 200)))

    result = generator.generate(today=date(2024, 3, 5))

    assert result is not None
    assert result.size == (900, 1100)
    assert result.mode == "RGBA"
    assert generator.canvas is result
    assert generator.export_enabled is True
    assert generator.state is GenerationState.DONE
    assert busy_events == [True, False]
    assert ready == [result]


def test_generate_tolerates_missing_assets(tmp_path: Path) -> None:
    generator = ArchiveGenerator(ArchiveStyle(), _catalog(tmp_path), FALLBACK_CAPTIONS, rng=random.Random(1))
    generator.set_photo(Image.new("RGB", (300, 400), (200, 10, 10)))

    result = generator.generate()

    assert result is not None
    assert generator.export_enabled is True


def test_generation_is_reproducible_with_a_seed(tmp_path: Path) -> None:
    photo = Image.new("RGB", (640, 480), (90, 90, 160))
    outputs = []
    for _ in range(2):
        generator = ArchiveGenerator(
            ArchiveStyle(),
            _catalog(tmp_path),
            FALLBACK_CAPTIONS,
            rng=random.Random(2024),
            loader=_in_memory_loader,
        )
        generator.set_photo(photo)
        outputs.append(generator.generate(today=date(2024, 3, 5)).tobytes())

    assert outputs[0] == outputs[1]


def test_flower_count_per_pass_is_four_to_six(tmp_path: Path) -> None:
    requested: list[Path] = []
    lock = threading.Lock()

    def _recording_loader(path: Path) -> LoadedAsset:
        with lock:
            requested.append(path)
        return _in_memory_loader(path)

    generator = ArchiveGenerator(
        ArchiveStyle(),
        _catalog(tmp_path),
        FALLBACK_CAPTIONS,
        rng=random.Random(7),
        grain=False,
        loader=_recording_loader,
    )
    generator.set_photo(Image.new("RGB", (50, 50)))
    for _ in range(10):
        requested.clear()
        assert generator.generate() is not None
        flowers = [p for p in requested if p.name.startswith("flower") and not p.name.startswith("flowerbed")]
        assert 4 <= len(flowers) <= 6


def test_pipeline_failure_is_logged_and_absorbed(tmp_path: Path, monkeypatch, caplog) -> None:
    def _broken_draw_photo(ctx, photo):
        raise RuntimeError("drawing exploded")

    monkeypatch.setattr(pipeline, "draw_photo", _broken_draw_photo)
    busy_events: list[bool] = []
    generator = ArchiveGenerator(
        ArchiveStyle(),
        _catalog(tmp_path),
        FALLBACK_CAPTIONS,
        loader=_in_memory_loader,
        on_busy=busy_events.append,
    )
    generator.set_photo(Image.new("RGB", (50, 50)))

    assert generator.generate() is None

    assert generator.canvas is None
    assert generator.export_enabled is False
    assert generator.busy is False
    assert generator.state is GenerationState.DONE
    assert busy_events == [True, False]
    assert "drawing exploded" in caplog.text


def test_overlapping_requests_publish_only_the_latest(tmp_path: Path) -> None:
    first_call_started = threading.Event()
    release_first = threading.Event()
    lock = threading.Lock()
    calls = {"count": 0}

    def _slow_first_loader(path: Path) -> LoadedAsset:
        with lock:
            calls["count"] += 1
            is_first = calls["count"] == 1
        if is_first:
            first_call_started.set()
            release_first.wait(timeout=10)
        return _in_memory_loader(path)

    generator = ArchiveGenerator(
        ArchiveStyle(),
        _catalog(tmp_path),
        FALLBACK_CAPTIONS,
        rng=random.Random(3),
        jobs=1,
        grain=False,
        loader=_slow_first_loader,
    )
    generator.set_photo(Image.new("RGB", (120, 80), (10, 10, 10)))

    results: dict[str, Image.Image | None] = {}
    worker = threading.Thread(target=lambda: results.setdefault("first", generator.generate()))
    worker.start()
    assert first_call_started.wait(timeout=10)

    results["second"] = generator.generate()
    release_first.set()
    worker.join(timeout=30)

    assert results["first"] is None
    assert results["second"] is not None
    assert generator.canvas is results["second"]
    assert generator.export_enabled is True


def test_compose_archive_without_sprites_still_renders_photo() -> None:
    style = ArchiveStyle()
    photo = Image.new("RGB", (400, 300), (0, 255, 0))
    empty = LoadedAssets(tree=None, flower_bed=None, flowers=())

    image = compose_archive(style, photo, empty, [], random.Random(0), today=date(2024, 3, 5), grain=False)

    assert image.getpixel((450, 400)) == (0, 255, 0, 255)
    assert image.getpixel((5, 5))[:3] == (0xF5, 0xF1, 0xEB)
