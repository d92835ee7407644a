from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from PIL import Image, ImageDraw

from marsarchive.constants import CANVAS_HEIGHT, CANVAS_WIDTH, GRAIN_MODE_CHROMATIC, PHOTO_HEIGHT


@dataclass(frozen=True, slots=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains_rect(self, other: "Rect", tolerance: float = 1e-6) -> bool:
        return (
            self.x <= other.x + tolerance
            and self.y <= other.y + tolerance
            and self.right >= other.right - tolerance
            and self.bottom >= other.bottom - tolerance
        )


@dataclass(slots=True)
class ArchiveStyle:
    width: int = CANVAS_WIDTH
    height: int = CANVAS_HEIGHT
    photo_height: int = PHOTO_HEIGHT
    photo_margin: int = 40
    colors: dict[str, str] = field(
        default_factory=lambda: {
            "background": "#f5f1eb",
            "border": "#8c2f2f",
            "divider": "#6e1f1f",
            "text": "#3a0f0f",
            "date": "#7a1f1f",
        }
    )
    fonts: dict[str, int] = field(
        default_factory=lambda: {"mono": 24, "hand": 48, "stamp_title": 16, "stamp_subtitle": 12}
    )
    mono_font_path: Path | None = None
    hand_font_path: Path | None = None

    frame_margin: int = 20
    border_width: int = 12
    divider_inset: int = 80
    divider_offset: int = 60
    divider_width: int = 3

    photo_stroke_width: int = 2
    photo_stroke_color: tuple[int, int, int, int] = (0, 0, 0, 26)
    photo_shadow_color: tuple[int, int, int, int] = (0, 0, 0, 51)
    photo_shadow_blur: float = 20.0

    caption_x: float = 100.0
    caption_jitter: float = 20.0
    caption_rotation: float = 0.01
    caption_line_height: float = 60.0
    caption_offset: float = 80.0

    date_margin_x: int = 80
    date_margin_y: int = 60
    stamp_offset_x: int = 120
    stamp_offset_y: int = 140
    stamp_outer_radius: int = 35
    stamp_inner_radius: int = 30
    stamp_rotation: float = 0.2
    stamp_lines: tuple[str, str] = ("MARS", "ARCHIVE")

    flower_count: tuple[int, int] = (4, 7)
    flower_size: tuple[float, float] = (60.0, 100.0)
    flower_opacity: float = 1.0
    flower_shadow_blur: float = 5.0
    flower_shadow_color: tuple[int, int, int, int] = (0, 0, 0, 51)

    tree_max_width: int = 250
    tree_offset_x: int = -20
    tree_bottom_offset: int = 100
    tree_sepia: float = 0.5
    tree_contrast: float = 1.2
    tree_opacity: float = 1.0

    bed_sepia: float = 0.3
    bed_opacity: float = 1.0

    grain_amount: float = 15.0
    grain_clamp: bool = True
    grain_mode: str = GRAIN_MODE_CHROMATIC

    @property
    def photo_rect(self) -> Rect:
        return Rect(
            float(self.photo_margin),
            float(self.photo_margin),
            float(self.width - self.photo_margin * 2),
            float(self.photo_height),
        )


@dataclass(slots=True)
class RenderContext:
    """Canvas surface, its draw handle, the style and the random source for one pass."""

    image: Image.Image
    draw: ImageDraw.ImageDraw
    style: ArchiveStyle
    rng: random.Random

    @classmethod
    def create(cls, style: ArchiveStyle, rng: random.Random) -> "RenderContext":
        image = Image.new("RGBA", (style.width, style.height), (0, 0, 0, 0))
        return cls(image=image, draw=ImageDraw.Draw(image), style=style, rng=rng)

    def composite(self, layer: Image.Image, dest: tuple[int, int] = (0, 0)) -> None:
        """Alpha-composite ``layer`` at ``dest``; negative or overflowing offsets are clipped."""
        x, y = dest
        left = max(0, -x)
        top = max(0, -y)
        right = min(layer.width, self.image.width - x)
        bottom = min(layer.height, self.image.height - y)
        if right <= left or bottom <= top:
            return
        if (left, top, right, bottom) != (0, 0, layer.width, layer.height):
            layer = layer.crop((left, top, right, bottom))
        self.image.alpha_composite(layer, (x + left, y + top))


@dataclass(frozen=True, slots=True)
class SpritePlacement:
    side: str
    x: float
    y: float
    rotation: float
    size: float
    opacity: float = 1.0


@dataclass(frozen=True, slots=True)
class LoadedAsset:
    path: Path
    image: Image.Image | None = None
    error: str | None = None

    @property
    def available(self) -> bool:
        return self.image is not None


@dataclass(frozen=True, slots=True)
class AssetCatalog:
    trees: tuple[Path, ...]
    flowers: tuple[Path, ...]
    flower_beds: tuple[Path, ...]

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "tree": [str(p) for p in self.trees],
            "flower": [str(p) for p in self.flowers],
            "flower-bed": [str(p) for p in self.flower_beds],
        }


class GenerationState(str, Enum):
    IDLE = "idle"
    LOADING_ASSETS = "loading_assets"
    COMPOSITING = "compositing"
    DONE = "done"
