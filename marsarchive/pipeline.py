from __future__ import annotations

import logging
import random
import threading
from datetime import date
from typing import Callable, Sequence

from PIL import Image

from marsarchive.assets import AssetLoader, LoadedAssets, load_asset, load_selection, select_assets
from marsarchive.captions import CaptionGroup
from marsarchive.models import ArchiveStyle, AssetCatalog, GenerationState, RenderContext
from marsarchive.randomness import make_rng, pick_one
from marsarchive.render.caption import draw_caption
from marsarchive.render.decorations import (
    draw_flower_bed,
    draw_flowers,
    draw_tree,
    flower_count,
    plan_flower_placements,
)
from marsarchive.render.frame import draw_frame
from marsarchive.render.grain import apply_grain
from marsarchive.render.photo import draw_photo
from marsarchive.render.stamp import draw_date_and_stamp

LOGGER = logging.getLogger(__name__)


def compose_archive(
    style: ArchiveStyle,
    photo: Image.Image,
    assets: LoadedAssets,
    caption: Sequence[str],
    rng: random.Random,
    *,
    today: date | None = None,
    grain: bool = True,
) -> Image.Image:
    """Run every drawing step in order on a fresh canvas and return the flattened result."""
    ctx = RenderContext.create(style, rng)
    draw_frame(ctx)
    draw_photo(ctx, photo)

    if assets.tree is not None and assets.tree.image is not None:
        draw_tree(ctx, assets.tree.image)
    placements = plan_flower_placements(
        rng,
        style.photo_rect,
        len(assets.flowers),
        style.flower_size,
        opacity=style.flower_opacity,
    )
    draw_flowers(ctx, assets.flowers, placements)

    draw_caption(ctx, caption, style.photo_height + style.caption_offset)
    draw_date_and_stamp(ctx, today)

    if assets.flower_bed is not None and assets.flower_bed.image is not None:
        draw_flower_bed(ctx, assets.flower_bed.image)

    if not grain:
        return ctx.image
    return apply_grain(
        ctx.image,
        rng,
        amount=style.grain_amount,
        clamp=style.grain_clamp,
        mode=style.grain_mode,
    )


class ArchiveGenerator:
    """Owns the source photo and the published canvas; runs one generation pass per request.

    Overlapping requests are resolved with a sequence token: only the most
    recent request may publish its canvas, older ones are discarded once their
    asset loading settles.
    """

    def __init__(
        self,
        style: ArchiveStyle,
        catalog: AssetCatalog,
        captions: Sequence[CaptionGroup],
        *,
        rng: random.Random | None = None,
        jobs: int = 4,
        grain: bool = True,
        loader: AssetLoader = load_asset,
        on_busy: Callable[[bool], None] | None = None,
        on_export_ready: Callable[[Image.Image], None] | None = None,
    ) -> None:
        self.style = style
        self.catalog = catalog
        self.captions = tuple(captions)
        self.rng = rng or make_rng()
        self.jobs = max(1, int(jobs))
        self.grain = grain
        self.loader = loader
        self.on_busy = on_busy
        self.on_export_ready = on_export_ready

        self.photo: Image.Image | None = None
        self.canvas: Image.Image | None = None
        self.export_enabled = False
        self.busy = False
        self.state = GenerationState.IDLE

        self._lock = threading.Lock()
        self._sequence = 0

    def set_photo(self, photo: Image.Image | None) -> None:
        self.photo = photo

    def _set_busy(self, busy: bool) -> None:
        self.busy = busy
        if self.on_busy is not None:
            self.on_busy(busy)

    def _begin(self) -> tuple[int, random.Random]:
        with self._lock:
            self._sequence += 1
            token = self._sequence
            pass_rng = random.Random(self.rng.getrandbits(64))
            self.export_enabled = False
            self.state = GenerationState.LOADING_ASSETS
        self._set_busy(True)
        return token, pass_rng

    def _is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._sequence

    def _publish(self, token: int, canvas: Image.Image) -> bool:
        with self._lock:
            if token != self._sequence:
                return False
            self.canvas = canvas
            self.export_enabled = True
            self.state = GenerationState.DONE
        return True

    def _finish(self, token: int) -> None:
        with self._lock:
            current = token == self._sequence
            if current:
                self.state = GenerationState.DONE
        if current:
            self._set_busy(False)

    def generate(self, today: date | None = None) -> Image.Image | None:
        """Composite the current photo; returns the published canvas, or None if nothing was published."""
        photo = self.photo
        if photo is None:
            return None

        token, rng = self._begin()
        try:
            count = flower_count(rng, self.style.flower_count)
            selection = select_assets(rng, self.catalog, count)
            LOGGER.debug("generation %d: loading %d flowers", token, len(selection.flowers))
            assets = load_selection(selection, jobs=self.jobs, loader=self.loader)
            if not self._is_current(token):
                LOGGER.info("generation %d superseded, discarding", token)
                return None

            with self._lock:
                if token == self._sequence:
                    self.state = GenerationState.COMPOSITING
            caption = pick_one(rng, self.captions)
            canvas = compose_archive(
                self.style,
                photo,
                assets,
                caption,
                rng,
                today=today,
                grain=self.grain,
            )
            if not self._publish(token, canvas):
                LOGGER.info("generation %d superseded, discarding", token)
                return None
            LOGGER.info("generation %d complete", token)
            if self.on_export_ready is not None:
                self.on_export_ready(canvas)
            return canvas
        except Exception:
            LOGGER.exception("Error generating archive image")
            return None
        finally:
            self._finish(token)
