from __future__ import annotations

import platform
from functools import lru_cache
from pathlib import Path

from PIL import ImageFont

FONT_ROLE_MONO = "mono"
FONT_ROLE_MONO_BOLD = "mono_bold"
FONT_ROLE_HAND = "hand"


def _system_font_candidates(role: str) -> list[Path]:
    system = platform.system().lower()
    if "windows" in system:
        table = {
            FONT_ROLE_MONO: [Path(r"C:\Windows\Fonts\consola.ttf"), Path(r"C:\Windows\Fonts\cour.ttf")],
            FONT_ROLE_MONO_BOLD: [Path(r"C:\Windows\Fonts\consolab.ttf"), Path(r"C:\Windows\Fonts\courbd.ttf")],
            FONT_ROLE_HAND: [
                Path(r"C:\Windows\Fonts\LXGWWenKai-Regular.ttf"),
                Path(r"C:\Windows\Fonts\simkai.ttf"),
                Path(r"C:\Windows\Fonts\msyh.ttc"),
            ],
        }
    elif "darwin" in system:
        table = {
            FONT_ROLE_MONO: [Path("/System/Library/Fonts/Menlo.ttc"), Path("/System/Library/Fonts/Monaco.ttf")],
            FONT_ROLE_MONO_BOLD: [Path("/System/Library/Fonts/Menlo.ttc")],
            FONT_ROLE_HAND: [
                Path("/Library/Fonts/LXGWWenKai-Regular.ttf"),
                Path("/System/Library/Fonts/Supplemental/Kaiti.ttc"),
                Path("/System/Library/Fonts/PingFang.ttc"),
            ],
        }
    else:
        table = {
            FONT_ROLE_MONO: [
                Path("/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf"),
                Path("/usr/share/fonts/TTF/DejaVuSansMono.ttf"),
            ],
            FONT_ROLE_MONO_BOLD: [
                Path("/usr/share/fonts/truetype/dejavu/DejaVuSansMono-Bold.ttf"),
                Path("/usr/share/fonts/TTF/DejaVuSansMono-Bold.ttf"),
            ],
            FONT_ROLE_HAND: [
                Path("/usr/share/fonts/truetype/lxgw/LXGWWenKai-Regular.ttf"),
                Path("/usr/share/fonts/opentype/noto/NotoSerifCJK-Regular.ttc"),
                Path("/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc"),
                Path("/usr/share/fonts/truetype/noto/NotoSansCJK-Regular.ttc"),
                Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
            ],
        }
    return table.get(role, [])


@lru_cache(maxsize=64)
def _load_font_cached(font_path: str, size: int, role: str) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    candidates: list[Path] = []
    if font_path:
        candidates.append(Path(font_path))
    candidates.extend(_system_font_candidates(role))
    for candidate in candidates:
        if candidate.exists():
            try:
                return ImageFont.truetype(str(candidate), size=size)
            except Exception:
                continue
    return ImageFont.load_default(size=size)


def load_font(
    font_path: Path | None,
    size: int,
    role: str = FONT_ROLE_MONO,
) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    return _load_font_cached(str(font_path) if font_path else "", int(size), role)
