"""
Render right-to-left text as bitmap images.

reportlab has no complex-script shaping, so Hebrew strings are drawn with
Pillow after bidi reordering and placed in the PDF as images.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

# Pixels per point when rasterizing text
RENDER_SCALE = 4
PADDING_PX = 4

FONT_ENV_VAR = "EXPENSE_REPORT_FONT"

# Common locations of fonts with Hebrew glyphs
FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/noto/NotoSansHebrew-Regular.ttf",
    "/usr/share/fonts/opentype/noto/NotoSansHebrew-Regular.ttf",
    "/usr/share/fonts/noto/NotoSansHebrew-Regular.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "C:/Windows/Fonts/arial.ttf",
]


def find_font(font_path: Optional[str] = None) -> Optional[str]:
    """Resolve the font file: explicit path, then env var, then known locations."""
    explicit = font_path or os.getenv(FONT_ENV_VAR)
    if explicit:
        return explicit if Path(explicit).is_file() else None
    for candidate in FONT_CANDIDATES:
        if Path(candidate).is_file():
            return candidate
    return None


@lru_cache(maxsize=32)
def _load_font(font_path: Optional[str], size_px: int):
    from PIL import ImageFont

    resolved = find_font(font_path)
    if resolved:
        try:
            return ImageFont.truetype(resolved, size_px)
        except OSError as e:
            print(f"[WARN] Could not load font {resolved}: {e}; using the default font")
            return ImageFont.load_default(size=size_px)
    print(f"[WARN] No Hebrew-capable font found; set {FONT_ENV_VAR} to a .ttf file")
    return ImageFont.load_default(size=size_px)


def to_visual_order(text: str) -> str:
    """Reorder logical text to visual (left-to-right drawing) order."""
    from bidi.algorithm import get_display
    return get_display(text, base_dir="R")


def render_text_as_image(text: str, size: float = 12, font_path: Optional[str] = None):
    """
    Draw a line of text, black on white, at `size` points.

    The bitmap is RENDER_SCALE pixels per point; divide its dimensions by
    RENDER_SCALE to get its size in points.
    """
    from PIL import Image, ImageDraw

    size_px = max(1, int(round(size * RENDER_SCALE)))
    font = _load_font(font_path, size_px)
    visual = to_visual_order(text or "")

    probe = ImageDraw.Draw(Image.new("RGB", (1, 1)))
    left, _, right, _ = probe.textbbox((0, 0), visual, font=font)
    width = max(1, right - left) + 2 * PADDING_PX
    height = int(size_px * 1.3) + 2 * PADDING_PX

    img = Image.new("RGB", (width, height), "white")
    ImageDraw.Draw(img).text((PADDING_PX - left, PADDING_PX), visual, font=font, fill="black")
    return img
