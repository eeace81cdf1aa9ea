from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple
from PIL import Image
import numpy as np

from core.config import OVERLAY_KEY_WHITE, OVERLAY_KEY_BLACK, logger
from utils.imaging import decode_image, image_size
from utils.storage import AssetStore

LUMINANCE_THRESHOLD = 0.5

# Overlay anchored past the bottom-right corner by a fixed margin
BASE_MARGIN_LEFT = 25
BASE_MARGIN_TOP = 45


class WatermarkVariant(str, Enum):
    # Light overlay, reads on dark images
    LIGHT_BACKGROUND = "light-background"
    # Dark overlay, reads on light images
    DARK_BACKGROUND = "dark-background"

    @property
    def overlay_key(self) -> str:
        if self is WatermarkVariant.LIGHT_BACKGROUND:
            return OVERLAY_KEY_WHITE
        return OVERLAY_KEY_BLACK

    @property
    def offset_correction(self) -> Tuple[int, int]:
        if self is WatermarkVariant.LIGHT_BACKGROUND:
            return -30, -40
        return 0, -50


class OverlayCache:
    """Read-through cache of overlay bytes, keyed by variant.

    Populated on first use and never evicted. Two concurrent misses may both
    fetch; the second write replaces the first with identical bytes.
    """

    def __init__(self, store: AssetStore):
        self.store = store
        self._items: Dict[WatermarkVariant, bytes] = {}

    def get(self, variant: WatermarkVariant) -> bytes:
        data = self._items.get(variant)
        if data is None:
            data = self.store.get(variant.overlay_key)
            self._items[variant] = data
        return data

    def __contains__(self, variant) -> bool:
        return variant in self._items


@dataclass
class WatermarkSelection:
    variant: WatermarkVariant
    overlay: bytes
    left: int
    top: int


def dominant_color(img: Image.Image) -> Tuple[int, int, int]:
    """Most populated bin of a 16x16x16 RGB histogram, as bin centers."""
    arr = np.asarray(img.convert("RGB"), dtype=np.uint8)
    if arr.size == 0:
        return 0, 0, 0
    q = (arr >> 4).astype(np.int32)
    idx = (q[:, :, 0] << 8) | (q[:, :, 1] << 4) | q[:, :, 2]
    counts = np.bincount(idx.ravel(), minlength=4096)
    top = int(np.argmax(counts))
    r, g, b = (top >> 8) & 0xF, (top >> 4) & 0xF, top & 0xF
    return r * 16 + 8, g * 16 + 8, b * 16 + 8


def luminance(rgb: Tuple[int, int, int]) -> float:
    r, g, b = rgb
    return (r * 0.299 + g * 0.587 + b * 0.114) / 255


def choose_variant(lum: float) -> WatermarkVariant:
    if lum < LUMINANCE_THRESHOLD:
        return WatermarkVariant.LIGHT_BACKGROUND
    return WatermarkVariant.DARK_BACKGROUND


def compute_offset(variant: WatermarkVariant, image_wh: Tuple[int, int], overlay_wh: Tuple[int, int]) -> Tuple[int, int]:
    left = image_wh[0] - overlay_wh[0] + BASE_MARGIN_LEFT
    top = image_wh[1] - overlay_wh[1] + BASE_MARGIN_TOP
    dx, dy = variant.offset_correction
    return left + dx, top + dy


def select_watermark(resized: bytes, overlays: OverlayCache) -> WatermarkSelection:
    img = decode_image(resized)
    lum = luminance(dominant_color(img))
    variant = choose_variant(lum)
    logger.info(f"Watermark key: {variant.overlay_key} (luminance {lum:.3f})")

    overlay = overlays.get(variant)
    left, top = compute_offset(variant, image_size(img), image_size(decode_image(overlay)))
    logger.info(f"Watermark position: {left}, {top}")
    return WatermarkSelection(variant=variant, overlay=overlay, left=left, top=top)


def composite(img: Image.Image, overlay: Image.Image, left: int, top: int) -> Image.Image:
    """Alpha-composite `overlay` at (left, top); parts outside the image are clipped."""
    base = img.convert("RGBA")
    layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
    layer.paste(overlay.convert("RGBA"), (left, top))
    return Image.alpha_composite(base, layer)
