import io
from typing import Optional, Tuple
from PIL import Image, UnidentifiedImageError
import numpy as np

from core.config import DEFAULT_FIT, RESIZE_WIDTH, RESIZE_HEIGHT, resize_fit, logger
from core.errors import ImageDecodeError

JPEG_QUALITY = 80

# Modes Pillow uses for 16/32-bit greyscale; RGB conversion would clip them
_WIDE_GREY_MODES = ("I;16", "I;16L", "I;16B", "I;16N", "I")


def decode_image(content: bytes) -> Image.Image:
    """Open and fully decode image bytes, raising ImageDecodeError on bad input.

    Wide greyscale is scaled down to 8-bit L; the source format is kept.
    """
    try:
        img = Image.open(io.BytesIO(content))
        img.load()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as ex:
        raise ImageDecodeError(f"Could not decode image: {ex}") from ex
    if img.mode in _WIDE_GREY_MODES:
        fmt = img.format
        img = to_8bit_grey(img)
        img.format = fmt
    return img


def to_8bit_grey(img: Image.Image) -> Image.Image:
    arr = np.asarray(img).astype(np.int64)
    arr8 = (np.clip(arr, 0, 65535) >> 8).astype(np.uint8)
    return Image.fromarray(arr8)


def image_size(img: Optional[Image.Image]) -> Tuple[int, int]:
    """(width, height) with missing dimensions read as zero."""
    size = getattr(img, "size", None) or (0, 0)
    return int(size[0] or 0), int(size[1] or 0)


def has_alpha(img: Image.Image) -> bool:
    return img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info)


def resize_to_bounds(img: Image.Image, width: int = RESIZE_WIDTH, height: int = RESIZE_HEIGHT) -> Image.Image:
    """Fit inside width x height keeping aspect ratio. Never upscales."""
    fit = resize_fit()
    if fit != DEFAULT_FIT:
        logger.info(f"FIT={fit} requested; only '{DEFAULT_FIT}' is supported, using it")
    out = img.copy()
    out.thumbnail((width, height), Image.Resampling.LANCZOS)
    if out.size != img.size:
        logger.info(f"Resized {img.size[0]}x{img.size[1]} -> {out.size[0]}x{out.size[1]}")
    return out


def encode_image(img: Image.Image, fmt: Optional[str]) -> bytes:
    fmt = (fmt or "PNG").upper()
    params = {}
    if fmt == "JPEG":
        if img.mode not in ("RGB", "L", "CMYK"):
            img = img.convert("RGB")
        params["quality"] = JPEG_QUALITY
    buf = io.BytesIO()
    img.save(buf, format=fmt, **params)
    return buf.getvalue()
