from core.config import logger
from utils.imaging import decode_image, encode_image, has_alpha, resize_to_bounds
from utils.watermark import OverlayCache, composite, select_watermark


def transform(content: bytes, overlays: OverlayCache) -> bytes:
    """Resize into the bounding box, then stamp the contrasting overlay.

    Output keeps the input's format. Decode failures raise ImageDecodeError.
    """
    logger.info("Processing Image...")
    img = decode_image(content)
    fmt = img.format
    resized = encode_image(resize_to_bounds(img), fmt)
    return add_watermark(resized, overlays)


def add_watermark(resized: bytes, overlays: OverlayCache) -> bytes:
    logger.info("Adding WaterMark...")
    selection = select_watermark(resized, overlays)
    img = decode_image(resized)
    fmt = img.format
    out = composite(img, decode_image(selection.overlay), selection.left, selection.top)
    if not has_alpha(img):
        out = out.convert("RGB")
    return encode_image(out, fmt)
