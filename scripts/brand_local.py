#!/usr/bin/env python3
"""
Brand a local image or zip archive without touching S3 or sending email.

The two overlay PNGs are read from --overlays (processed_LDARBranding-white.png
and processed_LDARBranding-black.png). Outputs land in a local store under
--out, keyed exactly as the service keys them, and the results page is
written next to them.

Usage:
    python -m scripts.brand_local INPUT --overlays DIR [--out DIR]
"""
import os
import sys
import argparse
import asyncio

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import OVERLAY_KEY_BLACK, OVERLAY_KEY_WHITE, brand_bucket, logger
from models.brand import BrandRequest
from routers.brand import process_request
from utils.emailing import render_results_html
from utils.storage import LocalAssetStore
from utils.watermark import OverlayCache


def seed_store(store: LocalAssetStore, input_path: str, overlays_dir: str) -> str:
    """Copy the input and both overlays into the store; return the input key."""
    for key in (OVERLAY_KEY_WHITE, OVERLAY_KEY_BLACK):
        with open(os.path.join(overlays_dir, key), "rb") as f:
            store.put(key, f.read())
    source_key = os.path.basename(input_path)
    with open(input_path, "rb") as f:
        store.put(source_key, f.read())
    return source_key


def run(input_path: str, overlays_dir: str, out_dir: str) -> str:
    store = LocalAssetStore(brand_bucket(), out_dir)
    source_key = seed_store(store, input_path, overlays_dir)
    outcome = asyncio.run(process_request(BrandRequest(image=source_key), store, OverlayCache(store)))

    html_path = os.path.join(out_dir, "results.html")
    with open(html_path, "w", encoding="utf-8") as f:
        f.write(render_results_html(outcome.results, outcome.package_url))
    logger.info(f"Branded {len(outcome.results)} image(s); results page at {html_path}")
    if outcome.package_key:
        logger.info(f"Package: {outcome.package_key}")
    return html_path


def main():
    parser = argparse.ArgumentParser(description='Brand a local image or zip archive')
    parser.add_argument('input', help='Image or .zip archive to brand')
    parser.add_argument('--overlays', required=True, help='Directory holding the two overlay PNGs')
    parser.add_argument('--out', default='branded', help='Output directory (default: ./branded)')
    args = parser.parse_args()

    if not os.path.isfile(args.input):
        parser.error(f"no such file: {args.input}")
    run(args.input, args.overlays, args.out)


if __name__ == '__main__':
    main()
