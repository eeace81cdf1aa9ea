import asyncio
import json
from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from starlette.concurrency import run_in_threadpool

from core.config import CORS_HEADERS, PACKAGE_FILENAME, logger
from models.brand import BrandOutcome, BrandRequest, ExtractedImage, ImageResult
from utils.archive import extract, is_archive
from utils.branding import transform
from utils.emailing import ResultsMailer, render_error_html, render_results_html
from utils.keys import generate_key
from utils.packaging import pack
from utils.storage import AssetStore, get_asset_store
from utils.watermark import OverlayCache

router = APIRouter(tags=["brand"])


@lru_cache()
def get_overlay_cache() -> OverlayCache:
    """One overlay cache for the life of the process."""
    return OverlayCache(get_asset_store())


def get_brand_store() -> AssetStore:
    return get_asset_store()


def get_mailer() -> ResultsMailer:
    return ResultsMailer()


async def process_file(file: ExtractedImage, store: AssetStore, overlays: OverlayCache) -> ImageResult:
    logger.info(f"Processing file: {file.filename}")
    processed = await run_in_threadpool(transform, file.content, overlays)

    original_key = generate_key(file.filename, "original")
    processed_key = generate_key(file.filename, "processed")
    await asyncio.to_thread(store.put, original_key, file.content)
    await asyncio.to_thread(store.put, processed_key, processed)

    return ImageResult(
        original_url=store.url_for(original_key),
        processed_url=store.url_for(processed_key),
    )


async def process_request(payload: BrandRequest, store: AssetStore, overlays: OverlayCache) -> BrandOutcome:
    filename = payload.source_key
    buffer = await asyncio.to_thread(store.get, filename)
    files = await run_in_threadpool(extract, buffer, filename)

    logger.info("Processing files")
    # gather keeps extraction order whatever order the files finish in
    results: List[ImageResult] = list(
        await asyncio.gather(*(process_file(f, store, overlays) for f in files))
    )
    logger.info("Finished processing files")

    package_key = package_url = ""
    if is_archive(filename):
        zip_bytes = await run_in_threadpool(pack, results, store)
        package_key = generate_key(PACKAGE_FILENAME, "package")
        await asyncio.to_thread(store.put, package_key, zip_bytes, "application/zip")
        package_url = store.url_for(package_key)

    return BrandOutcome(results=results, email=payload.requester_email, package_key=package_key, package_url=package_url)


def _html(status_code: int, body: str) -> HTMLResponse:
    return HTMLResponse(content=body, status_code=status_code, headers=CORS_HEADERS, media_type="text/html")


@router.post("/brand")
async def brand(
    request: Request,
    store: AssetStore = Depends(get_brand_store),
    overlays: OverlayCache = Depends(get_overlay_cache),
    mailer: ResultsMailer = Depends(get_mailer),
):
    try:
        raw = await request.body()
        payload = BrandRequest(**json.loads(raw or b"{}"))
        outcome = await process_request(payload, store, overlays)
        html = render_results_html(outcome.results, outcome.package_url)
        await run_in_threadpool(mailer.send, outcome.email, html)
        return _html(200, html)
    except Exception as ex:
        logger.exception(f"brand request failed: {ex}")
        return _html(500, render_error_html(str(ex)))
