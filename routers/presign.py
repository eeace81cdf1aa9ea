import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from core.config import CORS_HEADERS, logger, presign_expires, upload_bucket
from models.brand import PresignRequest
from utils.storage import AssetStore, get_asset_store

router = APIRouter(tags=["presign"])


def get_upload_store() -> AssetStore:
    return get_asset_store(upload_bucket())


@router.post("/presign")
async def presign(request: Request, store: AssetStore = Depends(get_upload_store)):
    """Time-limited direct-upload URL for `filename` in the upload bucket."""
    try:
        raw = await request.body()
        payload = PresignRequest(**json.loads(raw or b"{}"))
        if not payload.filename:
            return JSONResponse({"error": "filename required"}, status_code=400, headers=CORS_HEADERS)
        url = await run_in_threadpool(store.presign_upload, payload.filename, presign_expires())
        return JSONResponse({"url": url}, headers=CORS_HEADERS)
    except Exception as ex:
        logger.exception(f"presign failed: {ex}")
        return JSONResponse({"error": str(ex)}, status_code=500, headers=CORS_HEADERS)
