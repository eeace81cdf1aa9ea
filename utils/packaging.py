import io
import os
import zipfile
from typing import List

from core.config import logger
from core.errors import PackagingError
from models.brand import ImageResult
from utils.storage import AssetStore, key_from_url


def pack(results: List[ImageResult], store: AssetStore) -> bytes:
    """Zip the processed objects of `results`, one entry per result.

    Any failed download aborts the whole archive.
    """
    logger.info("Zipping files")
    mem = io.BytesIO()
    try:
        with zipfile.ZipFile(mem, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
            # Keys in different folders can share a base name
            used_names: set[str] = set()

            def _unique_name(name: str) -> str:
                base, ext = os.path.splitext(name)
                cand = name
                i = 1
                while cand in used_names:
                    cand = f"{base}_{i}{ext}"
                    i += 1
                used_names.add(cand)
                return cand

            for result in results:
                bucket_key = key_from_url(result.processed_url)
                arcname = _unique_name(bucket_key.split("/")[-1])
                content = store.get(bucket_key)
                logger.info(f"Zipping {bucket_key} as {arcname} from {result.processed_url}")
                zf.writestr(arcname, content)
    except Exception as ex:
        raise PackagingError(f"Failed to package processed images: {ex}") from ex
    return mem.getvalue()
