import io
import os
import mimetypes
import zipfile
from typing import List

from core.config import logger
from core.errors import UnsupportedFileType
from models.brand import ExtractedImage

# Declared media types accepted for an upload
ALLOWED_MEDIA_TYPES = {
    "application/zip",
    "image/gif",
    "image/jpeg",
    "image/png",
}

# Entry extensions kept when unpacking an archive (no .jpeg here)
ARCHIVE_IMAGE_EXTENSIONS = (".jpg", ".gif", ".png")

MACOS_METADATA_MARKER = "__MACOSX"


def is_archive(filename) -> bool:
    return isinstance(filename, str) and filename.endswith(".zip")


def check_media_type(filename: str) -> None:
    """Reject known, disallowed media types. Unknown extensions pass."""
    media_type = mimetypes.guess_type(filename)[0]
    if media_type is not None and media_type not in ALLOWED_MEDIA_TYPES:
        raise UnsupportedFileType(filename, media_type)


def extract(content: bytes, filename: str) -> List[ExtractedImage]:
    check_media_type(filename)
    if is_archive(filename):
        return extract_zip(content)
    return [ExtractedImage(filename=filename, content=content)]


def extract_zip(content: bytes) -> List[ExtractedImage]:
    files: List[ExtractedImage] = []
    with zipfile.ZipFile(io.BytesIO(content)) as zf:
        for info in zf.infolist():
            name = info.filename
            if info.is_dir() or MACOS_METADATA_MARKER in name:
                continue
            ext = os.path.splitext(name)[1].lower()
            if ext not in ARCHIVE_IMAGE_EXTENSIONS:
                logger.info(f"Skipping archive entry {name}")
                continue
            files.append(ExtractedImage(filename=name, content=zf.read(info)))
    logger.info(f"Extracted {len(files)} image(s) from archive")
    return files
