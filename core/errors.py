"""Failures raised while branding a request.

Messages are echoed verbatim into the HTTP 500 body, so keep them readable.
"""


class BrandingError(Exception):
    """Base class for branding pipeline failures."""


class UnsupportedFileType(BrandingError):
    def __init__(self, filename: str, media_type: str):
        self.filename = filename
        self.media_type = media_type
        super().__init__(f"Unsupported file type: {media_type} ({filename})")


class ImageDecodeError(BrandingError):
    pass


class StorageNotFound(BrandingError):
    def __init__(self, bucket: str, key):
        self.bucket = bucket
        self.key = key
        super().__init__(f"Object not found in storage: {bucket}/{key}")


class PackagingError(BrandingError):
    pass


class EmailDispatchError(BrandingError):
    pass
