import os
import mimetypes
from typing import Optional
from botocore.exceptions import ClientError

from core.config import brand_bucket, get_s3_resource, get_s3_client, local_storage_dir, logger, storage_backend
from core.errors import StorageNotFound

_MISSING_CODES = ("NoSuchKey", "404", "NotFound")


def generate_s3_url(bucket: str, key: str) -> str:
    url = f"https://{bucket}.s3.amazonaws.com/{key}"
    logger.info(f"Generated S3 URL: {url}")
    return url


def key_from_url(url: str) -> str:
    """Storage key of a public URL: everything after the host's '.com/'."""
    return url[url.index(".com/") + 5:]


def guess_content_type(key: str) -> str:
    return mimetypes.guess_type(key)[0] or "application/octet-stream"


class AssetStore:
    """Object storage gateway bound to one bucket."""

    def __init__(self, bucket: str):
        self.bucket = bucket

    def get(self, key: str) -> bytes:
        raise NotImplementedError

    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> None:
        raise NotImplementedError

    def url_for(self, key: str) -> str:
        return generate_s3_url(self.bucket, key)

    def presign_upload(self, key: str, expires_in: int = 300) -> str:
        raise NotImplementedError


class S3AssetStore(AssetStore):
    def __init__(self, bucket: str, resource=None, client=None):
        super().__init__(bucket)
        self._s3 = resource
        self._client = client

    @property
    def s3(self):
        if self._s3 is None:
            self._s3 = get_s3_resource()
        return self._s3

    @property
    def client(self):
        if self._client is None:
            self._client = get_s3_client()
        return self._client

    def get(self, key: str) -> bytes:
        if not key:
            raise StorageNotFound(self.bucket, key)
        logger.info(f"Downloading {self.bucket}/{key}")
        try:
            body = self.s3.Object(self.bucket, key).get()["Body"].read()
        except ClientError as ce:
            if ce.response.get("Error", {}).get("Code") in _MISSING_CODES:
                raise StorageNotFound(self.bucket, key) from ce
            raise
        logger.info(f"Successfully downloaded file from S3: {self.bucket}/{key}")
        return body

    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> None:
        logger.info(f"Uploading {self.bucket}/{key}")
        self.s3.Bucket(self.bucket).put_object(
            Key=key,
            Body=data,
            ContentType=content_type or guess_content_type(key),
        )

    def presign_upload(self, key: str, expires_in: int = 300) -> str:
        return self.client.generate_presigned_url(
            "put_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in,
        )


class LocalAssetStore(AssetStore):
    """Directory-backed store laid out as <root>/<bucket>/<key>."""

    def __init__(self, bucket: str, root: str):
        super().__init__(bucket)
        self.root = os.path.abspath(root)

    def _path(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, self.bucket, key))
        if not path.startswith(os.path.join(self.root, self.bucket) + os.sep):
            raise StorageNotFound(self.bucket, key)
        return path

    def get(self, key: str) -> bytes:
        if not key:
            raise StorageNotFound(self.bucket, key)
        path = self._path(key)
        if not os.path.isfile(path):
            raise StorageNotFound(self.bucket, key)
        with open(path, "rb") as f:
            return f.read()

    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> None:
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        logger.info(f"Saved locally: {path}")

    def presign_upload(self, key: str, expires_in: int = 300) -> str:
        return "file://" + self._path(key)


def get_asset_store(bucket: Optional[str] = None) -> AssetStore:
    """Store for `bucket` (default: the brand bucket) on the configured backend."""
    bucket = bucket or brand_bucket()
    if storage_backend() == "local":
        return LocalAssetStore(bucket, local_storage_dir())
    return S3AssetStore(bucket)
