import pytest
from botocore.exceptions import ClientError

from core.errors import StorageNotFound
from utils.storage import LocalAssetStore, S3AssetStore, generate_s3_url, get_asset_store, key_from_url


class _Body:
    def __init__(self, data):
        self.data = data

    def read(self):
        return self.data


class _Object:
    def __init__(self, objects, key):
        self.objects = objects
        self.key = key

    def get(self):
        if self.key not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}}, "GetObject")
        return {"Body": _Body(self.objects[self.key])}


class _Bucket:
    def __init__(self, objects, calls):
        self.objects = objects
        self.calls = calls

    def put_object(self, **kwargs):
        self.calls.append(kwargs)
        self.objects[kwargs["Key"]] = kwargs["Body"]


class FakeResource:
    def __init__(self):
        self.objects = {}
        self.calls = []

    def Object(self, bucket, key):
        return _Object(self.objects, key)

    def Bucket(self, name):
        return _Bucket(self.objects, self.calls)


class FakeClient:
    def __init__(self):
        self.calls = []

    def generate_presigned_url(self, op, Params, ExpiresIn):
        self.calls.append((op, Params, ExpiresIn))
        return f"https://{Params['Bucket']}.s3.amazonaws.com/{Params['Key']}?X-Amz-Expires={ExpiresIn}"


def test_url_shape_and_key_round_trip():
    url = generate_s3_url("p6-dne", "2024-01-01_00-00-00_000Z_processed_pets/a.jpg")
    assert url == "https://p6-dne.s3.amazonaws.com/2024-01-01_00-00-00_000Z_processed_pets/a.jpg"
    assert key_from_url(url) == "2024-01-01_00-00-00_000Z_processed_pets/a.jpg"


def test_s3_put_then_get():
    resource = FakeResource()
    store = S3AssetStore("bucket", resource=resource)
    store.put("x_original_a.png", b"png")
    assert store.get("x_original_a.png") == b"png"
    assert resource.calls[0]["ContentType"] == "image/png"


def test_s3_missing_key_raises_not_found():
    store = S3AssetStore("bucket", resource=FakeResource())
    with pytest.raises(StorageNotFound) as exc:
        store.get("nope.png")
    assert "not found" in str(exc.value)
    assert "bucket/nope.png" in str(exc.value)


def test_s3_other_errors_propagate():
    class Denied(FakeResource):
        def Object(self, bucket, key):
            class _O:
                def get(self):
                    raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "GetObject")
            return _O()

    with pytest.raises(ClientError):
        S3AssetStore("bucket", resource=Denied()).get("k")


def test_s3_empty_key_is_not_found():
    with pytest.raises(StorageNotFound):
        S3AssetStore("bucket", resource=FakeResource()).get(None)


def test_s3_presign_put():
    client = FakeClient()
    url = S3AssetStore("uploads", client=client).presign_upload("pets.zip", expires_in=120)
    assert client.calls == [("put_object", {"Bucket": "uploads", "Key": "pets.zip"}, 120)]
    assert url.startswith("https://uploads.s3.amazonaws.com/pets.zip")


def test_local_store_round_trip(tmp_path):
    store = LocalAssetStore("b", str(tmp_path))
    store.put("dir/a.png", b"1")
    assert store.get("dir/a.png") == b"1"
    with pytest.raises(StorageNotFound):
        store.get("missing.png")
    with pytest.raises(StorageNotFound):
        store.get("../escape.png")


def test_factory_follows_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("BRAND_IMAGE_BUCKET", "custom-bucket")
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("LOCAL_STORAGE_DIR", str(tmp_path))
    store = get_asset_store()
    assert isinstance(store, LocalAssetStore)
    assert store.bucket == "custom-bucket"

    monkeypatch.delenv("BRAND_IMAGE_BUCKET")
    monkeypatch.delenv("STORAGE_BACKEND")
    store = get_asset_store()
    assert isinstance(store, S3AssetStore)
    assert store.bucket == "p6-dne"
