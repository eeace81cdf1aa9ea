import io
import zipfile

import pytest
from PIL import Image
from fastapi.testclient import TestClient

from core.config import OVERLAY_KEY_BLACK, OVERLAY_KEY_WHITE
from utils.emailing import ResultsMailer
from utils.storage import LocalAssetStore
from utils.watermark import OverlayCache

BUCKET = "test-bucket"
OVERLAY_SIZE = (200, 100)


def make_image(size=(100, 80), color=(240, 240, 240), fmt="PNG", mode="RGB") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


def make_zip(entries) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, mode="w") as zf:
        for name, data in entries:
            zf.writestr(name, data)
    return buf.getvalue()


class RecordingMailer(ResultsMailer):
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def deliver(self, to_addr, html):
        if self.fail:
            raise RuntimeError("SES unavailable")
        self.sent.append((to_addr, html))


@pytest.fixture
def store(tmp_path):
    s = LocalAssetStore(BUCKET, str(tmp_path / "storage"))
    # White overlay goes on dark images, black on light ones
    s.put(OVERLAY_KEY_WHITE, make_image(OVERLAY_SIZE, (255, 255, 255, 255), mode="RGBA"))
    s.put(OVERLAY_KEY_BLACK, make_image(OVERLAY_SIZE, (0, 0, 0, 255), mode="RGBA"))
    return s


@pytest.fixture
def overlays(store):
    return OverlayCache(store)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def client(store, overlays, mailer):
    from main import app
    from routers.brand import get_brand_store, get_mailer, get_overlay_cache
    from routers.presign import get_upload_store

    app.dependency_overrides[get_brand_store] = lambda: store
    app.dependency_overrides[get_upload_store] = lambda: store
    app.dependency_overrides[get_overlay_cache] = lambda: overlays
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
