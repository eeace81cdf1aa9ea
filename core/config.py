import os
import logging
from functools import lru_cache
from dotenv import load_dotenv
from botocore.client import Config as BotoConfig
import boto3

# Load .env from project root
try:
    load_dotenv(dotenv_path=os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".env")))
except Exception:
    try:
        load_dotenv()
    except Exception:
        pass

# Defaults used when the environment does not override them
DEFAULT_BUCKET = "p6-dne"
DEFAULT_EMAIL_SENDER = "your-sender-email@example.com"
DEFAULT_EMAIL_REGION = "us-east-1"
DEFAULT_FIT = "inside"

EMAIL_SUBJECT = "P6 LDAR Pet Image Branding Results: Success"

# Resize bounding box (pixels)
RESIZE_WIDTH = 1400
RESIZE_HEIGHT = 1400

# Overlay assets, pre-existing in the brand bucket
OVERLAY_KEY_WHITE = "processed_LDARBranding-white.png"
OVERLAY_KEY_BLACK = "processed_LDARBranding-black.png"

PACKAGE_FILENAME = "processed_files.zip"

# Logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
logger = logging.getLogger("ldar")

# Static dir helper
STATIC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "data", "storage"))


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name, "") or "").strip().strip('"').strip("'") or default


# Environment is read at call time so overrides apply without a restart
def brand_bucket() -> str:
    return _env("BRAND_IMAGE_BUCKET", DEFAULT_BUCKET)


def upload_bucket() -> str:
    return _env("BUCKET_NAME", brand_bucket())


def email_sender() -> str:
    return _env("EMAIL_SENDER", DEFAULT_EMAIL_SENDER)


def email_region() -> str:
    return _env("EMAIL_REGION", DEFAULT_EMAIL_REGION)


def resize_fit() -> str:
    return _env("FIT", DEFAULT_FIT).lower()


def presign_expires() -> int:
    try:
        return int(_env("PRESIGN_EXPIRES_SEC", "300"))
    except ValueError:
        return 300


def storage_backend() -> str:
    return _env("STORAGE_BACKEND", "s3").lower()


def local_storage_dir() -> str:
    return _env("LOCAL_STORAGE_DIR", STATIC_DIR)


def allowed_origins() -> list[str]:
    raw = _env("ALLOWED_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()]


SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")


# S3 / SES clients, built lazily so importing config never needs credentials
@lru_cache()
def get_s3_resource():
    return boto3.resource(
        "s3",
        config=BotoConfig(signature_version="s3v4"),
    )


@lru_cache()
def get_s3_client():
    return boto3.client(
        "s3",
        config=BotoConfig(signature_version="s3v4"),
    )


@lru_cache()
def get_ses_client(region: str):
    return boto3.client("ses", region_name=region)


# Headers sent on every API Gateway style response
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Allow-Methods": "GET,PUT,POST,DELETE,PATCH,OPTIONS",
}
