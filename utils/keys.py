from datetime import datetime, timezone
from typing import Optional

from core.config import logger

ROLES = ("original", "processed", "package")


def generate_key(filename: str, role: str, now: Optional[datetime] = None) -> str:
    """Storage key <date>_<time>_<millis>Z_<role>_<filename>, e.g.

    2024-05-01_12-30-45_123Z_original_cat.png
    """
    if role not in ROLES:
        raise ValueError(f"unknown key role: {role}")
    now = now or datetime.now(timezone.utc)
    now = now.astimezone(timezone.utc)
    stamp = f"{now.strftime('%Y-%m-%d')}_{now.strftime('%H-%M-%S')}_{now.microsecond // 1000:03d}Z"
    key = f"{stamp}_{role}_{filename}"
    logger.info(f"Generated key: {key}")
    return key
