import re
from datetime import datetime, timezone

import pytest

from utils.keys import generate_key


def test_layout():
    now = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)
    assert generate_key("cat.png", "original", now=now) == "2024-05-01_12-30-45_123Z_original_cat.png"


def test_millis_are_zero_padded():
    now = datetime(2024, 1, 2, 3, 4, 5, 7000, tzinfo=timezone.utc)
    assert generate_key("a.jpg", "processed", now=now) == "2024-01-02_03-04-05_007Z_processed_a.jpg"


def test_keeps_subdirectories():
    now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert generate_key("pets/a.jpg", "processed", now=now).endswith("_processed_pets/a.jpg")


def test_wall_clock_default():
    key = generate_key("processed_files.zip", "package")
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}_\d{3}Z_package_processed_files\.zip", key)


def test_unknown_role():
    with pytest.raises(ValueError):
        generate_key("a.png", "thumbnail")
