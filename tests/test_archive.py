import zipfile

import pytest

from conftest import make_image, make_zip
from core.errors import UnsupportedFileType
from utils.archive import extract, is_archive


def test_single_image_passes_through():
    data = make_image(fmt="PNG")
    files = extract(data, "cat.png")
    assert len(files) == 1
    assert files[0].filename == "cat.png"
    assert files[0].content == data


@pytest.mark.parametrize("name", ["cat.jpg", "cat.jpeg", "cat.gif", "CAT.PNG"])
def test_supported_types_accepted(name):
    assert len(extract(b"whatever", name)) == 1


@pytest.mark.parametrize("name", ["doc.pdf", "notes.txt", "song.mp3"])
def test_disallowed_type_rejected(name):
    with pytest.raises(UnsupportedFileType) as exc:
        extract(b"data", name)
    assert "Unsupported file type" in str(exc.value)


def test_unknown_type_is_not_rejected():
    files = extract(b"raw", "upload-without-extension")
    assert [f.filename for f in files] == ["upload-without-extension"]


def test_zip_filters_entries_in_order():
    jpg = make_image(fmt="JPEG")
    png = make_image(fmt="PNG")
    gif = make_image(fmt="GIF")
    archive = make_zip([
        ("b.png", png),
        ("__MACOSX/._b.png", b"\x00\x05\x16\x07"),
        ("readme.txt", b"hello"),
        ("pets/a.jpg", jpg),
        ("pets/c.jpeg", jpg),
        ("d.gif", gif),
    ])
    files = extract(archive, "pets.zip")
    assert [f.filename for f in files] == ["b.png", "pets/a.jpg", "d.gif"]
    assert files[1].content == jpg


def test_zip_skips_directories(tmp_path):
    path = tmp_path / "dirs.zip"
    with zipfile.ZipFile(path, mode="w") as zf:
        zf.writestr(zipfile.ZipInfo("folder.png/"), b"")
        zf.writestr("folder.png/x.png", make_image())
    files = extract(path.read_bytes(), "dirs.zip")
    assert [f.filename for f in files] == ["folder.png/x.png"]


def test_empty_zip_yields_no_images():
    assert extract(make_zip([("notes.txt", b"x")]), "empty.zip") == []


def test_is_archive():
    assert is_archive("a.zip")
    assert not is_archive("a.ZIP.png")
    assert not is_archive(None)
