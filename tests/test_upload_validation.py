import pytest

from boxerconnect.core.upload_validation import detect_media_kind, validate_upload


@pytest.mark.parametrize("filename,content_type,expected", [
    ("photo.jpg", "image/jpeg", "image"),
    ("photo.bin", "image/png; charset=binary", "image"),
    ("clip.mp4", "video/mp4", "video"),
    ("clip.MOV", None, "video"),
    ("photo.webp", "application/octet-stream", "image"),
    ("notes.txt", "text/plain", None),
    ("noext", None, None),
])
def test_detect_media_kind(filename, content_type, expected):
    assert detect_media_kind(filename, content_type) == expected


def test_valid_photo():
    assert validate_upload("p.jpg", "image/jpeg", 1024) == ("image", None)


def test_unsupported_type():
    kind, err = validate_upload("doc.pdf", "application/pdf", 10)
    assert kind is None
    assert "Unsupported file type" in err


def test_kind_mismatch():
    kind, err = validate_upload("clip.mp4", "video/mp4", 10, expected="image")
    assert kind == "video"
    assert "Expected a image upload" in err


def test_empty_file():
    assert validate_upload("p.png", "image/png", 0)[1] == "File is empty"


def test_size_limits():
    _, err = validate_upload("p.png", "image/png", 5 * 1024 * 1024 + 1)
    assert err == "File too large. Max size for image: 5 MB"
    assert validate_upload("clip.mp4", "video/mp4", 50 * 1024 * 1024) == ("video", None)


@pytest.mark.parametrize("filename,content_type", [
    ("clip.mp4", "text/html"),
    ("photo.jpg", "application/javascript"),
    ("clip.webm", "image/svg+xml"),
])
def test_declared_type_off_allow_list_is_not_rescued_by_extension(filename, content_type):
    assert detect_media_kind(filename, content_type) is None
    kind, err = validate_upload(filename, content_type, 100, expected="video")
    assert kind is None
    assert "Unsupported file type" in err


def test_generic_declared_type_falls_back_to_extension():
    assert detect_media_kind("clip.mp4", "application/octet-stream") == "video"
    assert detect_media_kind("clip.mp4", "") == "video"
    assert detect_media_kind("clip.mp4", None) == "video"
