"""Image transform: orientation, bounds, format convergence, metadata removal."""

import io
from unittest.mock import patch

import pytest
from PIL import Image

from boxerconnect.storage.errors import ProcessingError
from boxerconnect.storage.images import ImageTransform

ORIENTATION = 0x0112
MAKE = 0x010F
DATETIME = 0x0132


def _open(data):
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


@pytest.mark.parametrize("size,expected", [
    ((800, 600), (400, 300)),
    ((300, 1200), (100, 400)),
    ((4000, 4000), (400, 400)),
])
def test_large_images_fit_inside_bounds(transformer, image_factory, size, expected):
    out = _open(transformer.transform(image_factory("JPEG", size)))
    assert out.size == expected
    assert out.width <= 400 and out.height <= 400


def test_small_images_are_not_upscaled(transformer, image_factory):
    out = _open(transformer.transform(image_factory("PNG", (120, 80))))
    assert out.size == (120, 80)


@pytest.mark.parametrize("fmt,mode,color", [
    ("JPEG", "RGB", (10, 20, 30)),
    ("PNG", "RGBA", (10, 20, 30, 128)),
    ("GIF", "P", 5),
    ("WEBP", "RGB", (10, 20, 30)),
    ("PNG", "L", 90),
])
def test_every_input_format_converges_to_output_format(transformer, image_factory, fmt, mode, color):
    out = _open(transformer.transform(image_factory(fmt, (64, 48), mode=mode, color=color)))
    assert out.format == "WEBP"
    assert out.size == (64, 48)


def test_exif_orientation_is_applied(transformer):
    # Stored 200x100, orientation 6 means "rotate 90 degrees clockwise to display"
    exif = Image.Exif()
    exif[ORIENTATION] = 6
    buf = io.BytesIO()
    Image.new("RGB", (200, 100), (0, 0, 255)).save(buf, format="JPEG", exif=exif.tobytes())

    out = _open(transformer.transform(buf.getvalue()))
    assert out.size == (100, 200)


def test_metadata_is_stripped(transformer):
    exif = Image.Exif()
    exif[MAKE] = "PhoneMaker"
    exif[DATETIME] = "2024:01:01 10:00:00"
    buf = io.BytesIO()
    Image.new("RGB", (50, 50), (1, 2, 3)).save(
        buf, format="JPEG", exif=exif.tobytes(), icc_profile=b"not-a-real-icc-profile"
    )
    source = _open(buf.getvalue())
    assert len(source.getexif()) > 0

    out = _open(transformer.transform(buf.getvalue()))
    assert len(out.getexif()) == 0
    assert not out.info.get("exif")
    assert not out.info.get("icc_profile")
    assert not out.info.get("xmp")


def test_output_is_deterministic(transformer, jpeg_bytes):
    assert transformer.transform(jpeg_bytes) == transformer.transform(jpeg_bytes)


def test_jpeg_output_drops_alpha(image_factory):
    transform = ImageTransform(max_width=100, max_height=100, quality=70, output_format="jpeg")
    out = _open(transform.transform(image_factory("PNG", (300, 150), mode="RGBA", color=(1, 2, 3, 4))))
    assert out.format == "JPEG"
    assert out.mode == "RGB"
    assert out.size == (100, 50)
    assert transform.mime_type == "image/jpeg"
    assert transform.extension == "jpeg"


def test_output_format_properties(transformer):
    assert transformer.mime_type == "image/webp"
    assert transformer.extension == "webp"


def test_unknown_output_format_is_rejected():
    with pytest.raises(ValueError):
        ImageTransform(output_format="bmp")


@pytest.mark.parametrize("data", [b"", b"definitely not an image", b"\x89PNG\r\n\x1a\n" + b"\x00" * 16])
def test_undecodable_input_raises_processing_error(transformer, data):
    with pytest.raises(ProcessingError):
        transformer.transform(data)


def test_truncated_image_raises_processing_error(transformer, image_factory):
    data = image_factory("PNG", (300, 300), color=(10, 200, 30))
    with pytest.raises(ProcessingError):
        transformer.transform(data[: len(data) // 2])


def test_encoder_failure_raises_processing_error(transformer, jpeg_bytes):
    with patch.object(Image.Image, "save", side_effect=OSError("encoding error 5")):
        with pytest.raises(ProcessingError, match="encoding error"):
            transformer.transform(jpeg_bytes)
