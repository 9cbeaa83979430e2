import io

import pytest
from PIL import Image

from boxerconnect.storage import LocalStorage, reset_storage_cache
from boxerconnect.storage.images import ImageTransform


def make_image(fmt="JPEG", size=(800, 600), mode="RGB", color=(200, 40, 40), **save_kwargs) -> bytes:
    """Encode a solid-colour test image."""
    image = Image.new(mode, size, color)
    buf = io.BytesIO()
    image.save(buf, format=fmt, **save_kwargs)
    return buf.getvalue()


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def jpeg_bytes():
    return make_image("JPEG", (800, 600))


@pytest.fixture
def transformer():
    return ImageTransform(max_width=400, max_height=400, quality=80, output_format="webp")


@pytest.fixture
def storage_root(tmp_path):
    # Not created up front: the driver must create it on first write
    return tmp_path / "uploads"


@pytest.fixture
def local_storage(storage_root, transformer):
    return LocalStorage(root=storage_root, base_url="/uploads", transformer=transformer)


@pytest.fixture(autouse=True)
def _fresh_storage_cache():
    reset_storage_cache()
    yield
    reset_storage_cache()
