import io
from datetime import date

import pytest
from PIL import Image

from image_server.application.services.image_service import ImageService
from image_server.infrastructure.imaging.pillow_codec import PillowImageCodec
from image_server.infrastructure.storage.local_storage import LocalStorageRepository


FIXED_DAY = date(2024, 2, 3)


def make_image_bytes(size=(800, 600), fmt="PNG", color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def storage_root(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def service(storage_root):
    return ImageService(
        storage_repo=LocalStorageRepository(storage_root),
        codec=PillowImageCodec(),
        today=lambda: FIXED_DAY,
    )
