import io
import logging
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from ...application.ports.image_codec import ImageCodec
from ...exceptions import DecodeError, EncodeError

logger = logging.getLogger(__name__)

# Formats that cannot carry an alpha channel or a palette
_RGB_ONLY_FORMATS = {"JPEG", "BMP", "PPM"}

_PREFERRED_EXTENSIONS = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "GIF": ".gif",
    "WEBP": ".webp",
    "BMP": ".bmp",
    "TIFF": ".tiff",
}


class PillowImageCodec(ImageCodec):
    def __init__(self, jpeg_quality: int = 90) -> None:
        self.jpeg_quality = jpeg_quality

    def decode(self, data: bytes) -> Image.Image:
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            logger.warning(f"Could not decode image: {e}")
            raise DecodeError("Could not decode image data") from e
        return image

    def fit(self, image: Image.Image, width: int, height: int) -> Image.Image:
        """Scale into the ``width`` x ``height`` box, keeping the aspect ratio."""
        return ImageOps.contain(image, (width, height), Image.Resampling.LANCZOS)

    def resize(self, image: Image.Image, width: int, height: int) -> Image.Image:
        return image.resize((width, height), Image.Resampling.LANCZOS)

    def extension_for(self, image: Image.Image) -> Optional[str]:
        if not image.format:
            return None
        if image.format in _PREFERRED_EXTENSIONS:
            return _PREFERRED_EXTENSIONS[image.format]
        for ext, fmt in Image.registered_extensions().items():
            if fmt == image.format:
                return ext
        return None

    def encode(self, image: Image.Image, extension: str) -> bytes:
        fmt = Image.registered_extensions().get(extension.lower())
        if fmt is None:
            raise EncodeError(f"Unsupported image extension: '{extension}'")

        # Convert to RGB if necessary
        if fmt in _RGB_ONLY_FORMATS and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")

        params = {}
        if fmt == "JPEG":
            params = {"quality": self.jpeg_quality, "optimize": True}

        output = io.BytesIO()
        try:
            image.save(output, format=fmt, **params)
        except (OSError, ValueError, KeyError) as e:
            raise EncodeError(f"Could not encode image as {fmt}") from e
        return output.getvalue()
