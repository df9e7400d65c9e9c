"""Deterministic file names and date partitions for stored images.

Everything here is pure: given the same inputs the same names come back,
which is what lets a caller re-derive any variant from the reference that
``store`` returned.
"""
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple


@dataclass(frozen=True)
class ImageVariant:
    tag: str
    width: int
    height: int


EAGER_VARIANTS: Tuple[ImageVariant, ...] = (
    ImageVariant("thumb", 150, 150),
    ImageVariant("small", 320, 240),
    ImageVariant("medium", 640, 480),
    ImageVariant("large", 1024, 768),
)


def new_image_id() -> str:
    return str(uuid.uuid4())


def date_partition(day: date) -> str:
    return day.strftime("%Y/%m/%d")


def partition_from_parts(year: str, month: str, day: str) -> str:
    return f"{year}/{month}/{day}"


def split_extension(filename: Optional[str]) -> Tuple[str, str]:
    """Split ``filename`` at its last dot, keeping the dot on the extension.

    A missing filename, or one without a dot, gives an empty extension.
    """
    if not filename or "." not in filename:
        return filename or "", ""
    idx = filename.rindex(".")
    extension = filename[idx:]
    # A trailing dot carries no format
    if extension == ".":
        extension = ""
    return filename[:idx], extension


def variant_name(image_id: str, extension: str, tag: str) -> str:
    return f"{image_id}_{tag}{extension}"


def resized_name(filename: str, width: int, height: int) -> str:
    base, extension = split_extension(filename)
    return f"{base}_{width}x{height}{extension}"


def build_reference(partition: str, image_id: str, extension: str) -> str:
    return f"{partition}/{image_id}{extension}"
