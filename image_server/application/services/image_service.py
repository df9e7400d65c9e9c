import logging
import mimetypes
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from ..naming import (
    EAGER_VARIANTS,
    build_reference,
    date_partition,
    new_image_id,
    resized_name,
    split_extension,
    variant_name,
)
from ..ports.image_codec import ImageCodec
from ..ports.storage_repo import StorageRepository
from ..single_flight import SingleFlight
from ...exceptions import (
    EmptyInputError,
    GenerationError,
    ImageStoreError,
    NotFoundError,
    OriginalNotFoundError,
    StorageError,
)

logger = logging.getLogger(__name__)


@dataclass
class ImageResource:
    path: Path
    filename: str

    @property
    def media_type(self) -> str:
        return mimetypes.guess_type(self.filename)[0] or "application/octet-stream"

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


@dataclass
class BatchUploadResult:
    original_filename: Optional[str]
    url: Optional[str] = None
    success: bool = False
    error: Optional[str] = None


@dataclass
class ImageService:
    storage_repo: StorageRepository
    codec: ImageCodec
    default_extension: str = ".png"
    today: Callable[[], date] = date.today
    flights: SingleFlight = field(default_factory=SingleFlight)

    def store(self, data: bytes, original_filename: Optional[str]) -> str:
        """Persist an upload plus its eager variants and return its reference.

        The reference is ``YYYY/MM/DD/<uuid><ext>``; every variant is derived
        from it later by name. Files written before a failure are kept.
        """
        if not data:
            raise EmptyInputError("Failed to store empty file.")

        _, extension = split_extension(original_filename)
        image_id = new_image_id()
        partition = date_partition(self.today())

        try:
            self.storage_repo.ensure_dir(partition)
        except OSError as e:
            raise StorageError("Failed to store file.") from e

        image = self.codec.decode(data)
        if not extension:
            extension = self.codec.extension_for(image) or self.default_extension
            logger.info(f"Upload '{original_filename}' has no extension, using '{extension}'")

        original_ref = build_reference(partition, image_id, extension)
        self._write(original_ref, self.codec.encode(image, extension))
        logger.info(f"Stored original image: {original_ref}")

        for variant in EAGER_VARIANTS:
            scaled = self.codec.fit(image, variant.width, variant.height)
            name = variant_name(image_id, extension, variant.tag)
            self._write(f"{partition}/{name}", self.codec.encode(scaled, extension))

        return original_ref

    def store_batch(self, files: Iterable[Tuple[bytes, Optional[str]]]) -> List[BatchUploadResult]:
        results = []
        for data, filename in files:
            if not data:
                results.append(BatchUploadResult(filename, error="File is empty"))
                continue
            try:
                reference = self.store(data, filename)
            except ImageStoreError as e:
                logger.error(f"Batch upload failed for '{filename}': {e.message}", exc_info=e)
                results.append(BatchUploadResult(filename, error=e.message))
            except Exception:
                logger.exception(f"Unexpected error storing '{filename}'")
                results.append(BatchUploadResult(filename, error="An unexpected error occurred"))
            else:
                results.append(BatchUploadResult(filename, url=reference, success=True))
        return results

    def load(self, partition: str, filename: str, width: Optional[int] = None, height: Optional[int] = None) -> ImageResource:
        """Return the original, or a ``width`` x ``height`` variant of it.

        Both dimensions are needed for a resize; with only one of them the
        original is returned. Missing variants are generated once and then
        served from disk.
        """
        original_ref = f"{partition}/{filename}"

        if width is None or height is None:
            if not self.storage_repo.is_readable(original_ref):
                raise NotFoundError(f"Could not read file: {filename}")
            logger.info(f"Loading original image: {original_ref}")
            return self._resource(original_ref)

        resized_ref = f"{partition}/{resized_name(filename, width, height)}"
        if self.storage_repo.exists(resized_ref):
            logger.info(f"Loading pre-resized image: {resized_ref}")
            return self._resource(resized_ref)

        self.flights.do(
            self.storage_repo.path_for(resized_ref),
            lambda: self._generate(original_ref, filename, resized_ref, width, height),
        )
        return self._resource(resized_ref)

    def _generate(self, original_ref: str, filename: str, resized_ref: str, width: int, height: int) -> None:
        # Another flight may have finished between the cache check and now
        if self.storage_repo.exists(resized_ref):
            return
        if not self.storage_repo.is_readable(original_ref):
            raise OriginalNotFoundError(f"Could not find original file for resizing: {filename}")

        logger.info(f"Dynamically resizing image to {width}x{height}")
        _, extension = split_extension(filename)
        try:
            image = self.codec.decode(self.storage_repo.read_bytes(original_ref))
            resized = self.codec.resize(image, width, height)
            extension = extension or self.codec.extension_for(image) or self.default_extension
            self.storage_repo.write_bytes(resized_ref, self.codec.encode(resized, extension))
        except (StorageError, OSError, ValueError, OverflowError, MemoryError) as e:
            raise GenerationError(f"Could not create resized image for file: {filename}") from e
        logger.info(f"Saved dynamically resized image: {resized_ref}")

    def _write(self, relative_path: str, data: bytes) -> None:
        try:
            self.storage_repo.write_bytes(relative_path, data)
        except OSError as e:
            raise StorageError(f"Failed to store file: {relative_path}") from e

    def _resource(self, relative_path: str) -> ImageResource:
        path = self.storage_repo.path_for(relative_path)
        return ImageResource(path=path, filename=path.name)
