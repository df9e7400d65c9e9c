import os
import uuid
from pathlib import Path

from ...application.ports.storage_repo import StorageRepository
from ...exceptions import NotFoundError


class LocalStorageRepository(StorageRepository):
    """Local filesystem storage rooted at an already resolved directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, relative_path: str) -> Path:
        root = os.path.normpath(str(self.root))
        path = os.path.normpath(os.path.join(root, relative_path))
        # Keep lookups inside the storage root
        if os.path.commonpath([root, path]) != root:
            raise NotFoundError(f"Could not read file: {relative_path}")
        return Path(path)

    def ensure_dir(self, relative_dir: str) -> Path:
        path = self.path_for(relative_dir)
        os.makedirs(path, exist_ok=True)
        return path

    def exists(self, relative_path: str) -> bool:
        return self.path_for(relative_path).is_file()

    def is_readable(self, relative_path: str) -> bool:
        path = self.path_for(relative_path)
        return path.is_file() and os.access(path, os.R_OK)

    def read_bytes(self, relative_path: str) -> bytes:
        return self.path_for(relative_path).read_bytes()

    def write_bytes(self, relative_path: str, data: bytes) -> Path:
        path = self.path_for(relative_path)
        os.makedirs(path.parent, exist_ok=True)
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.part")
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except BaseException:
            if tmp_path.exists():
                tmp_path.unlink()
            raise
        return path
