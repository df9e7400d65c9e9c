from pathlib import Path
from typing import Protocol


class StorageRepository(Protocol):
    """Filesystem-like store addressed by ``/``-separated relative paths."""

    def ensure_dir(self, relative_dir: str) -> Path:
        ...

    def exists(self, relative_path: str) -> bool:
        ...

    def is_readable(self, relative_path: str) -> bool:
        ...

    def path_for(self, relative_path: str) -> Path:
        ...

    def read_bytes(self, relative_path: str) -> bytes:
        ...

    def write_bytes(self, relative_path: str, data: bytes) -> Path:
        ...
