import os

import pytest

from image_server.exceptions import NotFoundError
from image_server.infrastructure.storage import local_storage
from image_server.infrastructure.storage.local_storage import LocalStorageRepository


def test_write_bytes_replaces_atomically(tmp_path):
    repo = LocalStorageRepository(tmp_path)
    repo.write_bytes("2024/02/03/a.png", b"one")
    repo.write_bytes("2024/02/03/a.png", b"two")
    assert (tmp_path / "2024" / "02" / "03" / "a.png").read_bytes() == b"two"
    assert os.listdir(tmp_path / "2024" / "02" / "03") == ["a.png"]


def test_failed_write_leaves_no_partial_file(tmp_path, monkeypatch):
    repo = LocalStorageRepository(tmp_path)

    def fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(local_storage.os, "replace", fail_replace)

    with pytest.raises(OSError):
        repo.write_bytes("2024/02/03/a.png", b"data")
    assert os.listdir(tmp_path / "2024" / "02" / "03") == []


def test_paths_outside_root_are_not_found(tmp_path):
    repo = LocalStorageRepository(tmp_path / "root")
    with pytest.raises(NotFoundError):
        repo.path_for("../elsewhere/a.png")
