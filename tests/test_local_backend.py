"""
Local filesystem backend tests.
"""

import os
import shutil
from pathlib import Path

import aiofiles.os
import pytest

from filekid.core.exceptions import NotAuthorizedError
from filekid.services.storage import LocalStorageBackend


@pytest.mark.asyncio
async def test_localfs_name(local_backend: LocalStorageBackend, root: Path):
    assert local_backend.name() == f"local:{root}"
    assert await local_backend.available()


def test_root_is_canonical(tmp_path: Path):
    (tmp_path / "real").mkdir()
    os.symlink(tmp_path / "real", tmp_path / "link")

    backend = LocalStorageBackend(tmp_path / "link" / ".." / "link")

    assert backend.root == (tmp_path / "real").resolve()


@pytest.mark.asyncio
async def test_available_after_root_removed(local_backend: LocalStorageBackend, root: Path):
    """A root that disappears reads as unavailable, not as an error."""
    shutil.rmtree(root)

    assert not await local_backend.available()


@pytest.mark.asyncio
async def test_available_when_root_is_a_file(tmp_path: Path):
    target = tmp_path / "not-a-dir"
    target.write_bytes(b"")

    assert not await LocalStorageBackend(target).available()


@pytest.mark.asyncio
async def test_metadata_size_unknown(
    local_backend: LocalStorageBackend, root: Path, monkeypatch: pytest.MonkeyPatch
):
    """A failed stat gives an unknown size instead of failing the call."""
    (root / "test.txt").write_bytes(b"Hello, world!")

    async def denied(*args, **kwargs):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(aiofiles.os, "stat", denied)

    record = await local_backend.get_metadata("test.txt")

    assert record.filename == "test.txt"
    assert record.size is None


@pytest.mark.asyncio
async def test_exists_through_escaping_symlink(
    local_backend: LocalStorageBackend, root: Path, outside: Path
):
    os.symlink(outside, root / "link")

    assert (root / "link" / "secret.txt").exists()
    assert not await local_backend.exists("link/secret.txt")

    with pytest.raises(NotAuthorizedError):
        await local_backend.read("link/secret.txt")


@pytest.mark.asyncio
async def test_write_through_dangling_symlink(
    local_backend: LocalStorageBackend, root: Path, outside: Path
):
    """Writing through a link to a missing file outside root is refused."""
    os.symlink(outside / "planted.txt", root / "planted.txt")

    with pytest.raises(NotAuthorizedError):
        await local_backend.write("planted.txt", b"payload")

    assert not (outside / "planted.txt").exists()


@pytest.mark.asyncio
async def test_root_removed_while_in_use(local_backend: LocalStorageBackend, root: Path):
    await local_backend.write("test.txt", b"Hello, world!")
    shutil.rmtree(root)

    assert await local_backend.exists("")
    assert not await local_backend.exists("test.txt")


@pytest.mark.asyncio
async def test_relative_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    (tmp_path / "files").mkdir()
    monkeypatch.chdir(tmp_path)

    backend = LocalStorageBackend("files")
    await backend.write("test.txt", b"relative")

    assert backend.root == (tmp_path / "files").resolve()
    assert (tmp_path / "files" / "test.txt").read_bytes() == b"relative"
