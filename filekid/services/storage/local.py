"""
Local filesystem storage backend.

Implements StorageBackend over a directory on durable storage. The
ephemeral tempdir backend reuses everything here except naming.
"""

import asyncio
import os
import stat
from pathlib import Path
from typing import AsyncIterator, BinaryIO

import aiofiles
import aiofiles.os

from filekid.core.exceptions import (
    BadRequestError,
    InternalServerError,
    InvalidFileTypeError,
    NotAuthorizedError,
    NotFoundError,
    StorageIOError,
)
from filekid.core.logging import get_logger
from filekid.services.storage.base import (
    DirectoryEntry,
    EntryKind,
    FileRecord,
    StorageBackend,
)
from filekid.services.storage.guard import join_key, resolve_and_contain

logger = get_logger(__name__)


class LocalStorageBackend(StorageBackend):
    """Local filesystem storage implementation."""

    def __init__(self, root: str | Path) -> None:
        """
        Initialize local storage backend.

        Args:
            root: Root directory of the server path. It isn't created here,
                and it may be missing until ``available()`` says otherwise.
        """
        self.root = Path(root).resolve()

    def name(self) -> str:
        return f"local:{self.root}"

    async def _resolve(self, key: str) -> Path:
        """Resolve a key to a contained, canonical path."""
        # resolving follows symlinks, which hits the disk
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, resolve_and_contain, self.root, key)

    async def _symlink_path(self, key: str) -> Path | None:
        """Path of the symlink named by the key's last component, if it is one."""
        joined = join_key(self.root, key)
        if joined == self.root or joined.name == "..":
            return None

        # the link sits in a contained, canonical parent under its own name
        parent = await self._resolve(str(joined.parent.relative_to(self.root)))
        link = parent / joined.name
        if await aiofiles.os.path.islink(link):
            return link
        return None

    async def _stat_regular_file(self, target: Path, key: str) -> os.stat_result:
        """Stat a target and make sure it's a regular file."""
        try:
            result = await aiofiles.os.stat(target)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFoundError(
                message=f"Can't find {key}",
                details={"key": key},
            ) from e
        except OSError as e:
            logger.error("stat_failed", backend=self.name(), key=key, error=str(e))
            raise StorageIOError(
                message=f"Failed to read file: {e}",
                details={"key": key},
            ) from e

        if stat.S_ISDIR(result.st_mode):
            raise BadRequestError(
                message=f"{key} is a directory",
                details={"key": key},
            )
        if not stat.S_ISREG(result.st_mode):
            raise InvalidFileTypeError(
                message=f"{key} is not a regular file",
                details={"key": key},
            )
        return result

    async def available(self) -> bool:
        """Check the root exists on disk right now."""
        try:
            result = await aiofiles.os.stat(self.root)
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as e:
            raise StorageIOError(
                message=f"Failed to check {self.name()}: {e}",
                details={"root": str(self.root)},
            ) from e
        return stat.S_ISDIR(result.st_mode)

    async def exists(self, key: str) -> bool:
        if not key:
            return True

        try:
            target = await self._resolve(key)
        except NotAuthorizedError:
            return False

        logger.debug(
            "checking_exists",
            backend=self.name(),
            key=key,
            target=str(target),
        )
        return await aiofiles.os.path.exists(target)

    async def get_metadata(self, key: str) -> FileRecord:
        target = await self._resolve(key)

        if not target.name:
            raise InternalServerError(
                message="Couldn't get filename",
                details={"key": key},
            )

        size: int | None
        try:
            result = await aiofiles.os.stat(target)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFoundError(
                message=f"Can't find {key}",
                details={"key": key},
            ) from e
        except OSError as e:
            # the file may be there but unreadable, the size is just unknown
            logger.warning(
                "file_size_unknown",
                backend=self.name(),
                key=key,
                error=str(e),
            )
            size = None
        else:
            size = result.st_size

        return FileRecord(filename=target.name, parent_path=target.parent, size=size)

    async def read(self, key: str) -> bytes:
        target = await self._resolve(key)
        await self._stat_regular_file(target, key)

        try:
            async with aiofiles.open(target, "rb") as f:
                return await f.read()
        except FileNotFoundError as e:
            raise NotFoundError(
                message=f"Can't find {key}",
                details={"key": key},
            ) from e
        except OSError as e:
            logger.error("read_failed", backend=self.name(), key=key, error=str(e))
            raise StorageIOError(
                message=f"Failed to read file: {e}",
                details={"key": key},
            ) from e

    async def stream(self, key: str, chunk_size: int = 8192) -> AsyncIterator[bytes]:
        """Stream file content in chunks."""
        target = await self._resolve(key)
        await self._stat_regular_file(target, key)

        try:
            async with aiofiles.open(target, "rb") as f:
                while chunk := await f.read(chunk_size):
                    yield chunk
        except FileNotFoundError as e:
            raise NotFoundError(
                message=f"Can't find {key}",
                details={"key": key},
            ) from e
        except OSError as e:
            logger.error("stream_failed", backend=self.name(), key=key, error=str(e))
            raise StorageIOError(
                message=f"Failed to stream file: {e}",
                details={"key": key},
            ) from e

    async def write(
        self,
        key: str,
        data: bytes | BinaryIO,
        create_parents: bool = False,
    ) -> None:
        # the full target is checked, the filename itself could hold a traversal
        target = await self._resolve(key)

        try:
            if create_parents:
                await aiofiles.os.makedirs(target.parent, exist_ok=True)

            async with aiofiles.open(target, "wb") as f:
                if isinstance(data, bytes):
                    await f.write(data)
                else:
                    while chunk := data.read(8192):
                        await f.write(chunk)
        except IsADirectoryError as e:
            raise BadRequestError(
                message=f"{key} is a directory",
                details={"key": key},
            ) from e
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFoundError(
                message=f"Parent directory of {key} doesn't exist",
                details={"key": key},
            ) from e
        except OSError as e:
            logger.error("write_failed", backend=self.name(), key=key, error=str(e))
            raise StorageIOError(
                message=f"Failed to write file: {e}",
                details={"key": key},
            ) from e

        logger.debug("file_written", backend=self.name(), key=key, target=str(target))

    async def delete(self, key: str) -> None:
        target = await self._resolve(key)

        # a symlink key removes the link, never the file it points to
        link = await self._symlink_path(key)
        if link is None and await aiofiles.os.path.isdir(target):
            raise BadRequestError(
                message=f"{key} is a directory, deleting directories is not supported",
                details={"key": key},
            )

        try:
            await aiofiles.os.remove(link or target)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFoundError(
                message=f"Can't find {key}",
                details={"key": key},
            ) from e
        except OSError as e:
            logger.error("delete_failed", backend=self.name(), key=key, error=str(e))
            raise StorageIOError(
                message=f"Failed to delete file: {e}",
                details={"key": key},
            ) from e

        logger.debug("file_deleted", backend=self.name(), key=key)

    async def list_dir(self, key: str | None = None) -> list[DirectoryEntry]:
        key = key or ""
        target = await self._resolve(key)

        if not await aiofiles.os.path.isdir(target):
            raise BadRequestError(
                message=f"{key} is not a directory",
                details={"key": key},
            )

        loop = asyncio.get_running_loop()
        entries = await loop.run_in_executor(None, self._scan, target, key)

        logger.debug(
            "directory_listed",
            backend=self.name(),
            key=key,
            entries=len(entries),
        )
        return entries

    def _scan(self, target: Path, key: str) -> list[DirectoryEntry]:
        """Read a directory, building entries relative to the caller's key."""
        prefix = key.rstrip("/")
        entries: list[DirectoryEntry] = []

        try:
            with os.scandir(target) as it:
                for entry in it:
                    try:
                        entry.name.encode("utf-8")
                    except UnicodeEncodeError as e:
                        logger.error(
                            "invalid_filename",
                            backend=self.name(),
                            directory=str(target),
                            filename=repr(entry.name),
                        )
                        raise InternalServerError(
                            message=f"Invalid filename {entry.name!r}",
                            details={"key": key},
                        ) from e

                    kind = EntryKind.DIRECTORY if entry.is_dir() else EntryKind.FILE
                    entries.append(
                        DirectoryEntry(
                            filename=entry.name,
                            full_relative_path=f"{prefix}/{entry.name}".lstrip("/"),
                            kind=kind,
                        )
                    )
        except FileNotFoundError as e:
            raise NotFoundError(
                message=f"Can't find {key}",
                details={"key": key},
            ) from e
        except NotADirectoryError as e:
            raise BadRequestError(
                message=f"{key} is not a directory",
                details={"key": key},
            ) from e
        except OSError as e:
            logger.error(
                "list_failed",
                backend=self.name(),
                directory=str(target),
                error=str(e),
            )
            raise StorageIOError(
                message=f"Failed to read directory: {e}",
                details={"key": key},
            ) from e

        return entries

    async def is_file(self, key: str) -> bool:
        try:
            target = await self._resolve(key)
        except NotAuthorizedError:
            return False
        return await aiofiles.os.path.isfile(target)

    async def is_dir(self, key: str) -> bool:
        try:
            target = await self._resolve(key)
        except NotAuthorizedError:
            return False
        return await aiofiles.os.path.isdir(target)
