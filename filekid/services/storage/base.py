"""
Abstract base class for storage backends.

Provides a consistent interface for every server path kind. Keys are
untrusted and relative to the backend root; implementations must run
them through the path guard on every call.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import AsyncIterator, BinaryIO


@dataclass
class FileRecord:
    """Metadata about a located file."""

    filename: str
    parent_path: Path
    size: int | None = None  # None when the size couldn't be read

    @property
    def path(self) -> Path:
        """Get the full path of the file."""
        return self.parent_path / self.filename


class EntryKind(str, Enum):
    """Kind of a directory listing entry."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class DirectoryEntry:
    """A single child returned by a directory listing."""

    filename: str
    full_relative_path: str  # relative to the backend root, no leading "/"
    kind: EntryKind

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    root: Path

    @abstractmethod
    def name(self) -> str:
        """
        Human readable identifier, including the backend kind and root.
        """
        ...

    @abstractmethod
    async def available(self) -> bool:
        """
        Check that the backend root is present and usable.

        Returns:
            False if the root is absent.

        Raises:
            StorageIOError: If it can't be determined whether the root exists.
        """
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """
        Check if a key exists within the scope of this backend.

        Args:
            key: Relative key. The empty key is the root and always exists.

        Returns:
            True if the key is inside the root and the target exists.
        """
        ...

    @abstractmethod
    async def get_metadata(self, key: str) -> FileRecord:
        """
        Look up a file without reading its content.

        Args:
            key: Relative key of the file.

        Returns:
            FileRecord for the target. ``size`` is None if it couldn't be read.

        Raises:
            NotAuthorizedError: If the key is outside the root.
            NotFoundError: If the target doesn't exist.
        """
        ...

    @abstractmethod
    async def read(self, key: str) -> bytes:
        """
        Read a whole file.

        Args:
            key: Relative key of the file.

        Returns:
            File content as bytes.

        Raises:
            NotAuthorizedError: If the key is outside the root.
            NotFoundError: If the file doesn't exist.
            BadRequestError: If the target is a directory.
            StorageIOError: If reading fails.
        """
        ...

    @abstractmethod
    def stream(self, key: str, chunk_size: int = 8192) -> AsyncIterator[bytes]:
        """
        Stream a file in chunks.

        Same errors as ``read``, raised on first iteration.
        """
        ...

    @abstractmethod
    async def write(
        self,
        key: str,
        data: bytes | BinaryIO,
        create_parents: bool = False,
    ) -> None:
        """
        Create or overwrite a file.

        Args:
            key: Relative key of the file, including the filename.
            data: File content as bytes or file-like object.
            create_parents: Create missing parent directories.

        Raises:
            NotAuthorizedError: If the key is outside the root.
            NotFoundError: If the parent directory doesn't exist.
            BadRequestError: If the target is a directory.
            StorageIOError: If writing fails.
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Delete a single file. Directories are not deleted.

        Raises:
            NotAuthorizedError: If the key is outside the root.
            NotFoundError: If the file doesn't exist.
            BadRequestError: If the target is a directory.
            StorageIOError: If deleting fails.
        """
        ...

    @abstractmethod
    async def list_dir(self, key: str | None = None) -> list[DirectoryEntry]:
        """
        List the immediate children of a directory.

        Args:
            key: Relative key of the directory. None or "" lists the root.

        Returns:
            Entries in no particular order.

        Raises:
            NotAuthorizedError: If the key is outside the root.
            BadRequestError: If the target is not a directory.
            StorageIOError: If reading the directory fails.
        """
        ...

    @abstractmethod
    async def is_file(self, key: str) -> bool:
        """True if the key is inside the root and is a regular file."""
        ...

    @abstractmethod
    async def is_dir(self, key: str) -> bool:
        """True if the key is inside the root and is a directory."""
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name()}>"
