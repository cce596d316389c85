"""Storage service abstraction for local and ephemeral directories."""

from filekid.services.storage.base import (
    DirectoryEntry,
    EntryKind,
    FileRecord,
    StorageBackend,
)
from filekid.services.storage.factory import build_backend, get_backend, startup_check
from filekid.services.storage.guard import resolve_and_contain
from filekid.services.storage.local import LocalStorageBackend
from filekid.services.storage.tempdir import EphemeralDirectory, TempDirStorageBackend

__all__ = [
    "DirectoryEntry",
    "EntryKind",
    "EphemeralDirectory",
    "FileRecord",
    "LocalStorageBackend",
    "StorageBackend",
    "TempDirStorageBackend",
    "build_backend",
    "get_backend",
    "resolve_and_contain",
    "startup_check",
]
