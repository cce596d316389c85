"""
Storage backend factory.

Creates the storage backend for a server path descriptor. New backend
kinds are added here: one branch plus a StorageBackend subclass.
"""

from filekid.core.config import (
    BackendKind,
    FileKidConfig,
    ServerPathConfig,
    SharedConfigState,
)
from filekid.core.exceptions import ConfigurationError, NotFoundError
from filekid.core.logging import get_logger
from filekid.services.storage.base import StorageBackend
from filekid.services.storage.local import LocalStorageBackend
from filekid.services.storage.tempdir import TempDirStorageBackend

logger = get_logger(__name__)


def build_backend(descriptor: ServerPathConfig) -> StorageBackend:
    """
    Build the storage backend for a server path.

    Args:
        descriptor: Server path descriptor.

    Returns:
        Configured StorageBackend instance.

    Raises:
        ConfigurationError: If the descriptor is invalid or, for a tempdir,
            hasn't been materialized yet.
    """
    if descriptor.kind is BackendKind.LOCAL:
        if descriptor.path is None:
            raise ConfigurationError(
                message="Local server paths require a path",
                details={"type": descriptor.kind.value},
            )

        try:
            return LocalStorageBackend(root=descriptor.path)
        except (OSError, RuntimeError) as e:
            raise ConfigurationError(
                message=f"Failed to resolve {descriptor.path}: {e}",
                details={"type": descriptor.kind.value, "path": str(descriptor.path)},
            ) from e

    elif descriptor.kind is BackendKind.TEMPDIR:
        if descriptor.scratch is None:
            raise ConfigurationError(
                message="Temporary directory hasn't been created for this server path",
                details={"type": descriptor.kind.value},
            )

        return TempDirStorageBackend(scratch=descriptor.scratch)

    raise ConfigurationError(f"Unknown storage backend: {descriptor.kind}")


def get_backend(state: SharedConfigState, server_path: str) -> StorageBackend:
    """
    Build the storage backend for a named server path.

    The descriptor is read from a snapshot, the config lock isn't held
    while the backend is built.

    Raises:
        NotFoundError: If the server path isn't configured.
        ConfigurationError: If its descriptor is invalid.
    """
    descriptor = state.server_path(server_path)
    return build_backend(descriptor)


async def startup_check(config: FileKidConfig) -> None:
    """
    Check that every local server path is online.

    Tempdir server paths are skipped, their directory is created on demand.

    Raises:
        NotFoundError: If a local server path's root isn't available.
        ConfigurationError: If a descriptor is invalid.
    """
    for name, descriptor in config.server_paths.items():
        if descriptor.kind is BackendKind.TEMPDIR:
            continue

        backend = build_backend(descriptor)
        if not await backend.available():
            logger.error("server_path_offline", server_path=name, backend=backend.name())
            raise NotFoundError(
                message=f"Server path {name} ({backend.name()}) is not online",
                details={"server_path": name},
            )

        logger.info("server_path_online", server_path=name, backend=backend.name())
