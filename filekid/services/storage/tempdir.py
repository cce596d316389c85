"""
Ephemeral scratch directory storage backend.

Only works while the process is up: the directory is created when the
configuration is resolved and removed once the last handle to it goes
away, or at interpreter exit. Nothing stored here survives a restart.
"""

import tempfile
from pathlib import Path

from filekid.core.exceptions import ConfigurationError
from filekid.core.logging import get_logger
from filekid.services.storage.local import LocalStorageBackend

logger = get_logger(__name__)

DEFAULT_PREFIX = "filekid-"


class EphemeralDirectory:
    """
    Owning handle for a process-scoped scratch directory.

    Handles are not shared by path: every backend built from the same
    descriptor keeps a reference to the same handle, and the directory is
    removed when the last reference is garbage collected.
    """

    def __init__(
        self,
        parent: str | Path | None = None,
        prefix: str = DEFAULT_PREFIX,
    ) -> None:
        """
        Create the scratch directory.

        Args:
            parent: Directory to create it in, created if missing. Defaults
                to the system temp directory.
            prefix: Name prefix of the scratch directory.

        Raises:
            ConfigurationError: If the directory can't be created.
        """
        try:
            if parent is not None:
                Path(parent).mkdir(parents=True, exist_ok=True)
            self._tempdir = tempfile.TemporaryDirectory(
                prefix=prefix,
                dir=parent,
                ignore_cleanup_errors=True,
            )
        except OSError as e:
            raise ConfigurationError(
                message=f"Failed to create temporary directory: {e}",
                details={"parent": str(parent) if parent is not None else None},
            ) from e

        self.path = Path(self._tempdir.name).resolve()
        logger.info("tempdir_created", path=str(self.path))

    def cleanup(self) -> None:
        """Remove the directory and everything in it now."""
        logger.info("tempdir_removed", path=str(self.path))
        self._tempdir.cleanup()

    def __repr__(self) -> str:
        return f"EphemeralDirectory({str(self.path)!r})"


class TempDirStorageBackend(LocalStorageBackend):
    """Storage over an ephemeral scratch directory."""

    def __init__(self, scratch: EphemeralDirectory) -> None:
        super().__init__(scratch.path)
        # keeps the directory alive for as long as this backend
        self.scratch = scratch

    def name(self) -> str:
        return f"tempdir ({self.root})"
