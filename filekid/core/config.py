"""
Application configuration.

Process settings are loaded from environment variables with Pydantic
Settings. Server paths are loaded from the JSON configuration file and
held in a shared, reader/writer guarded state object.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from filekid.core.exceptions import ConfigurationError, NotFoundError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FILEKID_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    config_file: Path = Field(
        default=Path("filekid.json"), description="Server path configuration file"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="json", description="Log format"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class BackendKind(str, Enum):
    """Storage backend kinds a server path can use."""

    LOCAL = "local"
    TEMPDIR = "tempdir"


class ServerPathConfig(BaseModel):
    """
    A configured storage root.

    For ``local`` the ``path`` is the root itself. For ``tempdir`` the
    ``path`` (optional) is where the scratch directory gets created; the
    scratch directory is attached by ``materialize()``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    kind: BackendKind = Field(alias="type", description="Backend kind")
    path: Path | None = Field(default=None, description="Path on disk")

    _scratch: Any = PrivateAttr(default=None)

    @property
    def scratch(self) -> Any:
        """The materialized ephemeral directory, if any."""
        return self._scratch

    def materialize(self) -> None:
        """Create the scratch directory for a ``tempdir`` server path."""
        if self.kind is not BackendKind.TEMPDIR or self._scratch is not None:
            return

        from filekid.services.storage.tempdir import EphemeralDirectory

        self._scratch = EphemeralDirectory(parent=self.path)


class FileKidConfig(BaseModel):
    """Configuration file contents."""

    # the file is shared with the web layer, which owns the other keys
    model_config = ConfigDict(extra="ignore")

    server_paths: dict[str, ServerPathConfig] = Field(
        default_factory=dict, description="Server paths keyed by name"
    )

    @classmethod
    def from_file(cls, filename: str | Path) -> "FileKidConfig":
        """
        Load the configuration from a JSON file.

        Ephemeral server paths are materialized before returning.

        Raises:
            ConfigurationError: If the file is missing or invalid.
        """
        path = Path(filename)
        if not path.exists():
            raise ConfigurationError(
                message=f"Config file {path} does not exist",
                details={"file": str(path)},
            )

        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                message=f"Failed to read config file {path}: {e}",
                details={"file": str(path)},
            ) from e

        try:
            config = cls.model_validate_json(raw)
        except ValidationError as e:
            raise ConfigurationError(
                message=f"Failed to parse config file {path}",
                details={"file": str(path), "error_count": e.error_count()},
            ) from e

        config.resolve_server_paths()
        return config

    def resolve_server_paths(self) -> None:
        """Materialize every ephemeral server path."""
        for server_path in self.server_paths.values():
            server_path.materialize()


def load_config(settings: Settings | None = None) -> FileKidConfig:
    """Load the configuration file named by the settings."""
    if settings is None:
        settings = get_settings()
    return FileKidConfig.from_file(settings.config_file)


class ReadWriteLock:
    """Lock allowing many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class SharedConfigState:
    """
    Live configuration shared between call sites.

    Readers take snapshots; nothing holds the lock while doing I/O.
    """

    def __init__(self, config: FileKidConfig) -> None:
        self._config = config
        self._lock = ReadWriteLock()

    def snapshot(self) -> FileKidConfig:
        """Return the current configuration object."""
        with self._lock.read():
            return self._config

    def server_path(self, name: str) -> ServerPathConfig:
        """
        Look up a server path descriptor by name.

        Returns a copy; the copy shares the scratch directory handle.

        Raises:
            NotFoundError: If no server path has that name.
        """
        with self._lock.read():
            descriptor = self._config.server_paths.get(name)
            if descriptor is None:
                raise NotFoundError(
                    message=f"Server path '{name}' not found",
                    details={"server_path": name},
                )
            return descriptor.model_copy()

    def replace(self, config: FileKidConfig) -> None:
        """Swap in a new configuration (e.g. after a reload)."""
        config.resolve_server_paths()
        with self._lock.write():
            self._config = config
