"""
Pytest configuration and fixtures.
"""

from pathlib import Path
from typing import Generator

import pytest

from filekid.core.config import Settings
from filekid.core.logging import configure_logging
from filekid.services.storage import (
    EphemeralDirectory,
    LocalStorageBackend,
    StorageBackend,
    TempDirStorageBackend,
)


# Test settings
@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        debug=True,
        log_level="DEBUG",
        log_format="console",
        config_file=Path("/nonexistent/filekid.json"),
    )


@pytest.fixture(scope="session", autouse=True)
def logging_setup(test_settings: Settings) -> None:
    """Configure logging once for the test session."""
    configure_logging(test_settings)


# Storage roots
@pytest.fixture
def root(tmp_path: Path) -> Path:
    """An empty directory to use as a local server path root."""
    path = tmp_path / "root"
    path.mkdir()
    return path.resolve()


@pytest.fixture
def outside(tmp_path: Path) -> Path:
    """A directory next to the root, holding a file nobody may reach."""
    path = tmp_path / "outside"
    path.mkdir()
    (path / "secret.txt").write_bytes(b"top secret")
    return path.resolve()


@pytest.fixture
def local_backend(root: Path) -> LocalStorageBackend:
    """Local backend over the empty root."""
    return LocalStorageBackend(root)


@pytest.fixture
def scratch(tmp_path: Path) -> Generator[EphemeralDirectory, None, None]:
    """A scratch directory, removed after the test."""
    directory = EphemeralDirectory(parent=tmp_path / "scratch")
    yield directory
    directory.cleanup()


@pytest.fixture
def tempdir_backend(scratch: EphemeralDirectory) -> TempDirStorageBackend:
    """Tempdir backend over a fresh scratch directory."""
    return TempDirStorageBackend(scratch)


@pytest.fixture(params=["local", "tempdir"])
def backend(request: pytest.FixtureRequest) -> StorageBackend:
    """Every backend kind, for tests of the shared contract."""
    return request.getfixturevalue(f"{request.param}_backend")
