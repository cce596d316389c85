"""Core module - Configuration, logging, and exceptions."""

from filekid.core.config import (
    BackendKind,
    FileKidConfig,
    ServerPathConfig,
    Settings,
    SharedConfigState,
    get_settings,
    load_config,
)
from filekid.core.exceptions import (
    BadRequestError,
    ConfigurationError,
    FileKidError,
    InternalServerError,
    InvalidFileTypeError,
    NotAuthorizedError,
    NotFoundError,
    StorageIOError,
)

__all__ = [
    "BackendKind",
    "FileKidConfig",
    "ServerPathConfig",
    "Settings",
    "SharedConfigState",
    "get_settings",
    "load_config",
    "FileKidError",
    "BadRequestError",
    "ConfigurationError",
    "InternalServerError",
    "InvalidFileTypeError",
    "NotAuthorizedError",
    "NotFoundError",
    "StorageIOError",
]
