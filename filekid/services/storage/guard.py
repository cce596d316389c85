"""
Path containment checks.

Every storage operation resolves the caller's key through
``resolve_and_contain`` before touching the filesystem. Keys come straight
from URL path segments, so they are untrusted: they may hold ``..``
segments, empty segments, leading slashes or point through symlinks.
"""

from pathlib import Path

from filekid.core.exceptions import NotAuthorizedError
from filekid.core.logging import get_logger

logger = get_logger(__name__)


def join_key(root: Path, key: str) -> Path:
    """
    Join a caller-supplied key under root without touching the disk.

    Leading slashes are dropped so an absolute-looking key is still
    joined under root instead of replacing it.
    """
    clean_key = key.lstrip("/")
    if not clean_key:
        return root
    return root / clean_key


def is_contained(root: Path, candidate: Path) -> bool:
    """
    Check whether candidate is root or one of its descendants.

    Both paths must already be canonical. Compares whole path components,
    so ``/base-evil`` is not inside ``/base``.
    """
    return candidate == root or root in candidate.parents


def resolve_and_contain(root: Path, key: str) -> Path:
    """
    Resolve a key against root and make sure it stays inside.

    Symlinks are followed the same way an open() would follow them. Parts
    of the path that don't exist yet are appended to the deepest existing
    ancestor, so targets about to be created can be checked too.

    Args:
        root: Canonical (resolved) root directory of the backend.
        key: Relative key supplied by the caller.

    Returns:
        The canonical absolute path for the key.

    Raises:
        NotAuthorizedError: If the path escapes root or can't be resolved.
    """
    if "\x00" in key:
        logger.warning("containment_denied", root=str(root), key=repr(key))
        raise NotAuthorizedError(key, reason="Embedded null byte")

    candidate = join_key(root, key)

    try:
        resolved = candidate.resolve(strict=False)
    except (OSError, RuntimeError, ValueError) as e:
        logger.warning(
            "containment_resolve_failed",
            root=str(root),
            key=key,
            error=str(e),
        )
        raise NotAuthorizedError(key, reason="Path could not be resolved") from e

    if not is_contained(root, resolved):
        logger.warning(
            "containment_denied",
            root=str(root),
            key=key,
            resolved=str(resolved),
        )
        raise NotAuthorizedError(key)

    return resolved
