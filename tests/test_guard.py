"""
Path containment tests.
"""

import os
import sys
from pathlib import Path

import pytest

from filekid.core.exceptions import NotAuthorizedError
from filekid.services.storage.guard import is_contained, join_key, resolve_and_contain


# =============================================================================
# Textual join
# =============================================================================


def test_join_key_empty_is_root(root: Path):
    assert join_key(root, "") == root


def test_join_key_absolute_key_stays_under_root(root: Path):
    assert join_key(root, "/etc/passwd") == root / "etc" / "passwd"


def test_join_key_ignores_trailing_slash(root: Path):
    assert join_key(root, "docs/") == join_key(root, "docs")


@pytest.mark.parametrize("key", ["/\\/etc/passwd", "///etc/passwd", "/\\etc/passwd"])
def test_join_key_mixed_leading_separators_stay_under_root(root: Path, key: str):
    assert root in join_key(root, key).parents


@pytest.mark.skipif(sys.platform == "win32", reason="backslash is a separator")
def test_join_key_keeps_leading_backslash(root: Path):
    """A backslash is an ordinary filename character on POSIX."""
    assert join_key(root, "\\name.txt") == root / "\\name.txt"


# =============================================================================
# Ancestor comparison
# =============================================================================


def test_is_contained_root_itself():
    assert is_contained(Path("/base"), Path("/base"))


def test_is_contained_descendant():
    assert is_contained(Path("/base"), Path("/base/a/b.txt"))


def test_is_contained_rejects_shared_prefix():
    """A sibling sharing a name prefix is not inside."""
    assert not is_contained(Path("/base"), Path("/base-evil"))
    assert not is_contained(Path("/base"), Path("/base-evil/file.txt"))


def test_is_contained_rejects_parent():
    assert not is_contained(Path("/base/sub"), Path("/base"))


# =============================================================================
# Resolution
# =============================================================================


def test_empty_key_is_root(root: Path):
    assert resolve_and_contain(root, "") == root
    assert resolve_and_contain(root, "/") == root
    assert resolve_and_contain(root, ".") == root


@pytest.mark.parametrize(
    "key",
    [
        "../../../etc/passwd",
        "..",
        "../",
        "a/../../x",
        "a/b/../../..",
        "/../../../test.txt",
        "./../outside/secret.txt",
        "sub//..//..//x",
    ],
)
def test_traversal_is_not_authorized(root: Path, key: str):
    with pytest.raises(NotAuthorizedError):
        resolve_and_contain(root, key)


def test_traversal_from_fixed_root():
    """Traversal is refused even when the root doesn't exist."""
    with pytest.raises(NotAuthorizedError):
        resolve_and_contain(Path("/tmp/x"), "../../../etc/passwd")


def test_traversal_into_prefixed_sibling(tmp_path: Path):
    base = tmp_path / "base"
    evil = tmp_path / "base-evil"
    base.mkdir()
    evil.mkdir()

    with pytest.raises(NotAuthorizedError):
        resolve_and_contain(base.resolve(), "../base-evil/file.txt")


def test_absolute_key_is_joined(root: Path):
    assert resolve_and_contain(root, "/etc/passwd") == root / "etc" / "passwd"


def test_absolute_key_behind_backslash_is_joined(root: Path):
    assert root in resolve_and_contain(root, "/\\/etc/passwd").parents


def test_dotdot_inside_root_is_allowed(root: Path):
    (root / "a").mkdir()
    assert resolve_and_contain(root, "a/../b.txt") == root / "b.txt"


def test_missing_components_are_appended(root: Path):
    """Paths about to be created can still be checked."""
    assert resolve_and_contain(root, "new/dir/file.txt") == root / "new" / "dir" / "file.txt"


def test_symlink_escaping_root(root: Path, outside: Path):
    os.symlink(outside, root / "link")

    with pytest.raises(NotAuthorizedError):
        resolve_and_contain(root, "link/secret.txt")
    with pytest.raises(NotAuthorizedError):
        resolve_and_contain(root, "link")


def test_symlink_to_missing_file_outside(root: Path, outside: Path):
    """A dangling link is followed like a write would follow it."""
    os.symlink(outside / "created-later.txt", root / "dangling")

    with pytest.raises(NotAuthorizedError):
        resolve_and_contain(root, "dangling")


def test_symlink_within_root(root: Path):
    (root / "real").mkdir()
    os.symlink(root / "real", root / "alias")

    assert resolve_and_contain(root, "alias/file.txt") == root / "real" / "file.txt"


def test_null_byte_is_not_authorized(root: Path):
    with pytest.raises(NotAuthorizedError) as exc_info:
        resolve_and_contain(root, "file\x00.txt")

    assert exc_info.value.details["reason"] == "Embedded null byte"


def test_not_authorized_error_details(root: Path):
    with pytest.raises(NotAuthorizedError) as exc_info:
        resolve_and_contain(root, "../nope")

    assert exc_info.value.status_code == 403
    assert exc_info.value.details == {"key": "../nope"}
