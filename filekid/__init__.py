"""
FileKid - Sandboxed file storage over configured server paths.

This package provides:
- Path containment checks for untrusted, caller-supplied keys
- Local directory and ephemeral scratch directory storage backends
- Server path configuration and startup checks
"""

__version__ = "0.1.0"
__author__ = "FileKid Team"
