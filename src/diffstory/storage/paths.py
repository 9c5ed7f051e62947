"""Working-directory canonicalization and hashing."""

from __future__ import annotations

import hashlib
import os

from diffstory.core.errors import StoreError


def canonicalize(path: str | os.PathLike[str]) -> str:
    """Return the canonical form of a directory path.

    Absolute against the process working directory, lexically cleaned (no
    ``.``/``..``, repeated or trailing separators) and symlink-resolved. A
    path that does not exist yet keeps its cleaned form, since producers may
    submit before the directory is created. Symlink resolution also fixes up
    case on case-insensitive filesystems.

    Raises:
        StoreError: INVALID_PATH for embedded NUL bytes or any resolution
            failure other than "not found".
    """
    raw = os.fspath(path)
    if "\x00" in raw:
        raise StoreError.invalid_path(raw.replace("\x00", "\\0"), "embedded NUL byte")

    try:
        cleaned = os.path.abspath(raw)
    except (OSError, ValueError) as e:
        raise StoreError.invalid_path(raw, f"failed to get absolute path: {e}") from e
    # POSIX lets normpath keep exactly two leading slashes
    if cleaned.startswith("//"):
        cleaned = cleaned[1:]

    try:
        return os.path.realpath(cleaned, strict=True)
    except FileNotFoundError:
        return cleaned
    except (OSError, ValueError) as e:
        raise StoreError.invalid_path(raw, f"failed to resolve path: {e}") from e


def hash_directory(canonical_path: str) -> str:
    """SHA-256 hex digest of a canonical path, used as a fixed-width file name."""
    return hashlib.sha256(canonical_path.encode("utf-8", "surrogateescape")).hexdigest()
