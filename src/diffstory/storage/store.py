"""Content-addressed review store.

Each working directory has at most one current review, stored at
``<base_dir>/<sha256(canonical dir)>.json``. Writes go to a ``.tmp`` sibling
first and are renamed into place, so readers and the watcher only ever see a
complete file.
"""

from __future__ import annotations

import contextlib
import os
from pathlib import Path

import structlog
from pydantic import ValidationError

from diffstory.core.errors import StoreError
from diffstory.model.review import Review, valid_importance
from diffstory.storage.paths import canonicalize, hash_directory

logger = structlog.get_logger()

APP_NAME = "diffstory"
REVIEW_SUFFIX = ".json"
TEMP_SUFFIX = ".tmp"
FILE_MODE = 0o644


def default_store_dir() -> Path:
    """User cache directory for review files ($XDG_CACHE_HOME or ~/.cache)."""
    xdg = os.environ.get("XDG_CACHE_HOME")
    base = Path(xdg) if xdg else Path("~/.cache").expanduser()
    return base / APP_NAME


def _parse_review(path: Path, data: bytes) -> Review:
    try:
        return Review.from_json(data)
    except ValidationError as e:
        raise StoreError.parse_error(str(path), str(e)) from e


class ReviewStore:
    """Persists reviews keyed by their canonical working directory."""

    def __init__(self, base_dir: Path | str | None = None) -> None:
        self._base_dir = Path(base_dir).expanduser() if base_dir else default_store_dir()
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError.io_error("create", str(self._base_dir), str(e)) from e

    @property
    def base_dir(self) -> Path:
        """Directory holding review files (watched by ReviewWatcher)."""
        return self._base_dir

    def path_for_directory(self, directory: str | os.PathLike[str]) -> Path:
        """File path for a working directory; the directory is canonicalized first."""
        normalized = canonicalize(directory)
        return self._base_dir / f"{hash_directory(normalized)}{REVIEW_SUFFIX}"

    def write(self, review: Review) -> Path:
        """Atomically persist a review. Returns the target path."""
        target = self.path_for_directory(review.working_directory)
        data = review.to_json().encode("utf-8")
        temp = target.with_name(target.name + TEMP_SUFFIX)

        try:
            fd = os.open(temp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError as e:
            with contextlib.suppress(OSError):
                temp.unlink()
            raise StoreError.io_error("write temp file", str(temp), str(e)) from e

        try:
            os.replace(temp, target)
        except OSError as e:
            with contextlib.suppress(OSError):
                temp.unlink()
            raise StoreError.io_error("rename temp file", str(temp), str(e)) from e

        logger.debug("review_written", path=str(target), bytes=len(data))
        return target

    def load(self, path: Path) -> Review:
        """Read and parse the review file at an exact path."""
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise StoreError.not_found(str(path), str(path)) from e
        except OSError as e:
            raise StoreError.io_error("read", str(path), str(e)) from e
        return _parse_review(path, data)

    def read(self, directory: str | os.PathLike[str]) -> Review:
        """Load the current review for a working directory.

        Raises:
            StoreError: NOT_FOUND when no review exists, PARSE_ERROR when the
                file is not a valid review.
        """
        path = self.path_for_directory(directory)
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise StoreError.not_found(os.fspath(directory), str(path)) from e
        except OSError as e:
            raise StoreError.io_error("read", str(path), str(e)) from e
        return _parse_review(path, data)

    def delete(self, directory: str | os.PathLike[str]) -> bool:
        """Remove the review for a directory. Returns False if none existed."""
        path = self.path_for_directory(directory)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StoreError.io_error("remove", str(path), str(e)) from e
        logger.info("review_removed", path=str(path))
        return True


def load_review_file(path: Path) -> Review:
    """Load a review from an arbitrary JSON file (bypassing the store).

    Empty importance is tolerated; any other non-canonical value is rejected.
    """
    try:
        data = path.read_bytes()
    except FileNotFoundError as e:
        raise StoreError.not_found(str(path), str(path)) from e
    except OSError as e:
        raise StoreError.io_error("read", str(path), str(e)) from e

    review = _parse_review(path, data)
    for hunk in review.all_hunks():
        if hunk.importance and not valid_importance(hunk.importance):
            raise StoreError.parse_error(
                str(path), f"invalid importance {hunk.importance!r} in file {hunk.file}"
            )
    return review
