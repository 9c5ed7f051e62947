"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages and
keeps every test away from the real user config and cache directories.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from diffstory.model.review import Hunk, Review, Section  # noqa: E402
from diffstory.review.service import ReviewService  # noqa: E402
from diffstory.storage.store import ReviewStore  # noqa: E402

FIXED_NOW = datetime(2026, 3, 14, 12, 0, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _isolate_user_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point XDG dirs at tmp and drop DIFFSTORY__ env vars."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))
    for key in list(os.environ):
        if key.upper().startswith("DIFFSTORY__"):
            monkeypatch.delenv(key)


@pytest.fixture
def store(tmp_path: Path) -> ReviewStore:
    """Review store in a temp directory."""
    return ReviewStore(tmp_path / "store")


@pytest.fixture
def fixed_now() -> datetime:
    """The time the service fixture stamps on reviews."""
    return FIXED_NOW


@pytest.fixture
def service(store: ReviewStore) -> ReviewService:
    """Ingest service with a fixed clock."""
    return ReviewService(store, clock=lambda: FIXED_NOW)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """An existing project directory to attach reviews to."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def make_review() -> Callable[..., Review]:
    """Factory for small reviews."""

    def _make(working_directory: str | Path = "", **overrides: Any) -> Review:
        fields: dict[str, Any] = {
            "working_directory": str(working_directory),
            "title": "Tighten config loading",
            "sections": [
                Section(
                    id="s1",
                    title="Loader",
                    narrative="Config errors now carry the offending field.",
                    hunks=[
                        Hunk(
                            file="src/loader.py",
                            start_line=10,
                            diff="@@ -10,2 +10,3 @@\n context\n+added\n",
                            importance="high",
                        )
                    ],
                )
            ],
        }
        fields.update(overrides)
        return Review(**fields)

    return _make
