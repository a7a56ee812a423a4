"""Integration test fixtures for a real SQLite item database."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from tagfinder.db.session import add_item, get_session

if TYPE_CHECKING:
    from collections.abc import Generator

    from sqlalchemy.orm import Session


# ---------------------------------------------------------------------------
# Item definitions
# ---------------------------------------------------------------------------

# (path, tags) pairs, inserted in this order so ids are 1..7.
SAMPLE_ITEMS: list[tuple[str, str]] = [
    ("Drums/Kick 01.wav", "kick drum acoustic"),
    ("Drums/Snare 01.wav", "snare drum"),
    ("Drums/Loops/Kick Loop.wav", "kick loop"),
    ("FX/Riser.mp3", "fx riser"),
    ("FX/Clap 50%.wav", "clap fx"),
    ("Drum Collection/kick_hard.flac", "kick hard"),
    ("readme.txt", ""),
]


def _has_fts5() -> bool:
    conn = sqlite3.connect(":memory:")
    try:
        conn.execute("CREATE VIRTUAL TABLE probe USING fts5(x)")
    except sqlite3.OperationalError:
        return False
    finally:
        conn.close()
    return True


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark everything here as integration, and skip it without FTS5."""
    skip = pytest.mark.skip(reason="SQLite built without FTS5")
    has_fts5 = _has_fts5()
    here = Path(__file__).resolve().parent
    for item in items:
        if here in item.path.resolve().parents:
            item.add_marker(pytest.mark.integration)
            if not has_fts5:
                item.add_marker(skip)


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def item_db(temp_dir: Path) -> Path:
    """Create an item database populated with SAMPLE_ITEMS."""
    db_path = temp_dir / "items.db"
    with get_session(db_path) as session:
        for path, tags in SAMPLE_ITEMS:
            add_item(session, path, tags)
    return db_path


@pytest.fixture
def item_session(item_db: Path) -> Generator[Session, None, None]:
    """Open a session on the populated item database."""
    with get_session(item_db, create=False) as session:
        yield session
