"""Item database session management."""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from tagfinder.db.models import Item, ItemBase
from tagfinder.db.schema import create_search_schema, install_functions
from tagfinder.exceptions import DatabaseNotFoundError
from tagfinder.search.escaping import to_storage_path

logger = logging.getLogger(__name__)


def get_engine(db_path: Path) -> Engine:
    """Create SQLAlchemy engine for the item database.

    Every connection gets the ``dirname``/``extname`` functions that
    compiled queries and the expression indexes rely on.

    Args:
        db_path: Path to the SQLite database file.

    Returns:
        SQLAlchemy engine for the database.
    """
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={
            "timeout": 30,
            "check_same_thread": False,
        },
    )
    install_functions(engine)
    return engine


def init_database(engine: Engine) -> None:
    """Create the items table and the search schema if missing."""
    ItemBase.metadata.create_all(engine)
    create_search_schema(engine)


@contextmanager
def get_session(db_path: Path, *, create: bool = True) -> Generator[Session, None, None]:
    """Create a session for the item database.

    Args:
        db_path: Path to the SQLite database file.
        create: Create the database and schema if they don't exist. When
            False, a missing database file is an error.

    Yields:
        SQLAlchemy Session; committed on success, rolled back on error.

    Raises:
        DatabaseNotFoundError: If ``create`` is False and the file is missing.
    """
    db_path = db_path.expanduser()
    if not create and not db_path.exists():
        raise DatabaseNotFoundError(db_path)

    engine = get_engine(db_path)
    if create:
        init_database(engine)

    session_factory = sessionmaker(bind=engine)
    session = session_factory()

    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
        engine.dispose()


def normalize_tags(tags: str | Iterable[str]) -> str:
    """Split, de-duplicate and sort tags into the stored form."""
    if isinstance(tags, str):
        tags = [tags]
    words: set[str] = set()
    for tag in tags:
        words.update(tag.split())
    return " ".join(sorted(words))


def add_item(session: Session, path: str, tags: str | Iterable[str]) -> Item:
    """Insert an item with the given tags and return it.

    The path is stored with forward slashes.
    """
    item = Item(path=to_storage_path(path), tags=normalize_tags(tags))
    session.add(item)
    session.flush()
    logger.debug("Added item %s with tags '%s'", item.path, item.tags)
    return item
