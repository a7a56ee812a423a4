"""SQLite item database with the FTS5 tag index."""

from tagfinder.db.models import Item, ItemBase
from tagfinder.db.schema import FTS_TABLE, create_search_schema
from tagfinder.db.session import add_item, get_engine, get_session, init_database

__all__ = [
    "FTS_TABLE",
    "Item",
    "ItemBase",
    "add_item",
    "create_search_schema",
    "get_engine",
    "get_session",
    "init_database",
]
