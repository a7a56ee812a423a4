"""SQLAlchemy ORM models for the tagged item database."""

from __future__ import annotations

from sqlalchemy import Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from tagfinder.search.render import ANCHOR_VALUE


class ItemBase(DeclarativeBase):
    """Base class for item database ORM models."""

    pass


class Item(ItemBase):
    """A tagged file, addressed by its forward-slash relative path."""

    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    path: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    # Space separated, sorted, no duplicates
    tags: Mapped[str] = mapped_column(Text, nullable=False, default="")
    meta_tags: Mapped[str] = mapped_column(
        Text, nullable=False, default=ANCHOR_VALUE, server_default=ANCHOR_VALUE
    )

    @property
    def tag_list(self) -> list[str]:
        return self.tags.split()

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, path='{self.path}', tags='{self.tags}')>"
