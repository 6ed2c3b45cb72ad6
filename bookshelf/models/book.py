"""
Bookshelf — Book SQLAlchemy Model
==================================

What:  ORM model representing the `books` table.
How:   Declarative mapping on the shared Base; the bootstrapper compiles its
       CREATE TABLE IF NOT EXISTS statement from this definition.
Who:   Used by BookRepository for every statement and by schema bootstrap.

Table Design:
    - id: SERIAL primary key, assigned by the database
    - title / author: TEXT NOT NULL
    - created_at / updated_at: TIMESTAMP WITH TIME ZONE, both defaulting to
      CURRENT_TIMESTAMP so an insert stamps them with the same clock reading
"""

from datetime import datetime

from sqlalchemy import Integer, Text, TIMESTAMP, text
from sqlalchemy.orm import Mapped, mapped_column

from bookshelf.database import Base


class Book(Base):
    """
    A single book record.

    Lifecycle:
        1. Inserted by POST /books (id and both timestamps from the database)
        2. Replaced in place by PUT /books/{id} (updated_at refreshed)
        3. Hard-deleted by DELETE /books/{id}
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    author: Mapped[str] = mapped_column(Text, nullable=False)

    # ── Timestamps ────────────────────────────────────────────────────────
    # Always set by the database, never by Python, so every writer shares
    # one clock.
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title={self.title!r}, author={self.author!r})>"
