"""
Bookshelf — Book Repository
============================

What:  Every SQL statement the service issues, and the row → Book mapping.
How:   Each operation runs exactly one parameterized statement through the
       request's AsyncSession; writes commit before returning.
Who:   Called by the route handlers in routes/books.py.

Outcomes:
    Each method either returns its value, raises NotFoundError (no row for
    the id), or raises DatabaseError (anything the driver or pool reports).
    Route handlers never see SQLAlchemy exceptions; main.py maps the two
    error types to 404 and 500.

Statements:
    list_all SELECT ... ORDER BY id
    get      SELECT ... WHERE id = :id
    create   INSERT ... RETURNING *
    update   UPDATE ... SET title, author, updated_at = now() WHERE id = :id RETURNING *
    delete   DELETE ... WHERE id = :id            (rowcount 0 → NotFoundError)
"""

import asyncio
import logging
from typing import Any, List

from fastapi import Depends
from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Result
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.config import settings
from bookshelf.database import get_db_session
from bookshelf.exceptions import DatabaseError, NotFoundError
from bookshelf.models.book import Book

logger = logging.getLogger(__name__)

# Failures that all collapse into DatabaseError
_DRIVER_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError)


class BookRepository:
    """
    Persistence operations for Book records.

    Args:
        session: Request-scoped async session
        statement_timeout: Seconds allowed for each database round-trip
    """

    def __init__(self, session: AsyncSession, statement_timeout: float = 5.0):
        self.session = session
        self.statement_timeout = statement_timeout

    # ── Plumbing ──────────────────────────────────────────────────────────

    async def _execute(self, statement: Any, operation: str, **context: Any) -> Result:
        try:
            return await asyncio.wait_for(
                self.session.execute(statement),
                timeout=self.statement_timeout,
            )
        except _DRIVER_ERRORS as e:
            raise self._database_error(e, operation, context) from e

    async def _commit(self, operation: str, **context: Any) -> None:
        try:
            await asyncio.wait_for(self.session.commit(), timeout=self.statement_timeout)
        except _DRIVER_ERRORS as e:
            raise self._database_error(e, operation, context) from e

    @staticmethod
    def _database_error(exc: BaseException, operation: str, context: dict) -> DatabaseError:
        # Logged by the DatabaseError handler, with the driver error as __cause__
        return DatabaseError(
            context={"operation": operation, "error_type": type(exc).__name__, **context},
        )

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_all(self) -> List[Book]:
        """All books, ascending by id. An empty table yields an empty list."""
        result = await self._execute(select(Book).order_by(Book.id), "list")
        return list(result.scalars().all())

    async def get(self, book_id: int) -> Book:
        """
        Fetch one book.

        Raises:
            NotFoundError: No row has this id
            DatabaseError: Query execution failed
        """
        result = await self._execute(
            select(Book).where(Book.id == book_id),
            "get",
            book_id=book_id,
        )
        book = result.scalar_one_or_none()
        if book is None:
            raise NotFoundError(resource="book", resource_id=book_id)
        return book

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create(self, title: str, author: str) -> Book:
        """Insert a book; the database assigns id, created_at and updated_at."""
        result = await self._execute(
            insert(Book).values(title=title, author=author).returning(Book),
            "create",
        )
        book = result.scalar_one()
        await self._commit("create", book_id=book.id)
        logger.info("Book %d created", book.id)
        return book

    async def update(self, book_id: int, title: str, author: str) -> Book:
        """
        Replace title and author and refresh updated_at in one statement.

        RETURNING hands back the new row; there is no follow-up SELECT.

        Raises:
            NotFoundError: No row has this id
            DatabaseError: Statement or commit failed
        """
        statement = (
            update(Book)
            .where(Book.id == book_id)
            .values(title=title, author=author, updated_at=func.now())
            .returning(Book)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        result = await self._execute(statement, "update", book_id=book_id)
        book = result.scalar_one_or_none()
        if book is None:
            raise NotFoundError(resource="book", resource_id=book_id)
        await self._commit("update", book_id=book_id)
        logger.info("Book %d updated", book_id)
        return book

    async def delete(self, book_id: int) -> None:
        """
        Hard-delete a book.

        Raises:
            NotFoundError: Zero rows affected (never existed or already deleted)
            DatabaseError: Statement or commit failed
        """
        statement = (
            delete(Book)
            .where(Book.id == book_id)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(statement, "delete", book_id=book_id)
        if result.rowcount == 0:
            raise NotFoundError(resource="book", resource_id=book_id)
        await self._commit("delete", book_id=book_id)
        logger.info("Book %d deleted", book_id)


# ── Dependency ────────────────────────────────────────────────────────────
def get_book_repository(
    session: AsyncSession = Depends(get_db_session),
) -> BookRepository:
    """FastAPI dependency: a repository bound to the request's session."""
    return BookRepository(session, statement_timeout=settings.db_statement_timeout)
