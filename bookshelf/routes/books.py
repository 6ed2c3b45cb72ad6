"""
Bookshelf — Books Route Handlers
=================================

What:  CRUD endpoints for book records.
How:   FastAPI routes each method+path to one handler. The handler receives
       an already-parsed id and body, calls BookRepository, and hands the
       result to the response encoder. Errors are raised, not returned;
       main.py maps them to statuses in one place.

Routes:
    GET    /books        → list_books    200
    POST   /books        → create_book   201
    GET    /books/{id}   → get_book      200
    PUT    /books/{id}   → update_book   200
    DELETE /books/{id}   → delete_book   204

Any other method on these paths is answered 405 by the router. The id is
the whole rest of the path; anything but a base-10 integer in the id
column's range is answered 400 before the repository runs.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, status
from fastapi.responses import Response

from bookshelf.exceptions import ValidationError
from bookshelf.repositories.book_repository import BookRepository, get_book_repository
from bookshelf.responses import empty_response, encode_response
from bookshelf.schemas.book import BookPayload, BookResponse, ErrorResponse

router = APIRouter(tags=["Books"])

INVALID_ID_MESSAGE = "invalid id"

# The id column is a 32-bit SERIAL; anything outside it cannot name a row.
BOOK_ID_MIN = -(2**31)
BOOK_ID_MAX = 2**31 - 1


def parse_book_id(
    book_id: Annotated[
        str,
        Path(pattern=r"^[+-]?[0-9]+$", description="Book identifier (base-10 integer)"),
    ],
) -> int:
    """Parse the `{book_id}` segment strictly as a base-10 integer."""
    try:
        value = int(book_id)
    except ValueError:
        # More digits than int() will convert
        value = None
    if value is None or not BOOK_ID_MIN <= value <= BOOK_ID_MAX:
        raise ValidationError(message=INVALID_ID_MESSAGE, context={"book_id": book_id})
    return value


BookId = Annotated[int, Depends(parse_book_id)]

Repository = Annotated[BookRepository, Depends(get_book_repository)]

_BAD_REQUEST = {"description": "Invalid id or body", "model": ErrorResponse}
_NOT_FOUND = {"description": "Book not found", "model": ErrorResponse}
_SERVER_ERROR = {"description": "Server error", "model": ErrorResponse}


@router.get(
    "/books",
    response_model=List[BookResponse],
    responses={500: _SERVER_ERROR},
    summary="List all books",
)
async def list_books(repository: Repository) -> Response:
    """All books in ascending id order; `[]` when there are none."""
    books = await repository.list_all()
    return encode_response(
        status.HTTP_200_OK,
        [BookResponse.model_validate(book) for book in books],
    )


@router.post(
    "/books",
    status_code=status.HTTP_201_CREATED,
    response_model=BookResponse,
    responses={400: _BAD_REQUEST, 500: _SERVER_ERROR},
    summary="Create a book",
)
async def create_book(payload: BookPayload, repository: Repository) -> Response:
    book = await repository.create(title=payload.title, author=payload.author)
    return encode_response(status.HTTP_201_CREATED, BookResponse.model_validate(book))


@router.get(
    "/books/{book_id:path}",
    response_model=BookResponse,
    responses={400: _BAD_REQUEST, 404: _NOT_FOUND, 500: _SERVER_ERROR},
    summary="Get a book by id",
)
async def get_book(book_id: BookId, repository: Repository) -> Response:
    book = await repository.get(book_id)
    return encode_response(status.HTTP_200_OK, BookResponse.model_validate(book))


@router.put(
    "/books/{book_id:path}",
    response_model=BookResponse,
    responses={400: _BAD_REQUEST, 404: _NOT_FOUND, 500: _SERVER_ERROR},
    summary="Replace a book's title and author",
)
async def update_book(
    book_id: BookId,
    payload: BookPayload,
    repository: Repository,
) -> Response:
    """
    Replace title and author of an existing book.

    Both fields are required; id and created_at never change, updated_at is
    refreshed by the database.
    """
    book = await repository.update(book_id, title=payload.title, author=payload.author)
    return encode_response(status.HTTP_200_OK, BookResponse.model_validate(book))


@router.delete(
    "/books/{book_id:path}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={400: _BAD_REQUEST, 404: _NOT_FOUND, 500: _SERVER_ERROR},
    summary="Delete a book",
)
async def delete_book(book_id: BookId, repository: Repository) -> Response:
    await repository.delete(book_id)
    return empty_response()
