"""
Book collection routes.
"""

from typing import Any, List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from library_api.config import APIConfig
from library_api.database import BookStore
from library_api.models import (
    BookCreated, BookDetail, BookSummary,
    COMPLETE_DELETE_SUCCESSFUL, DELETE_SUCCESSFUL,
    MISSING_COMMENT, MISSING_TITLE, NO_BOOK_EXISTS
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/books", tags=["Books"])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def get_book_store(request: Request) -> BookStore:
    """Return the book store attached to the running application."""
    book_store = getattr(request.app.state, "book_store", None)
    if book_store is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database service not available"
        )
    return book_store


def get_settings(request: Request) -> APIConfig:
    return request.app.state.settings


async def read_field(request: Request, name: str) -> Optional[str]:
    """
    Read a single field from a JSON or form-encoded request body.

    Args:
        request: Incoming request
        name: Field name

    Returns:
        The field value as a string, or None when it is absent or empty
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        try:
            data: Any = await request.form()
        except StarletteHTTPException as e:
            logger.debug("Ignoring malformed form body", field=name, error=str(e.detail))
            return None
    else:
        body = await request.body()
        if not body:
            return None
        try:
            data = await request.json()
        except ValueError:
            logger.debug("Ignoring unparseable request body", field=name)
            return None

    if not hasattr(data, "get"):
        return None

    value = data.get(name)
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    # Falsy values such as 0 count as absent
    if not value:
        return None
    return str(value)


def client_error(message: str, settings: APIConfig) -> PlainTextResponse:
    return PlainTextResponse(message, status_code=settings.client_error_status)


def storage_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error"
    )


@router.get("", response_model=List[BookSummary])
async def list_books(book_store: BookStore = Depends(get_book_store)):
    """
    Get every book with its comment count.

    Comment bodies are omitted; use the single book endpoint to read them.
    """
    try:
        books = await book_store.list_books()
    except Exception as e:
        logger.error("Failed to list books", error=str(e))
        raise storage_error()

    return [BookSummary.from_book(book) for book in books]


@router.post("", response_model=BookCreated, responses={400: {"description": MISSING_TITLE}})
async def create_book(
    request: Request,
    book_store: BookStore = Depends(get_book_store),
    settings: APIConfig = Depends(get_settings)
):
    """
    Create a book.

    - **title**: Book title (JSON or form field)
    """
    title = await read_field(request, "title")
    if not title:
        return client_error(MISSING_TITLE, settings)

    try:
        book = await book_store.create_book(title)
    except Exception as e:
        logger.error("Failed to create book", title=title, error=str(e))
        raise storage_error()

    return BookCreated.from_book(book)


@router.delete("", response_class=PlainTextResponse)
async def delete_all_books(book_store: BookStore = Depends(get_book_store)):
    """Delete every book. This cannot be undone."""
    try:
        await book_store.delete_all_books()
    except Exception as e:
        logger.error("Failed to delete all books", error=str(e))
        raise storage_error()

    return PlainTextResponse(COMPLETE_DELETE_SUCCESSFUL)


@router.get("/{book_id}", response_model=BookDetail, responses={400: {"description": NO_BOOK_EXISTS}})
async def get_book(
    book_id: str,
    book_store: BookStore = Depends(get_book_store),
    settings: APIConfig = Depends(get_settings)
):
    """
    Get a single book with all of its comments.

    - **book_id**: Book identifier (MongoDB ObjectId)
    """
    if not book_store.is_valid_id(book_id):
        return client_error(NO_BOOK_EXISTS, settings)

    try:
        book = await book_store.get_book(book_id)
    except Exception as e:
        logger.error("Failed to get book", book_id=book_id, error=str(e))
        raise storage_error()

    if not book:
        return client_error(NO_BOOK_EXISTS, settings)

    return BookDetail.from_book(book)


@router.post(
    "/{book_id}",
    response_model=BookDetail,
    responses={400: {"description": f"{MISSING_COMMENT} / {NO_BOOK_EXISTS}"}}
)
async def add_comment(
    book_id: str,
    request: Request,
    book_store: BookStore = Depends(get_book_store),
    settings: APIConfig = Depends(get_settings)
):
    """
    Append a comment to a book.

    - **book_id**: Book identifier (MongoDB ObjectId)
    - **comment**: Comment text (JSON or form field)
    """
    comment = await read_field(request, "comment")
    if not comment:
        return client_error(MISSING_COMMENT, settings)

    if not book_store.is_valid_id(book_id):
        return client_error(NO_BOOK_EXISTS, settings)

    try:
        book = await book_store.add_comment(book_id, comment)
    except Exception as e:
        logger.error("Failed to add comment", book_id=book_id, error=str(e))
        raise storage_error()

    if not book:
        return client_error(NO_BOOK_EXISTS, settings)

    return BookDetail.from_book(book)


@router.delete("/{book_id}", response_class=PlainTextResponse)
async def delete_book(
    book_id: str,
    book_store: BookStore = Depends(get_book_store),
    settings: APIConfig = Depends(get_settings)
):
    """
    Delete a single book.

    - **book_id**: Book identifier (MongoDB ObjectId)
    """
    if not book_store.is_valid_id(book_id):
        return client_error(NO_BOOK_EXISTS, settings)

    try:
        deleted = await book_store.delete_book(book_id)
    except Exception as e:
        logger.error("Failed to delete book", book_id=book_id, error=str(e))
        raise storage_error()

    if not deleted:
        return client_error(NO_BOOK_EXISTS, settings)

    return PlainTextResponse(DELETE_SUCCESSFUL)
