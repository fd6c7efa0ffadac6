"""
Handlers for book operations (create, get, list)

Each handler receives the API Gateway event and the book service, and
returns an API Gateway proxy response.
"""

from __future__ import annotations

import logging
from typing import Protocol

from connelly_backend.config import MIN_BOOK_YEAR
from connelly_backend.models import Adaptation, Book
from connelly_backend.utils.response import api_response, error_from_exception, serialize_book
from connelly_backend.utils.validation import (
    get_path_param,
    parse_json_body,
    validate_int_field,
    validate_object_list,
    validate_string_field,
)

logger = logging.getLogger()
logger.setLevel(logging.INFO)


class BookManager(Protocol):
    def create(self, book: Book) -> Book: ...
    def get_by_id(self, book_id: str) -> Book: ...
    def list_all(self) -> list[Book]: ...


def _validate_book_body(body: dict) -> dict | None:
    """Validate a create-book request body, returning the first error."""
    return (
        validate_string_field(body, "title", required=True)
        or validate_int_field(body, "year", minimum=MIN_BOOK_YEAR, required=True)
        or validate_string_field(body, "blurb", required=True)
        or validate_object_list(
            body,
            "adaptations",
            [
                lambda a: validate_string_field(a, "description", required=True),
                lambda a: validate_string_field(a, "imdb"),
            ],
        )
    )


def create_book_handler(event: dict, service: BookManager) -> dict:
    """
    Create a book.

    Body: {"title": str, "year": int >= 1, "blurb": str,
           "adaptations": [{"description": str, "imdb": str}]?}
    Creating a title that already exists returns the stored book.
    """
    logger.info("create_book_handler invoked")

    body, error = parse_json_body(event)
    if error:
        return error

    error = _validate_book_body(body)
    if error:
        return error

    book = Book(
        title=body["title"],
        year=body["year"],
        blurb=body["blurb"],
        adaptations=[
            Adaptation(description=a["description"], imdb=a.get("imdb", ""))
            for a in body.get("adaptations") or []
        ],
    )

    try:
        created_book = service.create(book)
    except Exception as e:
        return error_from_exception(e)

    logger.info(f"Created book {created_book.id}: {created_book.title}")
    return api_response(201, serialize_book(created_book))


def get_book_handler(event: dict, service: BookManager) -> dict:
    """Get a book by id. Expects book ID in path parameter 'bookID'."""
    logger.info("get_book_handler invoked")

    book_id, error = get_path_param(event, "bookID")
    if error:
        return error

    try:
        book = service.get_by_id(book_id)
    except Exception as e:
        return error_from_exception(e)

    return api_response(200, serialize_book(book))


def list_books_handler(event: dict, service: BookManager) -> dict:
    """List every book, sorted by publication year then title."""
    logger.info("list_books_handler invoked")

    try:
        books = service.list_all()
    except Exception as e:
        return error_from_exception(e)

    books.sort(key=lambda b: (b.year, b.title))
    return api_response(200, [serialize_book(book) for book in books])
