"""
Response building utilities for Connelly Books API

Provides functions to create standardized API Gateway responses and to
serialize entities into their JSON shapes.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any

from connelly_backend.errors import NotFoundError, ValidationError
from connelly_backend.models import Book, Character, Series

logger = logging.getLogger(__name__)


def api_response(status_code: int, body: Any) -> dict:
    """
    Helper to format API Gateway response with CORS headers.

    Args:
        status_code: HTTP status code
        body: Response body (will be JSON serialized)

    Returns:
        dict: API Gateway response with headers
    """
    return {
        "statusCode": status_code,
        "body": json.dumps(body),
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": "Content-Type,Authorization",
            "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        },
    }


def error_response(status_code: int, message: str) -> dict:
    """
    Helper to create error response.

    Args:
        status_code: HTTP status code
        message: Error message

    Returns:
        dict: API Gateway error response with body {"error": message}
    """
    return api_response(status_code, {"error": message})


def error_from_exception(error: Exception) -> dict:
    """
    Map an exception raised below the handlers to an error response.

    NotFoundError -> 404, ValidationError -> 400, anything else -> 500.
    Internal details of 500s are logged, never returned.
    """
    if isinstance(error, NotFoundError):
        logger.warning(str(error))
        return error_response(404, "not found")
    if isinstance(error, ValidationError):
        return error_response(400, error.message)

    logger.error(f"Unexpected error: {str(error)}", exc_info=error)
    return error_response(500, "unexpected error")


def convert_decimal(value: Any) -> Any:
    """
    Convert Decimal types (from DynamoDB) to int or float for JSON serialization.

    Args:
        value: Value that might be a Decimal

    Returns:
        Converted value (int if whole number, otherwise original value)
    """
    if isinstance(value, Decimal):
        return int(value) if value % 1 == 0 else float(value)
    return value


def serialize_book(book: Book) -> dict:
    """
    Convert a Book to its API response format.

    "adaptations" is only present when the book has any.
    """
    body: dict[str, Any] = {
        "id": book.id,
        "title": book.title,
        "year": convert_decimal(book.year),
        "blurb": book.blurb,
    }
    if book.adaptations:
        body["adaptations"] = [
            {"description": a.description, "imdb": a.imdb} for a in book.adaptations
        ]
    return body


def serialize_character(character: Character) -> dict:
    body: dict[str, Any] = {
        "id": character.id,
        "name": character.name,
        "booksTitles": [book.title for book in character.books],
    }
    if character.actors:
        body["actors"] = list(character.actors)
    return body


def serialize_series(series: Series) -> dict:
    return {
        "id": series.id,
        "title": series.title,
        "books": [
            {"id": b.book.id, "title": b.book.title, "order": convert_decimal(b.order)}
            for b in series.books
        ],
    }
