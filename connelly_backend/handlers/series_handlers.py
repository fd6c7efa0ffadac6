"""
Handlers for series operations (create, list)
"""

from __future__ import annotations

import logging
from typing import Protocol

from connelly_backend.config import MIN_SERIES_ORDER
from connelly_backend.models import Series
from connelly_backend.utils.response import api_response, error_from_exception, serialize_series
from connelly_backend.utils.validation import (
    parse_json_body,
    validate_int_field,
    validate_object_list,
    validate_string_field,
)

logger = logging.getLogger()
logger.setLevel(logging.INFO)


class SeriesManager(Protocol):
    def create(self, title: str, books_order: list[tuple[str, int]]) -> Series: ...
    def list_all(self) -> list[Series]: ...


def create_series_handler(event: dict, service: SeriesManager) -> dict:
    """
    Create a series.

    Body: {"title": str, "books": [{"bookTitle": str, "order": int >= 1}]}
    Fails without saving anything if a book title does not exist.
    """
    logger.info("create_series_handler invoked")

    body, error = parse_json_body(event)
    if error:
        return error

    error = validate_string_field(body, "title", required=True) or validate_object_list(
        body,
        "books",
        [
            lambda b: validate_string_field(b, "bookTitle", required=True),
            lambda b: validate_int_field(b, "order", minimum=MIN_SERIES_ORDER, required=True),
        ],
    )
    if error:
        return error

    books_order = [(b["bookTitle"], b["order"]) for b in body.get("books") or []]

    try:
        series = service.create(body["title"], books_order)
    except Exception as e:
        return error_from_exception(e)

    logger.info(f"Created series {series.id}: {series.title}")
    return api_response(201, serialize_series(series))


def list_series_handler(event: dict, service: SeriesManager) -> dict:
    """List every series with its books resolved."""
    logger.info("list_series_handler invoked")

    try:
        series_list = service.list_all()
    except Exception as e:
        return error_from_exception(e)

    return api_response(200, [serialize_series(series) for series in series_list])
