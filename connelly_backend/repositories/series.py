"""
Series repository: a series is stored as its title plus (book_id, order) pairs.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Protocol

from connelly_backend.errors import DuplicateError
from connelly_backend.models import Book, BookOrder, Series
from connelly_backend.utils.response import convert_decimal

logger = logging.getLogger(__name__)


class SeriesStore(Protocol):
    def save(self, table_name: str, item: dict[str, Any], unique_value: str) -> str: ...
    def get_by_unique_key(
        self, table_name: str, unique_value: str, consistent_read: bool = False
    ) -> dict[str, Any]: ...
    def get_all(self, table_name: str) -> list[dict[str, Any]]: ...


def series_to_item(series: Series) -> dict[str, Any]:
    return {
        "title": series.title,
        "booksOrder": [
            {"book_id": book_order.book.id, "order": book_order.order}
            for book_order in series.books
        ],
    }


def item_to_series(item: dict[str, Any]) -> Series:
    return Series(
        id=item.get("id", ""),
        title=item.get("title", ""),
        books=[
            BookOrder(
                book=Book(id=entry.get("book_id", ""), title=""),
                order=convert_decimal(entry.get("order", 0)),
            )
            for entry in item.get("booksOrder", [])
        ],
    )


class SeriesRepository:
    def __init__(self, store: SeriesStore, table_name: str):
        self._store = store
        self.table_name = table_name

    def save(self, series: Series) -> Series:
        try:
            series_id = self._store.save(self.table_name, series_to_item(series), series.title)
        except DuplicateError:
            logger.info(f'Series "{series.title}" already exists, returning stored series')
            return self.get_by_title(series.title, consistent_read=True)

        return dataclasses.replace(series, id=series_id)

    def get_by_title(self, title: str, consistent_read: bool = False) -> Series:
        return item_to_series(self._store.get_by_unique_key(self.table_name, title, consistent_read))

    def get_all(self) -> list[Series]:
        return [item_to_series(item) for item in self._store.get_all(self.table_name)]
