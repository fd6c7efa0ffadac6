"""
Book repository: translates Book entities to DynamoDB items and back.

Titles are unique; saving a title that already exists returns the stored book.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Protocol

from connelly_backend.errors import DuplicateError
from connelly_backend.models import Adaptation, Book
from connelly_backend.utils.response import convert_decimal

logger = logging.getLogger(__name__)


class BookStore(Protocol):
    def save(self, table_name: str, item: dict[str, Any], unique_value: str) -> str: ...
    def get_by_id(self, table_name: str, item_id: str, consistent_read: bool = False) -> dict[str, Any]: ...
    def get_by_unique_key(
        self, table_name: str, unique_value: str, consistent_read: bool = False
    ) -> dict[str, Any]: ...
    def get_all(self, table_name: str) -> list[dict[str, Any]]: ...


def book_to_item(book: Book) -> dict[str, Any]:
    item: dict[str, Any] = {
        "title": book.title,
        "year": book.year,
        "blurb": book.blurb,
    }
    if book.adaptations:
        item["adaptations"] = [
            {"description": a.description, "imdb": a.imdb} for a in book.adaptations
        ]
    return item


def item_to_book(item: dict[str, Any]) -> Book:
    return Book(
        id=item.get("id", ""),
        title=item.get("title", ""),
        year=convert_decimal(item.get("year", 0)),
        blurb=item.get("blurb", ""),
        adaptations=[
            Adaptation(description=a.get("description", ""), imdb=a.get("imdb", ""))
            for a in item.get("adaptations", [])
        ],
    )


class BookRepository:
    def __init__(self, store: BookStore, table_name: str):
        self._store = store
        self.table_name = table_name

    def save(self, book: Book) -> Book:
        try:
            book_id = self._store.save(self.table_name, book_to_item(book), book.title)
        except DuplicateError:
            logger.info(f'Book "{book.title}" already exists, returning stored book')
            return self.get_by_title(book.title, consistent_read=True)

        return dataclasses.replace(book, id=book_id)

    def get_by_id(self, book_id: str) -> Book:
        return item_to_book(self._store.get_by_id(self.table_name, book_id))

    def get_by_title(self, title: str, consistent_read: bool = False) -> Book:
        return item_to_book(self._store.get_by_unique_key(self.table_name, title, consistent_read))

    def get_by_titles(self, titles: list[str]) -> list[Book]:
        return [self.get_by_title(title) for title in titles]

    def get_all(self) -> list[Book]:
        return [item_to_book(item) for item in self._store.get_all(self.table_name)]
