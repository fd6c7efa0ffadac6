"""
Series service

Every (book title, order) pair is resolved to a stored book before the series
is saved, so a series never references a missing book at creation time.
Listing re-reads each referenced book by id (one lookup per book).
"""

from __future__ import annotations

import dataclasses
from typing import Protocol

from connelly_backend.models import Book, BookOrder, Series


class SeriesStorage(Protocol):
    def save(self, series: Series) -> Series: ...
    def get_all(self) -> list[Series]: ...


class BookLookup(Protocol):
    def get_by_id(self, book_id: str) -> Book: ...
    def get_by_title(self, title: str) -> Book: ...


class SeriesService:
    def __init__(self, series: SeriesStorage, books: BookLookup):
        self._series = series
        self._books = books

    def create(self, title: str, books_order: list[tuple[str, int]]) -> Series:
        """
        Create a series from (book title, order) pairs.

        Raises:
            NotFoundError: A book title does not exist; nothing is saved
        """
        books = [
            BookOrder(book=self._books.get_by_title(book_title), order=order)
            for book_title, order in books_order
        ]
        saved = self._series.save(Series(title=title, books=books))
        return self._resolve_books(saved)

    def list_all(self) -> list[Series]:
        return [self._resolve_books(series) for series in self._series.get_all()]

    def _resolve_books(self, series: Series) -> Series:
        books = [
            book_order
            if book_order.book.title
            else BookOrder(book=self._books.get_by_id(book_order.book.id), order=book_order.order)
            for book_order in series.books
        ]
        return dataclasses.replace(series, books=books)
