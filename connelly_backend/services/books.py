"""
Book service: pass-through orchestration over the book repository.
"""

from __future__ import annotations

from typing import Protocol

from connelly_backend.models import Book


class BookStorage(Protocol):
    def save(self, book: Book) -> Book: ...
    def get_by_id(self, book_id: str) -> Book: ...
    def get_by_title(self, title: str) -> Book: ...
    def get_all(self) -> list[Book]: ...


class BookService:
    def __init__(self, storage: BookStorage):
        self._storage = storage

    def create(self, book: Book) -> Book:
        return self._storage.save(book)

    def get_by_id(self, book_id: str) -> Book:
        return self._storage.get_by_id(book_id)

    def get_by_title(self, title: str) -> Book:
        return self._storage.get_by_title(title)

    def list_all(self) -> list[Book]:
        return self._storage.get_all()
