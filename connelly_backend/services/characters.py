"""
Character service

Resolves book titles to stored books before persisting, aggregates actor
lists, and resolves stored book ids back to books on reads.
"""

from __future__ import annotations

import dataclasses
import logging
import uuid
from typing import Protocol

from connelly_backend.models import Book, Character

logger = logging.getLogger(__name__)


class CharacterStorage(Protocol):
    def save(self, character: Character) -> Character: ...
    def get_by_id(self, character_id: str) -> Character: ...
    def get_by_name(self, name: str) -> Character: ...
    def add_books(self, character_id: str, books: list[Book]) -> Character: ...


class BookLookup(Protocol):
    def get_by_id(self, book_id: str) -> Book: ...
    def get_by_title(self, title: str) -> Book: ...


def aggregate_actors(actors: list[str]) -> list[str]:
    """Strip names, drop blanks and duplicates, keep first-seen order."""
    seen: list[str] = []
    for actor in actors:
        name = actor.strip()
        if name and name not in seen:
            seen.append(name)
    return seen


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


class CharacterService:
    def __init__(self, characters: CharacterStorage, books: BookLookup):
        self._characters = characters
        self._books = books

    def create(self, name: str, book_titles: list[str], actors: list[str]) -> Character:
        books = self._books_by_titles(book_titles)
        saved = self._characters.save(
            Character(name=name, books=books, actors=aggregate_actors(actors))
        )
        return self._resolve_books(saved)

    def get(self, identifier: str) -> Character:
        """Look a character up by id when the identifier is a UUID, else by name."""
        if is_uuid(identifier):
            character = self._characters.get_by_id(identifier)
        else:
            character = self._characters.get_by_name(identifier)
        return self._resolve_books(character)

    def add_books(self, character_id: str, book_titles: list[str]) -> Character:
        books = self._books_by_titles(book_titles)
        character = self._characters.add_books(character_id, books)
        logger.info(f"Added {len(books)} books to character {character_id}")
        return self._resolve_books(character)

    def _books_by_titles(self, titles: list[str]) -> list[Book]:
        return [self._books.get_by_title(title) for title in titles]

    def _resolve_books(self, character: Character) -> Character:
        # Stored characters only carry book ids
        books = [book if book.title else self._books.get_by_id(book.id) for book in character.books]
        return dataclasses.replace(character, books=books)
