"""
Character repository: characters are stored with the ids of their books.

Names are unique; saving a name that already exists returns the stored
character. Books come back as id-only Book stubs for the service to resolve.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Protocol

from connelly_backend.errors import DuplicateError
from connelly_backend.models import Book, Character

logger = logging.getLogger(__name__)


class CharacterStore(Protocol):
    def save(self, table_name: str, item: dict[str, Any], unique_value: str) -> str: ...
    def get_by_id(self, table_name: str, item_id: str, consistent_read: bool = False) -> dict[str, Any]: ...
    def get_by_unique_key(
        self, table_name: str, unique_value: str, consistent_read: bool = False
    ) -> dict[str, Any]: ...
    def append_to_list(
        self, table_name: str, item_id: str, attribute: str, values: list[Any]
    ) -> dict[str, Any]: ...


def character_to_item(character: Character) -> dict[str, Any]:
    item: dict[str, Any] = {
        "name": character.name,
        "books": [book.id for book in character.books],
    }
    if character.actors:
        item["actors"] = list(character.actors)
    return item


def item_to_character(item: dict[str, Any]) -> Character:
    return Character(
        id=item.get("id", ""),
        name=item.get("name", ""),
        books=[Book(id=book_id, title="") for book_id in item.get("books", [])],
        actors=list(item.get("actors", [])),
    )


class CharacterRepository:
    def __init__(self, store: CharacterStore, table_name: str):
        self._store = store
        self.table_name = table_name

    def save(self, character: Character) -> Character:
        try:
            character_id = self._store.save(
                self.table_name, character_to_item(character), character.name
            )
        except DuplicateError:
            logger.info(f'Character "{character.name}" already exists, returning stored character')
            return self.get_by_name(character.name, consistent_read=True)

        return dataclasses.replace(character, id=character_id)

    def get_by_id(self, character_id: str) -> Character:
        return item_to_character(self._store.get_by_id(self.table_name, character_id))

    def get_by_name(self, name: str, consistent_read: bool = False) -> Character:
        return item_to_character(self._store.get_by_unique_key(self.table_name, name, consistent_read))

    def add_books(self, character_id: str, books: list[Book]) -> Character:
        item = self._store.append_to_list(
            self.table_name, character_id, "books", [book.id for book in books]
        )
        return item_to_character(item)
