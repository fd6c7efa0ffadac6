"""
Handlers for character operations (create, get, add books)
"""

from __future__ import annotations

import logging
from typing import Protocol

from connelly_backend.models import Character
from connelly_backend.utils.response import api_response, error_from_exception, serialize_character
from connelly_backend.utils.validation import (
    get_path_param,
    parse_json_body,
    validate_string_field,
    validate_string_list,
)

logger = logging.getLogger()
logger.setLevel(logging.INFO)


class CharacterManager(Protocol):
    def create(self, name: str, book_titles: list[str], actors: list[str]) -> Character: ...
    def get(self, identifier: str) -> Character: ...
    def add_books(self, character_id: str, book_titles: list[str]) -> Character: ...


def create_character_handler(event: dict, service: CharacterManager) -> dict:
    """
    Create a character.

    Body: {"name": str, "bookTitles": [str]?, "actors": [str]?}
    Every book title must already exist.
    """
    logger.info("create_character_handler invoked")

    body, error = parse_json_body(event)
    if error:
        return error

    error = (
        validate_string_field(body, "name", required=True)
        or validate_string_list(body, "bookTitles")
        or validate_string_list(body, "actors")
    )
    if error:
        return error

    try:
        character = service.create(
            body["name"], body.get("bookTitles") or [], body.get("actors") or []
        )
    except Exception as e:
        return error_from_exception(e)

    logger.info(f"Created character {character.id}: {character.name}")
    return api_response(201, serialize_character(character))


def get_character_handler(event: dict, service: CharacterManager) -> dict:
    """
    Get a character. Path parameter 'character' is an id when it parses as a
    UUID, otherwise a name.
    """
    logger.info("get_character_handler invoked")

    identifier, error = get_path_param(event, "character")
    if error:
        return error

    try:
        character = service.get(identifier)
    except Exception as e:
        return error_from_exception(e)

    return api_response(200, serialize_character(character))


def add_character_books_handler(event: dict, service: CharacterManager) -> dict:
    """
    Append books to a character.

    Expects character id in path parameter 'characterID' and
    body {"bookTitles": [str]} with at least one title.
    """
    logger.info("add_character_books_handler invoked")

    character_id, error = get_path_param(event, "characterID")
    if error:
        return error

    body, error = parse_json_body(event)
    if error:
        return error

    error = validate_string_list(body, "bookTitles", required=True)
    if error:
        return error

    try:
        character = service.add_books(character_id, body["bookTitles"])
    except Exception as e:
        return error_from_exception(e)

    return api_response(200, serialize_character(character))
