"""
Domain entities for Connelly Books API
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Adaptation:
    description: str
    imdb: str = ""


@dataclass
class Book:
    title: str
    year: int = 0
    blurb: str = ""
    adaptations: list[Adaptation] = field(default_factory=list)
    id: str = ""


@dataclass
class Character:
    name: str
    books: list[Book] = field(default_factory=list)
    actors: list[str] = field(default_factory=list)
    id: str = ""


@dataclass
class BookOrder:
    """A book's position inside a series."""

    book: Book
    order: int


@dataclass
class Series:
    title: str
    books: list[BookOrder] = field(default_factory=list)
    id: str = ""
