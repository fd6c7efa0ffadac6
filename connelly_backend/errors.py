"""
Exception hierarchy for Connelly Books API

Repositories and the store client raise these; handlers translate them into
HTTP responses (see utils.response.error_from_exception).

    ConnellyError
    ├── NotFoundError          → 404
    ├── DuplicateError         → recovered by repositories (idempotent create)
    ├── ValidationError        → 400
    └── StoreError             → 500
        └── CorruptedIndexError
"""

from __future__ import annotations


class ConnellyError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str = "unexpected error"):
        self.message = message
        super().__init__(message)


class NotFoundError(ConnellyError):
    """Raised when a record does not exist in its table."""

    def __init__(self, table: str, key: str):
        self.table = table
        self.key = key
        super().__init__(f"{table} item not found: {key}")


class DuplicateError(ConnellyError):
    """Raised when a unique value is already claimed in the unique keys table."""

    def __init__(self, table: str, unique_value: str):
        self.table = table
        self.unique_value = unique_value
        super().__init__(f'{table} already has an item with unique value "{unique_value}"')


class ValidationError(ConnellyError):
    """Raised when client input is malformed or fails validation."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class StoreError(ConnellyError):
    """Raised on DynamoDB transport or marshalling failures."""


class CorruptedIndexError(StoreError):
    """
    Raised when a unique key entry points at a record that no longer exists.

    This is never reported as NotFoundError: the index outliving its record
    is a data integrity problem, not a lookup miss.
    """

    def __init__(self, table: str, unique_value: str, table_id: str):
        self.table = table
        self.unique_value = unique_value
        self.table_id = table_id
        super().__init__(
            f'unique key "{table}#{unique_value}" references missing {table} item {table_id}'
        )
