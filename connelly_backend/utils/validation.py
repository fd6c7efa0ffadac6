"""
Request validation utilities for Connelly Books API

Provides functions to validate and extract data from API Gateway events.
Validators return an error response dict when validation fails, None if valid.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Callable
from urllib.parse import unquote

from connelly_backend.config import MAX_STRING_LENGTH
from connelly_backend.utils.response import error_response

logger = logging.getLogger()


def get_path_param(event: dict, param: str) -> tuple[str | None, dict | None]:
    """
    Extract and URL-decode a path parameter from API Gateway event.

    Args:
        event: API Gateway event
        param: Parameter name to extract

    Returns:
        tuple: (decoded_value, error_response) - If successful, error_response is None
    """
    path_params = event.get("pathParameters") or {}
    if not path_params.get(param):
        logger.warning(f"Missing {param} in path parameters")
        return None, error_response(400, f"{param} is required in path")
    return unquote(path_params[param]), None


def parse_json_body(event: dict) -> tuple[dict, dict | None]:
    """
    Parse a JSON object body from API Gateway event.

    Returns:
        tuple: (parsed_body, error_response) - If successful, error_response is None
               If error, parsed_body is empty dict (caller should check error first)
    """
    raw_body = event.get("body") or "{}"
    try:
        if event.get("isBase64Encoded"):
            raw_body = base64.b64decode(raw_body).decode("utf-8")
        body = json.loads(raw_body)
    except (json.JSONDecodeError, binascii.Error, UnicodeDecodeError):
        logger.warning("Invalid JSON in request body")
        return {}, error_response(400, "invalid request body")

    if not isinstance(body, dict):
        logger.warning("Request body is not a JSON object")
        return {}, error_response(400, "invalid request body")

    return body, None


def validate_string_field(
    body: dict, field: str, max_length: int = MAX_STRING_LENGTH, required: bool = False
) -> dict | None:
    """
    Validate a string field in request body.

    Args:
        body: Request body dictionary
        field: Field name to validate
        max_length: Maximum allowed length
        required: Whether the field is required (and must be non-blank)
    """
    if field not in body:
        if required:
            return error_response(400, f'Field "{field}" is required')
        return None

    value = body[field]
    if not isinstance(value, str):
        return error_response(400, f'Field "{field}" must be a string')

    if len(value) > max_length:
        return error_response(400, f'Field "{field}" exceeds maximum length of {max_length}')

    if required and not value.strip():
        return error_response(400, f'Field "{field}" cannot be empty')

    return None


def validate_int_field(body: dict, field: str, minimum: int, required: bool = False) -> dict | None:
    """
    Validate an integer field with a lower bound.

    Booleans are rejected even though Python treats them as ints.
    """
    if field not in body:
        if required:
            return error_response(400, f'Field "{field}" is required')
        return None

    value = body[field]
    if isinstance(value, bool) or not isinstance(value, int):
        return error_response(400, f'Field "{field}" must be an integer')

    if value < minimum:
        return error_response(400, f'Field "{field}" must be at least {minimum}')

    return None


def validate_string_list(body: dict, field: str, required: bool = False) -> dict | None:
    """Validate an optional list of non-empty strings."""
    if field not in body or body[field] is None:
        if required:
            return error_response(400, f'Field "{field}" is required')
        return None

    values = body[field]
    if not isinstance(values, list):
        return error_response(400, f'Field "{field}" must be a list of strings')

    for value in values:
        if not isinstance(value, str) or not value.strip():
            return error_response(400, f'Field "{field}" must only contain non-empty strings')
        if len(value) > MAX_STRING_LENGTH:
            return error_response(
                400, f'Field "{field}" entries exceed maximum length of {MAX_STRING_LENGTH}'
            )

    if required and not values:
        return error_response(400, f'Field "{field}" cannot be empty')

    return None


def validate_object_list(
    body: dict, field: str, validators: list[Callable[[dict], dict | None]]
) -> dict | None:
    """
    Validate an optional list of objects.

    Each validator is called as validator(entry) on every entry and returns
    an error response or None, like the field validators above.
    """
    if field not in body or body[field] is None:
        return None

    entries = body[field]
    if not isinstance(entries, list):
        return error_response(400, f'Field "{field}" must be a list')

    for entry in entries:
        if not isinstance(entry, dict):
            return error_response(400, f'Field "{field}" must only contain objects')
        for validator in validators:
            error = validator(entry)
            if error:
                return error

    return None
