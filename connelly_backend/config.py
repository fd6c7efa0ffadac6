"""
Configuration and AWS resource initialization for Connelly Books API

This module provides:
- The DynamoDB service resource (optionally pointed at DynamoDB Local)
- Environment variable configuration
- Constants used across handlers
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import boto3
from botocore.config import Config

if TYPE_CHECKING:
    from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource

# Constants
MAX_STRING_LENGTH = 500  # Maximum length for string fields
MIN_BOOK_YEAR = 1
MIN_SERIES_ORDER = 1
UNIQUE_KEYS_TABLE_NAME = "unique_keys"

# Environment configuration
AWS_REGION = os.environ.get("AWS_REGION", "us-east-1")
DYNAMODB_ENDPOINT = os.environ.get("DYNAMODB_ENDPOINT") or None
BOOKS_TABLE_NAME = os.environ.get("BOOKS_TABLE", "books")
CHARACTERS_TABLE_NAME = os.environ.get("CHARACTERS_TABLE", "characters")
SERIES_TABLE_NAME = os.environ.get("SERIES_TABLE", "series")

# Bearer token required on write routes; empty means every write is rejected
ADMIN_TOKEN = os.environ.get("ADMIN_TOKEN", "")

# Token bucket: refill rate per client and maximum burst
RATE_LIMIT_PER_MINUTE = int(os.environ.get("RATE_LIMIT_PER_MINUTE", "5"))
RATE_LIMIT_BURST = int(os.environ.get("RATE_LIMIT_BURST", "10"))

# Create tables at cold start (DynamoDB Local / first deploy)
CREATE_TABLES = os.environ.get("CREATE_TABLES", "false").lower() in ("1", "true", "yes")


def create_dynamodb_resource() -> "DynamoDBServiceResource":
    """
    Build the DynamoDB service resource from environment configuration.

    When DYNAMODB_ENDPOINT is set (e.g. http://localhost:8000) the resource
    talks to DynamoDB Local instead of the regional endpoint.
    """
    return boto3.resource(
        "dynamodb",
        region_name=AWS_REGION,
        endpoint_url=DYNAMODB_ENDPOINT,
        config=Config(retries={"mode": "standard"}, connect_timeout=3, read_timeout=5),
    )
