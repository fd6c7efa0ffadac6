"""
Lambda entry point for Connelly Books API

Architecture:
- API Gateway (REST proxy) -> Lambda -> Router -> handler -> service -> repository
- Repositories -> DynamoClient -> DynamoDB (books, characters, series, unique_keys)

The dependency graph is built once per container (cold start) and reused by
every invocation. Nothing else is kept between requests except the rate
limiter's buckets.

Routes:
1. GET  /health: API and DynamoDB status
2. POST /books, GET /books, GET /books/{bookID}
3. POST /characters, GET /characters/{character}, POST /characters/{characterID}/books
4. POST /series, GET /series
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from connelly_backend import config
from connelly_backend.repositories.books import BookRepository
from connelly_backend.repositories.characters import CharacterRepository
from connelly_backend.repositories.series import SeriesRepository
from connelly_backend.router import Router
from connelly_backend.services.books import BookService
from connelly_backend.services.characters import CharacterService
from connelly_backend.services.health import HealthService
from connelly_backend.services.series import SeriesService
from connelly_backend.utils.dynamodb import DynamoClient
from connelly_backend.utils.rate_limit import RateLimiter
from connelly_backend.utils.response import error_from_exception

if TYPE_CHECKING:
    from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource

logger = logging.getLogger()
logger.setLevel(logging.INFO)


@dataclass
class Services:
    books: BookService
    characters: CharacterService
    series: SeriesService
    health: HealthService


def build_services(client: DynamoClient) -> Services:
    """Wire repositories and services on top of one store client."""
    books_repository = BookRepository(client, config.BOOKS_TABLE_NAME)
    characters_repository = CharacterRepository(client, config.CHARACTERS_TABLE_NAME)
    series_repository = SeriesRepository(client, config.SERIES_TABLE_NAME)

    return Services(
        books=BookService(books_repository),
        characters=CharacterService(characters_repository, books_repository),
        series=SeriesService(series_repository, books_repository),
        health=HealthService(client),
    )


def build_router(
    dynamodb: "DynamoDBServiceResource",
    admin_token: str = config.ADMIN_TOKEN,
    rate_limiter: RateLimiter | None = None,
    uuid_gen: Callable[[], uuid.UUID] = uuid.uuid4,
    create_tables: bool = config.CREATE_TABLES,
) -> Router:
    """
    Build the full request pipeline.

    Args:
        dynamodb: boto3 DynamoDB service resource
        admin_token: Bearer token for write routes
        rate_limiter: Limiter instance (defaults to the configured token bucket)
        uuid_gen: Identifier factory for new records
        create_tables: Create missing tables before serving
    """
    client = DynamoClient(dynamodb, uuid_gen)

    if create_tables:
        client.create_tables(
            [config.BOOKS_TABLE_NAME, config.CHARACTERS_TABLE_NAME, config.SERIES_TABLE_NAME]
        )

    if rate_limiter is None:
        rate_limiter = RateLimiter(config.RATE_LIMIT_PER_MINUTE, config.RATE_LIMIT_BURST)

    return Router(build_services(client), rate_limiter, admin_token)


_router: Router | None = None


def get_router() -> Router:
    """Build the router on first use and reuse it for the container's lifetime."""
    global _router
    if _router is None:
        logger.info("Initializing router")
        _router = build_router(config.create_dynamodb_resource())
    return _router


def lambda_handler(event, context):
    """
    Lambda handler for every API route.
    Returns an API Gateway proxy response.
    """
    logger.info(f"{event.get('httpMethod')} {event.get('path')}")

    try:
        return get_router().dispatch(event)
    except Exception as e:
        return error_from_exception(e)
