#!/usr/bin/env python3
"""
Create the DynamoDB tables used by the Connelly Books API.

Creates unique_keys, books, characters and series (hash key "id", on-demand
billing). Tables that already exist are left untouched, so the script is safe
to run repeatedly.

Environment Variables (optional):
    AWS_PROFILE: AWS profile name (default: boto3 credential chain)
    AWS_REGION: AWS region (default: 'us-east-1')
    DYNAMODB_ENDPOINT: Endpoint URL, e.g. http://localhost:8000 for DynamoDB Local

Usage:
    python scripts/create-tables.py [--endpoint URL] [--profile PROFILE] [--region REGION]

Example:
    # DynamoDB Local started with: docker run -p 8000:8000 amazon/dynamodb-local
    python3 scripts/create-tables.py --endpoint http://localhost:8000
"""

import argparse
import os
import sys

import boto3

from connelly_backend import config
from connelly_backend.errors import StoreError
from connelly_backend.utils.dynamodb import DynamoClient


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create Connelly Books API DynamoDB tables")
    parser.add_argument("--profile", default=os.environ.get("AWS_PROFILE"), help="AWS profile name")
    parser.add_argument("--region", default=config.AWS_REGION, help="AWS region")
    parser.add_argument(
        "--endpoint",
        default=config.DYNAMODB_ENDPOINT,
        help="DynamoDB endpoint URL (e.g. http://localhost:8000)",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    session = boto3.Session(profile_name=args.profile, region_name=args.region)
    dynamodb = session.resource("dynamodb", endpoint_url=args.endpoint)
    client = DynamoClient(dynamodb)

    tables = [config.BOOKS_TABLE_NAME, config.CHARACTERS_TABLE_NAME, config.SERIES_TABLE_NAME]

    print(f"Target endpoint: {args.endpoint or 'AWS ' + args.region}")
    print(f"Tables: {', '.join([client.unique_keys_table, *tables])}")

    try:
        client.create_tables(tables)
    except StoreError as e:
        print(f"Failed to create tables: {e}")
        return 1

    print("Tables ready")
    return 0


if __name__ == "__main__":
    sys.exit(main())
