"""
DynamoDB store client for Connelly Books API

DynamoDB only supports lookups and uniqueness on the primary key. This client
emulates two things on top of it:

- server-generated identifiers (a UUID injected under "id")
- a uniqueness constraint plus secondary lookup on one chosen attribute

The second one uses a side table (unique_keys) whose items look like
{"id": "<table>#<unique value>", "table_id": "<primary key>"}. Claiming the
unique value and writing the record happen in one TransactWriteItems call, so
two writers racing for the same value cannot both succeed.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any, Callable

from botocore.exceptions import BotoCoreError, ClientError

from connelly_backend.config import UNIQUE_KEYS_TABLE_NAME
from connelly_backend.errors import CorruptedIndexError, DuplicateError, NotFoundError, StoreError

if TYPE_CHECKING:
    from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource

logger = logging.getLogger(__name__)

PRIMARY_KEY = "id"
UNIQUE_KEY_REFERENCE = "table_id"


def unique_key_id(table_name: str, unique_value: str) -> str:
    """Build the unique keys table id for a value, e.g. "books#The Black Echo"."""
    return f"{table_name}#{unique_value}"


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")  # type: ignore[union-attr]


def _is_unique_key_conflict(error: ClientError) -> bool:
    """
    Check whether a cancelled transaction failed on the unique key condition.

    The unique key Put is always the first item of the transaction, so its
    cancellation reason is the first one reported.
    """
    if _error_code(error) != "TransactionCanceledException":
        return False
    reasons = error.response.get("CancellationReasons") or []  # type: ignore[attr-defined]
    return bool(reasons) and reasons[0].get("Code") == "ConditionalCheckFailed"


class DynamoClient:
    """
    Generic store primitives shared by every repository.

    Args:
        dynamodb: boto3 DynamoDB service resource
        uuid_gen: Identifier factory (injected so tests can pin ids)
    """

    def __init__(
        self,
        dynamodb: "DynamoDBServiceResource",
        uuid_gen: Callable[[], uuid.UUID] = uuid.uuid4,
        unique_keys_table: str = UNIQUE_KEYS_TABLE_NAME,
    ):
        self._dynamodb = dynamodb
        self._uuid_gen = uuid_gen
        self.unique_keys_table = unique_keys_table

    def save(self, table_name: str, item: dict[str, Any], unique_value: str) -> str:
        """
        Insert an item and claim its unique value atomically.

        Args:
            table_name: Target table
            item: Attributes to store (the generated id is injected in place)
            unique_value: Value that must be unique within the table

        Returns:
            str: The generated primary key

        Raises:
            DuplicateError: The unique value is already claimed
            StoreError: Any other DynamoDB failure
        """
        table_id = str(self._uuid_gen())
        item[PRIMARY_KEY] = table_id

        unique_key_item = {
            PRIMARY_KEY: unique_key_id(table_name, unique_value),
            UNIQUE_KEY_REFERENCE: table_id,
        }

        try:
            self._dynamodb.meta.client.transact_write_items(
                TransactItems=[
                    {
                        "Put": {
                            "TableName": self.unique_keys_table,
                            "Item": unique_key_item,
                            "ConditionExpression": "attribute_not_exists(id)",
                        }
                    },
                    {"Put": {"TableName": table_name, "Item": item}},
                ]
            )
        except ClientError as e:
            if _is_unique_key_conflict(e):
                logger.info(f"Unique value already taken in {table_name}: {unique_value}")
                raise DuplicateError(table_name, unique_value) from e
            raise StoreError(f"failed to save item in {table_name}: {e}") from e
        except BotoCoreError as e:
            raise StoreError(f"failed to save item in {table_name}: {e}") from e

        logger.info(f"Saved {table_name} item {table_id}")
        return table_id

    def get_by_id(self, table_name: str, item_id: str, consistent_read: bool = False) -> dict[str, Any]:
        """
        Point lookup by primary key.

        Raises:
            NotFoundError: No item with that id
            StoreError: DynamoDB failure
        """
        try:
            response = self._dynamodb.Table(table_name).get_item(
                Key={PRIMARY_KEY: item_id}, ConsistentRead=consistent_read
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"failed to get item id: {item_id} from table: {table_name}: {e}") from e

        if "Item" not in response:
            raise NotFoundError(table_name, item_id)

        return response["Item"]

    def get_by_unique_key(
        self, table_name: str, unique_value: str, consistent_read: bool = False
    ) -> dict[str, Any]:
        """
        Look up an item through its unique value.

        Reads the unique keys entry first, then the referenced record.

        Raises:
            NotFoundError: The value was never claimed
            CorruptedIndexError: The unique key entry references a missing record
            StoreError: DynamoDB failure or malformed unique key entry
        """
        unique_key_item = self.get_by_id(
            self.unique_keys_table, unique_key_id(table_name, unique_value), consistent_read
        )

        table_id = unique_key_item.get(UNIQUE_KEY_REFERENCE)
        if not isinstance(table_id, str) or not table_id:
            raise StoreError(
                f"malformed unique key entry for table: {table_name}, value: {unique_value}"
            )

        try:
            return self.get_by_id(table_name, table_id, consistent_read)
        except NotFoundError as e:
            logger.error(
                f"Unique key {unique_key_id(table_name, unique_value)} references missing item {table_id}"
            )
            raise CorruptedIndexError(table_name, unique_value, table_id) from e

    def get_all(self, table_name: str) -> list[dict[str, Any]]:
        """Scan a whole table, following pagination."""
        table = self._dynamodb.Table(table_name)
        try:
            response = table.scan()
            items = response.get("Items", [])

            while "LastEvaluatedKey" in response:
                response = table.scan(ExclusiveStartKey=response["LastEvaluatedKey"])
                items.extend(response.get("Items", []))
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"failed to scan table: {table_name}: {e}") from e

        logger.info(f"Retrieved {len(items)} items from {table_name}")
        return items

    def append_to_list(
        self, table_name: str, item_id: str, attribute: str, values: list[Any]
    ) -> dict[str, Any]:
        """
        Append values to a list attribute of an existing item.

        Returns:
            dict: The item after the update

        Raises:
            NotFoundError: No item with that id
            StoreError: DynamoDB failure
        """
        try:
            response = self._dynamodb.Table(table_name).update_item(
                Key={PRIMARY_KEY: item_id},
                UpdateExpression="SET #attr = list_append(if_not_exists(#attr, :empty_list), :new_values)",
                ConditionExpression="attribute_exists(id)",
                ExpressionAttributeNames={"#attr": attribute},
                ExpressionAttributeValues={":new_values": list(values), ":empty_list": []},
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if _error_code(e) == "ConditionalCheckFailedException":
                raise NotFoundError(table_name, item_id) from e
            raise StoreError(f"failed to update {attribute} of {table_name} item {item_id}: {e}") from e
        except BotoCoreError as e:
            raise StoreError(f"failed to update {attribute} of {table_name} item {item_id}: {e}") from e

        return response["Attributes"]

    def create_tables(self, table_names: list[str]) -> None:
        """
        Create the unique keys table and the given tables if they don't exist.

        Every table uses a string hash key "id" and on-demand billing.
        """
        for table_name in [self.unique_keys_table, *table_names]:
            try:
                self._dynamodb.create_table(
                    TableName=table_name,
                    AttributeDefinitions=[{"AttributeName": PRIMARY_KEY, "AttributeType": "S"}],
                    KeySchema=[{"AttributeName": PRIMARY_KEY, "KeyType": "HASH"}],
                    BillingMode="PAY_PER_REQUEST",
                )
                logger.info(f"Created table {table_name}")
            except ClientError as e:
                if _error_code(e) == "ResourceInUseException":
                    continue
                raise StoreError(f"failed to create table {table_name}: {e}") from e
            except BotoCoreError as e:
                raise StoreError(f"failed to create table {table_name}: {e}") from e

    def ping(self) -> None:
        """Check connectivity with a one-table ListTables call."""
        try:
            self._dynamodb.meta.client.list_tables(Limit=1)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"failed to ping dynamodb: {e}") from e
