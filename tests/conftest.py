"""
Shared fixtures: an in-memory stand-in for the boto3 DynamoDB service resource.

Only the calls DynamoClient makes are supported. Writes store numbers as
Decimal, like DynamoDB returns them, and transactions are applied atomically
under one lock.
"""

import copy
import threading
from decimal import Decimal
from types import SimpleNamespace

import pytest
from botocore.exceptions import ClientError


def _client_error(code, operation, **extra):
    response = {"Error": {"Code": code, "Message": code}}
    response.update(extra)
    return ClientError(response, operation)


def _to_dynamo(value):
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, list):
        return [_to_dynamo(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_dynamo(v) for k, v in value.items()}
    return value


class FakeTable:
    def __init__(self, db, name):
        self._db = db
        self.name = name

    @property
    def _items(self):
        if self.name not in self._db.tables:
            raise _client_error("ResourceNotFoundException", "GetItem")
        return self._db.tables[self.name]

    def get_item(self, Key, ConsistentRead=False):
        with self._db.lock:
            item = self._items.get(Key["id"])
            return {"Item": copy.deepcopy(item)} if item is not None else {}

    def put_item(self, Item):
        with self._db.lock:
            self._items[Item["id"]] = _to_dynamo(copy.deepcopy(Item))
        return {}

    def delete_item(self, Key):
        with self._db.lock:
            self._items.pop(Key["id"], None)
        return {}

    def scan(self, ExclusiveStartKey=None):
        with self._db.lock:
            ids = list(self._items)
            start = ids.index(ExclusiveStartKey["id"]) + 1 if ExclusiveStartKey else 0
            page_ids = ids[start:start + self._db.page_size]
            response = {"Items": [copy.deepcopy(self._items[i]) for i in page_ids]}
            if start + self._db.page_size < len(ids):
                response["LastEvaluatedKey"] = {"id": page_ids[-1]}
            return response

    def update_item(self, Key, UpdateExpression, ConditionExpression, ExpressionAttributeNames,
                    ExpressionAttributeValues, ReturnValues):
        # Supports the list_append expression DynamoClient.append_to_list sends
        with self._db.lock:
            item = self._items.get(Key["id"])
            if item is None:
                raise _client_error("ConditionalCheckFailedException", "UpdateItem")
            attribute = ExpressionAttributeNames["#attr"]
            current = item.get(attribute, ExpressionAttributeValues[":empty_list"])
            item[attribute] = list(current) + _to_dynamo(list(ExpressionAttributeValues[":new_values"]))
            return {"Attributes": copy.deepcopy(item)}


class FakeDynamoClient:
    def __init__(self, db):
        self._db = db

    def transact_write_items(self, TransactItems):
        with self._db.lock:
            reasons = []
            for entry in TransactItems:
                put = entry["Put"]
                table = self._db.tables.get(put["TableName"])
                if table is None:
                    raise _client_error("ResourceNotFoundException", "TransactWriteItems")
                if put.get("ConditionExpression") == "attribute_not_exists(id)" and put["Item"]["id"] in table:
                    reasons.append({"Code": "ConditionalCheckFailed"})
                else:
                    reasons.append({"Code": "None"})

            if any(r["Code"] != "None" for r in reasons):
                raise _client_error(
                    "TransactionCanceledException", "TransactWriteItems", CancellationReasons=reasons
                )

            for entry in TransactItems:
                put = entry["Put"]
                self._db.tables[put["TableName"]][put["Item"]["id"]] = _to_dynamo(copy.deepcopy(put["Item"]))
        return {}

    def list_tables(self, Limit=100):
        return {"TableNames": sorted(self._db.tables)[:Limit]}


class FakeDynamoDB:
    """Minimal boto3 DynamoDB service resource backed by dicts."""

    def __init__(self, page_size=100):
        self.tables = {}
        self.lock = threading.RLock()
        self.page_size = page_size
        self.meta = SimpleNamespace(client=FakeDynamoClient(self))

    def Table(self, name):
        return FakeTable(self, name)

    def create_table(self, TableName, **kwargs):
        with self.lock:
            if TableName in self.tables:
                raise _client_error("ResourceInUseException", "CreateTable")
            self.tables[TableName] = {}
        return FakeTable(self, TableName)


@pytest.fixture
def fake_dynamodb():
    return FakeDynamoDB()
