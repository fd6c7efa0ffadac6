"""
Unit tests for the DynamoDB store client
"""

import uuid
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from connelly_backend.errors import CorruptedIndexError, DuplicateError, NotFoundError, StoreError
from connelly_backend.utils.dynamodb import DynamoClient, unique_key_id

FIXED_ID = "c6767b2d-438b-4d4c-8b1a-659130a640ca"


def fixed_uuid():
    return uuid.UUID(FIXED_ID)


def client_error(code, operation="TransactWriteItems", **extra):
    response = {"Error": {"Code": code, "Message": "boom"}}
    response.update(extra)
    return ClientError(response, operation)


def make_client(tables=None):
    """Build a DynamoClient over a Mock resource; `tables` maps name -> Mock table."""
    dynamodb = Mock()
    tables = tables or {}
    dynamodb.Table.side_effect = lambda name: tables[name]
    return DynamoClient(dynamodb, fixed_uuid), dynamodb


# ============================================================================
# save
# ============================================================================


def test_save_writes_unique_key_and_item_in_one_transaction():
    """Test that save claims the unique value and writes the item atomically"""
    client, dynamodb = make_client()
    item = {"title": "The Black Echo", "year": 1992}

    table_id = client.save("books", item, "The Black Echo")

    assert table_id == FIXED_ID
    assert item["id"] == FIXED_ID
    dynamodb.meta.client.transact_write_items.assert_called_once_with(
        TransactItems=[
            {
                "Put": {
                    "TableName": "unique_keys",
                    "Item": {"id": "books#The Black Echo", "table_id": FIXED_ID},
                    "ConditionExpression": "attribute_not_exists(id)",
                }
            },
            {"Put": {"TableName": "books", "Item": {"id": FIXED_ID, "title": "The Black Echo", "year": 1992}}},
        ]
    )


def test_save_translates_conditional_check_failure_to_duplicate():
    """Test that a cancelled transaction on the unique key raises DuplicateError"""
    client, dynamodb = make_client()
    dynamodb.meta.client.transact_write_items.side_effect = client_error(
        "TransactionCanceledException",
        CancellationReasons=[{"Code": "ConditionalCheckFailed"}, {"Code": "None"}],
    )

    with pytest.raises(DuplicateError) as exc_info:
        client.save("books", {"title": "The Black Echo"}, "The Black Echo")

    assert exc_info.value.table == "books"
    assert exc_info.value.unique_value == "The Black Echo"


def test_save_other_cancellation_reason_is_store_error():
    """Test that a transaction cancelled for another reason is a generic store failure"""
    client, dynamodb = make_client()
    dynamodb.meta.client.transact_write_items.side_effect = client_error(
        "TransactionCanceledException",
        CancellationReasons=[{"Code": "None"}, {"Code": "ValidationError"}],
    )

    with pytest.raises(StoreError) as exc_info:
        client.save("books", {"title": "The Black Echo"}, "The Black Echo")

    assert not isinstance(exc_info.value, DuplicateError)


def test_save_client_error_is_store_error():
    """Test that other DynamoDB errors become StoreError"""
    client, dynamodb = make_client()
    dynamodb.meta.client.transact_write_items.side_effect = client_error("InternalServerError")

    with pytest.raises(StoreError):
        client.save("books", {"title": "The Black Echo"}, "The Black Echo")


def test_save_transport_error_is_store_error():
    """Test that connection failures become StoreError"""
    client, dynamodb = make_client()
    dynamodb.meta.client.transact_write_items.side_effect = EndpointConnectionError(
        endpoint_url="http://localhost:8000"
    )

    with pytest.raises(StoreError):
        client.save("books", {"title": "The Black Echo"}, "The Black Echo")


# ============================================================================
# get_by_id / get_by_unique_key
# ============================================================================


def test_get_by_id_returns_item():
    """Test point lookup by primary key"""
    books_table = Mock()
    books_table.get_item.return_value = {"Item": {"id": "book-123", "title": "The Black Echo"}}
    client, _ = make_client({"books": books_table})

    item = client.get_by_id("books", "book-123")

    assert item == {"id": "book-123", "title": "The Black Echo"}
    books_table.get_item.assert_called_once_with(Key={"id": "book-123"}, ConsistentRead=False)


def test_get_by_id_not_found():
    """Test that a missing item raises NotFoundError"""
    books_table = Mock()
    books_table.get_item.return_value = {}
    client, _ = make_client({"books": books_table})

    with pytest.raises(NotFoundError):
        client.get_by_id("books", "missing-id")


def test_get_by_id_client_error():
    """Test that DynamoDB failures during lookup become StoreError"""
    books_table = Mock()
    books_table.get_item.side_effect = client_error("InternalServerError", "GetItem")
    client, _ = make_client({"books": books_table})

    with pytest.raises(StoreError):
        client.get_by_id("books", "book-123")


def test_get_by_unique_key_follows_index():
    """Test that the unique key entry is read first and then the referenced record"""
    unique_keys_table = Mock()
    unique_keys_table.get_item.return_value = {
        "Item": {"id": "books#The Black Echo", "table_id": "book-123"}
    }
    books_table = Mock()
    books_table.get_item.return_value = {"Item": {"id": "book-123", "title": "The Black Echo"}}
    client, _ = make_client({"unique_keys": unique_keys_table, "books": books_table})

    item = client.get_by_unique_key("books", "The Black Echo")

    assert item["id"] == "book-123"
    unique_keys_table.get_item.assert_called_once_with(
        Key={"id": "books#The Black Echo"}, ConsistentRead=False
    )
    books_table.get_item.assert_called_once_with(Key={"id": "book-123"}, ConsistentRead=False)


def test_get_by_unique_key_never_saved_is_not_found():
    """Test that a value with no unique key entry raises NotFoundError"""
    unique_keys_table = Mock()
    unique_keys_table.get_item.return_value = {}
    client, _ = make_client({"unique_keys": unique_keys_table})

    with pytest.raises(NotFoundError):
        client.get_by_unique_key("books", "The Overlook")


def test_get_by_unique_key_missing_record_is_corrupted_index():
    """Test that an index entry pointing at a missing record is not reported as NotFound"""
    unique_keys_table = Mock()
    unique_keys_table.get_item.return_value = {
        "Item": {"id": "books#The Black Echo", "table_id": "ghost-id"}
    }
    books_table = Mock()
    books_table.get_item.return_value = {}
    client, _ = make_client({"unique_keys": unique_keys_table, "books": books_table})

    with pytest.raises(CorruptedIndexError) as exc_info:
        client.get_by_unique_key("books", "The Black Echo")

    assert not isinstance(exc_info.value, NotFoundError)
    assert exc_info.value.table_id == "ghost-id"


def test_get_by_unique_key_malformed_entry():
    """Test that an index entry without table_id is a store error"""
    unique_keys_table = Mock()
    unique_keys_table.get_item.return_value = {"Item": {"id": "books#The Black Echo"}}
    client, _ = make_client({"unique_keys": unique_keys_table})

    with pytest.raises(StoreError):
        client.get_by_unique_key("books", "The Black Echo")


def test_unique_key_id_format():
    assert unique_key_id("series", "Harry Bosch") == "series#Harry Bosch"


# ============================================================================
# get_all / append_to_list
# ============================================================================


def test_get_all_follows_pagination():
    """Test that scans continue while DynamoDB returns LastEvaluatedKey"""
    series_table = Mock()
    series_table.scan.side_effect = [
        {"Items": [{"id": "s1"}], "LastEvaluatedKey": {"id": "s1"}},
        {"Items": [{"id": "s2"}]},
    ]
    client, _ = make_client({"series": series_table})

    items = client.get_all("series")

    assert [i["id"] for i in items] == ["s1", "s2"]
    assert series_table.scan.call_count == 2
    series_table.scan.assert_called_with(ExclusiveStartKey={"id": "s1"})


def test_get_all_client_error():
    series_table = Mock()
    series_table.scan.side_effect = client_error("InternalServerError", "Scan")
    client, _ = make_client({"series": series_table})

    with pytest.raises(StoreError):
        client.get_all("series")


def test_append_to_list_returns_updated_item():
    """Test that books are appended with list_append on an existing item"""
    characters_table = Mock()
    characters_table.update_item.return_value = {
        "Attributes": {"id": "char-1", "name": "Harry Bosch", "books": ["b1", "b2"]}
    }
    client, _ = make_client({"characters": characters_table})

    item = client.append_to_list("characters", "char-1", "books", ["b2"])

    assert item["books"] == ["b1", "b2"]
    call_kwargs = characters_table.update_item.call_args.kwargs
    assert call_kwargs["Key"] == {"id": "char-1"}
    assert call_kwargs["ConditionExpression"] == "attribute_exists(id)"
    assert call_kwargs["ExpressionAttributeNames"] == {"#attr": "books"}
    assert call_kwargs["ExpressionAttributeValues"] == {":new_values": ["b2"], ":empty_list": []}


def test_append_to_list_missing_item_is_not_found():
    characters_table = Mock()
    characters_table.update_item.side_effect = client_error(
        "ConditionalCheckFailedException", "UpdateItem"
    )
    client, _ = make_client({"characters": characters_table})

    with pytest.raises(NotFoundError):
        client.append_to_list("characters", "missing", "books", ["b1"])


# ============================================================================
# create_tables / ping
# ============================================================================


def test_create_tables_skips_existing_tables():
    """Test that tables which already exist are skipped"""
    client, dynamodb = make_client()
    dynamodb.create_table.side_effect = [
        client_error("ResourceInUseException", "CreateTable"),
        None,
    ]

    client.create_tables(["books"])

    created = [c.kwargs["TableName"] for c in dynamodb.create_table.call_args_list]
    assert created == ["unique_keys", "books"]
    assert dynamodb.create_table.call_args.kwargs["KeySchema"] == [
        {"AttributeName": "id", "KeyType": "HASH"}
    ]


def test_create_tables_other_error_raises():
    client, dynamodb = make_client()
    dynamodb.create_table.side_effect = client_error("AccessDeniedException", "CreateTable")

    with pytest.raises(StoreError):
        client.create_tables(["books"])


def test_ping_success():
    client, dynamodb = make_client()

    client.ping()

    dynamodb.meta.client.list_tables.assert_called_once_with(Limit=1)


def test_ping_failure():
    client, dynamodb = make_client()
    dynamodb.meta.client.list_tables.side_effect = EndpointConnectionError(
        endpoint_url="http://localhost:8000"
    )

    with pytest.raises(StoreError):
        client.ping()
