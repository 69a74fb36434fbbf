from __future__ import annotations

import operator
import os
import uuid
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, cast

import boto3
from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

if TYPE_CHECKING:
    from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource
    from mypy_boto3_dynamodb.service_resource import Table as DynamoDBTable
else:
    DynamoDBServiceResource = Any  # type: ignore[assignment]
    DynamoDBTable = Any  # type: ignore[assignment]

from .models import Filter, RecordList

logger = Logger()

TABLE_NAMES: dict[str, str] = {
    "bookings": os.environ.get("BOOKINGS_TABLE", "bookings"),
    "resources": os.environ.get("RESOURCES_TABLE", "resources"),
    "instructors": os.environ.get("INSTRUCTORS_TABLE", "instructors"),
    "profiles": os.environ.get("PROFILES_TABLE", "profiles"),
}

RECORD_NOT_FOUND = "Record not found"

_dynamodb: DynamoDBServiceResource | None = None
_tables: dict[str, DynamoDBTable] = {}


def _table(resource: str) -> DynamoDBTable:
    global _dynamodb
    if resource not in TABLE_NAMES:
        raise ValueError(f"Unknown resource: {resource}")
    table = _tables.get(resource)
    if table is None:
        if _dynamodb is None:
            _dynamodb = boto3.resource("dynamodb")
        table = _dynamodb.Table(TABLE_NAMES[resource])
        _tables[resource] = table
    return table


def _is_condition_failure(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "eq": operator.eq,
    "ne": operator.ne,
    "lt": operator.lt,
    "lte": operator.le,
    "gt": operator.gt,
    "gte": operator.ge,
    "in": lambda actual, expected: actual in expected,
    "nin": lambda actual, expected: actual not in expected,
    "contains": lambda actual, expected: expected in actual,
}


def _matches(record: dict[str, Any], flt: Filter) -> bool:
    if flt.field not in record:
        # A missing attribute only satisfies negative predicates
        return flt.operator in ("ne", "nin")
    return bool(_OPERATORS[flt.operator](record[flt.field], flt.value))


def list_records(resource: str, filters: Iterable[Filter] | None = None) -> RecordList:
    table = _table(resource)
    filters = list(filters or [])
    items: list[dict[str, Any]] = []
    scan_kwargs: dict[str, Any] = {}
    # Scan pages until DynamoDB stops returning a continuation key
    while True:
        resp = cast(dict[str, Any], table.scan(**scan_kwargs))
        items.extend(it for it in resp.get("Items", []) if isinstance(it, dict))
        last_key = resp.get("LastEvaluatedKey")
        if not last_key:
            break
        scan_kwargs["ExclusiveStartKey"] = last_key

    data = [it for it in items if all(_matches(it, f) for f in filters)]
    logger.debug("Listed records", extra={"resource": resource, "scanned": len(items), "total": len(data)})
    return RecordList(data=data, total=len(data))


def get_record(resource: str, record_id: str) -> dict[str, Any]:
    resp = cast(dict[str, Any], _table(resource).get_item(Key={"id": record_id}))
    item = resp.get("Item")
    if not isinstance(item, dict):
        raise KeyError(RECORD_NOT_FOUND)
    return item


def create_record(resource: str, values: dict[str, Any]) -> dict[str, Any]:
    record_id = str(uuid.uuid4())
    item = {k: v for k, v in values.items() if v is not None and k != "id"}
    item["id"] = record_id

    logger.info("Creating record", extra={"resource": resource, "id": record_id})
    _table(resource).put_item(Item=item, ConditionExpression="attribute_not_exists(id)")  # type: ignore
    return get_record(resource, record_id)


def update_record(resource: str, record_id: str, values: dict[str, Any]) -> dict[str, Any]:
    set_parts: list[str] = []
    remove_parts: list[str] = []
    names: dict[str, str] = {}
    attr_values: dict[str, Any] = {}

    for name, value in values.items():
        if name == "id":
            continue
        names[f"#_{name}"] = name
        if value is None:
            remove_parts.append(f"#_{name}")
        else:
            attr_values[f":{name}"] = value
            set_parts.append(f"#_{name} = :{name}")

    if not set_parts and not remove_parts:
        return get_record(resource, record_id)

    update_expr = " ".join(
        part
        for part in (
            ("SET " + ", ".join(set_parts)) if set_parts else "",
            ("REMOVE " + ", ".join(remove_parts)) if remove_parts else "",
        )
        if part
    )

    logger.info("Updating record", extra={"resource": resource, "id": record_id, "fields": sorted(values)})
    kwargs: dict[str, Any] = {
        "Key": {"id": record_id},
        "UpdateExpression": update_expr,
        "ReturnValues": "ALL_NEW",
        "ConditionExpression": "attribute_exists(id)",
        "ExpressionAttributeNames": names,
    }
    if attr_values:
        kwargs["ExpressionAttributeValues"] = attr_values
    try:
        resp = cast(dict[str, Any], _table(resource).update_item(**kwargs))
    except ClientError as exc:
        if _is_condition_failure(exc):
            raise KeyError(RECORD_NOT_FOUND) from exc
        raise
    return cast(dict[str, Any], resp.get("Attributes") or {})


def delete_record(resource: str, record_id: str) -> None:
    logger.info("Deleting record", extra={"resource": resource, "id": record_id})
    _table(resource).delete_item(Key={"id": record_id})
