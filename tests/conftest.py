from __future__ import annotations

import os
from typing import Any

os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "ClubBooking")

import pytest  # noqa: E402
from botocore.exceptions import ClientError  # noqa: E402

from clubbooking import store  # noqa: E402


class FakeTable:
    def __init__(self, page_size: int | None = None):
        self.items: dict[str, dict[str, Any]] = {}
        self.page_size = page_size
        self.scans = 0

    def put_item(self, Item, ConditionExpression=None):  # noqa NOSONAR
        self.items[Item["id"]] = dict(Item)

    def get_item(self, Key):  # noqa NOSONAR
        item = self.items.get(Key["id"])
        return {"Item": dict(item)} if item else {}

    def update_item(self, **kwargs):
        key = kwargs["Key"]["id"]
        if key not in self.items:
            raise ClientError(
                {"Error": {"Code": "ConditionalCheckFailedException", "Message": "missing"}},
                "UpdateItem",
            )
        attrs = self.items[key]
        eav = kwargs.get("ExpressionAttributeValues") or {}
        ean = kwargs.get("ExpressionAttributeNames") or {}
        update_expr = kwargs.get("UpdateExpression", "")
        if "SET" in update_expr:
            set_part = update_expr.split("SET", 1)[1].split("REMOVE")[0]
            for assign in [s.strip() for s in set_part.split(",") if s.strip()]:
                name, val = [s.strip() for s in assign.split("=")]
                attrs[ean[name]] = eav[val]
        if "REMOVE" in update_expr:
            remove_part = update_expr.split("REMOVE", 1)[1]
            for name in [s.strip() for s in remove_part.split(",") if s.strip()]:
                attrs.pop(ean[name], None)
        return {"Attributes": dict(attrs)}

    def delete_item(self, Key):  # noqa NOSONAR
        self.items.pop(Key["id"], None)

    def scan(self, **kwargs):
        self.scans += 1
        items = [dict(it) for it in self.items.values()]
        if self.page_size is None:
            return {"Items": items}
        start = int(kwargs.get("ExclusiveStartKey", {}).get("offset", 0))
        page = items[start : start + self.page_size]
        resp: dict[str, Any] = {"Items": page}
        if start + self.page_size < len(items):
            resp["LastEvaluatedKey"] = {"offset": start + self.page_size}
        return resp


@pytest.fixture(autouse=True)
def fake_tables(monkeypatch: pytest.MonkeyPatch) -> dict[str, FakeTable]:
    tables = {name: FakeTable() for name in store.TABLE_NAMES}
    monkeypatch.setattr(store, "_tables", tables)
    return tables
