"""DynamoDB backend implementing ICacheBackend.

Items live in a single PK/SK table. Expiry is stored in an ``expires_at``
epoch attribute which reads honour immediately; enabling DynamoDB TTL on that
attribute only takes care of eventual cleanup.
"""

from __future__ import annotations

import time
from typing import Any, Callable

import boto3
from botocore.exceptions import ClientError

from kotapay.core.exceptions import CacheError
from kotapay.persistence.lease import LeasedCacheMixin

SORT_KEY = "CACHE"


def _is_conditional_failure(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


class DynamoDBCacheBackend(LeasedCacheMixin):
    """ICacheBackend backed by DynamoDB conditional writes."""

    def __init__(self, table_name: str = "kotapay-cache", region: str = "us-east-1",
                 endpoint_url: str | None = None,
                 clock: Callable[[], float] = time.time) -> None:
        self._table_name = table_name
        self._region = region
        self._endpoint_url = endpoint_url
        self._clock = clock
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)
        self._table = self._ddb.Table(table_name)

    def _now(self) -> int:
        return int(self._clock())

    def _key(self, key: str) -> dict[str, str]:
        return {"PK": key, "SK": SORT_KEY}

    def _live_item(self, key: str) -> dict[str, Any] | None:
        resp = self._table.get_item(Key=self._key(key), ConsistentRead=True)
        item = resp.get("Item")
        if item is None:
            return None
        expires_at = item.get("expires_at")
        if expires_at is not None and int(expires_at) <= self._now():
            return None
        return item

    def get(self, key: str) -> str | None:
        try:
            item = self._live_item(key)
        except ClientError as exc:
            raise CacheError(f"DynamoDB GET failed for key={key!r}: {exc}") from exc
        if item is None:
            return None
        if "value" in item:
            return item["value"]
        return str(int(item.get("counter", 0)))

    def setex(self, key: str, ttl: int, value: str) -> None:
        try:
            self._table.put_item(Item={**self._key(key), "value": value, "expires_at": self._now() + ttl})
        except ClientError as exc:
            raise CacheError(f"DynamoDB PUT failed for key={key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._table.delete_item(Key=self._key(key))
        except ClientError as exc:
            raise CacheError(f"DynamoDB DELETE failed for key={key!r}: {exc}") from exc

    def incr(self, key: str) -> int:
        now = self._now()
        try:
            resp = self._table.update_item(
                Key=self._key(key),
                UpdateExpression="ADD #c :one",
                ConditionExpression="attribute_not_exists(expires_at) OR expires_at > :now",
                ExpressionAttributeNames={"#c": "counter"},
                ExpressionAttributeValues={":one": 1, ":now": now},
                ReturnValues="UPDATED_NEW",
            )
            return int(resp["Attributes"]["counter"])
        except ClientError as exc:
            if not _is_conditional_failure(exc):
                raise CacheError(f"DynamoDB ADD failed for key={key!r}: {exc}") from exc

        # expired counter not yet swept by TTL: remove it and start a new window
        try:
            self._table.delete_item(
                Key=self._key(key),
                ConditionExpression="expires_at <= :now",
                ExpressionAttributeValues={":now": now},
            )
        except ClientError as exc:
            if not _is_conditional_failure(exc):
                raise CacheError(f"DynamoDB DELETE failed for key={key!r}: {exc}") from exc
        return self.incr(key)

    def expire(self, key: str, ttl: int) -> None:
        try:
            self._table.update_item(
                Key=self._key(key),
                UpdateExpression="SET expires_at = :exp",
                ConditionExpression="attribute_exists(PK)",
                ExpressionAttributeValues={":exp": self._now() + ttl},
            )
        except ClientError as exc:
            if _is_conditional_failure(exc):
                return
            raise CacheError(f"DynamoDB EXPIRE failed for key={key!r}: {exc}") from exc

    def _try_lease(self, key: str, owner: str, ttl: int) -> bool:
        now = self._now()
        try:
            self._table.put_item(
                Item={**self._key(key), "owner": owner, "expires_at": now + ttl},
                ConditionExpression="attribute_not_exists(PK) OR expires_at <= :now",
                ExpressionAttributeValues={":now": now},
            )
            return True
        except ClientError as exc:
            if _is_conditional_failure(exc):
                return False
            raise CacheError(f"DynamoDB lease failed for key={key!r}: {exc}") from exc

    def _release_lease(self, key: str, owner: str) -> None:
        try:
            self._table.delete_item(
                Key=self._key(key),
                ConditionExpression="#o = :owner",
                ExpressionAttributeNames={"#o": "owner"},
                ExpressionAttributeValues={":owner": owner},
            )
        except ClientError as exc:
            if not _is_conditional_failure(exc):
                raise CacheError(f"DynamoDB lease release failed for key={key!r}: {exc}") from exc
