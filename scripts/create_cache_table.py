"""Create the DynamoDB table backing the shared token / rate-limit cache.

Usage:
    python scripts/create_cache_table.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
from typing import Any

import boto3

DEFAULT_TABLE = "kotapay-cache"
TTL_ATTRIBUTE = "expires_at"


def create_cache_table(ddb: Any, table_name: str = DEFAULT_TABLE) -> bool:
    """Create the PK/SK cache table with TTL on ``expires_at``.

    Returns False if the table already exists.
    """
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])
    if table_name in existing:
        print(f"  Table {table_name} already exists, skipping")
        return False

    client.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    client.get_waiter("table_exists").wait(TableName=table_name)
    client.update_time_to_live(
        TableName=table_name,
        TimeToLiveSpecification={"Enabled": True, "AttributeName": TTL_ATTRIBUTE},
    )
    print(f"  Created table {table_name} (TTL on {TTL_ATTRIBUTE})")
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the Kotapay DynamoDB cache table")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table", default=DEFAULT_TABLE, help="Table name")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating cache table...")
    create_cache_table(ddb, table_name=args.table)
    print("Done!")


if __name__ == "__main__":
    main()
