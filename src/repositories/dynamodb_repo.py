"""DynamoDB repository for mirrored incidents and call logs."""

from typing import Any, Dict, Optional

import boto3

_dynamodb = None


def get_dynamodb():
    """Get or create the DynamoDB resource (reused across warm invocations)."""
    global _dynamodb
    if _dynamodb is None:
        _dynamodb = boto3.resource("dynamodb")
    return _dynamodb


class DynamoDbRepository:
    """Put/get helpers over one table."""

    def __init__(self, table_name: str, resource=None):
        self.table_name = table_name
        self.table = (resource or get_dynamodb()).Table(table_name)

    def put(self, item: Dict[str, Any]) -> None:
        """Insert an item, replacing any existing item with the same key."""
        self.table.put_item(Item=item)

    def get(self, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Fetch one item by primary key."""
        resp = self.table.get_item(Key=key)
        return resp.get("Item")
