"""DynamoDB backend implementing IMappingStore.

One item per mapping entry under the project partition, plus a META item
holding the configuration's version fields:

    PK = PROJECT#{project_id}    SK = MAP#{category}#{property}
    PK = PROJECT#{project_id}    SK = META
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

import boto3
from botocore.exceptions import ClientError

from gridrecon.core.exceptions import StoreError
from gridrecon.models.mapping import MappingConfiguration, MappingEntry, MappingSeverity

logger = logging.getLogger(__name__)

META_SK = "META"


def entry_to_item(pk: str, entry: MappingEntry, position: int) -> dict[str, Any]:
    item: dict[str, Any] = {
        "PK": pk,
        "SK": f"MAP#{entry.category}#{entry.property_name}",
        "category": entry.category,
        "propertyName": entry.property_name,
        "columnHeader": entry.column_header,
        "required": entry.required,
        "aliases": list(entry.aliases),
        "severity": entry.severity.value,
        "position": Decimal(position),
    }
    if entry.source_table:
        item["sourceTable"] = entry.source_table
    if entry.default_value is not None:
        item["defaultValue"] = entry.default_value
    return item


def item_to_entry(item: dict[str, Any]) -> MappingEntry:
    return MappingEntry(
        category=item["category"],
        property_name=item["propertyName"],
        column_header=item.get("columnHeader", ""),
        source_table=item.get("sourceTable"),
        required=bool(item.get("required", False)),
        aliases=list(item.get("aliases", [])),
        severity=MappingSeverity(item.get("severity", MappingSeverity.INFO.value)),
        default_value=item.get("defaultValue"),
    )


class DynamoDBMappingStore:
    """Production IMappingStore backed by a single DynamoDB table."""

    def __init__(self, table_name: str = "gridrecon-mapping-config", table_suffix: str = "",
                 region: str = "us-east-1", endpoint_url: str | None = None) -> None:
        self._table_name = f"{table_name}{table_suffix}"
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    @property
    def table_name(self) -> str:
        return self._table_name

    def _table(self):
        return self._ddb.Table(self._table_name)

    def _query_pk(self, pk: str) -> list[dict[str, Any]]:
        """All items in one partition, following pagination."""
        tbl = self._table()
        kwargs: dict[str, Any] = {
            "KeyConditionExpression": "PK = :pk",
            "ExpressionAttributeValues": {":pk": pk},
        }
        items: list[dict[str, Any]] = []
        while True:
            resp = tbl.query(**kwargs)
            items.extend(resp.get("Items", []))
            last = resp.get("LastEvaluatedKey")
            if not last:
                return items
            kwargs["ExclusiveStartKey"] = last

    def get_configuration(self, project_id: str) -> MappingConfiguration:
        pk = f"PROJECT#{project_id}"
        try:
            items = self._query_pk(pk)
        except ClientError as exc:
            raise StoreError(f"DynamoDB query failed for {pk!r}: {exc}") from exc

        config = MappingConfiguration()
        entries: list[tuple[int, MappingEntry]] = []
        for item in items:
            if item["SK"] == META_SK:
                config.software_version = item.get("softwareVersion", "")
                config.map_version = item.get("mapVersion")
            elif item["SK"].startswith("MAP#"):
                entries.append((int(item.get("position", 0)), item_to_entry(item)))
        config.entries = [entry for _, entry in sorted(entries, key=lambda pair: pair[0])]
        return config

    def save_configuration(self, project_id: str, config: MappingConfiguration) -> None:
        """Replace the project's stored configuration with ``config``."""
        pk = f"PROJECT#{project_id}"
        tbl = self._table()
        try:
            stale = {item["SK"] for item in self._query_pk(pk)}
            keep: set[str] = set()
            with tbl.batch_writer() as batch:
                meta: dict[str, Any] = {"PK": pk, "SK": META_SK, "softwareVersion": config.software_version}
                if config.map_version is not None:
                    meta["mapVersion"] = config.map_version
                batch.put_item(Item=meta)
                keep.add(META_SK)
                for position, entry in enumerate(config.entries):
                    item = entry_to_item(pk, entry, position)
                    if item["SK"] in keep:
                        logger.warning("Skipping duplicate mapping %s for project %s", item["SK"], project_id)
                        continue
                    keep.add(item["SK"])
                    batch.put_item(Item=item)
                for sk in stale - keep:
                    batch.delete_item(Key={"PK": pk, "SK": sk})
        except ClientError as exc:
            raise StoreError(f"DynamoDB write failed for {pk!r}: {exc}") from exc
        logger.info("Saved %d mapping entries for project %s", len(keep) - 1, project_id)
