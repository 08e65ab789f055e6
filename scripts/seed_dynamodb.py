"""Create the mapping-configuration table and seed the default project's mappings.

Usage:
    python scripts/seed_dynamodb.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

import boto3

from gridrecon.models.mapping import MappingConfiguration
from gridrecon.persistence.dynamodb_backend import META_SK, entry_to_item

DEFAULT_TABLE = "gridrecon-mapping-config"
SEED_PATH = Path(__file__).resolve().parent.parent / "config" / "mapping_seed.json"


def create_tables(ddb: Any, suffix: str = "", table: str = DEFAULT_TABLE) -> None:
    """Create the mapping table. Skips if it already exists."""
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])

    table_name = f"{table}{suffix}"
    if table_name in existing:
        print(f"  Table {table_name} already exists, skipping")
        return
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
    print(f"  Created table {table_name}")


def seed_mapping_data(ddb: Any, suffix: str = "", table: str = DEFAULT_TABLE,
                      seed_path: Path = SEED_PATH) -> int:
    """Load mapping_seed.json into the table. Returns the number of entries written."""
    data = json.loads(seed_path.read_text())
    project_id = data.pop("project_id", "default")
    config = MappingConfiguration.model_validate(data)
    config.normalize()

    pk = f"PROJECT#{project_id}"
    tbl = ddb.Table(f"{table}{suffix}")
    with tbl.batch_writer() as batch:
        meta: dict[str, Any] = {"PK": pk, "SK": META_SK, "softwareVersion": config.software_version}
        if config.map_version is not None:
            meta["mapVersion"] = config.map_version
        batch.put_item(Item=meta)
        for position, entry in enumerate(config.entries):
            batch.put_item(Item=entry_to_item(pk, entry, position))
    print(f"  Seeded {len(config.entries)} mapping entries for project {project_id}")
    return len(config.entries)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed DynamoDB tables for GridRecon")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument("--seed-file", type=Path, default=SEED_PATH, help="Mapping seed JSON")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    create_tables(ddb, suffix=args.table_suffix)

    print("Seeding data...")
    seed_mapping_data(ddb, suffix=args.table_suffix, seed_path=args.seed_file)

    print("Done!")


if __name__ == "__main__":
    main()
