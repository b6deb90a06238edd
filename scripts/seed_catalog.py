"""Create DynamoDB tables and seed the system sticker templates.

Usage:
    python scripts/seed_catalog.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import boto3

from qrstickers.core.protocols import ITemplateCatalog
from qrstickers.models.template import StickerTemplate, TemplateScope
from qrstickers.persistence.dynamodb_backend import (
    DEVICES_TABLE,
    MODEL_MAPPINGS_TABLE,
    TEMPLATES_TABLE,
    TYPE_MAPPINGS_TABLE,
    DynamoDBTemplateCatalog,
)

TABLE_DEFINITIONS: list[dict[str, Any]] = [
    {"name": TEMPLATES_TABLE},
    {"name": MODEL_MAPPINGS_TABLE},
    {"name": TYPE_MAPPINGS_TABLE},
    {"name": DEVICES_TABLE},
]

SEED_PATH = Path(__file__).resolve().parent.parent / "config" / "system_templates.json"


def create_tables(ddb: Any, suffix: str = "") -> None:
    """Create all 4 DynamoDB tables. Skips if table already exists."""
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])

    for defn in TABLE_DEFINITIONS:
        table_name = f"{defn['name']}{suffix}"
        if table_name in existing:
            print(f"  Table {table_name} already exists, skipping")
            continue
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


def load_system_templates(seed_path: Path = SEED_PATH) -> list[StickerTemplate]:
    """Build system templates from the JSON seed file."""
    data = json.loads(seed_path.read_text())
    templates = []
    for entry in data["templates"]:
        design = entry.pop("design")
        templates.append(
            StickerTemplate(
                scope=TemplateScope.global_(),
                template_json=json.dumps(design, indent=2),
                **entry,
            )
        )
    return templates


def seed_system_templates(catalog: ITemplateCatalog, seed_path: Path = SEED_PATH) -> tuple[int, int]:
    """Insert missing system templates and refresh existing ones by name.

    Returns:
        Tuple of (created, updated) counts.
    """
    existing = {t.name: t for t in catalog.list_templates(TemplateScope.global_())}
    created = updated = 0

    for template in load_system_templates(seed_path):
        current = existing.get(template.name)
        if current is None:
            catalog.add_template(template)
            created += 1
            continue
        catalog.update_template(
            current.model_copy(update={
                "template_json": template.template_json,
                "description": template.description,
                "updated_at": datetime.now(timezone.utc),
            })
        )
        updated += 1

    print(f"  Seeded system templates: {created} created, {updated} updated")
    return created, updated


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--endpoint-url", default=None)
    parser.add_argument("--region", default="us-east-1")
    parser.add_argument("--suffix", default="")
    args = parser.parse_args()

    kwargs: dict = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url
    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    create_tables(ddb, suffix=args.suffix)
    print("Seeding system templates...")
    catalog = DynamoDBTemplateCatalog(
        table_suffix=args.suffix, region=args.region, endpoint_url=args.endpoint_url,
    )
    seed_system_templates(catalog)
    print("Done.")


if __name__ == "__main__":
    main()
