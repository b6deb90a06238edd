"""Integration test fixtures: LocalStack DynamoDB."""

from __future__ import annotations

import os

import boto3
import pytest

from qrstickers.persistence.dynamodb_backend import DynamoDBTemplateCatalog

# Default LocalStack endpoint
LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")
TABLE_SUFFIX = "-inttest"


def _localstack_available() -> bool:
    """Check if LocalStack is reachable."""
    try:
        client = boto3.client("dynamodb", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)
        client.list_tables()
        return True
    except Exception:
        return False


skip_no_localstack = pytest.mark.skipif(
    not _localstack_available(),
    reason="LocalStack not available",
)


@pytest.fixture(scope="session")
def localstack_ddb():
    """DynamoDB resource pointing at LocalStack."""
    return boto3.resource("dynamodb", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)


@pytest.fixture(scope="session")
def seeded_catalog(localstack_ddb):
    """Create tables and seed system templates via the seed script."""
    from seed_catalog import create_tables, seed_system_templates

    create_tables(localstack_ddb, suffix=TABLE_SUFFIX)
    catalog = DynamoDBTemplateCatalog(
        table_suffix=TABLE_SUFFIX, region="us-east-1", endpoint_url=LOCALSTACK_URL,
    )
    seed_system_templates(catalog)
    return catalog
