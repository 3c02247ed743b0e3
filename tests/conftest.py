"""
Shared fixtures:
- schema documents in .bprint form
- table metadata with a global and a local index
- an output directory and a helper that runs the Java generator
"""

from __future__ import annotations

from pathlib import Path

import pytest

from chaim_codegen.codegen import Schema, TableMetadata, generate_code
from chaim_codegen.codegen.languages.java import JavaGenerator

PACKAGE = "com.acme.orders"


def package_dir(root: Path, sub: str | None = None) -> Path:
    path = root.joinpath(*PACKAGE.split("."))
    return path / sub if sub else path


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "generated"


@pytest.fixture
def simple_schema():
    """Partition key only, no indexes."""
    return {
        "schemaVersion": "1.0",
        "entityName": "User",
        "description": "A registered user",
        "identity": {"fields": ["pk"]},
        "fields": [
            {"name": "pk", "type": "string", "required": True},
            {"name": "email", "type": "string"},
        ],
    }


@pytest.fixture
def order_schema():
    """Partition and sort key, plus the attributes the indexes use."""
    return {
        "schemaVersion": "1.0",
        "entityName": "Order",
        "description": "A customer order",
        "identity": {"fields": ["pk", "sk"]},
        "fields": [
            {"name": "pk", "type": "string", "required": True},
            {"name": "sk", "type": "string", "required": True},
            {"name": "email", "type": "string"},
            {"name": "createdAt", "type": "timestamp"},
            {"name": "total", "type": "number.decimal", "constraints": {"min": 0, "max": 100}},
            {
                "name": "status",
                "type": "string",
                "required": True,
                "enumValues": ["PENDING", "SHIPPED", "DELIVERED"],
                "default": "PENDING",
            },
            {
                "name": "shipping-address",
                "type": "map",
                "fields": [
                    {"name": "street", "type": "string", "required": True},
                    {"name": "zip", "type": "string", "constraints": {"pattern": "^[0-9]{5}$"}},
                ],
            },
            {
                "name": "lines",
                "type": "list",
                "items": {
                    "type": "map",
                    "fields": [
                        {"name": "sku", "type": "string", "required": True},
                        {"name": "quantity", "type": "number", "constraints": {"min": 1}},
                    ],
                },
            },
        ],
    }


@pytest.fixture
def table_metadata():
    return {
        "tableName": "orders",
        "tableArn": "arn:aws:dynamodb:us-east-1:123456789012:table/orders",
        "region": "us-east-1",
        "globalSecondaryIndexes": [
            {
                "indexName": "gsi1",
                "partitionKey": "email",
                "sortKey": "createdAt",
                "projectionType": "ALL",
            }
        ],
        "localSecondaryIndexes": [
            {"indexName": "by-created", "sortKey": "createdAt", "projectionType": "KEYS_ONLY"}
        ],
    }


@pytest.fixture
def generate(output_dir):
    """Run the Java generator and return the GenerationResult."""

    def run(schemas, table=None, **options):
        generator = JavaGenerator({"package_name": PACKAGE, **options})
        parsed = [Schema.from_dict(s) for s in schemas]
        metadata = TableMetadata.from_dict(table) if table is not None else None
        return generate_code(generator, parsed, output_dir, metadata)

    return run


@pytest.fixture
def read(output_dir):
    """Read a generated file: read("keys", "OrderKeys") or read(None, "Order")."""

    def run(sub, class_name):
        return (package_dir(output_dir, sub) / f"{class_name}.java").read_text(encoding="utf-8")

    return run
