"""
Core schema representation for code generation.

Parses .bprint entity documents and table metadata into a normalized
internal format that generators can work with consistently.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any


DEFAULT_ENTITY_NAME = "Entity"


class SchemaError(Exception):
    """Exception raised for malformed schema or table metadata documents."""

    pass


@dataclass
class Constraints:
    """Field-level validation constraints."""

    # String constraints
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None

    # Number constraints
    min: Optional[float] = None
    max: Optional[float] = None

    def is_empty(self) -> bool:
        """True when no constraint is set."""
        return (
            self.min_length is None
            and self.max_length is None
            and self.pattern is None
            and self.min is None
            and self.max is None
        )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Constraints"]:
        if not data:
            return None
        return cls(
            min_length=data.get("minLength"),
            max_length=data.get("maxLength"),
            pattern=data.get("pattern"),
            min=data.get("min"),
            max=data.get("max"),
        )


@dataclass
class ListItems:
    """Element definition for list fields."""

    type: str
    fields: List["Field"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "ListItems":
        if not isinstance(data, dict):
            raise SchemaError(f"'items' of {path} must be an object")
        return cls(
            type=data.get("type") or "string",
            fields=_parse_fields(data.get("fields"), f"{path}[]"),
        )


@dataclass
class Field:
    """
    A single attribute of an entity or of a nested map structure.

    Nested map fields and list item fields use the same shape; their
    children live in ``fields`` and ``items`` respectively.
    """

    name: str
    type: str = "string"
    name_override: Optional[str] = None
    required: bool = False
    nullable: bool = False
    description: Optional[str] = None
    default_value: Any = None
    enum_values: List[str] = field(default_factory=list)
    constraints: Optional[Constraints] = None
    items: Optional[ListItems] = None
    fields: List["Field"] = field(default_factory=list)

    @property
    def has_default(self) -> bool:
        return self.default_value is not None

    @property
    def has_enum(self) -> bool:
        return bool(self.enum_values)

    @property
    def has_constraints(self) -> bool:
        return self.constraints is not None and not self.constraints.is_empty()

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str = "") -> "Field":
        """
        Build a field from its JSON form.

        Both ``default``/``defaultValue`` and ``enum``/``enumValues`` spellings
        are accepted. Unknown keys are ignored.
        """
        if not isinstance(data, dict):
            raise SchemaError(f"Field definition at {path or 'root'} must be an object")

        name = data.get("name")
        if not name or not isinstance(name, str):
            raise SchemaError(f"Field at {path or 'root'} is missing a name")

        field_path = f"{path}.{name}" if path else name

        default_value = data.get("defaultValue", data.get("default"))
        enum_values = data.get("enumValues", data.get("enum")) or []
        items = data.get("items")

        return cls(
            name=name,
            type=data.get("type") or "string",
            name_override=data.get("nameOverride") or None,
            required=bool(data.get("required", False)),
            nullable=bool(data.get("nullable", False)),
            description=data.get("description") or None,
            default_value=default_value,
            enum_values=[str(v) for v in enum_values],
            constraints=Constraints.from_dict(data.get("constraints")),
            items=ListItems.from_dict(items, field_path) if items is not None else None,
            fields=_parse_fields(data.get("fields"), field_path),
        )


def _parse_fields(raw: Optional[List[Dict[str, Any]]], path: str) -> List[Field]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise SchemaError(f"'fields' of {path or 'schema'} must be a list")
    return [Field.from_dict(item, path) for item in raw]


@dataclass
class Schema:
    """A declarative entity definition."""

    entity_name: str
    identity_fields: List[str]
    fields: List[Field] = field(default_factory=list)
    description: Optional[str] = None
    schema_version: Optional[str] = None

    @property
    def partition_key(self) -> str:
        return self.identity_fields[0]

    @property
    def sort_key(self) -> Optional[str]:
        return self.identity_fields[1] if len(self.identity_fields) > 1 else None

    def get_field(self, name: str) -> Optional[Field]:
        """Get top-level field by raw attribute name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schema":
        """
        Parse a schema document.

        Raises:
            SchemaError: If the identity block is missing or names an
                attribute that is not declared in ``fields``.
        """
        if not isinstance(data, dict):
            raise SchemaError("Schema document must be a JSON object")

        entity_name = data.get("entityName") or DEFAULT_ENTITY_NAME

        identity = data.get("identity") or {}
        identity_fields = identity.get("fields") if isinstance(identity, dict) else None
        if not identity_fields or not isinstance(identity_fields, list):
            raise SchemaError(f"Schema '{entity_name}' has no identity.fields")
        if len(identity_fields) > 2:
            raise SchemaError(
                f"Schema '{entity_name}' declares {len(identity_fields)} identity fields; "
                "expected a partition key and an optional sort key"
            )

        schema = cls(
            entity_name=entity_name,
            identity_fields=list(identity_fields),
            fields=_parse_fields(data.get("fields"), ""),
            description=data.get("description") or None,
            schema_version=(
                str(data["schemaVersion"]) if data.get("schemaVersion") is not None else None
            ),
        )

        for key_name in schema.identity_fields:
            if schema.get_field(key_name) is None:
                raise SchemaError(
                    f"Identity field '{key_name}' of '{entity_name}' is not declared in fields"
                )

        return schema


@dataclass
class SecondaryIndex:
    """A global or local secondary index declaration."""

    name: str
    partition_key: Optional[str] = None  # None for local indexes: uses the table key
    sort_key: Optional[str] = None
    projection_type: Optional[str] = None
    local: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any], local: bool = False) -> "SecondaryIndex":
        if not isinstance(data, dict):
            raise SchemaError("Secondary index declaration must be an object")

        name = data.get("indexName") or data.get("name")
        if not name:
            raise SchemaError("Secondary index declaration is missing indexName")

        partition_key = data.get("partitionKey")
        if not local and not partition_key:
            raise SchemaError(f"Global secondary index '{name}' has no partitionKey")
        if local and not data.get("sortKey"):
            raise SchemaError(f"Local secondary index '{name}' has no sortKey")

        return cls(
            name=name,
            partition_key=None if local else partition_key,
            sort_key=data.get("sortKey") or None,
            projection_type=data.get("projectionType"),
            local=local,
        )


@dataclass
class TableMetadata:
    """Table topology the generated client library binds to."""

    table_name: Optional[str] = None
    table_arn: Optional[str] = None
    region: Optional[str] = None
    indexes: List[SecondaryIndex] = field(default_factory=list)

    def get_index(self, name: str) -> Optional[SecondaryIndex]:
        for index in self.indexes:
            if index.name == name:
                return index
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableMetadata":
        """
        Parse table metadata.

        Global indexes come first, then local indexes, then entries of a
        generic ``secondaryIndexes`` list. A generic entry without a
        partition key is treated as local.
        """
        if not isinstance(data, dict):
            raise SchemaError("Table metadata must be a JSON object")

        indexes: List[SecondaryIndex] = []
        for raw in data.get("globalSecondaryIndexes") or []:
            indexes.append(SecondaryIndex.from_dict(raw))
        for raw in data.get("localSecondaryIndexes") or []:
            indexes.append(SecondaryIndex.from_dict(raw, local=True))
        for raw in data.get("secondaryIndexes") or []:
            local = isinstance(raw, dict) and not raw.get("partitionKey")
            indexes.append(SecondaryIndex.from_dict(raw, local=local))

        seen = set()
        for index in indexes:
            if index.name in seen:
                raise SchemaError(f"Secondary index '{index.name}' is declared twice")
            seen.add(index.name)

        return cls(
            table_name=data.get("tableName"),
            table_arn=data.get("tableArn"),
            region=data.get("region"),
            indexes=indexes,
        )


def iter_nested_fields(fields: List[Field]):
    """Yield every field in the tree, depth first, including list item fields."""
    for f in fields:
        yield f
        if f.fields:
            yield from iter_nested_fields(f.fields)
        if f.items is not None and f.items.fields:
            yield from iter_nested_fields(f.items.fields)
