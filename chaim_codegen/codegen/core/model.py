"""
Structural model builder.

Turns a parsed ``Schema`` into an ``EntityModel``: every field gets its
code identifier and a resolved type, and every nested map or list-of-map
field becomes a ``GeneratedTypeDescriptor``. Descriptor names are
ancestor-qualified (``User`` + ``address`` -> ``UserAddress``) and kept in
one flat ``name -> descriptor`` map per entity, so nesting depth never
affects how the back end walks them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from .generator import GeneratorError
from .naming import LEGAL_IDENTIFIER, capitalize_first, find_collisions, resolve_code_name
from .schema import Field, Schema, SchemaError
from .types import TypeKind, TypeSpec, parse_type
from ...logging_config import get_logger

logger = get_logger(__name__)

LIST_ITEM_SUFFIX = "Item"

# Kinds a store key attribute may resolve to.
_KEY_KINDS = frozenset({TypeKind.STRING, TypeKind.NUMBER, TypeKind.TIMESTAMP, TypeKind.BINARY})


class ResolvedKind(Enum):
    SCALAR = "scalar"
    ENUM = "enum"
    LIST_OF_SCALAR = "list-of-scalar"
    LIST_OF_GENERATED = "list-of-generated"
    GENERATED = "generated"
    SET_OF_SCALAR = "set-of-scalar"


@dataclass(frozen=True)
class ResolvedType:
    """
    Target representation chosen for a field.

    ``spec`` is the field's own parsed type. ``element`` is the parsed item
    type for lists of scalars. ``type_name`` names the enum or generated
    type the field refers to.
    """

    kind: ResolvedKind
    spec: TypeSpec
    element: Optional[TypeSpec] = None
    type_name: Optional[str] = None

    @property
    def is_collection(self) -> bool:
        return self.kind in (
            ResolvedKind.LIST_OF_SCALAR,
            ResolvedKind.LIST_OF_GENERATED,
            ResolvedKind.GENERATED,
            ResolvedKind.SET_OF_SCALAR,
        )

    @property
    def is_enum(self) -> bool:
        return self.kind == ResolvedKind.ENUM

    @property
    def is_date(self) -> bool:
        return self.kind == ResolvedKind.SCALAR and self.spec.is_date


@dataclass
class ResolvedField:
    """A schema field with its identifier and resolved type."""

    source: Field
    code_name: str
    type: ResolvedType
    partition_key: bool = False
    sort_key: bool = False

    @property
    def name(self) -> str:
        return self.source.name

    @property
    def needs_attribute_marker(self) -> bool:
        return self.code_name != self.source.name

    @property
    def required(self) -> bool:
        return self.source.required

    @property
    def nullable(self) -> bool:
        return self.source.nullable

    @property
    def description(self) -> Optional[str]:
        return self.source.description

    @property
    def constraints(self):
        return self.source.constraints

    @property
    def is_key(self) -> bool:
        return self.partition_key or self.sort_key


@dataclass
class GeneratedTypeDescriptor:
    """A synthesized structural type for a nested map or list-of-map field."""

    name: str
    owner: str
    source_field: str
    fields: List[ResolvedField] = field(default_factory=list)
    list_item: bool = False
    description: Optional[str] = None


@dataclass
class EnumDescriptor:
    """A dedicated enumerated type for a string field with enum values."""

    name: str
    owner: str
    values: List[str]
    nested: bool = False
    description: Optional[str] = None


@dataclass
class EntityModel:
    """Resolved form of one schema, ready for emission."""

    schema: Schema
    name: str
    fields: List[ResolvedField]
    descriptors: Dict[str, GeneratedTypeDescriptor] = field(default_factory=dict)
    enums: Dict[str, EnumDescriptor] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def description(self) -> Optional[str]:
        return self.schema.description

    @property
    def partition_key(self) -> ResolvedField:
        return next(f for f in self.fields if f.partition_key)

    @property
    def sort_key(self) -> Optional[ResolvedField]:
        return next((f for f in self.fields if f.sort_key), None)

    def get_field(self, raw_name: str) -> Optional[ResolvedField]:
        for f in self.fields:
            if f.name == raw_name:
                return f
        return None

    def iter_all_fields(self) -> Iterator[ResolvedField]:
        """Entity fields followed by every descriptor's fields."""
        yield from self.fields
        for descriptor in self.descriptors.values():
            yield from descriptor.fields

    def class_names(self) -> List[str]:
        """Every class name this entity emits, entity first."""
        return [self.name, *self.enums, *self.descriptors]

    @property
    def needs_validation(self) -> bool:
        """
        True when any field at any depth is required, or any non-collection
        field at any depth carries constraints or enum values.
        """
        for f in self.iter_all_fields():
            if f.required:
                return True
            if not f.type.is_collection and (
                f.source.has_constraints or f.source.has_enum
            ):
                return True
        return False

    @property
    def uses_date(self) -> bool:
        return any(f.type.is_date for f in self.iter_all_fields())


def iter_field_scopes(schema: Schema) -> Iterator[Tuple[str, List[Field]]]:
    """Yield ``(path, fields)`` for the entity and every nested field list."""

    def walk(path: str, fields: List[Field]):
        yield path, fields
        for f in fields:
            child = f"{path}.{f.name}" if path else f.name
            if f.fields:
                yield from walk(child, f.fields)
            if f.items is not None and f.items.fields:
                yield from walk(f"{child}[]", f.items.fields)

    yield from walk("", schema.fields)


def find_schema_collisions(schema: Schema) -> Dict[str, List[str]]:
    """
    Collect identifier collisions of every field list in a schema.

    Nested raw names are reported with their path.
    """
    collisions: Dict[str, List[str]] = {}
    for path, fields in iter_field_scopes(schema):
        for code, names in find_collisions(fields).items():
            qualified = [f"{path}.{n}" if path else n for n in names]
            collisions.setdefault(code, []).extend(qualified)
    return collisions


def _check_enum_values(f: Field, path: str) -> None:
    seen = set()
    for value in f.enum_values:
        if not LEGAL_IDENTIFIER.match(value):
            raise SchemaError(
                f"Enum value '{value}' of {path} is not a legal Java identifier"
            )
        if value in seen:
            raise SchemaError(f"Enum value '{value}' of {path} is declared twice")
        seen.add(value)


class ModelBuilder:
    """
    Resolves schemas into entity models.

    Args:
        strict_subtypes: Raise on unknown dotted subtypes instead of
            falling back to the default representation
    """

    def __init__(self, strict_subtypes: bool = False):
        self.strict_subtypes = strict_subtypes

    def build(self, schema: Schema) -> EntityModel:
        """Build the model for one schema."""
        model = EntityModel(schema=schema, name=schema.entity_name, fields=[])
        model.fields = self._resolve_fields(model, schema.entity_name, schema.fields, "", top_level=True)

        for role, key_name in (("partition", schema.partition_key), ("sort", schema.sort_key)):
            if key_name is None:
                continue
            key_field = model.get_field(key_name)
            self._check_key_field(key_field, schema.entity_name, role)
            if role == "partition":
                key_field.partition_key = True
            else:
                key_field.sort_key = True

        logger.debug(
            "Built model %s: %d fields, %d nested types, %d enums",
            model.name,
            len(model.fields),
            len(model.descriptors),
            len(model.enums),
        )
        return model

    def _parse(self, model: EntityModel, type_string: str, path: str) -> TypeSpec:
        spec = parse_type(type_string, strict=self.strict_subtypes)
        if spec.fallback:
            model.warnings.append(
                f"{model.name}.{path}: unknown subtype in '{spec.raw}', using the default"
            )
        return spec

    def _register(self, model: EntityModel, name: str, registry: dict, value) -> None:
        if name == model.name or name in model.descriptors or name in model.enums:
            raise GeneratorError(
                f"Generated type name '{name}' is produced twice for entity '{model.name}'"
            )
        registry[name] = value

    def _resolve_fields(
        self,
        model: EntityModel,
        owner: str,
        fields: List[Field],
        path: str,
        top_level: bool = False,
    ) -> List[ResolvedField]:
        resolved = []
        for f in fields:
            field_path = f"{path}.{f.name}" if path else f.name
            code_name = resolve_code_name(f)
            spec = self._parse(model, f.type, field_path)
            rtype = self._resolve_type(model, owner, f, code_name, spec, field_path, top_level)
            resolved.append(ResolvedField(source=f, code_name=code_name, type=rtype))
        return resolved

    def _resolve_type(
        self,
        model: EntityModel,
        owner: str,
        f: Field,
        code_name: str,
        spec: TypeSpec,
        path: str,
        top_level: bool,
    ) -> ResolvedType:
        qualified = owner + capitalize_first(code_name)

        if spec.kind == TypeKind.MAP:
            if not f.fields:
                raise SchemaError(f"Map field {model.name}.{path} declares no fields")
            descriptor = GeneratedTypeDescriptor(
                name=qualified, owner=owner, source_field=f.name, description=f.description
            )
            self._register(model, qualified, model.descriptors, descriptor)
            descriptor.fields = self._resolve_fields(model, qualified, f.fields, path)
            return ResolvedType(ResolvedKind.GENERATED, spec, type_name=qualified)

        if spec.kind == TypeKind.LIST:
            if f.items is None:
                raise SchemaError(f"List field {model.name}.{path} declares no items")
            element = self._parse(model, f.items.type, f"{path}[]")
            if element.kind == TypeKind.MAP:
                if not f.items.fields:
                    raise SchemaError(
                        f"List items of {model.name}.{path} are maps without fields"
                    )
                item_name = qualified + LIST_ITEM_SUFFIX
                descriptor = GeneratedTypeDescriptor(
                    name=item_name,
                    owner=owner,
                    source_field=f.name,
                    list_item=True,
                    description=f.description,
                )
                self._register(model, item_name, model.descriptors, descriptor)
                descriptor.fields = self._resolve_fields(
                    model, item_name, f.items.fields, f"{path}[]"
                )
                return ResolvedType(
                    ResolvedKind.LIST_OF_GENERATED, spec, element=element, type_name=item_name
                )
            if element.is_collection:
                raise SchemaError(
                    f"List items of {model.name}.{path} must be a scalar or map, got '{element.raw}'"
                )
            return ResolvedType(ResolvedKind.LIST_OF_SCALAR, spec, element=element)

        if spec.kind in (TypeKind.STRING_SET, TypeKind.NUMBER_SET):
            return ResolvedType(ResolvedKind.SET_OF_SCALAR, spec)

        if spec.kind == TypeKind.STRING and spec.suffix is None and f.has_enum:
            _check_enum_values(f, f"{model.name}.{path}")
            enum = EnumDescriptor(
                name=qualified,
                owner=owner,
                values=list(f.enum_values),
                nested=not top_level,
                description=f.description,
            )
            self._register(model, qualified, model.enums, enum)
            return ResolvedType(ResolvedKind.ENUM, spec, type_name=qualified)

        return ResolvedType(ResolvedKind.SCALAR, spec)

    def _check_key_field(self, key_field: ResolvedField, entity: str, role: str) -> None:
        check_key_capable(key_field, f"{role} key of '{entity}'")


def check_key_capable(key_field: ResolvedField, context: str) -> None:
    """
    Fail unless a field can serve as a store key attribute.

    Text, numbers, timestamps, binary and enums qualify.

    Raises:
        SchemaError: For boolean or collection attributes
    """
    rtype = key_field.type
    if rtype.is_enum:
        return
    if rtype.kind == ResolvedKind.SCALAR and rtype.spec.kind in _KEY_KINDS:
        return
    raise SchemaError(
        f"Attribute '{key_field.name}' ({rtype.spec.raw}) cannot be used as {context}"
    )


def build_models(schemas: List[Schema], strict_subtypes: bool = False) -> List[EntityModel]:
    builder = ModelBuilder(strict_subtypes=strict_subtypes)
    return [builder.build(schema) for schema in schemas]
