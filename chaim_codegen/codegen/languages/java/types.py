"""
Java type system for code generation.

Maps resolved field types to Java types with the imports they need, and
renders the Java literals used for field defaults and numeric bounds.
"""

import re
from dataclasses import dataclass, field
from datetime import timezone
from decimal import Decimal, InvalidOperation
from typing import Any, FrozenSet, List, Optional

import dateparser

from ...core.model import EntityModel, ResolvedField, ResolvedKind, ResolvedType
from ...core.schema import SchemaError
from ...core.types import NumberSubtype, TimestampSubtype, TypeKind, TypeSpec
from ...core.templates import escape_java_string
from ....logging_config import get_logger
from . import config as jc

logger = get_logger(__name__)

ISO_INSTANT = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,9})?Z$")
ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_DATEPARSER_SETTINGS = {
    "TIMEZONE": "UTC",
    "TO_TIMEZONE": "UTC",
    "RETURN_AS_TIMEZONE_AWARE": True,
    "PREFER_DAY_OF_MONTH": "first",
}


@dataclass(frozen=True)
class JavaType:
    """
    Immutable representation of a Java type.

    ``imports`` holds fully qualified class names; the file being
    rendered decides which of them actually need an import line.
    """

    name: str
    imports: FrozenSet[str] = field(default_factory=frozenset)
    text_stored: bool = False

    def generic(self, container: str, container_import: str) -> "JavaType":
        """Wrap this type as the element of a generic container."""
        return JavaType(
            name=f"{container}<{self.name}>",
            imports=self.imports | {container_import},
        )


STRING = JavaType("String", text_stored=True)
INTEGER = JavaType("Integer")
LONG = JavaType("Long")
FLOAT = JavaType("Float")
DOUBLE = JavaType("Double")
BIG_DECIMAL = JavaType("BigDecimal", frozenset({jc.BIG_DECIMAL}))
BOOLEAN = JavaType("Boolean")
BYTES = JavaType("byte[]")
INSTANT = JavaType("Instant", frozenset({jc.INSTANT}), text_stored=True)
LOCAL_DATE = JavaType("LocalDate", frozenset({jc.LOCAL_DATE}), text_stored=True)

_NUMBER_TYPES = {
    NumberSubtype.INT: INTEGER,
    NumberSubtype.LONG: LONG,
    NumberSubtype.FLOAT: FLOAT,
    NumberSubtype.DOUBLE: DOUBLE,
    NumberSubtype.DECIMAL: BIG_DECIMAL,
}

_TIMESTAMP_TYPES = {
    TimestampSubtype.INSTANT: INSTANT,
    TimestampSubtype.EPOCH: LONG,
    TimestampSubtype.DATE: LOCAL_DATE,
}


class JavaTypeMapper:
    """
    Maps resolved field types to Java types.

    Args:
        package_name: Base package of the generated sources
    """

    def __init__(self, package_name: str):
        self.package_name = package_name

    def map_scalar(self, spec: TypeSpec) -> JavaType:
        """Java type for a scalar type spec."""
        if spec.kind == TypeKind.STRING:
            return STRING
        if spec.kind == TypeKind.NUMBER:
            return _NUMBER_TYPES[spec.number]
        if spec.kind == TypeKind.BOOLEAN:
            return BOOLEAN
        if spec.kind == TypeKind.BINARY:
            return BYTES
        if spec.kind == TypeKind.TIMESTAMP:
            return _TIMESTAMP_TYPES[spec.timestamp]
        raise SchemaError(f"'{spec.raw}' is not a scalar type")

    def map_field(self, rfield: ResolvedField, model: EntityModel) -> JavaType:
        """Java type of a field of ``model`` (or of one of its nested types)."""
        if rfield.type.kind == ResolvedKind.ENUM:
            enum = model.enums[rfield.type.type_name]
            return self.enum_type(enum.name, nested=enum.nested)
        return self.map_type(rfield.type)

    def map_type(self, rtype: ResolvedType) -> JavaType:
        """Java type for a resolved non-enum field type."""
        kind = rtype.kind
        if kind == ResolvedKind.SCALAR:
            return self.map_scalar(rtype.spec)
        if kind == ResolvedKind.GENERATED:
            return self.model_type(rtype.type_name)
        if kind == ResolvedKind.LIST_OF_GENERATED:
            return self.model_type(rtype.type_name).generic("List", jc.LIST)
        if kind == ResolvedKind.LIST_OF_SCALAR:
            return self.map_scalar(rtype.element).generic("List", jc.LIST)
        if kind == ResolvedKind.SET_OF_SCALAR:
            if rtype.spec.kind == TypeKind.STRING_SET:
                return STRING.generic("Set", jc.SET)
            return _NUMBER_TYPES[rtype.spec.number].generic("Set", jc.SET)
        raise SchemaError(f"Unhandled resolved kind {kind}")

    def model_type(self, name: str) -> JavaType:
        return JavaType(name, frozenset({jc.qualified(self.package_name, "model", name)}))

    def enum_type(self, name: str, nested: bool) -> JavaType:
        role = "model" if nested else "enum"
        return JavaType(name, frozenset({jc.qualified(self.package_name, role, name)}))

    def get_all_imports(self, types: List[JavaType]) -> FrozenSet[str]:
        """Collect the imports of a list of types."""
        imports = set()
        for java_type in types:
            imports.update(java_type.imports)
        return frozenset(imports)


# Key values


def key_value_expression(param: str, rfield: ResolvedField) -> str:
    """
    Expression handing a key parameter to ``Key.Builder``.

    Text-stored timestamps and enums go through ``toString()``; binary goes
    through ``SdkBytes``; numbers, strings and epoch timestamps pass as-is.
    """
    rtype = rfield.type
    if rtype.is_enum:
        return f"{param}.toString()"
    spec = rtype.spec
    if spec.kind == TypeKind.TIMESTAMP and spec.timestamp != TimestampSubtype.EPOCH:
        return f"{param}.toString()"
    if spec.kind == TypeKind.BINARY:
        return f"SdkBytes.fromByteArray({param})"
    return param


def key_value_imports(rfield: ResolvedField) -> FrozenSet[str]:
    if rfield.type.kind == ResolvedKind.SCALAR and rfield.type.spec.kind == TypeKind.BINARY:
        return frozenset({jc.SDK_BYTES})
    return frozenset()


# Numeric literals


def _decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def is_integral(value: Any) -> bool:
    number = _decimal(value)
    return number is not None and number == number.to_integral_value()


def integer_text(value: Any) -> str:
    """Exact decimal digits of an integral value, without float rounding."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return str(int(_decimal(value)))


def display_number(value: Any) -> str:
    """Human readable form of a bound: integral values without a fraction."""
    if isinstance(value, bool):
        return str(value).lower()
    if is_integral(value):
        return integer_text(value)
    return repr(float(value))


def double_literal(value: Any) -> str:
    return repr(float(value))


def bound_literal(spec: TypeSpec, value: Any) -> str:
    """
    Java literal for a numeric bound compared against a field of ``spec``.

    Integer subtypes get width-correct literals; a non-integral bound on an
    integer field becomes a double literal.
    """
    number = spec.number or NumberSubtype.INT
    if number in (NumberSubtype.INT, NumberSubtype.LONG) and not is_integral(value):
        return double_literal(value)
    if number == NumberSubtype.INT:
        return integer_text(value)
    if number == NumberSubtype.LONG:
        return f"{integer_text(value)}L"
    if number == NumberSubtype.FLOAT:
        return f"{double_literal(value)}f"
    if number == NumberSubtype.DECIMAL:
        return f'new BigDecimal("{display_number(value)}")'
    return double_literal(value)


# Default initializers


def normalize_instant(value: Any, context: str, warnings: List[str]) -> str:
    text = str(value).strip()
    if ISO_INSTANT.match(text):
        return text
    parsed = dateparser.parse(text, settings=_DATEPARSER_SETTINGS)
    if parsed is None:
        raise SchemaError(f"Default value '{value}' of {context} is not a valid timestamp")
    normalized = parsed.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    warnings.append(f"{context}: default '{value}' normalized to {normalized}")
    logger.warning("Normalized timestamp default of %s: %r -> %s", context, value, normalized)
    return normalized


def normalize_date(value: Any, context: str, warnings: List[str]) -> str:
    text = str(value).strip()
    if ISO_DATE.match(text):
        return text
    parsed = dateparser.parse(text, settings=_DATEPARSER_SETTINGS)
    if parsed is None:
        raise SchemaError(f"Default value '{value}' of {context} is not a valid date")
    normalized = parsed.strftime("%Y-%m-%d")
    warnings.append(f"{context}: default '{value}' normalized to {normalized}")
    logger.warning("Normalized date default of %s: %r -> %s", context, value, normalized)
    return normalized


def _as_integer(value: Any, context: str) -> str:
    number = _decimal(value)
    if number is None:
        raise SchemaError(f"Default value '{value}' of {context} is not a number")
    if number != number.to_integral_value():
        raise SchemaError(f"Default value '{value}' of {context} is not an integer")
    return integer_text(value)


def _as_number(value: Any, context: str) -> float:
    if isinstance(value, bool):
        raise SchemaError(f"Default value '{value}' of {context} is not a number")
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise SchemaError(f"Default value '{value}' of {context} is not a number") from e


def format_default_initializer(
    spec: TypeSpec, value: Any, context: str = "field", warnings: Optional[List[str]] = None
) -> Optional[str]:
    """
    Java initializer literal for a schema default.

    Args:
        spec: Parsed type of the field
        value: Default value from the schema
        context: Field path used in messages
        warnings: Receives normalization and skip notices

    Returns:
        The literal, or None when the type takes no initializer

    Raises:
        SchemaError: If the value cannot be represented
    """
    if warnings is None:
        warnings = []

    if spec.kind == TypeKind.STRING:
        return f'"{escape_java_string(value)}"'

    if spec.kind == TypeKind.NUMBER:
        number = spec.number or NumberSubtype.INT
        if number == NumberSubtype.DECIMAL:
            _as_number(value, context)
            return f'new BigDecimal("{value}")'
        if number == NumberSubtype.FLOAT:
            return f"{repr(_as_number(value, context))}f"
        if number == NumberSubtype.DOUBLE:
            return repr(_as_number(value, context))
        if number == NumberSubtype.LONG:
            return f"{_as_integer(value, context)}L"
        return _as_integer(value, context)

    if spec.kind == TypeKind.BOOLEAN:
        text = str(value).lower()
        if text not in ("true", "false"):
            raise SchemaError(f"Default value '{value}' of {context} is not a boolean")
        return text

    if spec.kind == TypeKind.TIMESTAMP:
        if spec.timestamp == TimestampSubtype.EPOCH:
            return f"{_as_integer(value, context)}L"
        if spec.timestamp == TimestampSubtype.DATE:
            return f'LocalDate.parse("{normalize_date(value, context, warnings)}")'
        return f'Instant.parse("{normalize_instant(value, context, warnings)}")'

    warnings.append(f"{context}: default values are not supported for '{spec.raw}'; ignored")
    return None


def format_field_default(
    rfield: ResolvedField, java_type: JavaType, context: str, warnings: List[str]
) -> Optional[str]:
    """Initializer for a resolved field, or None when it has no usable default."""
    value = rfield.source.default_value
    if value is None:
        return None
    if rfield.type.is_enum:
        text = str(value)
        if text not in rfield.source.enum_values:
            raise SchemaError(
                f"Default value '{text}' of {context} is not one of {rfield.source.enum_values}"
            )
        return f"{java_type.name}.{text}"
    if rfield.type.kind != ResolvedKind.SCALAR:
        warnings.append(f"{context}: default values are not supported for collections; ignored")
        return None
    return format_default_initializer(rfield.type.spec, value, context, warnings)

