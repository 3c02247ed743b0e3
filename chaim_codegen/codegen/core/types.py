"""
Type specifications for .bprint field types.

A field type is written as ``prefix[.suffix]``. Parsing produces a
``TypeSpec`` from a closed set of kinds and subtypes; every later stage
dispatches on the enums here rather than on raw strings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .schema import SchemaError
from ...logging_config import get_logger

logger = get_logger(__name__)


class SubtypeError(SchemaError):
    """Raised for an unrecognized dotted subtype when strict subtypes are on."""

    pass


class TypeKind(Enum):
    """Supported type prefixes."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    BINARY = "binary"
    TIMESTAMP = "timestamp"
    LIST = "list"
    MAP = "map"
    STRING_SET = "stringSet"
    NUMBER_SET = "numberSet"


class NumberSubtype(Enum):
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"


class TimestampSubtype(Enum):
    INSTANT = "instant"  # unsuffixed timestamp
    EPOCH = "epoch"
    DATE = "date"


TYPE_PREFIXES = {
    "string": TypeKind.STRING,
    "number": TypeKind.NUMBER,
    "boolean": TypeKind.BOOLEAN,
    "bool": TypeKind.BOOLEAN,
    "binary": TypeKind.BINARY,
    "timestamp": TypeKind.TIMESTAMP,
    "list": TypeKind.LIST,
    "map": TypeKind.MAP,
    "stringSet": TypeKind.STRING_SET,
    "numberSet": TypeKind.NUMBER_SET,
}

COLLECTION_KINDS = frozenset(
    {TypeKind.LIST, TypeKind.MAP, TypeKind.STRING_SET, TypeKind.NUMBER_SET}
)

# Suffixes accepted after "timestamp."; "instant" is only the internal default.
_TIMESTAMP_SUFFIXES = {
    TimestampSubtype.EPOCH.value: TimestampSubtype.EPOCH,
    TimestampSubtype.DATE.value: TimestampSubtype.DATE,
}


@dataclass(frozen=True)
class TypeSpec:
    """
    Parsed form of a field type string.

    ``number`` is set only for NUMBER and NUMBER_SET kinds, ``timestamp``
    only for TIMESTAMP. ``fallback`` records that an unknown suffix was
    replaced by the kind's default subtype.
    """

    kind: TypeKind
    raw: str
    suffix: Optional[str] = None
    number: Optional[NumberSubtype] = None
    timestamp: Optional[TimestampSubtype] = None
    fallback: bool = False

    @property
    def is_collection(self) -> bool:
        return self.kind in COLLECTION_KINDS

    @property
    def is_scalar(self) -> bool:
        return not self.is_collection

    @property
    def is_string(self) -> bool:
        return self.kind == TypeKind.STRING

    @property
    def is_number(self) -> bool:
        return self.kind == TypeKind.NUMBER

    @property
    def is_decimal(self) -> bool:
        return self.number == NumberSubtype.DECIMAL

    @property
    def is_date(self) -> bool:
        return self.timestamp == TimestampSubtype.DATE


def split_type(type_string: Optional[str]) -> Tuple[str, Optional[str]]:
    """
    Split a type string at its first dot.

    A missing type is a plain string.
    """
    if type_string is None:
        return "string", None
    prefix, dot, suffix = type_string.partition(".")
    return prefix, (suffix if dot else None)


def parse_type(type_string: Optional[str], strict: bool = False) -> TypeSpec:
    """
    Parse a field type string into a TypeSpec.

    Args:
        type_string: Raw ``prefix[.suffix]`` string
        strict: Raise on unknown suffixes instead of falling back

    Returns:
        Parsed TypeSpec

    Raises:
        SchemaError: For an unsupported prefix
        SubtypeError: For an unknown suffix when ``strict`` is set
    """
    raw = type_string if type_string is not None else "string"
    prefix, suffix = split_type(type_string)

    kind = TYPE_PREFIXES.get(prefix)
    if kind is None:
        raise SchemaError(f"Unsupported field type '{raw}'")

    number = None
    timestamp = None
    fallback = False

    if kind in (TypeKind.NUMBER, TypeKind.NUMBER_SET):
        number = NumberSubtype.INT
        if suffix is not None:
            try:
                number = NumberSubtype(suffix)
            except ValueError:
                fallback = True
    elif kind == TypeKind.TIMESTAMP:
        timestamp = TimestampSubtype.INSTANT
        if suffix is not None:
            if suffix in _TIMESTAMP_SUFFIXES:
                timestamp = _TIMESTAMP_SUFFIXES[suffix]
            else:
                fallback = True
    elif suffix is not None:
        # Other kinds take no subtype; the suffix is ignored.
        fallback = True

    if fallback:
        if strict:
            raise SubtypeError(f"Unknown subtype '{suffix}' in field type '{raw}'")
        logger.warning("Unknown subtype in '%s'; using the default for '%s'", raw, prefix)

    return TypeSpec(
        kind=kind,
        raw=raw,
        suffix=suffix,
        number=number,
        timestamp=timestamp,
        fallback=fallback,
    )


def is_collection_type(type_string: Optional[str]) -> bool:
    """True when the type prefix names a collection (list, map, sets)."""
    prefix, _ = split_type(type_string)
    return TYPE_PREFIXES.get(prefix) in COLLECTION_KINDS
