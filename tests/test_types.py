import pytest

from chaim_codegen.codegen.core.schema import SchemaError
from chaim_codegen.codegen.core.types import (
    NumberSubtype,
    SubtypeError,
    TimestampSubtype,
    TypeKind,
    is_collection_type,
    parse_type,
    split_type,
)
from chaim_codegen.codegen.languages.java.types import (
    bound_literal,
    display_number,
    format_default_initializer,
)


def test_split_type_partitions_on_first_dot():
    assert split_type("number.long") == ("number", "long")
    assert split_type("string") == ("string", None)
    assert split_type(None) == ("string", None)


@pytest.mark.parametrize(
    "raw, number",
    [
        ("number", NumberSubtype.INT),
        ("number.int", NumberSubtype.INT),
        ("number.long", NumberSubtype.LONG),
        ("number.float", NumberSubtype.FLOAT),
        ("number.double", NumberSubtype.DOUBLE),
        ("number.decimal", NumberSubtype.DECIMAL),
    ],
)
def test_number_subtypes(raw, number):
    spec = parse_type(raw)
    assert spec.kind == TypeKind.NUMBER
    assert spec.number == number
    assert not spec.fallback


def test_timestamp_subtypes():
    assert parse_type("timestamp").timestamp == TimestampSubtype.INSTANT
    assert parse_type("timestamp.epoch").timestamp == TimestampSubtype.EPOCH
    assert parse_type("timestamp.date").is_date


def test_bool_alias():
    assert parse_type("bool").kind == TypeKind.BOOLEAN


def test_unknown_subtype_falls_back_to_default():
    spec = parse_type("number.huge")
    assert spec.number == NumberSubtype.INT
    assert spec.fallback

    spec = parse_type("timestamp.iso")
    assert spec.timestamp == TimestampSubtype.INSTANT
    assert spec.fallback


def test_unknown_subtype_strict_raises():
    with pytest.raises(SubtypeError):
        parse_type("number.huge", strict=True)


def test_subtype_error_is_a_schema_error():
    assert issubclass(SubtypeError, SchemaError)


def test_unsupported_prefix_raises():
    with pytest.raises(SchemaError, match="widget"):
        parse_type("widget")


def test_collection_kinds():
    assert is_collection_type("list")
    assert is_collection_type("map")
    assert is_collection_type("stringSet")
    assert is_collection_type("numberSet.long")
    assert not is_collection_type("string")
    assert parse_type("numberSet.long").number == NumberSubtype.LONG


@pytest.mark.parametrize(
    "raw, value, literal",
    [
        ("number", 42, "42"),
        ("number.int", "7", "7"),
        ("number.long", 5, "5L"),
        ("number.float", 1.5, "1.5f"),
        ("number.double", 2, "2.0"),
        ("number.decimal", "12.50", 'new BigDecimal("12.50")'),
        ("timestamp.epoch", 1700000000, "1700000000L"),
        ("timestamp.date", "2024-01-15", 'LocalDate.parse("2024-01-15")'),
        ("timestamp", "2024-01-15T10:30:00Z", 'Instant.parse("2024-01-15T10:30:00Z")'),
        ("boolean", True, "true"),
        ("boolean", "false", "false"),
        ("string", "hello", '"hello"'),
        ("number.long", 9007199254740993, "9007199254740993L"),
        ("number.long", "9007199254740993", "9007199254740993L"),
        ("timestamp.epoch", 1700000000000000001, "1700000000000000001L"),
        ("number.int", 3.0, "3"),
        ("boolean", "TRUE", "true"),
    ],
)
def test_default_initializers(raw, value, literal):
    warnings = []
    assert format_default_initializer(parse_type(raw), value, "f", warnings) == literal
    assert warnings == []


def test_string_default_is_escaped():
    literal = format_default_initializer(parse_type("string"), 'say "hi"\n')
    assert literal == '"say \\"hi\\"\\n"'


def test_non_iso_instant_default_is_normalized_with_warning():
    warnings = []
    literal = format_default_initializer(
        parse_type("timestamp"), "2024-01-15 10:30:00", "Order.createdAt", warnings
    )
    assert literal == 'Instant.parse("2024-01-15T10:30:00Z")'
    assert len(warnings) == 1
    assert "Order.createdAt" in warnings[0]


def test_non_iso_date_default_is_normalized():
    warnings = []
    literal = format_default_initializer(
        parse_type("timestamp.date"), "January 15, 2024", "User.birthday", warnings
    )
    assert literal == 'LocalDate.parse("2024-01-15")'
    assert warnings


def test_unparseable_timestamp_default_raises():
    with pytest.raises(SchemaError):
        format_default_initializer(parse_type("timestamp"), "xyzzy", "Order.createdAt")


def test_non_numeric_default_raises():
    with pytest.raises(SchemaError):
        format_default_initializer(parse_type("number.long"), "lots", "Order.count")


def test_collection_default_is_skipped_with_warning():
    warnings = []
    assert format_default_initializer(parse_type("stringSet"), ["a"], "Order.tags", warnings) is None
    assert warnings


def test_bound_literals_match_field_width():
    assert bound_literal(parse_type("number"), 10) == "10"
    assert bound_literal(parse_type("number.long"), 10) == "10L"
    assert bound_literal(parse_type("number.float"), 0.5) == "0.5f"
    assert bound_literal(parse_type("number.double"), 3) == "3.0"
    assert bound_literal(parse_type("number.decimal"), 100) == 'new BigDecimal("100")'
    assert bound_literal(parse_type("number"), 1.5) == "1.5"


def test_display_number():
    assert display_number(0) == "0"
    assert display_number(100.0) == "100"
    assert display_number(2.5) == "2.5"


@pytest.mark.parametrize(
    "raw, value",
    [
        ("number.int", 2.5),
        ("number.long", "10.75"),
        ("timestamp.epoch", 1.5),
        ("boolean", "yes"),
        ("boolean", 1),
    ],
)
def test_lossy_defaults_raise(raw, value):
    with pytest.raises(SchemaError):
        format_default_initializer(parse_type(raw), value, "Order.field")


def test_large_bounds_keep_every_digit():
    assert bound_literal(parse_type("number.long"), 9007199254740993) == "9007199254740993L"
    assert bound_literal(parse_type("number"), "2147483647") == "2147483647"
    assert display_number(9007199254740993) == "9007199254740993"
