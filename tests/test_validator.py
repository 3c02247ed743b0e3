from chaim_codegen.codegen.core.model import ModelBuilder
from chaim_codegen.codegen.core.schema import Schema
from chaim_codegen.codegen.languages.java.types import JavaTypeMapper
from chaim_codegen.codegen.languages.java.validation import build_validator_body


def _body(schema_dict):
    model = ModelBuilder().build(Schema.from_dict(schema_dict))
    return build_validator_body(model, JavaTypeMapper("com.acme.orders"))


def _text(body):
    return "\n".join(line.strip() for line in body.lines)


def test_required_check_precedes_constraints():
    body = _body(
        {
            "entityName": "User",
            "identity": {"fields": ["pk"]},
            "fields": [
                {"name": "pk", "required": True, "constraints": {"minLength": 3, "maxLength": 20}},
            ],
        }
    )
    text = _text(body)
    required = text.index("if (entity.getPk() == null) {")
    min_length = text.index("if (entity.getPk().length() < 3) {")
    assert required < min_length
    assert "if (entity.getPk() != null) {" in text
    assert "if (entity.getPk().length() > 20) {" in text
    assert '"must have minimum length 3, got " + entity.getPk().length()' in text


def test_errors_are_collected_and_thrown_once(order_schema):
    body = _body(order_schema)
    assert body.lines[0] == "List<ChaimValidationException.FieldError> errors = new ArrayList<>();"
    assert body.lines[-3:] == [
        "if (!errors.isEmpty()) {",
        '  throw new ChaimValidationException("Order", errors);',
        "}",
    ]
    assert sum("throw new" in line for line in body.lines) == 1


def test_enum_field_gets_only_required_check(order_schema):
    text = _text(_body(order_schema))
    assert "if (entity.getStatus() == null) {" in text
    assert "entity.getStatus().length()" not in text
    assert "entity.getStatus().matches" not in text


def test_decimal_bounds_use_compare_to(order_schema):
    body = _body(order_schema)
    text = _text(body)
    assert 'if (entity.getTotal().compareTo(new BigDecimal("0")) < 0) {' in text
    assert 'if (entity.getTotal().compareTo(new BigDecimal("100")) > 0) {' in text
    assert "entity.getTotal() <" not in text
    assert "java.math.BigDecimal" in body.imports


def test_nested_map_is_guarded(order_schema):
    text = _text(_body(order_schema))
    assert "OrderShippingAddress shippingAddress = entity.getShippingAddress();" in text
    assert "if (shippingAddress != null) {" in text
    assert '"shipping-address.street", "required"' in text
    assert 'if (!shippingAddress.getZip().matches("^[0-9]{5}$")) {' in text


def test_list_items_carry_their_index(order_schema):
    text = _text(_body(order_schema))
    assert "for (int i = 0; i < entity.getLines().size(); i++) {" in text
    assert "OrderLinesItem linesItem = entity.getLines().get(i);" in text
    assert '"lines[" + i + "].sku", "required"' in text
    assert "if (linesItem.getQuantity() < 1) {" in text


def test_nested_lists_use_next_index_variable():
    body = _body(
        {
            "entityName": "Doc",
            "identity": {"fields": ["id"]},
            "fields": [
                {"name": "id"},
                {
                    "name": "sections",
                    "type": "list",
                    "items": {
                        "type": "map",
                        "fields": [
                            {
                                "name": "paragraphs",
                                "type": "list",
                                "items": {
                                    "type": "map",
                                    "fields": [{"name": "text", "required": True}],
                                },
                            }
                        ],
                    },
                },
                {
                    "name": "notes",
                    "type": "list",
                    "items": {"type": "map", "fields": [{"name": "body", "required": True}]},
                },
            ],
        }
    )
    text = _text(body)
    assert "for (int j = 0; j < sectionsItem.getParagraphs().size(); j++) {" in text
    assert '"sections[" + i + "].paragraphs[" + j + "].text"' in text
    # sibling loops reuse the first index variable
    assert "for (int i = 0; i < entity.getNotes().size(); i++) {" in text


def test_lists_without_checks_are_not_walked():
    body = _body(
        {
            "entityName": "Doc",
            "identity": {"fields": ["id"]},
            "fields": [
                {"name": "id", "required": True},
                {"name": "notes", "type": "list", "items": {"type": "map", "fields": [{"name": "body"}]}},
            ],
        }
    )
    assert "getNotes" not in _text(body)


def test_collection_field_gets_required_check_only():
    body = _body(
        {
            "entityName": "Doc",
            "identity": {"fields": ["id"]},
            "fields": [
                {"name": "id"},
                {"name": "tags", "type": "stringSet", "required": True, "constraints": {"maxLength": 2}},
            ],
        }
    )
    text = _text(body)
    assert "if (entity.getTags() == null) {" in text
    assert "length()" not in text


def test_nothing_to_validate_gives_empty_body():
    body = _body({"entityName": "Doc", "identity": {"fields": ["id"]}, "fields": [{"name": "id"}]})
    assert body.empty
    assert body.imports == set()
