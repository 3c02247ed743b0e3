import pytest

from chaim_codegen.codegen.core.templates import (
    TemplateEngine,
    TemplateError,
    escape_java_string,
)


@pytest.fixture
def engine():
    return TemplateEngine()


def test_case_filters(engine):
    text = engine.render_string(
        "{{ name | camel_case }} {{ name | pascal_case }} {{ name | constant_case }}",
        {"name": "customer-index"},
    )
    assert text == "customerIndex CustomerIndex CUSTOMER_INDEX"


def test_java_string_filter(engine):
    text = engine.render_string('"{{ value | java_string }}"', {"value": 'say "hi"\n\\'})
    assert text == '"say \\"hi\\"\\n\\\\"'


def test_javadoc_filter(engine):
    text = engine.render_string("{{ doc | javadoc(4) }}", {"doc": "First line.\n\nEnds */ here"})
    assert text.splitlines() == [
        "    /**",
        "     * First line.",
        "     *",
        "     * Ends *&#47; here",
        "     */",
    ]


def test_javadoc_wraps_long_text(engine):
    doc = " ".join(["word"] * 60)
    lines = engine.render_string("{{ doc | javadoc }}", {"doc": doc}).splitlines()
    assert len(lines) > 3
    assert all(len(line) <= 100 for line in lines)


def test_in_memory_templates(engine):
    engine.add_template("greeting.j2", "Hello {{ name }}\n")
    assert engine.template_exists("greeting.j2")
    assert engine.render_template("greeting.j2", {"name": "Order"}) == "Hello Order\n"


def test_missing_template(engine):
    assert not engine.template_exists("missing.j2")
    with pytest.raises(TemplateError, match="not found"):
        engine.render_template("missing.j2", {})


def test_escape_java_string_handles_control_characters():
    assert escape_java_string("a\tb\rc") == "a\\tb\\rc"
