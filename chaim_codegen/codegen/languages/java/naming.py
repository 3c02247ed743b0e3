"""
Java-specific naming utilities.

Handles Java reserved words and the class names that generated code
imports implicitly from java.lang.
"""

from ...core.naming import NameSanitizer


# Java keywords and literals
JAVA_RESERVED_WORDS = {
    "abstract",
    "assert",
    "boolean",
    "break",
    "byte",
    "case",
    "catch",
    "char",
    "class",
    "const",
    "continue",
    "default",
    "do",
    "double",
    "else",
    "enum",
    "extends",
    "final",
    "finally",
    "float",
    "for",
    "goto",
    "if",
    "implements",
    "import",
    "instanceof",
    "int",
    "interface",
    "long",
    "native",
    "new",
    "package",
    "private",
    "protected",
    "public",
    "return",
    "short",
    "static",
    "strictfp",
    "super",
    "switch",
    "synchronized",
    "this",
    "throw",
    "throws",
    "transient",
    "try",
    "void",
    "volatile",
    "while",
    "true",
    "false",
    "null",
    "_",
}

# java.lang and generated class names a field name should not shadow
JAVA_BUILTIN_TYPES = {
    "Boolean",
    "Double",
    "Float",
    "Integer",
    "Long",
    "Object",
    "String",
    "BigDecimal",
    "Instant",
    "LocalDate",
    "List",
    "Set",
    "Objects",
    "Builder",
}


def create_java_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for Java."""
    return NameSanitizer(JAVA_RESERVED_WORDS, JAVA_BUILTIN_TYPES)
