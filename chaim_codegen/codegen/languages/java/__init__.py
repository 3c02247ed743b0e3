"""
Java code generator module.

Generates AWS SDK v2 DynamoDB Enhanced Client data-access code: beans,
key helpers, validators, repositories and the shared client scaffold.
"""

from .generator import JavaGenerator
from .naming import create_java_sanitizer, JAVA_RESERVED_WORDS
from .types import (
    JavaType,
    JavaTypeMapper,
    format_default_initializer,
    key_value_expression,
)

__all__ = [
    "JavaGenerator",
    "JavaType",
    "JavaTypeMapper",
    "JAVA_RESERVED_WORDS",
    "create_java_sanitizer",
    "format_default_initializer",
    "key_value_expression",
    # Factory functions
    "create_generator",
    "create_entities_only_generator",
]


def create_generator(package_name: str = "com.example.model", **kwargs):
    """
    Create a Java generator.

    Args:
        package_name: Base package of the generated sources
        **kwargs: Additional generator options (indent_size, add_comments, etc.)

    Returns:
        Configured JavaGenerator instance
    """
    return JavaGenerator({"package_name": package_name, **kwargs})


def create_entities_only_generator(package_name: str = "com.example.model"):
    """
    Create a generator that never emits repositories.

    Features:
    - Entities, keys and validators only
    - Client and config classes still follow table metadata
    """
    return JavaGenerator({"package_name": package_name, "generate_repositories": False})
