"""
Chaim code generation module.

Compiles .bprint entity schemas and optional table metadata into a
DynamoDB Enhanced Client data-access layer.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .registry import (
    GeneratorRegistry,
    RegistryError,
    get_generator,
    get_registry,
    get_language_info,
    is_language_supported,
    list_all_language_info,
    list_supported_languages,
    resolve_language,
)
from .core.generator import (
    CodeGenerator,
    GenerationResult,
    GeneratedFile,
    GeneratorError,
    generate_code,
)
from .core.schema import Schema, Field, TableMetadata, SecondaryIndex, SchemaError
from .core.config import GeneratorConfig, ConfigManager, ConfigError, get_config_manager, load_config

# Version info
__version__ = "0.1.0"

registry = get_registry()


def generate_for_table(
    schemas: List[Union[Schema, Dict[str, Any]]],
    package_name: str,
    output_dir: Union[str, Path],
    table_metadata: Optional[Union[TableMetadata, Dict[str, Any]]] = None,
    language: str = "java",
    config: Optional[Dict[str, Any]] = None,
) -> GenerationResult:
    """
    Generate the client library for schemas sharing one table.

    Args:
        schemas: Parsed schemas or raw schema documents
        package_name: Base package of the generated sources
        output_dir: Root directory of the generated source tree
        table_metadata: Optional table topology, parsed or raw
        language: Target language name
        config: Additional generator options

    Returns:
        GenerationResult with the files written
    """
    parsed = [s if isinstance(s, Schema) else Schema.from_dict(s) for s in schemas]
    if isinstance(table_metadata, dict):
        table_metadata = TableMetadata.from_dict(table_metadata)

    generator = get_generator(language, {**(config or {}), "package_name": package_name})
    return generate_code(generator, parsed, output_dir, table_metadata)


# Export main interfaces
__all__ = [
    "GeneratorRegistry",
    "RegistryError",
    "CodeGenerator",
    "GenerationResult",
    "GeneratedFile",
    "GeneratorError",
    "ConfigError",
    "get_config_manager",
    "Schema",
    "Field",
    "TableMetadata",
    "SecondaryIndex",
    "SchemaError",
    "GeneratorConfig",
    "ConfigManager",
    "load_config",
    "generate_code",
    "generate_for_table",
    "get_generator",
    "list_supported_languages",
    "list_all_language_info",
    "get_language_info",
    "is_language_supported",
    "resolve_language",
    "registry",
]
