"""
Core code generation components.

Provides base classes and utilities used by all language generators.
"""

from .schema import (
    Schema,
    Field,
    Constraints,
    ListItems,
    SecondaryIndex,
    TableMetadata,
    SchemaError,
)
from .types import TypeKind, TypeSpec, NumberSubtype, TimestampSubtype, SubtypeError, parse_type
from .config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, TemplateError, create_template_engine
from .generator import (
    CodeGenerator,
    GeneratorError,
    OutputWriteError,
    GeneratedFile,
    BatchState,
    GenerationResult,
    generate_code,
)
from .naming import (
    CollisionError,
    NameSanitizer,
    NamingCase,
    resolve_code_name,
    needs_attribute_marker,
    detect_collisions,
)
from .model import (
    ModelBuilder,
    EntityModel,
    ResolvedField,
    ResolvedKind,
    ResolvedType,
    GeneratedTypeDescriptor,
    EnumDescriptor,
)

__all__ = [
    # Base generator interface
    "CodeGenerator",
    "GeneratorError",
    "OutputWriteError",
    "GeneratedFile",
    "BatchState",
    "GenerationResult",
    "generate_code",
    # Schema system - core data structures
    "Schema",
    "Field",
    "Constraints",
    "ListItems",
    "SecondaryIndex",
    "TableMetadata",
    "SchemaError",
    # Type resolution
    "TypeKind",
    "TypeSpec",
    "NumberSubtype",
    "TimestampSubtype",
    "SubtypeError",
    "parse_type",
    # Naming utilities
    "CollisionError",
    "NameSanitizer",
    "NamingCase",
    "resolve_code_name",
    "needs_attribute_marker",
    "detect_collisions",
    # Structural model
    "ModelBuilder",
    "EntityModel",
    "ResolvedField",
    "ResolvedKind",
    "ResolvedType",
    "GeneratedTypeDescriptor",
    "EnumDescriptor",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
