"""
Java code generator implementation.

Generates DynamoDB Enhanced Client beans, key helpers, validators,
repositories and the shared client scaffold for a batch of schemas that
share one table.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ...core.config import GeneratorConfig
from ...core.generator import BatchState, CodeGenerator, GeneratedFile, GeneratorError
from ...core.model import EntityModel, ResolvedField, build_models, find_schema_collisions
from ...core.naming import CollisionError, capitalize_first, resolve_code_name, uncapitalize
from ...core.schema import Schema, SecondaryIndex, TableMetadata, iter_nested_fields
from ...core.templates import escape_java_string
from ....logging_config import get_logger
from . import config as jc
from .naming import create_java_sanitizer
from .repository import (
    applicable_indexes,
    build_repository_context,
    index_constant,
    index_markers,
    key_param,
)
from .types import JavaTypeMapper, format_field_default, key_value_imports
from .validation import EXCEPTION, build_validator_body

logger = get_logger(__name__)

CLIENT_CLASS = "ChaimDynamoDbClient"
CONFIG_CLASS = "ChaimConfig"
CONVERTER_CLASS = "LocalDateConverter"
NULLABLE_NOTE = "Nullable: explicitly allows null values."

SORT_COMPARISONS = [
    ("GreaterThan", "sortGreaterThan"),
    ("GreaterThanOrEqualTo", "sortGreaterThanOrEqualTo"),
    ("LessThan", "sortLessThan"),
    ("LessThanOrEqualTo", "sortLessThanOrEqualTo"),
]


def _java_literal(value: Optional[str]) -> str:
    return "null" if value is None else f'"{escape_java_string(value)}"'


class JavaGenerator(CodeGenerator):
    """Code generator for the AWS SDK v2 DynamoDB Enhanced Client."""

    def __init__(self, config: Optional[Union[GeneratorConfig, Dict[str, Any]]] = None):
        """Initialize Java generator with configuration."""
        super().__init__(config)

        self.sanitizer = create_java_sanitizer()
        self.package_name = self.config.package_name
        self.type_mapper = JavaTypeMapper(self.package_name)

    def get_template_directory(self) -> Optional[Path]:
        """Return the Java templates directory."""
        template_dir = Path(__file__).parent / "templates"
        return template_dir if template_dir.exists() else None

    @property
    def language_name(self) -> str:
        return "java"

    @property
    def file_extension(self) -> str:
        return ".java"

    def format_code(self, code: str) -> str:
        """Base cleanup, then re-indent when the configured indent is not two spaces."""
        code = super().format_code(code)
        indent = self.config.indent_size
        if indent == 2 or indent < 1:
            return code

        lines = []
        for line in code.split("\n"):
            stripped = line.lstrip(" ")
            levels, remainder = divmod(len(line) - len(stripped), 2)
            lines.append(" " * (levels * indent + remainder) + stripped)
        return "\n".join(lines)

    def validate_schemas(self, schemas: List[Schema]) -> List[str]:
        """Base checks plus reserved-word and shadowing warnings for identifiers."""
        warnings = super().validate_schemas(schemas)
        for schema in schemas:
            message = self.sanitizer.check_identifier(schema.entity_name, "Entity name")
            if message:
                warnings.append(message)
            for f in iter_nested_fields(schema.fields):
                message = self.sanitizer.check_identifier(
                    resolve_code_name(f), f"{schema.entity_name}.{f.name}"
                )
                if message:
                    warnings.append(message)
        return warnings

    # Orchestration

    def generate(
        self,
        schemas: List[Schema],
        output_dir: Union[str, Path],
        table_metadata: Optional[TableMetadata] = None,
    ) -> BatchState:
        """
        Generate the client library for every schema of a batch.

        Collisions are checked for the whole batch before anything is
        written. Files already written stay in place when a later entity
        fails; the raised exception carries them as ``written_files``.

        Raises:
            CollisionError: If raw names resolve to the same identifier
            GeneratorError: If two generated classes share a name
            SchemaError: If a schema cannot be resolved
            OutputWriteError: If a file cannot be written
        """
        output_dir = Path(output_dir)
        state = BatchState()

        self._check_collisions(schemas)
        models = build_models(schemas, strict_subtypes=self.config.strict_subtypes)
        self._check_class_names(models)
        for model in models:
            state.warnings.extend(model.warnings)

        try:
            self._emit_shared(models, output_dir, table_metadata, state)
            for model in models:
                self._emit_entity(model, output_dir, table_metadata, state)
        except Exception as e:
            e.written_files = list(state.files)
            raise

        logger.info(
            "Generated %d files for %d entities under %s",
            len(state.files),
            len(models),
            output_dir,
        )
        return state

    def _check_collisions(self, schemas: List[Schema]) -> None:
        collisions: Dict[str, List[str]] = {}
        for schema in schemas:
            for code, names in find_schema_collisions(schema).items():
                if len(schemas) > 1:
                    names = [f"{schema.entity_name}.{name}" for name in names]
                collisions.setdefault(code, []).extend(names)
        if collisions:
            error = CollisionError(collisions)
            logger.error("%s", error)
            raise error

    def _check_class_names(self, models: List[EntityModel]) -> None:
        seen: Dict[str, str] = {}
        for model in models:
            for name in model.class_names():
                if name in seen:
                    raise GeneratorError(
                        f"Class '{name}' would be generated for both '{seen[name]}' and "
                        f"'{model.name}'"
                    )
                seen[name] = model.name

    def _write(
        self,
        state: BatchState,
        output_dir: Path,
        role: str,
        class_name: str,
        template: str,
        context: Dict[str, Any],
        imports: Iterable[str] = (),
        entity: Optional[str] = None,
    ) -> GeneratedFile:
        package = jc.subpackage(self.package_name, role)
        full_context = {
            **context,
            "package": package,
            "class_name": class_name,
            "imports": jc.format_java_imports(imports, package),
            "add_comments": self.config.add_comments,
        }
        content = self.format_code(self.render_template(template, full_context))
        path = self.write_file(jc.source_path(output_dir, package, class_name), content)
        generated = GeneratedFile(path=path, role=role, entity=entity)
        state.record(generated)
        return generated

    def _qualified(self, role: str, class_name: str) -> str:
        return jc.qualified(self.package_name, role, class_name)

    # Shared components

    def _emit_shared(
        self,
        models: List[EntityModel],
        output_dir: Path,
        table_metadata: Optional[TableMetadata],
        state: BatchState,
    ) -> None:
        if not state.shared_emitted:
            if table_metadata is not None:
                self._emit_client(output_dir, state)
                self._emit_config(models, output_dir, table_metadata, state)
            self._write(
                state,
                output_dir,
                "validation-exception",
                EXCEPTION,
                "validation_exception.java.j2",
                {},
                imports=[jc.LIST, jc.ARRAY_LIST, jc.COLLECTIONS],
            )
            state.shared_emitted = True

        if not state.converter_emitted and any(model.uses_date for model in models):
            self._write(
                state,
                output_dir,
                "converter",
                CONVERTER_CLASS,
                "local_date_converter.java.j2",
                {},
                imports=[
                    jc.ATTRIBUTE_CONVERTER,
                    jc.ATTRIBUTE_VALUE_TYPE,
                    jc.ENHANCED_TYPE,
                    jc.ATTRIBUTE_VALUE,
                    jc.LOCAL_DATE,
                ],
            )
            state.converter_emitted = True

    def _emit_client(self, output_dir: Path, state: BatchState) -> None:
        self._write(
            state,
            output_dir,
            "client",
            CLIENT_CLASS,
            "client.java.j2",
            {},
            imports=[
                jc.DYNAMO_DB_ENHANCED_CLIENT,
                jc.DYNAMO_DB_CLIENT,
                jc.DYNAMO_DB_CLIENT_BUILDER,
                jc.REGION,
                jc.URI,
            ],
        )

    def _emit_config(
        self,
        models: List[EntityModel],
        output_dir: Path,
        table_metadata: TableMetadata,
        state: BatchState,
    ) -> None:
        imports = [self._qualified("client", CLIENT_CLASS)]
        repositories = []
        if self.config.generate_repositories:
            for model in models:
                class_name = f"{model.name}Repository"
                imports.append(self._qualified("repository", class_name))
                repositories.append(
                    {"class_name": class_name, "method": f"{uncapitalize(model.name)}Repository"}
                )

        self._write(
            state,
            output_dir,
            "config",
            CONFIG_CLASS,
            "config.java.j2",
            {
                "client_class": CLIENT_CLASS,
                "table_name": _java_literal(table_metadata.table_name),
                "region": _java_literal(table_metadata.region),
                "repositories": repositories,
            },
            imports=imports,
        )

    # Per-entity components

    def _emit_entity(
        self,
        model: EntityModel,
        output_dir: Path,
        table_metadata: Optional[TableMetadata],
        state: BatchState,
    ) -> None:
        logger.debug("Generating entity %s", model.name)
        indexes = applicable_indexes(model, table_metadata, state.warnings)

        for enum in model.enums.values():
            self._write(
                state,
                output_dir,
                "model" if enum.nested else "enum",
                enum.name,
                "enum.java.j2",
                {"values": enum.values, "description": enum.description},
                entity=model.name,
            )

        for descriptor in model.descriptors.values():
            context, imports = self._bean_context(
                model, descriptor.fields, descriptor.description, state
            )
            self._write(
                state,
                output_dir,
                "model",
                descriptor.name,
                "bean.java.j2",
                context,
                imports=imports,
                entity=model.name,
            )

        context, imports = self._bean_context(
            model, model.fields, model.description, state, indexes=indexes
        )
        self._write(
            state,
            output_dir,
            "entity",
            model.name,
            "bean.java.j2",
            context,
            imports=imports,
            entity=model.name,
        )

        self._emit_keys(model, output_dir, table_metadata, state)
        self._emit_validator(model, output_dir, state)

        if table_metadata is not None and self.config.generate_repositories:
            self._emit_repository(model, output_dir, indexes, state)

    def _bean_context(
        self,
        model: EntityModel,
        fields: List[ResolvedField],
        description: Optional[str],
        state: BatchState,
        indexes: Optional[List[SecondaryIndex]] = None,
    ):
        """Template context and imports for an entity or nested type."""
        imports = {jc.DYNAMO_DB_BEAN, jc.OBJECTS}
        partition_markers, sort_markers = index_markers(model, indexes or [])
        field_contexts = []

        for rfield in fields:
            java_type = self.type_mapper.map_field(rfield, model)
            imports.update(java_type.imports)

            annotations = []
            if rfield.partition_key:
                annotations.append("@DynamoDbPartitionKey")
                imports.add(jc.DYNAMO_DB_PARTITION_KEY)
            if rfield.sort_key:
                annotations.append("@DynamoDbSortKey")
                imports.add(jc.DYNAMO_DB_SORT_KEY)
            if indexes is not None and rfield.name in partition_markers:
                annotations.append(
                    f"@DynamoDbSecondaryPartitionKey(indexNames = "
                    f"{self._index_names(partition_markers[rfield.name])})"
                )
                imports.add(jc.DYNAMO_DB_SECONDARY_PARTITION_KEY)
            if indexes is not None and rfield.name in sort_markers:
                annotations.append(
                    f"@DynamoDbSecondarySortKey(indexNames = "
                    f"{self._index_names(sort_markers[rfield.name])})"
                )
                imports.add(jc.DYNAMO_DB_SECONDARY_SORT_KEY)
            if rfield.type.is_date:
                annotations.append(f"@DynamoDbConvertedBy({CONVERTER_CLASS}.class)")
                imports.update({jc.DYNAMO_DB_CONVERTED_BY, self._qualified("converter", CONVERTER_CLASS)})
            if rfield.needs_attribute_marker:
                annotations.append(f'@DynamoDbAttribute("{escape_java_string(rfield.name)}")')
                imports.add(jc.DYNAMO_DB_ATTRIBUTE)

            default = format_field_default(
                rfield, java_type, f"{model.name}.{rfield.name}", state.warnings
            )

            doc_lines = []
            if rfield.description:
                doc_lines.append(rfield.description)
            if rfield.nullable:
                doc_lines.append(NULLABLE_NOTE)

            field_contexts.append(
                {
                    "name": rfield.code_name,
                    "accessor": capitalize_first(rfield.code_name),
                    "type": java_type.name,
                    "default": default,
                    "doc": "\n".join(doc_lines),
                    "annotations": annotations,
                    "array": java_type.name == "byte[]",
                }
            )

        array_fields = [f for f in field_contexts if f["array"]]
        if array_fields:
            imports.add(jc.ARRAYS)

        context = {
            "description": description,
            "fields": field_contexts,
            "array_fields": array_fields,
            "plain_fields": [f for f in field_contexts if not f["array"]],
        }
        return context, imports

    @staticmethod
    def _index_names(names: List[str]) -> str:
        return "{" + ", ".join(f'"{escape_java_string(n)}"' for n in names) + "}"

    def _emit_keys(
        self,
        model: EntityModel,
        output_dir: Path,
        table_metadata: Optional[TableMetadata],
        state: BatchState,
    ) -> None:
        partition = key_param(model.partition_key, model, self.type_mapper)
        sort = key_param(model.sort_key, model, self.type_mapper) if model.sort_key else None

        imports = {jc.KEY}
        for rfield in filter(None, [model.partition_key, model.sort_key]):
            imports.update(self.type_mapper.map_field(rfield, model).imports)
            imports.update(key_value_imports(rfield))

        declared = table_metadata.indexes if table_metadata else []
        self._write(
            state,
            output_dir,
            "keys",
            f"{model.name}Keys",
            "keys.java.j2",
            {
                "entity": model.name,
                "partition": partition,
                "sort": sort,
                "indexes": [
                    {"name": index.name, "constant": index_constant(index.name)}
                    for index in declared
                ],
            },
            imports=imports,
            entity=model.name,
        )

    def _emit_validator(self, model: EntityModel, output_dir: Path, state: BatchState) -> None:
        body = build_validator_body(model, self.type_mapper)
        imports = set(body.imports)
        imports.add(self._qualified("entity", model.name))
        self._write(
            state,
            output_dir,
            "validator",
            f"{model.name}Validator",
            "validator.java.j2",
            {"entity": model.name, "body": body},
            imports=imports,
            entity=model.name,
        )

    def _emit_repository(
        self,
        model: EntityModel,
        output_dir: Path,
        indexes: List[SecondaryIndex],
        state: BatchState,
    ) -> None:
        repo = build_repository_context(model, self.type_mapper, indexes)
        keys_class = f"{model.name}Keys"
        validator = f"{model.name}Validator"
        imports = set(repo.imports)
        imports.update(
            {
                self._qualified("entity", model.name),
                self._qualified("keys", keys_class),
                self._qualified("validator", validator),
                self._qualified("client", CLIENT_CLASS),
            }
        )
        self._write(
            state,
            output_dir,
            "repository",
            f"{model.name}Repository",
            "repository.java.j2",
            {
                "entity": model.name,
                "keys_class": keys_class,
                "validator": validator,
                "partition": repo.partition,
                "sort": repo.sort,
                "begins_with": repo.begins_with,
                "indexes": repo.indexes,
                "comparisons": SORT_COMPARISONS,
                "max_attempts": self.config.batch_max_attempts,
            },
            imports=imports,
            entity=model.name,
        )
