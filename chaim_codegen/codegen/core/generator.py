"""
Base generator interface for all code generation targets.

Defines the contract that all language generators must implement, plus
the result and per-run state types shared by every generator.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Union
from pathlib import Path

from .config import GeneratorConfig, load_config
from .schema import Schema, TableMetadata, iter_nested_fields
from .templates import TemplateEngine, create_template_engine
from .types import is_collection_type
from ...logging_config import get_logger

logger = get_logger(__name__)


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class OutputWriteError(GeneratorError):
    """Raised when a generated file cannot be written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Failed to write {path}: {reason}")


@dataclass(frozen=True)
class GeneratedFile:
    """One file written by a generator run."""

    path: Path
    role: str
    entity: Optional[str] = None


@dataclass
class BatchState:
    """
    Emission state for a single generator invocation.

    Created fresh by the orchestrator for every run so that shared
    components are emitted exactly once per batch, independent of any
    other run.
    """

    shared_emitted: bool = False
    converter_emitted: bool = False
    files: List[GeneratedFile] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def record(self, generated: GeneratedFile) -> None:
        self.files.append(generated)


class CodeGenerator(ABC):
    """Abstract base class for all code generators."""

    def __init__(self, config: Optional[Union[GeneratorConfig, Dict[str, Any]]] = None):
        """Initialize generator with optional configuration."""
        if isinstance(config, GeneratorConfig):
            self.config = config
        else:
            self.config = load_config(self.language_name, custom_config=config or {})
        self._template_engine = None
        self._setup_templates()

    def _setup_templates(self):
        """Setup template engine for this generator."""
        template_dir = self.get_template_directory()
        if template_dir:
            self._template_engine = create_template_engine(template_dir)
        else:
            # Fallback to in-memory templates
            self._template_engine = create_template_engine()

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'java')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated files (e.g., '.java')."""
        pass

    def get_template_directory(self) -> Optional[Path]:
        """
        Return the directory containing templates for this generator.

        Subclasses should override this to provide their template directory.
        Return None to use in-memory templates only.

        Returns:
            Path to template directory or None
        """
        return None

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        if self._template_engine is None:
            self._setup_templates()
        return self._template_engine

    @abstractmethod
    def generate(
        self,
        schemas: List[Schema],
        output_dir: Union[str, Path],
        table_metadata: Optional[TableMetadata] = None,
    ) -> BatchState:
        """
        Generate the client library for a batch of schemas sharing one table.

        Args:
            schemas: Entity schemas of the batch
            output_dir: Root directory of the generated source tree
            table_metadata: Optional table topology

        Returns:
            The batch state holding every file written
        """
        pass

    def validate_schemas(self, schemas: List[Schema]) -> List[str]:
        """
        Validate schemas for basic structural issues.

        Language generators should override this to add language-specific validation.

        Args:
            schemas: Schemas to validate

        Returns:
            List of warning messages (empty if no issues)
        """
        warnings = []

        seen_entities = set()
        for schema in schemas:
            if schema.entity_name in seen_entities:
                warnings.append(
                    f"Entity '{schema.entity_name}' appears more than once in the batch"
                )
            seen_entities.add(schema.entity_name)

            for f in iter_nested_fields(schema.fields):
                if f.required and f.nullable:
                    warnings.append(
                        f"{schema.entity_name}.{f.name} is both required and nullable"
                    )
                if f.has_default and is_collection_type(f.type):
                    warnings.append(
                        f"Default value of collection field {schema.entity_name}.{f.name} is ignored"
                    )
                if f.has_constraints and is_collection_type(f.type):
                    warnings.append(
                        f"Constraints on collection field {schema.entity_name}.{f.name} are ignored"
                    )

        return warnings

    def format_code(self, code: str) -> str:
        """
        Apply language-specific formatting to generated code.

        Args:
            code: Raw generated code

        Returns:
            Formatted code
        """
        # Basic cleanup - strip trailing spaces and collapse blank runs
        lines = code.split("\n")
        formatted_lines = []
        blank_count = 0

        for line in lines:
            stripped = line.rstrip()
            if not stripped:
                blank_count += 1
                if blank_count <= 1 and formatted_lines:
                    formatted_lines.append("")
            else:
                blank_count = 0
                formatted_lines.append(stripped)

        while formatted_lines and not formatted_lines[-1]:
            formatted_lines.pop()

        return "\n".join(formatted_lines) + "\n"

    def write_file(self, path: Path, content: str) -> Path:
        """
        Write one generated file, creating parent directories.

        Raises:
            OutputWriteError: On any filesystem failure
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error("Failed to write %s: %s", path, e)
            raise OutputWriteError(path, str(e)) from e
        logger.debug("Wrote %s", path)
        return path

    # Template helper methods

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with context.

        Args:
            template_name: Template file name
            context: Template variables

        Returns:
            Rendered content
        """
        return self.template_engine.render_template(template_name, context)

    def template_exists(self, template_name: str) -> bool:
        """Check if a template exists."""
        return self.template_engine.template_exists(template_name)


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        files: List[GeneratedFile] = None,
        warnings: List[str] = None,
        metadata: Dict[str, Any] = None,
    ):
        """
        Initialize generation result.

        Args:
            files: Files written by the run
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.files = files or []
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message = None
        self.exception = None

    @classmethod
    def error(
        cls,
        message: str,
        exception: Exception = None,
        files: List[GeneratedFile] = None,
    ) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(files=files)
        result.success = False
        result.error_message = message
        result.exception = exception
        return result

    @property
    def paths(self) -> List[Path]:
        return [f.path for f in self.files]

    def files_by_role(self) -> Dict[str, List[GeneratedFile]]:
        """Group written files by role, keeping write order."""
        grouped: Dict[str, List[GeneratedFile]] = {}
        for generated in self.files:
            grouped.setdefault(generated.role, []).append(generated)
        return grouped


def generate_code(
    generator: CodeGenerator,
    schemas: List[Schema],
    output_dir: Union[str, Path],
    table_metadata: Optional[TableMetadata] = None,
) -> GenerationResult:
    """
    Generate code using the specified generator with error handling.

    Args:
        generator: Code generator instance
        schemas: Schemas to generate code for
        output_dir: Root of the generated source tree
        table_metadata: Optional table topology

    Returns:
        GenerationResult with files, warnings, and metadata
    """
    try:
        # Validate schemas at the base level
        warnings = generator.validate_schemas(schemas)

        state = generator.generate(schemas, output_dir, table_metadata)

        metadata = {
            "language": generator.language_name,
            "file_extension": generator.file_extension,
            "package": generator.config.package_name,
            "output_dir": str(output_dir),
            "entity_count": len(schemas),
            "file_count": len(state.files),
            "has_table_metadata": table_metadata is not None,
            "index_count": len(table_metadata.indexes) if table_metadata else 0,
        }

        return GenerationResult(state.files, warnings + state.warnings, metadata)

    except Exception as e:
        logger.error("Code generation failed: %s", e)
        written = getattr(e, "written_files", None) or []
        return GenerationResult.error(
            f"Code generation failed: {str(e)}", exception=e, files=written
        )
