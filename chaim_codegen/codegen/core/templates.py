"""
Template engine wrapper for code generation.

Provides a simple interface for Jinja2 template rendering
with common utilities for Java code generation.
"""

import textwrap
from typing import Dict, Any, Optional
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, DictLoader, TemplateNotFound

from ...logging_config import get_logger

logger = get_logger(__name__)

_JAVA_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


def escape_java_string(value: Any) -> str:
    """Escape text for use inside a Java string literal (quotes not added)."""
    return "".join(_JAVA_ESCAPES.get(ch, ch) for ch in str(value))


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Initialize template engine.

        Args:
            template_dir: Directory containing template files
        """
        self.template_dir = Path(template_dir) if template_dir else None
        self._env = None
        self._setup_environment()

    def _setup_environment(self):
        """Setup Jinja2 environment with code generation utilities."""
        if self.template_dir and self.template_dir.exists():
            loader = FileSystemLoader(str(self.template_dir))
        else:
            # Use in-memory templates
            loader = DictLoader({})

        self._env = Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        # Add custom filters for code generation
        self._env.filters["camel_case"] = self._camel_case_filter
        self._env.filters["pascal_case"] = self._pascal_case_filter
        self._env.filters["constant_case"] = self._constant_case_filter
        self._env.filters["javadoc"] = self._javadoc_filter
        self._env.filters["java_string"] = escape_java_string

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of template file
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except TemplateNotFound as e:
            raise TemplateError(f"Template not found: {template_name}") from e
        except Exception as e:
            logger.debug("Render of %s failed", template_name, exc_info=True)
            raise TemplateError(f"Failed to render template {template_name}: {str(e)}") from e

    def render_string(self, template_string: str, context: Dict[str, Any]) -> str:
        """Render a template string with the given context."""
        try:
            template = self._env.from_string(template_string)
            return template.render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template string: {str(e)}") from e

    def template_exists(self, template_name: str) -> bool:
        try:
            self._env.get_template(template_name)
            return True
        except TemplateNotFound:
            return False

    def add_template(self, name: str, content: str):
        """
        Add an in-memory template.

        Args:
            name: Template name
            content: Template content
        """
        if not isinstance(self._env.loader, DictLoader):
            # Convert to DictLoader to support in-memory templates
            self._env.loader = DictLoader({})

        self._env.loader.mapping[name] = content

    # Template filters for code generation

    def _camel_case_filter(self, value: str) -> str:
        from .naming import to_camel_case

        return to_camel_case(str(value))

    def _pascal_case_filter(self, value: str) -> str:
        from .naming import to_pascal_case

        return to_pascal_case(str(value))

    def _constant_case_filter(self, value: str) -> str:
        from .naming import to_constant_case

        return to_constant_case(str(value))

    def _javadoc_filter(self, value: str, indent: int = 2, width: int = 100) -> str:
        """
        Render text as a Javadoc block.

        Each paragraph (newline separated) is wrapped to ``width`` columns.
        The result has no trailing newline.
        """
        pad = " " * indent
        body = []
        for paragraph in str(value).strip().split("\n"):
            paragraph = paragraph.strip().replace("*/", "*&#47;")
            if not paragraph:
                body.append(f"{pad} *")
                continue
            for line in textwrap.wrap(paragraph, max(width - indent - 3, 20)):
                body.append(f"{pad} * {line}")
        return "\n".join([f"{pad}/**", *body, f"{pad} */"])


def create_template_engine(template_dir: Optional[Path] = None) -> TemplateEngine:
    """Create a template engine, optionally bound to a template directory."""
    return TemplateEngine(template_dir)
