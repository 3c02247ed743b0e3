"""
Registry of target-language generators.

Maps a primary language name and its aliases to a generator class and
builds configured generator instances on demand.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

from .core.config import GeneratorConfig, load_config
from .core.generator import CodeGenerator
from ..logging_config import get_logger

logger = get_logger(__name__)

ConfigSource = Union[GeneratorConfig, Dict[str, Any], str, Path, None]


class RegistryError(Exception):
    """Exception raised for unknown languages or bad registrations."""

    pass


@dataclass
class LanguageEntry:
    """A registered generator and the names it answers to."""

    language: str
    generator_class: Type[CodeGenerator]
    aliases: List[str] = field(default_factory=list)


class GeneratorRegistry:
    """Lookup table from language names and aliases to generator classes."""

    def __init__(self):
        self._entries: Dict[str, LanguageEntry] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        language: str,
        generator_class: Type[CodeGenerator],
        aliases: Optional[List[str]] = None,
    ):
        """
        Register a generator under a primary name and optional aliases.

        Registering a language that is already known is a no-op.

        Raises:
            RegistryError: If the class is not a CodeGenerator or an alias
                is already taken by another language
        """
        if not (isinstance(generator_class, type) and issubclass(generator_class, CodeGenerator)):
            raise RegistryError(f"{generator_class!r} is not a CodeGenerator subclass")

        key = language.lower()
        if key in self._entries:
            logger.debug("Generator for %s already registered", key)
            return

        alias_keys = sorted({a.lower() for a in aliases or []} - {key})
        for alias in alias_keys:
            if alias in self._entries:
                raise RegistryError(f"Alias '{alias}' is already a language name")
            if self._aliases.get(alias, key) != key:
                raise RegistryError(f"Alias '{alias}' already points to '{self._aliases[alias]}'")

        self._entries[key] = LanguageEntry(key, generator_class, alias_keys)
        for alias in alias_keys:
            self._aliases[alias] = key
        logger.debug("Registered %s generator %s", key, generator_class.__name__)

    def unregister(self, language: str):
        """Drop a language together with its aliases."""
        entry = self._entries.pop(self.primary_name(language), None)
        if entry:
            for alias in entry.aliases:
                self._aliases.pop(alias, None)

    def primary_name(self, language: str) -> str:
        key = language.lower()
        return self._aliases.get(key, key)

    def is_supported(self, language: str) -> bool:
        return self.primary_name(language) in self._entries

    def list_languages(self) -> List[str]:
        """Primary language names, sorted."""
        return sorted(self._entries)

    def _entry(self, language: str) -> LanguageEntry:
        entry = self._entries.get(self.primary_name(language))
        if entry is None:
            raise RegistryError(
                f"No generator registered for language: {language}. "
                f"Available: {', '.join(self.list_languages())}"
            )
        return entry

    def get_generator_class(self, language: str) -> Type[CodeGenerator]:
        return self._entry(language).generator_class

    def create_generator(self, language: str, config: ConfigSource = None) -> CodeGenerator:
        """
        Instantiate the generator for a language.

        Args:
            language: Language name or alias
            config: A GeneratorConfig, a dict of overrides, or a JSON config file path

        Raises:
            RegistryError: If the language is unknown, the config type is not
                supported, or the generator cannot be built
        """
        entry = self._entry(language)

        if isinstance(config, GeneratorConfig):
            final_config = config
        elif isinstance(config, (str, Path)):
            final_config = load_config(entry.language, config_file=config)
        elif isinstance(config, dict) or config is None:
            final_config = load_config(entry.language, custom_config=config)
        else:
            raise RegistryError(f"Invalid config type: {type(config)}")

        try:
            return entry.generator_class(final_config)
        except Exception as e:
            raise RegistryError(f"Failed to create {entry.language} generator: {e}") from e

    def get_language_info(self, language: str) -> Dict[str, Any]:
        """Describe a registered language: name, class, module, extension and aliases."""
        entry = self._entry(language)
        generator = entry.generator_class(load_config(entry.language))
        return {
            "name": generator.language_name,
            "class": entry.generator_class.__name__,
            "module": entry.generator_class.__module__,
            "file_extension": generator.file_extension,
            "aliases": list(entry.aliases),
        }


_global_registry: Optional[GeneratorRegistry] = None


def get_registry() -> GeneratorRegistry:
    """Return the process-wide registry, registering built-in generators on first use."""
    global _global_registry
    if _global_registry is None:
        from .languages.java import JavaGenerator

        _global_registry = GeneratorRegistry()
        _global_registry.register(
            "java", JavaGenerator, aliases=["dynamodb-java", "enhanced-client"]
        )
    return _global_registry


def get_generator(language: str, config: ConfigSource = None) -> CodeGenerator:
    return get_registry().create_generator(language, config)


def list_supported_languages() -> List[str]:
    return get_registry().list_languages()


def is_language_supported(language: str) -> bool:
    return get_registry().is_supported(language)


def get_language_info(language: str) -> Dict[str, Any]:
    return get_registry().get_language_info(language)


def list_all_language_info() -> Dict[str, Dict[str, Any]]:
    """Info for every registered language; languages that fail to load are skipped."""
    result = {}
    for language in list_supported_languages():
        try:
            result[language] = get_language_info(language)
        except RegistryError as e:
            logger.warning("Skipping %s: %s", language, e)
    return result


def resolve_language(language: str) -> str:
    """Map a language name or alias to its primary name."""
    return get_registry().primary_name(language)
