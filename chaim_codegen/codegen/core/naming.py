"""
Naming utilities for safe code generation.

Derives legal code identifiers from raw attribute names, detects
identifier collisions, and provides the case conversions used for
generated class, method and constant names.
"""

import re
from typing import Dict, Iterable, List, Optional, Set
from enum import Enum

from .generator import GeneratorError
from .schema import Field, SchemaError


LEGAL_IDENTIFIER = re.compile(r"^[a-zA-Z_$][a-zA-Z0-9_$]*$")

# Characters that separate words in a raw attribute name.
_WORD_SEPARATORS = re.compile(r"[^a-zA-Z0-9$]+")


class CollisionError(GeneratorError):
    """Two or more raw attribute names resolve to the same identifier."""

    def __init__(self, collisions: Dict[str, List[str]]):
        self.collisions = collisions
        super().__init__(format_collisions(collisions))


class NamingCase(Enum):
    """Different naming case styles."""

    CAMEL_CASE = "camel"  # userName
    PASCAL_CASE = "pascal"  # UserName
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME


def capitalize_first(name: str) -> str:
    """Upper-case the first character only."""
    if not name:
        return name
    return name[0].upper() + name[1:]


def uncapitalize(name: str) -> str:
    """Lower-case the first character only."""
    if not name:
        return name
    return name[0].lower() + name[1:]


def to_java_camel_case(name: str) -> str:
    """
    Convert a raw attribute name to a camelCase identifier.

    All-caps names without separators are lower-cased wholesale
    (``TTL`` -> ``ttl``). Otherwise the name is split on separators, the
    first segment gets a lower-case first letter and every later segment an
    upper-case first letter; the rest of each segment is left alone
    (``order-date`` -> ``orderDate``, ``user_ID`` -> ``userID``). A result
    starting with a digit is prefixed with an underscore.
    """
    if not name:
        return name

    if (
        len(name) > 1
        and name == name.upper()
        and not _WORD_SEPARATORS.search(name)
    ):
        result = name.lower()
    else:
        parts = [p for p in _WORD_SEPARATORS.split(name) if p]
        if not parts:
            raise SchemaError(
                f"Attribute name '{name}' has no letters or digits; add a nameOverride"
            )
        result = uncapitalize(parts[0]) + "".join(capitalize_first(p) for p in parts[1:])

    if result[0].isdigit():
        result = f"_{result}"
    return result


def to_camel_case(name: str) -> str:
    """Convert a hyphenated, dotted or underscored name to camelCase."""
    parts = [p for p in re.split(r"[-_.]", name) if p]
    if not parts:
        return name
    return uncapitalize(parts[0]) + "".join(capitalize_first(p) for p in parts[1:])


def to_pascal_case(name: str) -> str:
    """``customer-index`` -> ``CustomerIndex``."""
    return capitalize_first(to_camel_case(name))


def to_constant_case(name: str) -> str:
    """
    Convert a name to UPPER_SNAKE_CASE.

    Hyphens become underscores and an underscore is inserted at every
    lower-to-upper case boundary: ``customerIndex`` -> ``CUSTOMER_INDEX``.
    """
    if not name:
        return name
    result = name.replace("-", "_")
    result = re.sub(r"(?<=[a-z])(?=[A-Z])", "_", result)
    return result.upper()


def resolve_code_name(f: Field) -> str:
    """
    Resolve the code identifier for a field.

    ``nameOverride`` wins; a name that is already a legal identifier is kept
    unchanged; anything else is camel-cased.
    """
    if f.name_override:
        return f.name_override
    if f.name == "_":
        raise SchemaError("Attribute name '_' is not a legal identifier; add a nameOverride")
    if LEGAL_IDENTIFIER.match(f.name):
        return f.name
    return to_java_camel_case(f.name)


def needs_attribute_marker(f: Field, code_name: Optional[str] = None) -> bool:
    """True when the stored attribute name differs from the code identifier."""
    if code_name is None:
        code_name = resolve_code_name(f)
    return code_name != f.name


def find_collisions(fields: Iterable[Field]) -> Dict[str, List[str]]:
    """
    Group raw names by resolved identifier.

    Returns:
        Only the groups with two or more raw names, keyed by identifier,
        in first-seen order.
    """
    groups: Dict[str, List[str]] = {}
    for f in fields:
        groups.setdefault(resolve_code_name(f), []).append(f.name)
    return {code: names for code, names in groups.items() if len(names) > 1}


def format_collisions(collisions: Dict[str, List[str]]) -> str:
    """Human readable message naming every colliding group."""
    return " ".join(
        f"Name collision: fields [{', '.join(names)}] all resolve to Java identifier "
        f"'{code}'. Add nameOverride to one of the conflicting fields in your .bprint."
        for code, names in collisions.items()
    )


def detect_collisions(fields: Iterable[Field]) -> None:
    """
    Fail if two raw names in one field list resolve to the same identifier.

    Raises:
        CollisionError: Listing every colliding group
    """
    collisions = find_collisions(fields)
    if collisions:
        raise CollisionError(collisions)


class NameSanitizer:
    """Handles reserved-word checks and case conversion for one target language."""

    def __init__(self, reserved_words: Set[str] = None, builtin_types: Set[str] = None):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_types: Set of builtin type names that might conflict
        """
        self.reserved_words = reserved_words or set()
        self.builtin_types = builtin_types or set()
        self._name_cache: Dict[str, str] = {}

    def is_reserved(self, name: str) -> bool:
        return name in self.reserved_words

    def shadows_builtin(self, name: str) -> bool:
        return name in self.builtin_types

    def convert_case(self, name: str, target_case: NamingCase) -> str:
        """Convert name to target case style."""
        cache_key = f"{name}_{target_case.value}"
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        if target_case == NamingCase.CAMEL_CASE:
            converted = to_camel_case(name)
        elif target_case == NamingCase.PASCAL_CASE:
            converted = to_pascal_case(name)
        elif target_case == NamingCase.SCREAMING_SNAKE:
            converted = to_constant_case(name)
        else:
            converted = name

        self._name_cache[cache_key] = converted
        return converted

    def check_identifier(self, name: str, context: str) -> Optional[str]:
        """
        Check a generated identifier.

        Returns:
            A warning message, or None when the identifier is safe
        """
        if not LEGAL_IDENTIFIER.match(name):
            return f"{context}: '{name}' is not a legal identifier"
        if self.is_reserved(name):
            return f"{context}: '{name}' is a reserved word; add a nameOverride"
        if self.shadows_builtin(name):
            return f"{context}: '{name}' shadows a built-in type name"
        return None
