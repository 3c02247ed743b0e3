"""
Validator body synthesis.

Walks an entity model and produces the statements of the generated
``validate`` method: required checks, string and numeric constraint
checks, and recursion into nested maps and list-of-map items. Every
violation is appended to one error list that is thrown at the end.
"""

from dataclasses import dataclass, field
from typing import List, Set

from ...core.model import EntityModel, ResolvedField, ResolvedKind
from ...core.naming import capitalize_first
from ...core.templates import escape_java_string
from ...core.types import TypeKind
from . import config as jc
from .types import JavaTypeMapper, bound_literal, display_number

FIELD_ERROR = "ChaimValidationException.FieldError"
EXCEPTION = "ChaimValidationException"

_INDEX_VARIABLES = "ijklmn"
_STEP = "  "


@dataclass
class ValidatorBody:
    """Statements of a validate method, each already indented by two spaces per level."""

    lines: List[str] = field(default_factory=list)
    imports: Set[str] = field(default_factory=set)

    @property
    def empty(self) -> bool:
        return not self.lines


class ValidatorBuilder:
    """
    Builds the validate method body for one entity.

    Args:
        model: Resolved entity
        mapper: Java type mapper for local variable types
    """

    def __init__(self, model: EntityModel, mapper: JavaTypeMapper):
        self.model = model
        self.mapper = mapper
        self._body = ValidatorBody()
        self._locals = {"entity", "errors"}

    def build(self) -> ValidatorBody:
        if not self.model.needs_validation:
            return self._body

        self._body.imports.update({jc.LIST, jc.ARRAY_LIST})
        self._emit(0, f"List<{FIELD_ERROR}> errors = new ArrayList<>();")
        self._check_fields(self.model.fields, "entity", '"', 0, 0)
        self._emit(0, "if (!errors.isEmpty()) {")
        self._emit(1, f'throw new {EXCEPTION}("{escape_java_string(self.model.name)}", errors);')
        self._emit(0, "}")
        return self._body

    def _emit(self, level: int, line: str) -> None:
        self._body.lines.append(_STEP * level + line)

    def _local(self, base: str) -> str:
        name = base
        counter = 2
        while name in self._locals:
            name = f"{base}{counter}"
            counter += 1
        self._locals.add(name)
        return name

    def _index_variable(self, loop_depth: int) -> str:
        if loop_depth < len(_INDEX_VARIABLES):
            name = _INDEX_VARIABLES[loop_depth]
        else:
            name = f"i{loop_depth}"
        return self._local(name)

    def _error(self, level: int, path: str, constraint: str, message: str) -> None:
        self._emit(level, f'errors.add(new {FIELD_ERROR}({path}, "{constraint}", {message}));')

    def emits_checks(self, fields: List[ResolvedField]) -> bool:
        """True when a field list produces at least one statement."""
        for f in fields:
            if f.required or self._has_scalar_checks(f):
                return True
            if f.type.kind in (ResolvedKind.GENERATED, ResolvedKind.LIST_OF_GENERATED):
                if self.emits_checks(self.model.descriptors[f.type.type_name].fields):
                    return True
        return False

    @staticmethod
    def _has_scalar_checks(f: ResolvedField) -> bool:
        if f.type.kind != ResolvedKind.SCALAR or not f.source.has_constraints:
            return False
        c = f.constraints
        if f.type.spec.kind == TypeKind.STRING:
            return c.min_length is not None or c.max_length is not None or c.pattern is not None
        if f.type.spec.kind == TypeKind.NUMBER:
            return c.min is not None or c.max is not None
        return False

    def _check_fields(
        self,
        fields: List[ResolvedField],
        owner: str,
        prefix: str,
        level: int,
        loop_depth: int,
    ) -> None:
        for f in fields:
            getter = f"{owner}.get{capitalize_first(f.code_name)}()"
            path = f'{prefix}{escape_java_string(f.name)}"'

            if f.required:
                self._emit(level, f"if ({getter} == null) {{")
                self._error(level + 1, path, "required", '"is required but was null"')
                self._emit(level, "}")

            if self._has_scalar_checks(f):
                if f.type.spec.kind == TypeKind.STRING:
                    self._string_checks(f, getter, path, level)
                else:
                    self._number_checks(f, getter, path, level)
            elif f.type.kind == ResolvedKind.GENERATED:
                self._nested_map(f, getter, prefix, level, loop_depth)
            elif f.type.kind == ResolvedKind.LIST_OF_GENERATED:
                self._nested_list(f, getter, prefix, level, loop_depth)

    def _string_checks(self, f: ResolvedField, getter: str, path: str, level: int) -> None:
        c = f.constraints
        self._emit(level, f"if ({getter} != null) {{")
        inner = level + 1
        if c.min_length is not None:
            self._emit(inner, f"if ({getter}.length() < {c.min_length}) {{")
            self._error(
                inner + 1,
                path,
                "minLength",
                f'"must have minimum length {c.min_length}, got " + {getter}.length()',
            )
            self._emit(inner, "}")
        if c.max_length is not None:
            self._emit(inner, f"if ({getter}.length() > {c.max_length}) {{")
            self._error(
                inner + 1,
                path,
                "maxLength",
                f'"must have maximum length {c.max_length}, got " + {getter}.length()',
            )
            self._emit(inner, "}")
        if c.pattern is not None:
            pattern = escape_java_string(c.pattern)
            self._emit(inner, f'if (!{getter}.matches("{pattern}")) {{')
            self._error(inner + 1, path, "pattern", f"\"must match pattern '{pattern}'\"")
            self._emit(inner, "}")
        self._emit(level, "}")

    def _number_checks(self, f: ResolvedField, getter: str, path: str, level: int) -> None:
        c = f.constraints
        spec = f.type.spec
        self._emit(level, f"if ({getter} != null) {{")
        inner = level + 1
        for bound, op, tag, text in ((c.min, "<", "min", ">="), (c.max, ">", "max", "<=")):
            if bound is None:
                continue
            literal = bound_literal(spec, bound)
            if spec.is_decimal:
                self._body.imports.add(jc.BIG_DECIMAL)
                condition = f"{getter}.compareTo({literal}) {op} 0"
            else:
                condition = f"{getter} {op} {literal}"
            self._emit(inner, f"if ({condition}) {{")
            self._error(
                inner + 1,
                path,
                tag,
                f'"must be {text} {display_number(bound)}, got " + {getter}',
            )
            self._emit(inner, "}")
        self._emit(level, "}")

    def _nested_map(
        self, f: ResolvedField, getter: str, prefix: str, level: int, loop_depth: int
    ) -> None:
        descriptor = self.model.descriptors[f.type.type_name]
        if not self.emits_checks(descriptor.fields):
            return
        java_type = self.mapper.model_type(descriptor.name)
        self._body.imports.update(java_type.imports)
        var = self._local(f.code_name)
        self._emit(level, f"{java_type.name} {var} = {getter};")
        self._emit(level, f"if ({var} != null) {{")
        self._check_fields(
            descriptor.fields,
            var,
            f"{prefix}{escape_java_string(f.name)}.",
            level + 1,
            loop_depth,
        )
        self._emit(level, "}")

    def _nested_list(
        self, f: ResolvedField, getter: str, prefix: str, level: int, loop_depth: int
    ) -> None:
        descriptor = self.model.descriptors[f.type.type_name]
        if not self.emits_checks(descriptor.fields):
            return
        java_type = self.mapper.model_type(descriptor.name)
        self._body.imports.update(java_type.imports)
        index = self._index_variable(loop_depth)
        item = self._local(f"{f.code_name}Item")
        self._emit(level, f"if ({getter} != null) {{")
        self._emit(level + 1, f"for (int {index} = 0; {index} < {getter}.size(); {index}++) {{")
        self._emit(level + 2, f"{java_type.name} {item} = {getter}.get({index});")
        self._emit(level + 2, f"if ({item} != null) {{")
        self._check_fields(
            descriptor.fields,
            item,
            f'{prefix}{escape_java_string(f.name)}[" + {index} + "].',
            level + 3,
            loop_depth + 1,
        )
        self._emit(level + 2, "}")
        self._emit(level + 1, "}")
        self._emit(level, "}")
        self._locals.discard(index)


def build_validator_body(model: EntityModel, mapper: JavaTypeMapper) -> ValidatorBody:
    return ValidatorBuilder(model, mapper).build()
