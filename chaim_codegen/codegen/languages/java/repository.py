"""
Repository operation builder.

Decides which query families a repository carries and types their key
parameters. The primary range family exists only with a sort key; one
index family exists per declared secondary index whose attributes the
entity actually has.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set

from ...core.model import EntityModel, ResolvedField, check_key_capable
from ...core.naming import capitalize_first, to_camel_case, to_constant_case
from ...core.schema import SchemaError, SecondaryIndex, TableMetadata
from ....logging_config import get_logger
from . import config as jc
from .types import JavaTypeMapper, key_value_expression, key_value_imports

logger = get_logger(__name__)

# Fields, parameters and locals declared by the key and repository templates.
TEMPLATE_NAMES = frozenset(
    {
        "attempt",
        "batch",
        "condition",
        "conditionExpression",
        "consistentRead",
        "document",
        "enhancedClient",
        "entities",
        "entity",
        "filterExpression",
        "item",
        "key",
        "keys",
        "maxResults",
        "page",
        "pages",
        "remaining",
        "request",
        "result",
        "results",
        "sortFrom",
        "sortPrefix",
        "sortTo",
        "sortValue",
        "start",
        "table",
        "tableSchema",
    }
)


@dataclass
class KeyParam:
    """A typed key parameter of a generated method."""

    attribute: str
    name: str
    type: str
    source: ResolvedField = field(repr=False)
    text_stored: bool = False

    @property
    def value(self) -> str:
        return self.value_of(self.name)

    def value_of(self, param: str) -> str:
        """Expression handing ``param`` (of this key's type) to the key builder."""
        return key_value_expression(param, self.source)


@dataclass
class IndexQueries:
    """Query family for one secondary index."""

    index: SecondaryIndex
    method_suffix: str
    constant: str
    partition: KeyParam
    sort: Optional[KeyParam] = None

    @property
    def name(self) -> str:
        return self.index.name

    @property
    def local(self) -> bool:
        return self.index.local

    @property
    def begins_with(self) -> bool:
        return self.sort is not None and self.sort.text_stored


@dataclass
class RepositoryContext:
    partition: KeyParam
    sort: Optional[KeyParam] = None
    indexes: List[IndexQueries] = field(default_factory=list)
    imports: Set[str] = field(default_factory=set)

    @property
    def begins_with(self) -> bool:
        return self.sort is not None and self.sort.text_stored

    @property
    def has_queries(self) -> bool:
        return self.sort is not None or bool(self.indexes)


def index_constant(index_name: str) -> str:
    """``customer-index`` -> ``INDEX_CUSTOMER_INDEX``."""
    return "INDEX_" + to_constant_case(index_name.replace(".", "-"))


def index_method_suffix(index_name: str) -> str:
    return capitalize_first(to_camel_case(index_name))


def parameter_name(code_name: str) -> str:
    """Key parameter name that cannot clash with a name the templates declare."""
    name = code_name
    while name in TEMPLATE_NAMES:
        name = f"{name}Key"
    return name


def key_param(rfield: ResolvedField, model: EntityModel, mapper: JavaTypeMapper) -> KeyParam:
    java_type = mapper.map_field(rfield, model)
    return KeyParam(
        attribute=rfield.name,
        name=parameter_name(rfield.code_name),
        type=java_type.name,
        source=rfield,
        text_stored=java_type.text_stored,
    )


def applicable_indexes(
    model: EntityModel, table_metadata: Optional[TableMetadata], warnings: List[str]
) -> List[SecondaryIndex]:
    """
    Declared indexes whose key attributes are all fields of ``model``.

    Indexes referring to an attribute the entity lacks are skipped with a
    warning. Local indexes use the table's partition key.

    Raises:
        SchemaError: If an index key attribute cannot be a key
    """
    if table_metadata is None:
        return []

    result = []
    for index in table_metadata.indexes:
        partition_name = index.partition_key or model.partition_key.name
        names = [partition_name] + ([index.sort_key] if index.sort_key else [])
        missing = [name for name in names if model.get_field(name) is None]
        if missing:
            message = (
                f"{model.name}: index '{index.name}' skipped, "
                f"attribute(s) {', '.join(missing)} not declared on the entity"
            )
            warnings.append(message)
            logger.warning(message)
            continue
        for name in names:
            check_key_capable(model.get_field(name), f"key of index '{index.name}'")
        result.append(index)
    return result


def index_markers(model: EntityModel, indexes: List[SecondaryIndex]):
    """
    Map each raw attribute name to the indexes it keys.

    Returns ``(partition, sort)`` dicts of ``attribute -> [index names]``,
    ordered by index declaration. Local indexes only mark their sort key.
    """
    partition = {}
    sort = {}
    for index in indexes:
        if not index.local:
            partition.setdefault(index.partition_key, []).append(index.name)
        if index.sort_key:
            sort.setdefault(index.sort_key, []).append(index.name)
    return partition, sort


def build_repository_context(
    model: EntityModel,
    mapper: JavaTypeMapper,
    indexes: List[SecondaryIndex],
) -> RepositoryContext:
    """
    Assemble the key parameters and index families of one repository.

    Args:
        model: Resolved entity
        mapper: Java type mapper
        indexes: Applicable indexes, in declaration order
    """
    pk_field = model.partition_key
    sk_field = model.sort_key
    context = RepositoryContext(partition=key_param(pk_field, model, mapper))
    key_fields = [pk_field]
    if sk_field is not None:
        context.sort = key_param(sk_field, model, mapper)
        key_fields.append(sk_field)

    for index in indexes:
        partition_field = model.get_field(index.partition_key or pk_field.name)
        sort_field = model.get_field(index.sort_key) if index.sort_key else None
        if partition_field is None:
            raise SchemaError(f"Index '{index.name}' has no partition attribute on {model.name}")
        family = IndexQueries(
            index=index,
            method_suffix=index_method_suffix(index.name),
            constant=index_constant(index.name),
            partition=key_param(partition_field, model, mapper),
            sort=key_param(sort_field, model, mapper) if sort_field else None,
        )
        context.indexes.append(family)
        key_fields.append(partition_field)
        if sort_field is not None:
            key_fields.append(sort_field)

    for rfield in key_fields:
        context.imports.update(mapper.map_field(rfield, model).imports)
        context.imports.update(key_value_imports(rfield))

    context.imports.update(
        {
            jc.DYNAMO_DB_ENHANCED_CLIENT,
            jc.DYNAMO_DB_TABLE,
            jc.TABLE_SCHEMA,
            jc.KEY,
            jc.EXPRESSION,
            jc.DOCUMENT,
            jc.PAGE,
            jc.PAGE_ITERABLE,
            jc.SDK_ITERABLE,
            jc.PUT_ITEM_ENHANCED_REQUEST,
            jc.UPDATE_ITEM_ENHANCED_REQUEST,
            jc.GET_ITEM_ENHANCED_REQUEST,
            jc.DELETE_ITEM_ENHANCED_REQUEST,
            jc.SCAN_ENHANCED_REQUEST,
            jc.BATCH_GET_ITEM_ENHANCED_REQUEST,
            jc.BATCH_WRITE_ITEM_ENHANCED_REQUEST,
            jc.BATCH_WRITE_RESULT,
            jc.READ_BATCH,
            jc.WRITE_BATCH,
            jc.TRANSACT_GET_ITEMS_ENHANCED_REQUEST,
            jc.TRANSACT_WRITE_ITEMS_ENHANCED_REQUEST,
            jc.ARRAY_LIST,
            jc.LIST,
            jc.OPTIONAL,
            jc.COLLECTORS,
        }
    )
    if context.has_queries:
        context.imports.update({jc.QUERY_CONDITIONAL, jc.QUERY_ENHANCED_REQUEST})
    return context
