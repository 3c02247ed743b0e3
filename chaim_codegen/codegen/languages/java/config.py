"""
Java-specific layout and import constants.

Sub-package names by file role, and the fully qualified names of the
AWS SDK and JDK classes that generated sources import.
"""

from pathlib import Path
from typing import Iterable, List, Union


# Sub-packages by role; None means the base package
ROLE_SUBPACKAGES = {
    "entity": None,
    "enum": None,
    "model": "model",
    "keys": "keys",
    "validator": "validation",
    "validation-exception": "validation",
    "repository": "repository",
    "client": "client",
    "config": "config",
    "converter": "converter",
}

ENHANCED_PACKAGE = "software.amazon.awssdk.enhanced.dynamodb"
ANNOTATIONS_PACKAGE = f"{ENHANCED_PACKAGE}.mapper.annotations"
ENHANCED_MODEL_PACKAGE = f"{ENHANCED_PACKAGE}.model"

# Annotations
DYNAMO_DB_BEAN = f"{ANNOTATIONS_PACKAGE}.DynamoDbBean"
DYNAMO_DB_PARTITION_KEY = f"{ANNOTATIONS_PACKAGE}.DynamoDbPartitionKey"
DYNAMO_DB_SORT_KEY = f"{ANNOTATIONS_PACKAGE}.DynamoDbSortKey"
DYNAMO_DB_ATTRIBUTE = f"{ANNOTATIONS_PACKAGE}.DynamoDbAttribute"
DYNAMO_DB_CONVERTED_BY = f"{ANNOTATIONS_PACKAGE}.DynamoDbConvertedBy"
DYNAMO_DB_SECONDARY_PARTITION_KEY = f"{ANNOTATIONS_PACKAGE}.DynamoDbSecondaryPartitionKey"
DYNAMO_DB_SECONDARY_SORT_KEY = f"{ANNOTATIONS_PACKAGE}.DynamoDbSecondarySortKey"

# Enhanced client
DYNAMO_DB_ENHANCED_CLIENT = f"{ENHANCED_PACKAGE}.DynamoDbEnhancedClient"
DYNAMO_DB_TABLE = f"{ENHANCED_PACKAGE}.DynamoDbTable"
DYNAMO_DB_INDEX = f"{ENHANCED_PACKAGE}.DynamoDbIndex"
TABLE_SCHEMA = f"{ENHANCED_PACKAGE}.TableSchema"
KEY = f"{ENHANCED_PACKAGE}.Key"
EXPRESSION = f"{ENHANCED_PACKAGE}.Expression"
DOCUMENT = f"{ENHANCED_PACKAGE}.Document"
ATTRIBUTE_CONVERTER = f"{ENHANCED_PACKAGE}.AttributeConverter"
ATTRIBUTE_VALUE_TYPE = f"{ENHANCED_PACKAGE}.AttributeValueType"
ENHANCED_TYPE = f"{ENHANCED_PACKAGE}.EnhancedType"

# Enhanced client request and result models
QUERY_CONDITIONAL = f"{ENHANCED_MODEL_PACKAGE}.QueryConditional"
QUERY_ENHANCED_REQUEST = f"{ENHANCED_MODEL_PACKAGE}.QueryEnhancedRequest"
SCAN_ENHANCED_REQUEST = f"{ENHANCED_MODEL_PACKAGE}.ScanEnhancedRequest"
PAGE_ITERABLE = f"{ENHANCED_MODEL_PACKAGE}.PageIterable"
PAGE = f"{ENHANCED_MODEL_PACKAGE}.Page"
PUT_ITEM_ENHANCED_REQUEST = f"{ENHANCED_MODEL_PACKAGE}.PutItemEnhancedRequest"
UPDATE_ITEM_ENHANCED_REQUEST = f"{ENHANCED_MODEL_PACKAGE}.UpdateItemEnhancedRequest"
GET_ITEM_ENHANCED_REQUEST = f"{ENHANCED_MODEL_PACKAGE}.GetItemEnhancedRequest"
DELETE_ITEM_ENHANCED_REQUEST = f"{ENHANCED_MODEL_PACKAGE}.DeleteItemEnhancedRequest"
BATCH_GET_ITEM_ENHANCED_REQUEST = f"{ENHANCED_MODEL_PACKAGE}.BatchGetItemEnhancedRequest"
BATCH_WRITE_ITEM_ENHANCED_REQUEST = f"{ENHANCED_MODEL_PACKAGE}.BatchWriteItemEnhancedRequest"
BATCH_WRITE_RESULT = f"{ENHANCED_MODEL_PACKAGE}.BatchWriteResult"
READ_BATCH = f"{ENHANCED_MODEL_PACKAGE}.ReadBatch"
WRITE_BATCH = f"{ENHANCED_MODEL_PACKAGE}.WriteBatch"
TRANSACT_GET_ITEMS_ENHANCED_REQUEST = f"{ENHANCED_MODEL_PACKAGE}.TransactGetItemsEnhancedRequest"
TRANSACT_WRITE_ITEMS_ENHANCED_REQUEST = f"{ENHANCED_MODEL_PACKAGE}.TransactWriteItemsEnhancedRequest"

# Low-level SDK
DYNAMO_DB_CLIENT = "software.amazon.awssdk.services.dynamodb.DynamoDbClient"
DYNAMO_DB_CLIENT_BUILDER = "software.amazon.awssdk.services.dynamodb.DynamoDbClientBuilder"
ATTRIBUTE_VALUE = "software.amazon.awssdk.services.dynamodb.model.AttributeValue"
REGION = "software.amazon.awssdk.regions.Region"
SDK_BYTES = "software.amazon.awssdk.core.SdkBytes"
SDK_ITERABLE = "software.amazon.awssdk.core.pagination.sync.SdkIterable"

# JDK
BIG_DECIMAL = "java.math.BigDecimal"
INSTANT = "java.time.Instant"
LOCAL_DATE = "java.time.LocalDate"
URI = "java.net.URI"
LIST = "java.util.List"
ARRAY_LIST = "java.util.ArrayList"
ARRAYS = "java.util.Arrays"
SET = "java.util.Set"
OBJECTS = "java.util.Objects"
OPTIONAL = "java.util.Optional"
COLLECTIONS = "java.util.Collections"
COLLECTORS = "java.util.stream.Collectors"


def subpackage(base_package: str, role: str) -> str:
    """Fully qualified package for files of a role."""
    sub = ROLE_SUBPACKAGES[role]
    return f"{base_package}.{sub}" if sub else base_package


def qualified(base_package: str, role: str, class_name: str) -> str:
    return f"{subpackage(base_package, role)}.{class_name}"


def source_path(output_dir: Union[str, Path], package: str, class_name: str) -> Path:
    """Path of a class's source file under the output root."""
    return Path(output_dir).joinpath(*package.split("."), f"{class_name}.java")


def format_java_imports(imports: Iterable[str], current_package: str) -> List[str]:
    """
    Sorted import statements for a compilation unit.

    Classes of the current package and of java.lang are dropped.

    Args:
        imports: Fully qualified class names
        current_package: Package the file is declared in

    Returns:
        ``import x.y.Z;`` lines, sorted
    """
    needed = set()
    for name in imports:
        package, _, _ = name.rpartition(".")
        if package in (current_package, "java.lang", ""):
            continue
        needed.add(name)
    return [f"import {name};" for name in sorted(needed)]
