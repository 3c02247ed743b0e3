import re

import pytest

from chaim_codegen.codegen.core.model import ModelBuilder
from chaim_codegen.codegen.core.schema import Schema, SchemaError, TableMetadata
from chaim_codegen.codegen.languages.java.repository import (
    applicable_indexes,
    build_repository_context,
    index_constant,
    index_markers,
    index_method_suffix,
)
from chaim_codegen.codegen.languages.java.types import JavaTypeMapper


@pytest.fixture
def order_repository(generate, order_schema, table_metadata, read):
    result = generate([order_schema], table_metadata)
    assert result.success, result.error_message
    return read("repository", "OrderRepository")


def test_point_operations(order_repository):
    text = order_repository
    assert "public void save(Order entity) {\n    OrderValidator.validate(entity);\n    table.putItem(entity);" in text
    assert "public void save(Order entity, Expression conditionExpression) {" in text
    assert "public void save(PutItemEnhancedRequest<Order> request) {" in text
    assert "public Order update(Order entity, boolean ignoreNulls) {" in text
    assert "public Order update(Order entity, Expression conditionExpression, boolean ignoreNulls) {" in text
    assert ".ignoreNulls(ignoreNulls)" in text
    assert "public Order update(UpdateItemEnhancedRequest<Order> request) {" in text


def test_lookup_and_delete(order_repository):
    text = order_repository
    assert "public Optional<Order> findByKey(String pk, String sk) {" in text
    assert "public Optional<Order> findByKey(String pk, String sk, boolean consistentRead) {" in text
    assert ".consistentRead(consistentRead)" in text
    assert "public Optional<Order> findByKey(GetItemEnhancedRequest request) {" in text
    assert "public boolean existsByKey(String pk, String sk) {\n    return findByKey(pk, sk).isPresent();" in text
    assert "public void deleteByKey(String pk, String sk, Expression conditionExpression) {" in text
    assert "public Optional<Order> deleteAndReturn(String pk, String sk) {" in text
    assert "public Optional<Order> delete(DeleteItemEnhancedRequest request) {" in text
    assert "table.getItem(OrderKeys.key(pk, sk))" in text


def test_scan_family(order_repository):
    text = order_repository
    assert "public List<Order> scan() {" in text
    assert "public List<Order> scan(Expression filterExpression) {" in text
    assert "public PageIterable<Order> scan(ScanEnhancedRequest request) {" in text
    assert "public PageIterable<Order> scanPages() {" in text


def test_primary_range_queries(order_repository):
    text = order_repository
    assert "public List<Order> query(String pk) {" in text
    assert "public List<Order> queryLimit(String pk, int maxResults) {" in text
    assert ".limit(maxResults)" in text
    assert "public List<Order> query(String pk, Expression filterExpression) {" in text
    assert "public PageIterable<Order> query(QueryEnhancedRequest request) {" in text
    assert "public PageIterable<Order> queryPages(String pk) {" in text
    assert "public List<Order> queryBetween(String pk, String sortFrom, String sortTo) {" in text
    assert "public List<Order> queryBeginsWith(String pk, String sortPrefix) {" in text
    for suffix in ("GreaterThan", "GreaterThanOrEqualTo", "LessThan", "LessThanOrEqualTo"):
        assert f"public List<Order> query{suffix}(String pk, String sortValue) {{" in text
    assert "QueryConditional.sortGreaterThanOrEqualTo(" in text


def test_index_families_use_index_types(order_repository):
    text = order_repository
    assert "public List<Order> queryByGsi1(String email) {" in text
    assert "public List<Order> queryByGsi1(String email, Instant createdAt) {" in text
    assert "public List<Order> queryByGsi1Limit(String email, int maxResults) {" in text
    assert "public List<Order> queryByGsi1Between(String email, Instant sortFrom, Instant sortTo) {" in text
    assert "public List<Order> queryByGsi1BeginsWith(String email, String sortPrefix) {" in text
    assert "public List<Order> queryByGsi1LessThan(String email, Instant sortValue) {" in text
    assert "table.index(OrderKeys.INDEX_GSI1)" in text
    # non-epoch timestamps are handed to the key builder as text
    assert ".sortValue(sortFrom.toString())" in text
    assert ".sortValue(createdAt.toString())" in text


def test_local_index_reuses_table_partition_key(order_repository):
    text = order_repository
    assert "public List<Order> queryByByCreated(String pk) {" in text
    assert "public List<Order> queryByByCreatedBetween(String pk, Instant sortFrom, Instant sortTo) {" in text
    assert "table.index(OrderKeys.INDEX_BY_CREATED)" in text


def test_batch_and_transactions(order_repository):
    text = order_repository
    assert "private static final int MAX_BATCH_ATTEMPTS = 3;" in text
    assert "private static final int BATCH_WRITE_SIZE = 25;" in text
    assert "private static final int BATCH_GET_SIZE = 100;" in text
    assert "public List<Order> batchGet(List<Key> keys) {" in text
    assert "entities.forEach(OrderValidator::validate);" in text
    assert "for (int attempt = 0; attempt < MAX_BATCH_ATTEMPTS && !remaining.isEmpty(); attempt++) {" in text
    assert "result.unprocessedPutItemsForTable(table)" in text
    assert "result.unprocessedDeleteItemsForTable(table)" in text
    assert 'throw new IllegalStateException("Batch save failed: " + remaining.size()' in text
    assert 'throw new IllegalStateException("Batch delete failed: " + remaining.size()' in text
    assert "public List<Order> transactGet(List<Key> keys) {" in text
    assert "Order item = document.getItem(table);\n      if (item != null) {" in text
    assert "public void transactSave(List<Order> entities) {\n    entities.forEach(OrderValidator::validate);" in text
    assert "public void transactDelete(List<Key> keys) {" in text
    assert "public void transactWrite(TransactWriteItemsEnhancedRequest request) {" in text


def test_accessors_and_constructors(order_repository):
    text = order_repository
    assert "public OrderRepository(ChaimDynamoDbClient client) {" in text
    assert "public OrderRepository(DynamoDbEnhancedClient enhancedClient, String tableName) {" in text
    assert "this.tableSchema = TableSchema.fromBean(Order.class);" in text
    assert "public DynamoDbTable<Order> getTable() {" in text
    assert "public DynamoDbEnhancedClient getEnhancedClient() {" in text
    assert "public TableSchema<Order> getTableSchema() {" in text


def test_repository_imports(order_repository):
    text = order_repository
    for name in (
        "com.acme.orders.Order",
        "com.acme.orders.keys.OrderKeys",
        "com.acme.orders.validation.OrderValidator",
        "com.acme.orders.client.ChaimDynamoDbClient",
        "java.time.Instant",
        "software.amazon.awssdk.enhanced.dynamodb.model.QueryConditional",
        "software.amazon.awssdk.core.pagination.sync.SdkIterable",
    ):
        assert f"import {name};" in text


def test_batch_attempts_follow_config(generate, order_schema, table_metadata, read):
    generate([order_schema], table_metadata, batch_max_attempts=5)
    assert "private static final int MAX_BATCH_ATTEMPTS = 5;" in read("repository", "OrderRepository")


def test_partition_only_entity_has_no_query_family(generate, simple_schema, table_metadata, read):
    result = generate([simple_schema], table_metadata)
    text = read("repository", "UserRepository")

    assert "public Optional<User> findByKey(String pk) {" in text
    assert "public List<User> query" not in text
    assert "queryPages" not in text
    assert "queryBy" not in text
    assert "QueryConditional" not in text
    assert any("index 'gsi1' skipped" in w for w in result.warnings)
    # keys still list every declared index
    assert "INDEX_GSI1" in read("keys", "UserKeys")
    assert "@DynamoDbSecondaryPartitionKey" not in read(None, "User")


def test_numeric_and_binary_key_parameters(generate, read):
    schema = {
        "entityName": "Reading",
        "identity": {"fields": ["deviceId", "takenAt"]},
        "fields": [
            {"name": "deviceId", "type": "binary"},
            {"name": "takenAt", "type": "timestamp.epoch"},
        ],
    }
    generate([schema], {"tableName": "readings"})

    keys = read("keys", "ReadingKeys")
    assert "public static Key key(byte[] deviceId, Long takenAt) {" in keys
    assert ".partitionValue(SdkBytes.fromByteArray(deviceId))" in keys
    assert ".sortValue(takenAt)" in keys
    assert "import software.amazon.awssdk.core.SdkBytes;" in keys

    repo = read("repository", "ReadingRepository")
    assert "public List<Reading> queryBetween(byte[] deviceId, Long sortFrom, Long sortTo) {" in repo
    assert "queryBeginsWith" not in repo

    entity = read(None, "Reading")
    assert "return Arrays.equals(this.deviceId, that.deviceId)" in entity
    assert "result = 31 * result + Arrays.hashCode(this.deviceId);" in entity


def test_repository_signatures_are_unique(order_repository):
    signatures = re.findall(r"^  public [^{]*\{", order_repository, flags=re.MULTILINE)
    assert len(signatures) == len(set(signatures))
    # limited queries never share a name with a key-only overload
    for signature in signatures:
        if "int maxResults" in signature:
            assert re.search(r" query\w*Limit\(", signature), signature


def test_key_parameters_avoid_template_names(generate, read):
    schema = {
        "entityName": "Rule",
        "identity": {"fields": ["condition", "request"]},
        "fields": [{"name": "condition"}, {"name": "request"}, {"name": "table"}],
    }
    table = {
        "tableName": "rules",
        "globalSecondaryIndexes": [{"indexName": "by-table", "partitionKey": "table"}],
    }
    result = generate([schema], table)
    assert result.success, result.error_message

    repo = read("repository", "RuleRepository")
    assert "public Optional<Rule> findByKey(String conditionKey, String requestKey) {" in repo
    assert "public List<Rule> queryBetween(String conditionKey, String sortFrom, String sortTo) {" in repo
    assert "public List<Rule> queryByByTable(String tableKey) {" in repo
    assert "String condition," not in repo
    assert "String request)" not in repo
    assert "public static Key key(String conditionKey, String requestKey) {" in read("keys", "RuleKeys")
    # the bean keeps the attribute names
    assert "public String getCondition() {" in read(None, "Rule")


def test_limited_index_query_is_not_an_overload_of_exact_match(generate, read):
    schema = {
        "entityName": "Score",
        "identity": {"fields": ["pk"]},
        "fields": [{"name": "pk"}, {"name": "player"}, {"name": "points", "type": "number"}],
    }
    table = {
        "tableName": "scores",
        "globalSecondaryIndexes": [
            {"indexName": "byPlayer", "partitionKey": "player", "sortKey": "points"}
        ],
    }
    generate([schema], table)

    repo = read("repository", "ScoreRepository")
    assert "public List<Score> queryByByPlayer(String player, Integer points) {" in repo
    assert "public List<Score> queryByByPlayerLimit(String player, int maxResults) {" in repo
    assert "queryByByPlayer(String player, int maxResults)" not in repo


# Builder helpers


def test_index_naming_helpers():
    assert index_constant("customer-index") == "INDEX_CUSTOMER_INDEX"
    assert index_constant("orders.by.date") == "INDEX_ORDERS_BY_DATE"
    assert index_method_suffix("customer-index") == "CustomerIndex"


def test_index_markers_skip_local_partition():
    metadata = TableMetadata.from_dict(
        {
            "globalSecondaryIndexes": [{"indexName": "g", "partitionKey": "email", "sortKey": "at"}],
            "localSecondaryIndexes": [{"indexName": "l", "sortKey": "at"}],
        }
    )
    model = ModelBuilder().build(
        Schema.from_dict(
            {
                "entityName": "E",
                "identity": {"fields": ["pk"]},
                "fields": [{"name": "pk"}, {"name": "email"}, {"name": "at", "type": "timestamp"}],
            }
        )
    )
    partition, sort = index_markers(model, metadata.indexes)
    assert partition == {"email": ["g"]}
    assert sort == {"at": ["g", "l"]}


def test_applicable_indexes_reject_unusable_key():
    metadata = TableMetadata.from_dict(
        {"globalSecondaryIndexes": [{"indexName": "g", "partitionKey": "active"}]}
    )
    model = ModelBuilder().build(
        Schema.from_dict(
            {
                "entityName": "E",
                "identity": {"fields": ["pk"]},
                "fields": [{"name": "pk"}, {"name": "active", "type": "boolean"}],
            }
        )
    )
    with pytest.raises(SchemaError):
        applicable_indexes(model, metadata, [])


def test_context_imports_queries_only_when_needed():
    model = ModelBuilder().build(
        Schema.from_dict(
            {"entityName": "E", "identity": {"fields": ["pk"]}, "fields": [{"name": "pk"}]}
        )
    )
    context = build_repository_context(model, JavaTypeMapper("com.acme"), [])
    assert not context.has_queries
    assert not any(name.endswith("QueryConditional") for name in context.imports)
