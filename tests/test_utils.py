import json

import pytest
import requests

from chaim_codegen import utils
from chaim_codegen.codegen.core.schema import SchemaError
from chaim_codegen.utils import (
    JSONLoaderError,
    load_json,
    load_schemas,
    load_table_metadata,
    parse_schemas,
)


class FakeResponse:
    def __init__(self, payload=None, status=200, bad_json=False):
        self.payload = payload
        self.status_code = status
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code}", response=self)

    def json(self):
        if self.bad_json:
            raise ValueError("no JSON")
        return self.payload


@pytest.fixture
def fake_get(monkeypatch):
    calls = []

    def install(response=None, error=None):
        def get(url, timeout):
            calls.append((url, timeout))
            if error is not None:
                raise error
            return response

        monkeypatch.setattr(utils.requests, "get", get)
        return calls

    return install


def test_schemas_from_bprint_file(tmp_path, order_schema, simple_schema):
    path = tmp_path / "entities.bprint"
    path.write_text(json.dumps([order_schema, simple_schema]), encoding="utf-8")

    schemas = load_schemas(file_path=path)

    assert [s.entity_name for s in schemas] == ["Order", "User"]


def test_single_inline_schema(simple_schema):
    schemas = load_schemas(text=json.dumps(simple_schema))
    assert len(schemas) == 1
    assert schemas[0].partition_key == "pk"


def test_schemas_from_url(fake_get, simple_schema):
    calls = fake_get(FakeResponse(simple_schema))
    schemas = load_schemas(url="https://example.com/user.bprint", timeout=5)
    assert schemas[0].entity_name == "User"
    assert calls == [("https://example.com/user.bprint", 5)]


def test_exactly_one_schema_source(tmp_path):
    with pytest.raises(JSONLoaderError, match="Exactly one"):
        load_schemas()
    with pytest.raises(JSONLoaderError, match="Exactly one"):
        load_schemas(text="{}", url="https://example.com/x")


def test_empty_schema_array():
    with pytest.raises(SchemaError):
        parse_schemas([])


def test_invalid_inline_schemas():
    with pytest.raises(JSONLoaderError, match="Invalid inline schemas"):
        load_schemas(text="[{")


def test_missing_and_invalid_files(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_json(file_path=tmp_path / "missing.json")

    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(JSONLoaderError, match="Invalid JSON"):
        load_json(file_path=path)


def test_load_json_requires_one_source(tmp_path):
    with pytest.raises(JSONLoaderError):
        load_json()
    with pytest.raises(JSONLoaderError):
        load_json(file_path=tmp_path / "a.json", url="https://example.com/a.json")


def test_invalid_url():
    with pytest.raises(JSONLoaderError, match="Invalid URL"):
        load_json(url="not-a-url")


@pytest.mark.parametrize(
    "error, fragment",
    [
        (requests.exceptions.Timeout(), "timeout"),
        (requests.exceptions.ConnectionError(), "Connection error"),
        (requests.exceptions.RequestException("boom"), "Request error"),
    ],
)
def test_url_failures(fake_get, error, fragment):
    fake_get(error=error)
    with pytest.raises(JSONLoaderError, match=fragment):
        load_json(url="https://example.com/schema.json")


def test_http_error_status(fake_get):
    fake_get(FakeResponse(status=404))
    with pytest.raises(JSONLoaderError, match="HTTP error 404"):
        load_json(url="https://example.com/schema.json")


def test_non_json_response(fake_get):
    fake_get(FakeResponse(bad_json=True))
    with pytest.raises(JSONLoaderError, match="Invalid JSON response"):
        load_json(url="https://example.com/schema.json")


def test_table_metadata_sources(tmp_path, table_metadata, fake_get):
    assert load_table_metadata(None) is None

    inline = load_table_metadata(json.dumps(table_metadata))
    assert inline.table_name == "orders"
    assert [i.name for i in inline.indexes] == ["gsi1", "by-created"]

    path = tmp_path / "table.json"
    path.write_text(json.dumps(table_metadata), encoding="utf-8")
    assert load_table_metadata(path).region == "us-east-1"
    assert load_table_metadata(str(path)).table_name == "orders"

    fake_get(FakeResponse({"tableName": "remote"}))
    assert load_table_metadata("https://example.com/table.json").table_name == "remote"
