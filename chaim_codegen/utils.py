"""Utility functions for loading schemas and table metadata.

JSON documents come from local files or URLs. Schema documents may be a
single ``.bprint`` object or an array of them; table metadata may also be
passed inline as a JSON string.
"""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests

from .codegen.core.schema import Schema, SchemaError, TableMetadata
from .logging_config import get_logger

logger = get_logger(__name__)


class JSONLoaderError(Exception):
    """Custom exception for JSON loading errors."""

    pass


def load_json_from_file(file_path: str | Path) -> tuple[str, Any]:
    """Load JSON data from a local file.

    Args:
        file_path: Path to the JSON or ``.bprint`` file.

    Returns:
        Tuple of (source description, parsed JSON data).

    Raises:
        FileNotFoundError: If file doesn't exist.
        JSONLoaderError: If file cannot be read or JSON is invalid.
    """
    file_path = Path(file_path)
    logger.debug("Loading JSON from file: %s", file_path)

    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() not in (".json", ".bprint"):
        logger.warning("Unexpected file extension for %s", file_path)

    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in file %s: %s", file_path, e)
        raise JSONLoaderError(f"Invalid JSON in file {file_path}: {e}") from e
    except OSError as e:
        logger.error("Error reading file %s: %s", file_path, e)
        raise JSONLoaderError(f"Error reading file {file_path}: {e}") from e

    logger.info("Loaded JSON from %s", file_path)
    return str(file_path), data


def load_json_from_url(url: str, timeout: int = 30) -> tuple[str, Any]:
    """Load JSON data from a URL.

    Raises:
        JSONLoaderError: If URL is invalid, request fails, or response isn't valid JSON.
    """
    logger.debug("Loading JSON from URL: %s", url)

    parsed_url = urlparse(url)
    if not all([parsed_url.scheme, parsed_url.netloc]):
        logger.error("Invalid URL format: %s", url)
        raise JSONLoaderError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.Timeout as e:
        logger.error("Request timeout for URL: %s", url)
        raise JSONLoaderError(f"Request timeout for URL: {url}") from e
    except requests.exceptions.ConnectionError as e:
        logger.error("Connection error for URL %s: %s", url, e)
        raise JSONLoaderError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else "?"
        logger.error("HTTP error %s for URL: %s", status, url)
        raise JSONLoaderError(f"HTTP error {status} for URL: {url}") from e
    except requests.exceptions.RequestException as e:
        logger.error("Request error for URL %s: %s", url, e)
        raise JSONLoaderError(f"Request error for URL {url}: {e}") from e
    except ValueError as e:
        logger.error("Invalid JSON response from URL %s: %s", url, e)
        raise JSONLoaderError(f"Invalid JSON response from URL {url}: {e}") from e

    logger.info("Loaded JSON from %s", url)
    return url, data


def load_json(
    file_path: str | Path | None = None,
    url: str | None = None,
    timeout: int = 30,
) -> tuple[str, Any]:
    """Load JSON data from either a file or URL.

    Args:
        file_path: Path to local JSON file (mutually exclusive with url).
        url: URL to fetch JSON from (mutually exclusive with file_path).
        timeout: Request timeout in seconds (only used for URLs).

    Returns:
        Tuple of (source description, parsed JSON data).

    Raises:
        JSONLoaderError: If neither or both parameters are provided, or loading fails.
        FileNotFoundError: If file doesn't exist.
    """
    if not file_path and not url:
        raise JSONLoaderError("Either file_path or url must be provided")
    if file_path and url:
        raise JSONLoaderError("Cannot specify both file_path and url")

    if file_path:
        return load_json_from_file(file_path)
    return load_json_from_url(url, timeout)


def parse_inline_json(text: str, what: str = "JSON") -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise JSONLoaderError(f"Invalid inline {what}: {e}") from e


def parse_schemas(data: Any) -> list[Schema]:
    """Turn a schema document or an array of documents into Schema objects.

    Raises:
        SchemaError: If a document is malformed.
    """
    documents = data if isinstance(data, list) else [data]
    if not documents:
        raise SchemaError("No schemas given")
    return [Schema.from_dict(document) for document in documents]


def load_schemas(
    text: str | None = None,
    file_path: str | Path | None = None,
    url: str | None = None,
    timeout: int = 30,
) -> list[Schema]:
    """Load schemas from inline JSON, a file, or a URL.

    Exactly one source must be given.
    """
    sources = [s for s in (text, file_path, url) if s]
    if len(sources) != 1:
        raise JSONLoaderError("Exactly one schema source must be provided")

    if text:
        data = parse_inline_json(text, "schemas")
    else:
        _, data = load_json(file_path=file_path, url=url, timeout=timeout)

    schemas = parse_schemas(data)
    logger.info("Loaded %d schema(s)", len(schemas))
    return schemas


def load_table_metadata(source: str | Path | None, timeout: int = 30) -> TableMetadata | None:
    """Load table metadata from a file path, URL, or inline JSON string.

    Returns ``None`` when no source is given.
    """
    if not source:
        return None

    if isinstance(source, Path):
        _, data = load_json(file_path=source)
    elif source.lstrip().startswith("{"):
        data = parse_inline_json(source, "table metadata")
    elif urlparse(source).scheme in ("http", "https"):
        _, data = load_json(url=source, timeout=timeout)
    else:
        _, data = load_json(file_path=source)

    metadata = TableMetadata.from_dict(data)
    logger.info(
        "Loaded table metadata for %s with %d index(es)",
        metadata.table_name or "<unnamed table>",
        len(metadata.indexes),
    )
    return metadata
