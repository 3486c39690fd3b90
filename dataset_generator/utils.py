"""Loading JSON records for capture.

Records come from a local file or a URL, either as one JSON document (a list
of objects, a single object, or an object wrapping one list of objects) or as
JSON Lines with one object per line. Every loader returns the validated list
of records, ready for ``RecordsSource``.
"""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests

from .logging_config import get_logger

logger = get_logger(__name__)

JSON_LINES_SUFFIXES = {".jsonl", ".ndjson"}
JSON_LINES_CONTENT_TYPES = ("application/x-ndjson", "application/jsonl", "application/json-lines")


class SourceLoadError(Exception):
    """Custom exception for source loading errors."""

    pass


def extract_records(data: Any, origin: str = "JSON data") -> list[dict]:
    """Find the record list in a decoded JSON document.

    Accepts a list of objects, a single object, or an object with exactly one
    list-of-objects member (``{"items": [...]}``).

    Raises:
        SourceLoadError: If no list of objects can be found.
    """
    if isinstance(data, dict):
        candidates = [
            (key, value)
            for key, value in data.items()
            if isinstance(value, list) and all(isinstance(v, dict) for v in value)
        ]
        if len(candidates) == 1:
            key, data = candidates[0]
            logger.debug("Using records under %r in %s", key, origin)
        else:
            data = [data]

    if not isinstance(data, list):
        raise SourceLoadError(
            f"{origin}: expected a list of JSON objects, got {type(data).__name__}"
        )

    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise SourceLoadError(
                f"{origin}: record {index} is a {type(record).__name__}, expected a JSON object"
            )
    return data


def parse_json_lines(text: str, origin: str = "JSON Lines") -> list[dict]:
    """Decode JSON Lines text: one object per non-blank line.

    Raises:
        SourceLoadError: If a line is not valid JSON or not an object.
    """
    records = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            raise SourceLoadError(f"{origin}: invalid JSON on line {line_number}: {e}") from e
        if not isinstance(record, dict):
            raise SourceLoadError(
                f"{origin}: line {line_number} is a {type(record).__name__}, "
                "expected a JSON object"
            )
        records.append(record)
    return records


def load_records_from_file(file_path: str | Path) -> list[dict]:
    """Load records from a local JSON or JSON Lines file.

    The format follows the file suffix: ``.jsonl`` and ``.ndjson`` files hold
    one object per line, anything else is a single JSON document. A leading
    byte order mark is ignored.

    Raises:
        SourceLoadError: If the file is missing, unreadable or holds no records.
    """
    file_path = Path(file_path)
    logger.debug("Loading records from file: %s", file_path)

    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        raise SourceLoadError(f"File not found: {file_path}")

    try:
        text = file_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Error reading file %s: %s", file_path, e)
        raise SourceLoadError(f"Error reading file {file_path}: {e}") from e

    origin = str(file_path)
    if file_path.suffix.lower() in JSON_LINES_SUFFIXES:
        records = parse_json_lines(text, origin)
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in file %s: %s", file_path, e)
            raise SourceLoadError(f"Invalid JSON in file {file_path}: {e}") from e
        records = extract_records(data, origin)

    logger.info("Loaded %d records from %s", len(records), file_path)
    return records


def load_records_from_url(url: str, timeout: int = 30) -> list[dict]:
    """Load records from a URL returning JSON or JSON Lines.

    JSON Lines is recognised by the response content type or a ``.jsonl`` /
    ``.ndjson`` path.

    Raises:
        SourceLoadError: If the URL is invalid, the request fails or the body
            holds no records.
    """
    logger.debug("Loading records from URL: %s", url)

    parsed_url = urlparse(url)
    if not all([parsed_url.scheme, parsed_url.netloc]):
        logger.error("Invalid URL format: %s", url)
        raise SourceLoadError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        raise SourceLoadError(f"Request timeout for URL: {url}") from e
    except requests.exceptions.ConnectionError as e:
        raise SourceLoadError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        raise SourceLoadError(f"HTTP error {e.response.status_code} for URL: {url}") from e
    except requests.exceptions.RequestException as e:
        raise SourceLoadError(f"Request error for URL {url}: {e}") from e

    content_type = response.headers.get("content-type", "").lower()
    suffix = Path(parsed_url.path).suffix.lower()
    if suffix in JSON_LINES_SUFFIXES or content_type.startswith(JSON_LINES_CONTENT_TYPES):
        records = parse_json_lines(response.text, url)
    else:
        if "json" not in content_type and suffix != ".json":
            logger.warning("URL %s does not have a JSON content type: %s", url, content_type)
        try:
            data = response.json()
        except ValueError as e:
            # requests raises a ValueError subclass for undecodable bodies
            raise SourceLoadError(f"Invalid JSON response from URL {url}: {e}") from e
        records = extract_records(data, url)

    logger.info("Loaded %d records from %s", len(records), url)
    return records


def load_records(
    file_path: str | Path | None = None,
    url: str | None = None,
    timeout: int = 30,
) -> tuple[str, list[dict]]:
    """Load a list of JSON records from either a file or URL.

    Args:
        file_path: Path to local JSON file (mutually exclusive with url).
        url: URL to fetch JSON from (mutually exclusive with file_path).
        timeout: Request timeout in seconds (only used for URLs).

    Returns:
        Tuple of (source description, list of records).

    Raises:
        SourceLoadError: If neither or both parameters are provided, or loading fails.
    """
    if not file_path and not url:
        raise SourceLoadError("Either file_path or url must be provided")

    if file_path and url:
        raise SourceLoadError("Cannot specify both file_path and url")

    if file_path:
        return str(file_path), load_records_from_file(file_path)
    return url, load_records_from_url(url, timeout)
