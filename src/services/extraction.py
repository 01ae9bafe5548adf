"""Sketch extraction through the Gemini vision API.

The call is synchronous (the GUI runs it on a worker thread) and retries
transient transport / server errors with exponential backoff. The result is
the raw JSON bundle; turning it into a Schema is ``services.schema_import``.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional

from google.genai import Client, errors as genai_errors, types

from config import settings

__all__ = [
    "ExtractionError",
    "MissingApiKeyError",
    "EmptyResponseError",
    "InvalidResponseError",
    "EXTRACTION_PROMPT",
    "response_schema",
    "analyze_sketch",
    "is_image_file",
]

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """
Analyze this database sketch.
Extract the tables, their columns, probable data types, and relationships.
If a relationship is drawn, infer the foreign key column in the child table and the primary key in the parent table.
Return a strictly structured JSON object.
"""

_IMAGE_SUFFIXES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


class ExtractionError(RuntimeError):
    pass


class MissingApiKeyError(ExtractionError):
    pass


class EmptyResponseError(ExtractionError):
    pass


class InvalidResponseError(ExtractionError):
    pass


def is_image_file(path: str) -> Optional[str]:
    """Return the mime type for an image path, or None when not an image."""
    lower = path.lower()
    for suffix, mime in _IMAGE_SUFFIXES.items():
        if lower.endswith(suffix):
            return mime
    return None


def response_schema() -> types.Schema:
    column = types.Schema(
        type=types.Type.OBJECT,
        properties={
            "name": types.Schema(type=types.Type.STRING),
            "type": types.Schema(
                type=types.Type.STRING,
                description="SQL type like VARCHAR, INTEGER, BOOLEAN, etc.",
            ),
            "isPk": types.Schema(type=types.Type.BOOLEAN),
            "isFk": types.Schema(type=types.Type.BOOLEAN),
            "isUnique": types.Schema(type=types.Type.BOOLEAN),
            "isNullable": types.Schema(type=types.Type.BOOLEAN),
        },
        required=["name", "type", "isPk", "isFk", "isUnique", "isNullable"],
    )
    table = types.Schema(
        type=types.Type.OBJECT,
        properties={
            "name": types.Schema(type=types.Type.STRING, description="Name of the table"),
            "columns": types.Schema(type=types.Type.ARRAY, items=column),
        },
        required=["name", "columns"],
    )
    relationship = types.Schema(
        type=types.Type.OBJECT,
        properties={
            "fromTable": types.Schema(
                type=types.Type.STRING, description="Name of the child table (contains FK)"
            ),
            "fromColumn": types.Schema(type=types.Type.STRING, description="Name of the FK column"),
            "toTable": types.Schema(
                type=types.Type.STRING, description="Name of the parent table (contains PK)"
            ),
            "toColumn": types.Schema(type=types.Type.STRING, description="Name of the PK column"),
        },
        required=["fromTable", "fromColumn", "toTable", "toColumn"],
    )
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "tables": types.Schema(type=types.Type.ARRAY, items=table),
            "relationships": types.Schema(type=types.Type.ARRAY, items=relationship),
        },
        required=["tables", "relationships"],
    )


def _parse(text: Optional[str]) -> Dict[str, Any]:
    if not text:
        raise EmptyResponseError("No response text generated")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidResponseError(f"Response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidResponseError(f"Expected a JSON object, got {type(data).__name__}")
    tables = data.get("tables")
    relationships = data.get("relationships", [])
    if not isinstance(tables, list) or not isinstance(relationships, list):
        raise InvalidResponseError("Response must contain 'tables' and 'relationships' lists")
    for table in tables:
        if not isinstance(table, dict):
            raise InvalidResponseError(f"Table entries must be objects, got {table!r}")
        columns = table.get("columns", [])
        if not isinstance(columns, list) or not all(isinstance(c, dict) for c in columns):
            raise InvalidResponseError(
                f"Columns of table {table.get('name')!r} must be a list of objects"
            )
    for rel in relationships:
        if not isinstance(rel, dict):
            raise InvalidResponseError(f"Relationship entries must be objects, got {rel!r}")
    return {"tables": tables, "relationships": relationships}


def analyze_sketch(
    image: bytes,
    api_key: str,
    *,
    mime_type: str = settings.DEFAULT_IMAGE_MIME,
    model: Optional[str] = None,
    client: Any | None = None,
    retries: int | None = None,
    backoff_factor: float | None = None,
) -> Dict[str, Any]:
    """Send a sketch image to Gemini and return the raw extraction bundle.

    Parameters
    ----------
    image: Raw image bytes.
    api_key: Gemini API key; ignored when ``client`` is supplied.
    client: Pre-built ``google.genai.Client`` (or a test double exposing
        ``models.generate_content``).
    """
    if client is None:
        if not api_key or not api_key.strip():
            raise MissingApiKeyError("Please enter your Gemini API key first.")
        client = Client(api_key=api_key.strip())
    model = model or settings.GEMINI_MODEL
    retries = retries if retries is not None else settings.DEFAULT_RETRIES
    backoff_factor = (
        backoff_factor if backoff_factor is not None else settings.DEFAULT_BACKOFF_FACTOR
    )
    config = types.GenerateContentConfig(
        response_mime_type="application/json",
        response_schema=response_schema(),
    )
    contents = [
        types.Part.from_bytes(data=image, mime_type=mime_type),
        EXTRACTION_PROMPT,
    ]

    attempt = 0
    while True:
        attempt += 1
        try:
            logger.debug("calling %s (attempt %d, %d bytes)", model, attempt, len(image))
            response = client.models.generate_content(
                model=model, contents=contents, config=config
            )
            break
        except (genai_errors.ServerError, ConnectionError, TimeoutError) as e:
            if attempt > retries:
                raise ExtractionError(
                    f"Sketch analysis failed after {retries} retries: {e}"
                ) from e
            sleep_for = backoff_factor * (2 ** (attempt - 1))
            logger.warning(
                "attempt %d/%d failed: %s; retrying in %.1fs", attempt, retries, e, sleep_for
            )
            time.sleep(sleep_for)
        except genai_errors.APIError as e:
            raise ExtractionError(f"Gemini rejected the request: {e}") from e

    data = _parse(getattr(response, "text", None))
    logger.info(
        "extracted %d tables, %d relationships",
        len(data["tables"]),
        len(data["relationships"]),
    )
    return data
